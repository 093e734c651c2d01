"""Storage interface for users, categories, tickets and comments, and its SQLAlchemy implementation.

Services depend only on the Store protocol. Methods never commit on their own; each service
operation calls commit() once so multi-row changes (status change + audit comment) are atomic.
"""

import logging
from collections.abc import Iterable
from datetime import datetime
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict
from sqlalchemy import case, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from quickdesk.models import Category, Comment, Ticket, User
from quickdesk.schemas.ticket import PRIORITY_RANK, STATUS_RANK, SortField, SortOrder
from quickdesk.services.errors import ConflictError

logger = logging.getLogger(__name__)


class TicketScope(BaseModel):
    """Role-derived narrowing applied before any explicit filter."""

    model_config = ConfigDict(frozen=True)

    owner_id: int | None = None
    assignee_id: int | None = None


class TicketFilters(BaseModel):
    """Explicit equality filters (conjunctive)."""

    model_config = ConfigDict(frozen=True)

    status: str | None = None
    category_id: int | None = None
    priority: str | None = None
    assignee_id: int | None = None
    unassigned_only: bool = False


class TicketQuery(BaseModel):
    """Full ticket list query: scope stage, filter stage, ordering and page window."""

    model_config = ConfigDict(frozen=True)

    scope: TicketScope
    filters: TicketFilters
    sort_by: SortField = "created_at"
    sort_order: SortOrder = "desc"
    offset: int = 0
    limit: int = 10


class Store(Protocol):
    """Persistence operations the service layer relies on."""

    # users
    def get_user(self, user_id: int) -> User | None: ...
    def get_user_by_email(self, email: str) -> User | None: ...
    def get_users_by_ids(self, user_ids: Iterable[int]) -> dict[int, User]: ...
    def list_users(self) -> list[User]: ...
    def add_user(self, **fields: Any) -> User: ...
    def delete_user(self, user: User) -> None: ...
    def email_taken(self, email: str, exclude_user_id: int | None = None) -> bool: ...
    def count_users_by_role(self) -> dict[str, int]: ...
    def count_users_created_since(self, since: datetime) -> int: ...
    def user_has_authored_content(self, user_id: int) -> bool: ...
    def unassign_tickets_for(self, user_id: int) -> int: ...

    # categories
    def get_category(self, category_id: int) -> Category | None: ...
    def get_categories_by_ids(self, category_ids: Iterable[int]) -> dict[int, Category]: ...
    def list_categories(self) -> list[Category]: ...
    def add_category(self, **fields: Any) -> Category: ...
    def delete_category(self, category: Category) -> None: ...
    def category_name_taken(self, name: str, exclude_category_id: int | None = None) -> bool: ...
    def count_tickets_in_category(self, category_id: int) -> int: ...
    def clear_category_from_tickets(self, category_id: int) -> int: ...

    # tickets
    def get_ticket(self, ticket_id: int, for_update: bool = False) -> Ticket | None: ...
    def add_ticket(self, **fields: Any) -> Ticket: ...
    def query_tickets(self, query: TicketQuery) -> tuple[list[Ticket], int]: ...
    def count_tickets_by(self, column: str, scope: TicketScope) -> dict[str, int]: ...

    # comments
    def add_comment(self, **fields: Any) -> Comment: ...
    def list_comments(self, ticket_id: int) -> list[Comment]: ...
    def count_comments(self, ticket_ids: Iterable[int]) -> dict[int, int]: ...

    # unit of work
    def commit(self) -> None: ...
    def rollback(self) -> None: ...


class SqlStore:
    """Store backed by a SQLAlchemy session (one per request)."""

    def __init__(self, db: Session) -> None:
        self.db = db

    # users

    def get_user(self, user_id: int) -> User | None:
        return self.db.get(User, user_id)

    def get_user_by_email(self, email: str) -> User | None:
        return (
            self.db.query(User)
            .filter(func.lower(User.email) == email.strip().lower())
            .first()
        )

    def get_users_by_ids(self, user_ids: Iterable[int]) -> dict[int, User]:
        ids = {i for i in user_ids if i is not None}
        if not ids:
            return {}
        return {u.id: u for u in self.db.query(User).filter(User.id.in_(ids)).all()}

    def list_users(self) -> list[User]:
        return self.db.query(User).order_by(User.id).all()

    def add_user(self, **fields: Any) -> User:
        user = User(**fields)
        self.db.add(user)
        self._flush()
        return user

    def delete_user(self, user: User) -> None:
        self.db.delete(user)
        self._flush()

    def email_taken(self, email: str, exclude_user_id: int | None = None) -> bool:
        q = self.db.query(User.id).filter(func.lower(User.email) == email.strip().lower())
        if exclude_user_id is not None:
            q = q.filter(User.id != exclude_user_id)
        return q.first() is not None

    def count_users_by_role(self) -> dict[str, int]:
        rows = self.db.query(User.role, func.count(User.id)).group_by(User.role).all()
        return {role: count for role, count in rows}

    def count_users_created_since(self, since: datetime) -> int:
        return self.db.query(func.count(User.id)).filter(User.created_at > since).scalar() or 0

    def user_has_authored_content(self, user_id: int) -> bool:
        if self.db.query(Ticket.id).filter(Ticket.user_id == user_id).first() is not None:
            return True
        return self.db.query(Comment.id).filter(Comment.user_id == user_id).first() is not None

    def unassign_tickets_for(self, user_id: int) -> int:
        return (
            self.db.query(Ticket)
            .filter(Ticket.assigned_to == user_id)
            .update({Ticket.assigned_to: None}, synchronize_session=False)
        )

    # categories

    def get_category(self, category_id: int) -> Category | None:
        return self.db.get(Category, category_id)

    def get_categories_by_ids(self, category_ids: Iterable[int]) -> dict[int, Category]:
        ids = {i for i in category_ids if i is not None}
        if not ids:
            return {}
        return {
            c.id: c for c in self.db.query(Category).filter(Category.id.in_(ids)).all()
        }

    def list_categories(self) -> list[Category]:
        return self.db.query(Category).order_by(Category.id).all()

    def add_category(self, **fields: Any) -> Category:
        category = Category(**fields)
        self.db.add(category)
        self._flush()
        return category

    def delete_category(self, category: Category) -> None:
        self.db.delete(category)
        self._flush()

    def category_name_taken(self, name: str, exclude_category_id: int | None = None) -> bool:
        q = self.db.query(Category.id).filter(
            func.lower(Category.name) == name.strip().lower()
        )
        if exclude_category_id is not None:
            q = q.filter(Category.id != exclude_category_id)
        return q.first() is not None

    def count_tickets_in_category(self, category_id: int) -> int:
        return (
            self.db.query(func.count(Ticket.id))
            .filter(Ticket.category_id == category_id)
            .scalar()
            or 0
        )

    def clear_category_from_tickets(self, category_id: int) -> int:
        return (
            self.db.query(Ticket)
            .filter(Ticket.category_id == category_id)
            .update({Ticket.category_id: None}, synchronize_session=False)
        )

    # tickets

    def get_ticket(self, ticket_id: int, for_update: bool = False) -> Ticket | None:
        q = self.db.query(Ticket).filter(Ticket.id == ticket_id)
        if for_update:
            # Row lock held until commit/rollback; serializes concurrent writers per ticket.
            q = q.with_for_update()
        return q.first()

    def add_ticket(self, **fields: Any) -> Ticket:
        ticket = Ticket(**fields)
        self.db.add(ticket)
        self._flush()
        return ticket

    def _scoped(self, scope: TicketScope):
        q = self.db.query(Ticket)
        if scope.owner_id is not None:
            q = q.filter(Ticket.user_id == scope.owner_id)
        if scope.assignee_id is not None:
            q = q.filter(Ticket.assigned_to == scope.assignee_id)
        return q

    def query_tickets(self, query: TicketQuery) -> tuple[list[Ticket], int]:
        q = self._scoped(query.scope)
        f = query.filters
        if f.status is not None:
            q = q.filter(Ticket.status == f.status)
        if f.category_id is not None:
            q = q.filter(Ticket.category_id == f.category_id)
        if f.priority is not None:
            q = q.filter(Ticket.priority == f.priority)
        if f.assignee_id is not None:
            q = q.filter(Ticket.assigned_to == f.assignee_id)
        if f.unassigned_only:
            q = q.filter(Ticket.assigned_to.is_(None))

        total = q.count()
        if query.offset >= total:
            return [], total

        sort_columns = {
            "created_at": Ticket.created_at,
            "updated_at": Ticket.updated_at,
            "priority": case(PRIORITY_RANK, value=Ticket.priority, else_=len(PRIORITY_RANK)),
            "status": case(STATUS_RANK, value=Ticket.status, else_=len(STATUS_RANK)),
        }
        sort_col = sort_columns[query.sort_by]
        ordering = sort_col.asc() if query.sort_order == "asc" else sort_col.desc()
        # Ties keep insertion order regardless of direction.
        items = (
            q.order_by(ordering, Ticket.id.asc())
            .offset(query.offset)
            .limit(query.limit)
            .all()
        )
        return items, total

    def count_tickets_by(self, column: str, scope: TicketScope) -> dict[str, int]:
        col = getattr(Ticket, column)
        rows = (
            self._scoped(scope)
            .with_entities(col, func.count(Ticket.id))
            .group_by(col)
            .all()
        )
        return {value: count for value, count in rows}

    # comments

    def add_comment(self, **fields: Any) -> Comment:
        comment = Comment(**fields)
        self.db.add(comment)
        self._flush()
        return comment

    def list_comments(self, ticket_id: int) -> list[Comment]:
        return (
            self.db.query(Comment)
            .filter(Comment.ticket_id == ticket_id)
            .order_by(Comment.created_at.asc(), Comment.id.asc())
            .all()
        )

    def count_comments(self, ticket_ids: Iterable[int]) -> dict[int, int]:
        ids = set(ticket_ids)
        if not ids:
            return {}
        rows = (
            self.db.query(Comment.ticket_id, func.count(Comment.id))
            .filter(Comment.ticket_id.in_(ids))
            .group_by(Comment.ticket_id)
            .all()
        )
        return {ticket_id: count for ticket_id, count in rows}

    # unit of work

    def _flush(self) -> None:
        try:
            self.db.flush()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning("Flush rejected by integrity constraint: %s", e.orig)
            raise ConflictError("Record conflicts with an existing record") from e

    def commit(self) -> None:
        """Commit the request transaction; unique violations that raced past pre-checks become ConflictError."""
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning("Commit rejected by integrity constraint: %s", e.orig)
            raise ConflictError("Record conflicts with an existing record") from e

    def rollback(self) -> None:
        self.db.rollback()
