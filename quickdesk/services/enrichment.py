"""Attach creator, assignee, category and comment data to tickets for API responses."""

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from quickdesk.schemas.category import CategorySummary
from quickdesk.schemas.comment import CommentOut
from quickdesk.schemas.ticket import TicketDetail, TicketListItem, TicketOut
from quickdesk.schemas.user import CommentAuthor, UserSummary

if TYPE_CHECKING:
    from quickdesk.models import Category, Comment, Ticket, User
    from quickdesk.services.store import Store


def _ticket_fields(ticket: "Ticket") -> dict[str, Any]:
    return {
        "id": ticket.id,
        "subject": ticket.subject,
        "description": ticket.description,
        "category_id": ticket.category_id,
        "user_id": ticket.user_id,
        "assigned_to": ticket.assigned_to,
        "status": ticket.status,
        "priority": ticket.priority,
        "attachments": list(ticket.attachments or []),
        "created_at": ticket.created_at,
        "updated_at": ticket.updated_at,
    }


def _user_summary(user: "User | None") -> UserSummary | None:
    return UserSummary.model_validate(user) if user is not None else None


def _category_summary(category: "Category | None") -> CategorySummary | None:
    return CategorySummary.model_validate(category) if category is not None else None


def _related(
    store: "Store", tickets: Sequence["Ticket"]
) -> tuple[dict[int, "User"], dict[int, "Category"]]:
    """Load every user and category referenced by tickets in two queries."""
    user_ids: set[int] = set()
    category_ids: set[int] = set()
    for t in tickets:
        user_ids.add(t.user_id)
        if t.assigned_to is not None:
            user_ids.add(t.assigned_to)
        if t.category_id is not None:
            category_ids.add(t.category_id)
    return store.get_users_by_ids(user_ids), store.get_categories_by_ids(category_ids)


def _enriched_fields(
    ticket: "Ticket",
    users: dict[int, "User"],
    categories: dict[int, "Category"],
) -> dict[str, Any]:
    fields = _ticket_fields(ticket)
    fields["user"] = _user_summary(users.get(ticket.user_id))
    fields["assignee"] = (
        _user_summary(users.get(ticket.assigned_to)) if ticket.assigned_to is not None else None
    )
    fields["category"] = (
        _category_summary(categories.get(ticket.category_id))
        if ticket.category_id is not None
        else None
    )
    return fields


def enrich_ticket(store: "Store", ticket: "Ticket") -> TicketOut:
    """Single ticket with creator, assignee and category summaries; no comments."""
    users, categories = _related(store, [ticket])
    return TicketOut(**_enriched_fields(ticket, users, categories))


def enrich_ticket_list(store: "Store", tickets: Sequence["Ticket"]) -> list[TicketListItem]:
    """List entries with summaries and comment counts, preserving input order."""
    users, categories = _related(store, tickets)
    counts = store.count_comments(t.id for t in tickets)
    return [
        TicketListItem(
            **_enriched_fields(t, users, categories),
            comment_count=counts.get(t.id, 0),
        )
        for t in tickets
    ]


def enrich_comments(store: "Store", comments: Sequence["Comment"]) -> list[CommentOut]:
    """Comments with the author's public profile (including role)."""
    authors = store.get_users_by_ids(c.user_id for c in comments)
    out: list[CommentOut] = []
    for c in comments:
        author = authors.get(c.user_id)
        out.append(
            CommentOut(
                id=c.id,
                ticket_id=c.ticket_id,
                user_id=c.user_id,
                content=c.content,
                is_status_change=bool(c.is_status_change),
                created_at=c.created_at,
                user=CommentAuthor.model_validate(author) if author is not None else None,
            )
        )
    return out


def enrich_ticket_detail(store: "Store", ticket: "Ticket") -> TicketDetail:
    """Ticket summaries plus all comments, oldest first."""
    users, categories = _related(store, [ticket])
    comments = enrich_comments(store, store.list_comments(ticket.id))
    return TicketDetail(**_enriched_fields(ticket, users, categories), comments=comments)
