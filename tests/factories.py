"""Shared test helpers: in-memory SQLite store and small record factories."""

import itertools
import unittest
from datetime import UTC, datetime, timedelta

from sqlalchemy.orm import sessionmaker

from quickdesk.core.database import create_db_engine
from quickdesk.core.security import hash_password
from quickdesk.models import Base, Category, Ticket
from quickdesk.schemas.auth import CurrentUser
from quickdesk.services.store import SqlStore

TEST_PASSWORD = "password123"
# Low bcrypt cost keeps the suite fast; verify_password reads the cost from the hash.
TEST_PASSWORD_HASH = hash_password(TEST_PASSWORD, rounds=4)

BASE_TIME = datetime(2024, 1, 10, 9, 0, tzinfo=UTC)


def make_engine():
    engine = create_db_engine("sqlite://")
    Base.metadata.create_all(engine)
    return engine


class StoreTestCase(unittest.TestCase):
    """Fresh database per test, with factories that insert committed rows."""

    def setUp(self) -> None:
        self.engine = make_engine()
        self.db = sessionmaker(bind=self.engine, autoflush=False)()
        self.store = SqlStore(self.db)
        self._seq = itertools.count(1)

    def tearDown(self) -> None:
        self.db.close()
        self.engine.dispose()

    def make_user(
        self,
        role: str = "user",
        name: str | None = None,
        email: str | None = None,
        created_at: datetime | None = None,
    ) -> CurrentUser:
        n = next(self._seq)
        user = self.store.add_user(
            name=name or f"{role.title()} {n}",
            email=email or f"{role}{n}@example.com",
            password_hash=TEST_PASSWORD_HASH,
            role=role,
            avatar=f"https://via.placeholder.com/40/1976d2/ffffff?text={role[0].upper()}",
            created_at=created_at or datetime.now(UTC),
        )
        self.store.commit()
        return CurrentUser.model_validate(user)

    def make_category(self, name: str | None = None, color: str = "#1976d2") -> Category:
        n = next(self._seq)
        category = self.store.add_category(
            name=name or f"Category {n}",
            description="",
            color=color,
            created_at=BASE_TIME,
        )
        self.store.commit()
        return category

    def make_ticket(
        self,
        owner: CurrentUser,
        category: Category,
        **overrides: object,
    ) -> Ticket:
        n = next(self._seq)
        created = BASE_TIME + timedelta(minutes=n)
        fields: dict[str, object] = {
            "subject": f"Ticket number {n}",
            "description": "Something is not working as expected.",
            "category_id": category.id,
            "user_id": owner.id,
            "assigned_to": None,
            "status": "open",
            "priority": "medium",
            "attachments": [],
            "created_at": created,
            "updated_at": created,
        }
        fields.update(overrides)
        ticket = self.store.add_ticket(**fields)
        self.store.commit()
        return ticket
