"""Tests for user accounts: registration, login, admin management, deletion policy, stats."""

from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

from quickdesk.schemas.auth import PasswordChangeRequest, ProfileUpdate, RegisterRequest
from quickdesk.schemas.user import UserCreate, UserUpdate
from quickdesk.services.errors import (
    AccessDeniedError,
    ConflictError,
    NotFoundError,
    ValidationFailed,
)
from quickdesk.services.users import (
    authenticate,
    change_password,
    create_user,
    delete_user,
    get_user,
    list_users,
    register_user,
    update_profile,
    update_user,
    user_stats,
)
from tests.factories import TEST_PASSWORD, StoreTestCase


class TestRegistrationAndLogin(StoreTestCase):
    def test_register_creates_plain_user_with_lowercase_email(self) -> None:
        user = register_user(
            self.store,
            RegisterRequest(name="Dana", email="Dana@Example.COM", password="s3cret-pass"),
        )
        self.assertEqual(user.role, "user")
        self.assertEqual(user.email, "dana@example.com")
        self.assertNotEqual(user.password_hash, "s3cret-pass")
        self.assertTrue(user.avatar.endswith("text=D"))

    def test_duplicate_email_conflicts_ignoring_case(self) -> None:
        self.make_user("user", email="dana@example.com")
        with self.assertRaises(ConflictError):
            register_user(
                self.store,
                RegisterRequest(name="Dana", email="DANA@example.com", password="s3cret-pass"),
            )

    def test_authenticate(self) -> None:
        created = self.make_user("agent", email="agent@example.com")
        self.assertEqual(authenticate(self.store, "AGENT@example.com", TEST_PASSWORD).id, created.id)
        self.assertIsNone(authenticate(self.store, "agent@example.com", "wrong-password"))
        self.assertIsNone(authenticate(self.store, "nobody@example.com", TEST_PASSWORD))


class TestOwnProfile(StoreTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.alice = self.make_user("user", email="alice@example.com")

    def test_update_profile_keeps_role(self) -> None:
        out = update_profile(self.store, self.alice, ProfileUpdate(name="Alice B."))
        self.assertEqual(out.name, "Alice B.")
        self.assertEqual(out.role, "user")
        self.assertIsNotNone(out.updated_at)

    def test_update_profile_is_logged(self) -> None:
        with self.assertLogs("quickdesk.services.users", level="INFO") as logs:
            update_profile(self.store, self.alice, ProfileUpdate(email="alice.b@example.com"))
        self.assertIn(f"Profile updated: id={self.alice.id}", logs.output[0])

    def test_update_profile_email_conflict(self) -> None:
        self.make_user("user", email="bob@example.com")
        with self.assertRaises(ConflictError):
            update_profile(self.store, self.alice, ProfileUpdate(email="Bob@example.com"))

    def test_change_password_requires_current(self) -> None:
        with self.assertRaises(ValidationFailed):
            change_password(
                self.store,
                self.alice,
                PasswordChangeRequest(current_password="nope", new_password="brand-new-pass"),
            )

    def test_change_password(self) -> None:
        change_password(
            self.store,
            self.alice,
            PasswordChangeRequest(current_password=TEST_PASSWORD, new_password="brand-new-pass"),
        )
        self.assertIsNotNone(authenticate(self.store, "alice@example.com", "brand-new-pass"))
        self.assertIsNone(authenticate(self.store, "alice@example.com", TEST_PASSWORD))


class TestAdminUserManagement(StoreTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.admin = self.make_user("admin")
        self.agent = self.make_user("agent")
        self.alice = self.make_user("user", email="alice@example.com")

    def test_list_users_is_admin_only(self) -> None:
        with self.assertRaises(AccessDeniedError):
            list_users(self.store, self.agent)
        users = list_users(self.store, self.admin)
        self.assertEqual(len(users), 3)
        for user in users:
            self.assertNotIn("password_hash", user.model_dump())

    def test_create_user_with_role(self) -> None:
        out = create_user(
            self.store,
            self.admin,
            UserCreate(name="New Agent", email="new.agent@example.com", password="s3cret-pass", role="agent"),
        )
        self.assertEqual(out.role, "agent")

    def test_update_user_role(self) -> None:
        out = update_user(self.store, self.admin, self.alice.id, UserUpdate(role="agent"))
        self.assertEqual(out.role, "agent")

    def test_update_user_email_taken_ignoring_case(self) -> None:
        with self.assertRaises(ConflictError):
            update_user(self.store, self.admin, self.agent.id, UserUpdate(email="ALICE@example.com"))

    def test_update_missing_user(self) -> None:
        with self.assertRaises(NotFoundError):
            update_user(self.store, self.admin, 9999, UserUpdate(name="Ghost"))
        with self.assertRaises(NotFoundError):
            get_user(self.store, self.admin, 9999)


class TestDeleteUser(StoreTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.admin = self.make_user("admin")
        self.agent = self.make_user("agent")
        self.alice = self.make_user("user")
        self.category = self.make_category()

    def test_admin_cannot_delete_self(self) -> None:
        with self.assertRaises(ConflictError):
            delete_user(self.store, self.admin, self.admin.id)

    def test_user_with_tickets_is_kept(self) -> None:
        self.make_ticket(self.alice, self.category)
        with self.assertRaises(ConflictError):
            delete_user(self.store, self.admin, self.alice.id)
        self.assertEqual(get_user(self.store, self.admin, self.alice.id).id, self.alice.id)

    def test_user_with_comments_is_kept(self) -> None:
        ticket = self.make_ticket(self.alice, self.category)
        self.store.add_comment(ticket_id=ticket.id, user_id=self.agent.id, content="Looking")
        self.store.commit()
        with self.assertRaises(ConflictError):
            delete_user(self.store, self.admin, self.agent.id)

    def test_deleting_assignee_unassigns_tickets(self) -> None:
        ticket = self.make_ticket(self.alice, self.category, assigned_to=self.agent.id)
        deleted = delete_user(self.store, self.admin, self.agent.id)
        self.assertEqual(deleted.id, self.agent.id)
        self.assertIsNone(self.store.get_ticket(ticket.id).assigned_to)
        with self.assertRaises(NotFoundError):
            get_user(self.store, self.admin, self.agent.id)

    def test_agent_cannot_delete(self) -> None:
        with self.assertRaises(AccessDeniedError):
            delete_user(self.store, self.agent, self.alice.id)


class TestUserStats(StoreTestCase):
    def test_counts_by_role_and_recent(self) -> None:
        now = datetime(2026, 6, 1, tzinfo=UTC)
        admin = self.make_user("admin", created_at=now - timedelta(days=400))
        self.make_user("agent", created_at=now - timedelta(days=2))
        self.make_user("user", created_at=now - timedelta(days=10))
        self.make_user("user", created_at=now - timedelta(days=45))

        settings = MagicMock()
        settings.RECENT_USERS_DAYS = 30
        stats = user_stats(self.store, admin, settings, now=now)
        self.assertEqual(stats.total_users, 4)
        self.assertEqual(stats.user_count, 2)
        self.assertEqual(stats.agent_count, 1)
        self.assertEqual(stats.admin_count, 1)
        self.assertEqual(stats.recent_users, 2)

    def test_stats_are_admin_only(self) -> None:
        agent = self.make_user("agent")
        with self.assertRaises(AccessDeniedError):
            user_stats(self.store, agent, MagicMock())
