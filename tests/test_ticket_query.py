"""Tests for ticket listing: role scope, filters, sort order, pagination and enrichment."""

import unittest

from pydantic import ValidationError

from quickdesk.models.base import MAX_ID
from quickdesk.schemas.auth import CurrentUser
from quickdesk.schemas.ticket import TicketListParams
from quickdesk.services.errors import AccessDeniedError, NotFoundError
from quickdesk.services.ticket_query import (
    get_ticket_detail,
    list_tickets,
    paginate,
    scope_for_caller,
    ticket_stats,
)
from quickdesk.services.store import TicketScope
from tests.factories import StoreTestCase


def _caller(role: str, user_id: int) -> CurrentUser:
    return CurrentUser(id=user_id, name="Caller", email=f"{role}{user_id}@example.com", role=role)


class TestScopeForCaller(unittest.TestCase):
    """Scope stage depends only on the caller; assigned_to=me narrows agents and admins."""

    def test_user_is_scoped_to_own_tickets(self) -> None:
        self.assertEqual(scope_for_caller(_caller("user", 3)), TicketScope(owner_id=3))

    def test_user_scope_ignores_assigned_to_me(self) -> None:
        self.assertEqual(scope_for_caller(_caller("user", 3), "me"), TicketScope(owner_id=3))

    def test_agent_sees_everything_by_default(self) -> None:
        self.assertEqual(scope_for_caller(_caller("agent", 4)), TicketScope())

    def test_agent_and_admin_me_narrows_to_assignee(self) -> None:
        for role in ("agent", "admin"):
            with self.subTest(role=role):
                self.assertEqual(
                    scope_for_caller(_caller(role, 9), "me"), TicketScope(assignee_id=9)
                )


class TestPaginate(unittest.TestCase):
    def test_last_partial_page(self) -> None:
        info = paginate(page=3, limit=10, total=25)
        self.assertEqual(info.total_pages, 3)
        self.assertFalse(info.has_next_page)
        self.assertTrue(info.has_prev_page)

    def test_first_page_of_many(self) -> None:
        info = paginate(page=1, limit=10, total=25)
        self.assertTrue(info.has_next_page)
        self.assertFalse(info.has_prev_page)

    def test_exact_multiple(self) -> None:
        info = paginate(page=2, limit=5, total=10)
        self.assertEqual(info.total_pages, 2)
        self.assertFalse(info.has_next_page)

    def test_empty_result(self) -> None:
        info = paginate(page=1, limit=10, total=0)
        self.assertEqual(info.total_pages, 0)
        self.assertEqual(info.total_tickets, 0)
        self.assertFalse(info.has_next_page)
        self.assertFalse(info.has_prev_page)

    def test_page_past_the_end(self) -> None:
        info = paginate(page=5, limit=10, total=12)
        self.assertEqual(info.current_page, 5)
        self.assertFalse(info.has_next_page)
        self.assertTrue(info.has_prev_page)


class TestTicketListParams(unittest.TestCase):
    """Malformed query parameters are rejected before any query runs."""

    def test_defaults(self) -> None:
        params = TicketListParams()
        self.assertEqual(params.page, 1)
        self.assertEqual(params.limit, 10)
        self.assertEqual(params.sort_by, "created_at")
        self.assertEqual(params.sort_order, "desc")

    def test_rejects_out_of_range_values(self) -> None:
        for bad in ({"page": 0}, {"limit": 0}, {"limit": 101}):
            with self.subTest(bad=bad), self.assertRaises(ValidationError):
                TicketListParams(**bad)

    def test_rejects_unknown_enum_values(self) -> None:
        for bad in ({"status": "pending"}, {"priority": "urgent"}, {"sort_by": "subject"}):
            with self.subTest(bad=bad), self.assertRaises(ValidationError):
                TicketListParams(**bad)

    def test_assigned_to_accepts_keywords_and_ids(self) -> None:
        for value in ("me", "unassigned", "12"):
            self.assertEqual(TicketListParams(assigned_to=value).assigned_to, value)

    def test_assigned_to_rejects_names(self) -> None:
        with self.assertRaises(ValidationError):
            TicketListParams(assigned_to="bob")

    def test_integers_past_key_range_rejected(self) -> None:
        for bad in (
            {"page": MAX_ID + 1},
            {"category_id": MAX_ID + 1},
            {"assigned_to": str(10**20)},
        ):
            with self.subTest(bad=bad), self.assertRaises(ValidationError):
                TicketListParams(**bad)
        self.assertEqual(TicketListParams(assigned_to=str(MAX_ID)).assigned_to, str(MAX_ID))


class TicketListFixture(StoreTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.alice = self.make_user("user", name="Alice")
        self.bob = self.make_user("user", name="Bob")
        self.agent = self.make_user("agent", name="Agent Smith")
        self.admin = self.make_user("admin", name="Admin")
        self.billing = self.make_category("Billing")
        self.tech = self.make_category("Technical")


class TestListTicketsScope(TicketListFixture):
    """A plain user never sees another user's ticket, whatever the filters."""

    def setUp(self) -> None:
        super().setUp()
        self.alice_tickets = [
            self.make_ticket(self.alice, self.billing),
            self.make_ticket(self.alice, self.tech, assigned_to=self.agent.id),
        ]
        self.bob_tickets = [
            self.make_ticket(self.bob, self.billing, assigned_to=self.agent.id),
            self.make_ticket(self.bob, self.tech, status="resolved"),
        ]

    def _ids(self, caller: CurrentUser, **params: object) -> set[int]:
        items, _ = list_tickets(self.store, caller, TicketListParams(**params))
        return {t.id for t in items}

    def test_user_sees_only_own(self) -> None:
        self.assertEqual(self._ids(self.alice), {t.id for t in self.alice_tickets})

    def test_user_filters_never_widen_scope(self) -> None:
        own = {t.id for t in self.alice_tickets}
        for params in (
            {"assigned_to": str(self.agent.id)},
            {"assigned_to": "me"},
            {"status": "resolved"},
            {"category_id": self.tech.id},
        ):
            with self.subTest(params=params):
                self.assertTrue(self._ids(self.alice, **params) <= own)

    def test_agent_sees_all(self) -> None:
        self.assertEqual(len(self._ids(self.agent)), 4)

    def test_agent_me_sees_only_assigned(self) -> None:
        expected = {self.alice_tickets[1].id, self.bob_tickets[0].id}
        self.assertEqual(self._ids(self.agent, assigned_to="me"), expected)

    def test_admin_me_sees_only_assigned(self) -> None:
        self.make_ticket(self.bob, self.tech, assigned_to=self.admin.id)
        ids = self._ids(self.admin, assigned_to="me")
        self.assertEqual(len(ids), 1)

    def test_unassigned_filter(self) -> None:
        expected = {self.alice_tickets[0].id, self.bob_tickets[1].id}
        self.assertEqual(self._ids(self.agent, assigned_to="unassigned"), expected)

    def test_assignee_id_filter(self) -> None:
        ids = self._ids(self.admin, assigned_to=str(self.agent.id))
        self.assertEqual(ids, {self.alice_tickets[1].id, self.bob_tickets[0].id})

    def test_filters_are_conjunctive(self) -> None:
        ids = self._ids(self.agent, status="open", category_id=self.billing.id)
        self.assertEqual(ids, {self.alice_tickets[0].id, self.bob_tickets[0].id})
        self.assertEqual(self._ids(self.agent, status="resolved", category_id=self.billing.id), set())

    def test_empty_result_is_not_an_error(self) -> None:
        items, pagination = list_tickets(self.store, self.agent, TicketListParams(priority="high"))
        self.assertEqual(items, [])
        self.assertEqual(pagination.total_tickets, 0)
        self.assertEqual(pagination.total_pages, 0)


class TestListTicketsPaginationAndSort(TicketListFixture):
    def test_third_page_of_twenty_five(self) -> None:
        for _ in range(25):
            self.make_ticket(self.alice, self.billing)
        items, pagination = list_tickets(self.store, self.alice, TicketListParams(page=3, limit=10))
        self.assertEqual(len(items), 5)
        self.assertEqual(pagination.total_pages, 3)
        self.assertEqual(pagination.total_tickets, 25)
        self.assertFalse(pagination.has_next_page)
        self.assertTrue(pagination.has_prev_page)

    def test_page_past_the_end_is_empty(self) -> None:
        for _ in range(3):
            self.make_ticket(self.alice, self.billing)
        items, pagination = list_tickets(
            self.store, self.alice, TicketListParams(page=MAX_ID, limit=100)
        )
        self.assertEqual(items, [])
        self.assertEqual(pagination.total_tickets, 3)
        self.assertEqual(pagination.total_pages, 1)
        self.assertFalse(pagination.has_next_page)

    def test_pages_do_not_overlap(self) -> None:
        for _ in range(7):
            self.make_ticket(self.alice, self.billing)
        seen: list[int] = []
        for page in (1, 2, 3):
            items, _ = list_tickets(self.store, self.alice, TicketListParams(page=page, limit=3))
            seen.extend(t.id for t in items)
        self.assertEqual(len(seen), 7)
        self.assertEqual(len(set(seen)), 7)

    def test_default_sort_is_newest_first(self) -> None:
        first = self.make_ticket(self.alice, self.billing)
        second = self.make_ticket(self.alice, self.billing)
        items, _ = list_tickets(self.store, self.alice, TicketListParams())
        self.assertEqual([t.id for t in items], [second.id, first.id])

    def test_priority_sorts_by_severity(self) -> None:
        for priority in ("high", "low", "medium"):
            self.make_ticket(self.alice, self.billing, priority=priority)
        items, _ = list_tickets(
            self.store, self.alice, TicketListParams(sort_by="priority", sort_order="asc")
        )
        self.assertEqual([t.priority for t in items], ["low", "medium", "high"])
        items, _ = list_tickets(
            self.store, self.alice, TicketListParams(sort_by="priority", sort_order="desc")
        )
        self.assertEqual([t.priority for t in items], ["high", "medium", "low"])

    def test_status_sorts_by_workflow_order(self) -> None:
        for status in ("closed", "open", "resolved", "in_progress"):
            self.make_ticket(self.alice, self.billing, status=status)
        items, _ = list_tickets(
            self.store, self.alice, TicketListParams(sort_by="status", sort_order="asc")
        )
        self.assertEqual(
            [t.status for t in items], ["open", "in_progress", "resolved", "closed"]
        )

    def test_ties_keep_id_order(self) -> None:
        tickets = [self.make_ticket(self.alice, self.billing, priority="high") for _ in range(3)]
        for order in ("asc", "desc"):
            with self.subTest(order=order):
                items, _ = list_tickets(
                    self.store, self.alice, TicketListParams(sort_by="priority", sort_order=order)
                )
                self.assertEqual([t.id for t in items], [t.id for t in tickets])


class TestListTicketsEnrichment(TicketListFixture):
    def test_items_carry_summaries_and_comment_count(self) -> None:
        ticket = self.make_ticket(self.alice, self.billing, assigned_to=self.agent.id)
        for text in ("first", "second"):
            self.store.add_comment(
                ticket_id=ticket.id, user_id=self.agent.id, content=text, is_status_change=False
            )
        self.store.commit()

        items, _ = list_tickets(self.store, self.alice, TicketListParams())
        item = items[0]
        self.assertEqual(item.user.name, "Alice")
        self.assertEqual(item.assignee.id, self.agent.id)
        self.assertEqual(item.category.name, "Billing")
        self.assertEqual(item.comment_count, 2)
        self.assertNotIn("password_hash", item.user.model_dump())

    def test_unassigned_ticket_has_no_assignee(self) -> None:
        self.make_ticket(self.alice, self.billing)
        items, _ = list_tickets(self.store, self.alice, TicketListParams())
        self.assertIsNone(items[0].assignee)
        self.assertEqual(items[0].comment_count, 0)


class TestGetTicketDetail(TicketListFixture):
    def test_missing_ticket_is_not_found_for_any_role(self) -> None:
        for caller in (self.alice, self.agent):
            with self.subTest(role=caller.role), self.assertRaises(NotFoundError):
                get_ticket_detail(self.store, caller, 9999)

    def test_other_users_ticket_is_access_denied(self) -> None:
        ticket = self.make_ticket(self.bob, self.billing)
        with self.assertRaises(AccessDeniedError):
            get_ticket_detail(self.store, self.alice, ticket.id)

    def test_comments_oldest_first_with_author_role(self) -> None:
        ticket = self.make_ticket(self.alice, self.billing)
        self.store.add_comment(ticket_id=ticket.id, user_id=self.alice.id, content="one")
        self.store.add_comment(ticket_id=ticket.id, user_id=self.agent.id, content="two")
        self.store.commit()

        detail = get_ticket_detail(self.store, self.agent, ticket.id)
        self.assertEqual([c.content for c in detail.comments], ["one", "two"])
        self.assertEqual(detail.comments[1].user.role, "agent")


class TestTicketStats(TicketListFixture):
    def test_user_stats_cover_own_tickets_only(self) -> None:
        self.make_ticket(self.alice, self.billing, priority="high")
        self.make_ticket(self.alice, self.billing, status="closed", priority="low")
        self.make_ticket(self.bob, self.billing, priority="high")

        stats = ticket_stats(self.store, self.alice)
        self.assertEqual(stats.total, 2)
        self.assertEqual(stats.open, 1)
        self.assertEqual(stats.closed, 1)
        self.assertEqual(stats.high_priority, 1)
        self.assertEqual(stats.low_priority, 1)

        self.assertEqual(ticket_stats(self.store, self.agent).total, 3)
