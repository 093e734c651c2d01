"""Ticket list/detail queries: role scope, explicit filters, sorting, pagination, enrichment.

The pipeline has two stages. The scope stage is derived only from the caller (a plain user
sees only tickets they created; an agent or admin asking for assigned_to=me sees only tickets
assigned to them). The filter stage adds equality filters from query parameters. Both are
ANDed in the store, so no filter value can widen the scope.
"""

import logging
import math
from typing import TYPE_CHECKING

from quickdesk.schemas.ticket import (
    ASSIGNED_TO_ME,
    ASSIGNED_TO_NOBODY,
    STATUS_VALUES,
    PaginationInfo,
    TicketDetail,
    TicketListItem,
    TicketListParams,
    TicketStats,
)
from quickdesk.services.enrichment import enrich_ticket_detail, enrich_ticket_list
from quickdesk.services.policy import authorize, get_accessible_ticket
from quickdesk.services.store import TicketFilters, TicketQuery, TicketScope

if TYPE_CHECKING:
    from quickdesk.schemas.auth import CurrentUser
    from quickdesk.services.store import Store

logger = logging.getLogger(__name__)


def scope_for_caller(caller: "CurrentUser", assigned_to: str | None = None) -> TicketScope:
    """Scope stage: narrowing that depends only on who is asking."""
    if not authorize(caller.role, "ticket.list_all"):
        return TicketScope(owner_id=caller.id)
    if assigned_to == ASSIGNED_TO_ME and authorize(caller.role, "ticket.assign"):
        return TicketScope(assignee_id=caller.id)
    return TicketScope()


def filters_from_params(params: TicketListParams) -> TicketFilters:
    """Filter stage: explicit equality filters. assigned_to=me is handled by the scope stage."""
    assignee_id: int | None = None
    unassigned_only = False
    if params.assigned_to == ASSIGNED_TO_NOBODY:
        unassigned_only = True
    elif params.assigned_to is not None and params.assigned_to != ASSIGNED_TO_ME:
        assignee_id = int(params.assigned_to)
    return TicketFilters(
        status=params.status,
        category_id=params.category_id,
        priority=params.priority,
        assignee_id=assignee_id,
        unassigned_only=unassigned_only,
    )


def build_ticket_query(caller: "CurrentUser", params: TicketListParams) -> TicketQuery:
    return TicketQuery(
        scope=scope_for_caller(caller, params.assigned_to),
        filters=filters_from_params(params),
        sort_by=params.sort_by,
        sort_order=params.sort_order,
        offset=(params.page - 1) * params.limit,
        limit=params.limit,
    )


def paginate(page: int, limit: int, total: int) -> PaginationInfo:
    """Pagination metadata for the window [(page-1)*limit, page*limit)."""
    end = (page - 1) * limit + limit
    return PaginationInfo(
        current_page=page,
        limit=limit,
        total_pages=math.ceil(total / limit),
        total_tickets=total,
        has_next_page=end < total,
        has_prev_page=page > 1,
    )


def list_tickets(
    store: "Store",
    caller: "CurrentUser",
    params: TicketListParams,
) -> tuple[list[TicketListItem], PaginationInfo]:
    """
    Return one page of tickets visible to the caller, enriched, plus pagination metadata.

    An empty result is not an error; pagination still reports the filtered total.
    """
    query = build_ticket_query(caller, params)
    tickets, total = store.query_tickets(query)
    logger.debug(
        "list_tickets caller=%s scope=%s filters=%s total=%s",
        caller.id,
        query.scope.model_dump(exclude_none=True),
        query.filters.model_dump(exclude_defaults=True),
        total,
    )
    return enrich_ticket_list(store, tickets), paginate(params.page, params.limit, total)


def get_ticket_detail(store: "Store", caller: "CurrentUser", ticket_id: int) -> TicketDetail:
    """Ticket with creator/assignee/category summaries and comments oldest first."""
    ticket = get_accessible_ticket(store, caller, ticket_id, action="ticket.read")
    return enrich_ticket_detail(store, ticket)


def ticket_stats(store: "Store", caller: "CurrentUser") -> TicketStats:
    """Counts by status and priority over the caller's scope (plain users: own tickets)."""
    scope = scope_for_caller(caller)
    by_status = store.count_tickets_by("status", scope)
    by_priority = store.count_tickets_by("priority", scope)
    return TicketStats(
        total=sum(by_status.get(s, 0) for s in STATUS_VALUES),
        open=by_status.get("open", 0),
        in_progress=by_status.get("in_progress", 0),
        resolved=by_status.get("resolved", 0),
        closed=by_status.get("closed", 0),
        high_priority=by_priority.get("high", 0),
        medium_priority=by_priority.get("medium", 0),
        low_priority=by_priority.get("low", 0),
    )

