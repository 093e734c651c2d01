"""Tickets endpoints: list/filter, stats, detail, create, update, comment."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from quickdesk.api.v1.auth import ResourceId, get_current_user, get_store
from quickdesk.schemas.auth import CurrentUser
from quickdesk.schemas.comment import CommentCreate, CommentOut
from quickdesk.schemas.ticket import (
    TicketCreate,
    TicketDetail,
    TicketListParams,
    TicketListResponse,
    TicketOut,
    TicketStats,
    TicketUpdate,
)
from quickdesk.services import comments, ticket_query, ticket_workflow
from quickdesk.services.store import Store

router = APIRouter()


@router.get("", response_model=TicketListResponse)
def get_tickets(
    params: Annotated[TicketListParams, Query()],
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Store, Depends(get_store)],
) -> TicketListResponse:
    """
    List tickets visible to the caller, one page at a time.

    Plain users only ever see their own tickets. Agents and admins see all tickets, or
    only those assigned to them with assigned_to=me. status, category_id, priority and
    assigned_to (user id or 'unassigned') narrow the result further.
    """
    items, pagination = ticket_query.list_tickets(store, current_user, params)
    return TicketListResponse(tickets=items, pagination=pagination)


@router.get("/stats", response_model=TicketStats)
def get_ticket_stats(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Store, Depends(get_store)],
) -> TicketStats:
    """Counts by status and priority over the caller's visible tickets."""
    return ticket_query.ticket_stats(store, current_user)


@router.get("/{ticket_id}", response_model=TicketDetail)
def get_ticket(
    ticket_id: ResourceId,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Store, Depends(get_store)],
) -> TicketDetail:
    return ticket_query.get_ticket_detail(store, current_user, ticket_id)


@router.post("", response_model=TicketDetail, status_code=status.HTTP_201_CREATED)
def post_ticket(
    body: TicketCreate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Store, Depends(get_store)],
) -> TicketDetail:
    return ticket_workflow.create_ticket(store, current_user, body)


@router.put("/{ticket_id}", response_model=TicketOut)
def put_ticket(
    ticket_id: ResourceId,
    body: TicketUpdate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Store, Depends(get_store)],
) -> TicketOut:
    """
    Update status, assignee and priority.

    Agents and admins may change all three; the ticket's creator may change only priority.
    Fields the caller may not change are ignored. A status change adds an audit comment.
    """
    return ticket_workflow.update_ticket(store, current_user, ticket_id, body)


@router.post(
    "/{ticket_id}/comments",
    response_model=CommentOut,
    status_code=status.HTTP_201_CREATED,
)
def post_comment(
    ticket_id: ResourceId,
    body: CommentCreate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Store, Depends(get_store)],
) -> CommentOut:
    return comments.add_comment(store, current_user, ticket_id, body)
