"""Ticket creation and updates: per-field authorization, assignee checks, status-change audit comments."""

import logging
from typing import TYPE_CHECKING, Any

from quickdesk.models.base import utcnow
from quickdesk.schemas.ticket import TicketCreate, TicketDetail, TicketOut, TicketUpdate
from quickdesk.services.enrichment import enrich_ticket, enrich_ticket_detail
from quickdesk.services.errors import ValidationFailed
from quickdesk.services.policy import ensure_allowed, filter_ticket_patch, get_accessible_ticket

if TYPE_CHECKING:
    from quickdesk.schemas.auth import CurrentUser
    from quickdesk.services.store import Store

logger = logging.getLogger(__name__)


def status_change_message(status: str, reason: str | None = None) -> str:
    """Audit comment text, e.g. 'Status changed to in progress: Investigating'."""
    message = f"Status changed to {status.replace('_', ' ')}"
    if reason:
        message = f"{message}: {reason}"
    return message


def create_ticket(store: "Store", caller: "CurrentUser", body: TicketCreate) -> TicketDetail:
    """Create an open ticket owned by the caller. category_id must reference an existing category."""
    ensure_allowed(caller, "ticket.create")
    if store.get_category(body.category_id) is None:
        raise ValidationFailed.for_field("category_id", "Invalid category")

    now = utcnow()
    ticket = store.add_ticket(
        subject=body.subject,
        description=body.description,
        category_id=body.category_id,
        user_id=caller.id,
        assigned_to=None,
        status="open",
        priority=body.priority,
        attachments=list(body.attachments),
        created_at=now,
        updated_at=now,
    )
    store.commit()
    logger.info("Ticket created: id=%s user_id=%s category_id=%s", ticket.id, caller.id, body.category_id)
    return enrich_ticket_detail(store, ticket)


def _requested_changes(patch: TicketUpdate) -> dict[str, Any]:
    """Fields present in the patch. assigned_to counts when sent explicitly, even as null."""
    changes: dict[str, Any] = {}
    for field in ("status", "priority", "status_change_reason"):
        value = getattr(patch, field)
        if value is not None:
            changes[field] = value
    if "assigned_to" in patch.model_fields_set:
        changes["assigned_to"] = patch.assigned_to
    return changes


def update_ticket(
    store: "Store",
    caller: "CurrentUser",
    ticket_id: int,
    patch: TicketUpdate,
) -> TicketOut:
    """
    Apply the fields of patch the caller's role may change; others are ignored.

    A status that differs from the current one writes an is_status_change comment in the
    same transaction. updated_at is refreshed on every successful update.
    """
    ticket = get_accessible_ticket(
        store, caller, ticket_id, action="ticket.update", for_update=True
    )
    changes = filter_ticket_patch(caller.role, _requested_changes(patch))

    new_assignee = changes.get("assigned_to")
    if new_assignee is not None and store.get_user(new_assignee) is None:
        raise ValidationFailed.for_field("assigned_to", "Assignee not found")

    reason = changes.pop("status_change_reason", None)
    previous_status = ticket.status
    for field, value in changes.items():
        setattr(ticket, field, value)
    ticket.updated_at = utcnow()

    new_status = changes.get("status")
    if new_status is not None and new_status != previous_status:
        store.add_comment(
            ticket_id=ticket.id,
            user_id=caller.id,
            content=status_change_message(new_status, reason),
            is_status_change=True,
            created_at=utcnow(),
        )
        logger.info(
            "Ticket status changed: id=%s %s -> %s by user_id=%s",
            ticket.id,
            previous_status,
            new_status,
            caller.id,
        )
    store.commit()
    return enrich_ticket(store, ticket)
