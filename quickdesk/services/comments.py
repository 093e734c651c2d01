"""Comment thread: append a comment to a ticket the caller may access."""

import logging
from typing import TYPE_CHECKING

from quickdesk.models.base import utcnow
from quickdesk.schemas.comment import CommentCreate, CommentOut
from quickdesk.services.enrichment import enrich_comments
from quickdesk.services.policy import get_accessible_ticket

if TYPE_CHECKING:
    from quickdesk.schemas.auth import CurrentUser
    from quickdesk.services.store import Store

logger = logging.getLogger(__name__)


def add_comment(
    store: "Store",
    caller: "CurrentUser",
    ticket_id: int,
    body: CommentCreate,
) -> CommentOut:
    """Append a regular (non status-change) comment authored by the caller."""
    ticket = get_accessible_ticket(store, caller, ticket_id, action="ticket.comment")
    comment = store.add_comment(
        ticket_id=ticket.id,
        user_id=caller.id,
        content=body.content,
        is_status_change=False,
        created_at=utcnow(),
    )
    store.commit()
    logger.info("Comment added: ticket_id=%s comment_id=%s user_id=%s", ticket.id, comment.id, caller.id)
    return enrich_comments(store, [comment])[0]
