"""Request/response schemas for ticket comments."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from quickdesk.schemas.user import CommentAuthor

COMMENT_MIN_LENGTH = 1
COMMENT_MAX_LENGTH = 1000


class CommentCreate(BaseModel):
    """Request body for POST /tickets/{id}/comments."""

    model_config = ConfigDict(str_strip_whitespace=True)

    content: str = Field(
        ...,
        min_length=COMMENT_MIN_LENGTH,
        max_length=COMMENT_MAX_LENGTH,
        description="Comment text (1-1000 characters after trimming).",
    )


class CommentOut(BaseModel):
    """Comment enriched with the author's public profile."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    ticket_id: int
    user_id: int
    content: str
    is_status_change: bool
    created_at: datetime
    user: CommentAuthor | None = None
