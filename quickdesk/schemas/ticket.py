"""Pydantic schemas for support tickets: create/update bodies, list filters, enriched responses."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from quickdesk.models.base import MAX_ID
from quickdesk.schemas.category import CategorySummary
from quickdesk.schemas.comment import CommentOut
from quickdesk.schemas.user import UserSummary

TicketStatus = Literal["open", "in_progress", "resolved", "closed"]
TicketPriority = Literal["low", "medium", "high"]
SortField = Literal["created_at", "updated_at", "priority", "status"]
SortOrder = Literal["asc", "desc"]

STATUS_VALUES: tuple[TicketStatus, ...] = ("open", "in_progress", "resolved", "closed")
PRIORITY_VALUES: tuple[TicketPriority, ...] = ("low", "medium", "high")

# Sort ranks: priority by severity, status by workflow order (not alphabetical).
STATUS_RANK: dict[str, int] = {s: i for i, s in enumerate(STATUS_VALUES)}
PRIORITY_RANK: dict[str, int] = {p: i for i, p in enumerate(PRIORITY_VALUES)}

# assigned_to filter keywords; anything else must be a numeric user id.
ASSIGNED_TO_ME = "me"
ASSIGNED_TO_NOBODY = "unassigned"

SUBJECT_MIN_LENGTH = 5
SUBJECT_MAX_LENGTH = 200
DESCRIPTION_MIN_LENGTH = 10
DESCRIPTION_MAX_LENGTH = 10_000
STATUS_CHANGE_REASON_MAX_LENGTH = 500
MAX_ATTACHMENTS = 20
ATTACHMENT_REF_MAX_LENGTH = 1024

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
# Keeps (page - 1) * limit within a 64-bit OFFSET.
MAX_PAGE = MAX_ID


class TicketCreate(BaseModel):
    """Request body for POST /tickets. Status is always 'open' on creation."""

    model_config = ConfigDict(str_strip_whitespace=True)

    subject: str = Field(..., min_length=SUBJECT_MIN_LENGTH, max_length=SUBJECT_MAX_LENGTH)
    description: str = Field(
        ...,
        min_length=DESCRIPTION_MIN_LENGTH,
        max_length=DESCRIPTION_MAX_LENGTH,
    )
    category_id: int = Field(..., ge=1, le=MAX_ID, description="Must reference an existing category.")
    priority: TicketPriority = "medium"
    attachments: list[str] = Field(
        default_factory=list,
        max_length=MAX_ATTACHMENTS,
        description="Opaque attachment references (file names or URLs).",
    )

    @field_validator("attachments")
    @classmethod
    def validate_attachments(cls, v: list[str]) -> list[str]:
        for ref in v:
            if not ref or not ref.strip():
                raise ValueError("attachments must be non-empty strings.")
            if len(ref) > ATTACHMENT_REF_MAX_LENGTH:
                raise ValueError(
                    f"attachment references must be at most {ATTACHMENT_REF_MAX_LENGTH} characters."
                )
        return v


class TicketUpdate(BaseModel):
    """
    Request body for PUT /tickets/{id}.

    Fields the caller's role may not change are ignored, not rejected.
    Send assigned_to: null explicitly to unassign.
    """

    status: TicketStatus | None = None
    assigned_to: int | None = Field(default=None, ge=1, le=MAX_ID)
    priority: TicketPriority | None = None
    status_change_reason: str | None = Field(
        default=None,
        max_length=STATUS_CHANGE_REASON_MAX_LENGTH,
    )

    @field_validator("status_change_reason")
    @classmethod
    def strip_reason(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip() or None


class TicketListParams(BaseModel):
    """Query parameters for GET /tickets. All filters are conjunctive."""

    status: TicketStatus | None = None
    category_id: int | None = Field(default=None, ge=1, le=MAX_ID)
    priority: TicketPriority | None = None
    assigned_to: str | None = Field(
        default=None,
        description="'me', 'unassigned', or a user id.",
    )
    page: int = Field(default=1, ge=1, le=MAX_PAGE)
    limit: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)
    sort_by: SortField = "created_at"
    sort_order: SortOrder = "desc"

    @field_validator("assigned_to")
    @classmethod
    def validate_assigned_to(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        if not v:
            return None
        if v in (ASSIGNED_TO_ME, ASSIGNED_TO_NOBODY):
            return v
        if not v.isdigit() or not 1 <= int(v) <= MAX_ID:
            raise ValueError(
                "assigned_to must be 'me', 'unassigned', or a numeric user id."
            )
        return v


class TicketOut(BaseModel):
    """Ticket enriched with creator, assignee and category summaries."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    subject: str
    description: str
    category_id: int | None
    user_id: int
    assigned_to: int | None
    status: TicketStatus
    priority: TicketPriority
    attachments: list[str]
    created_at: datetime
    updated_at: datetime
    user: UserSummary | None = None
    assignee: UserSummary | None = None
    category: CategorySummary | None = None


class TicketListItem(TicketOut):
    """List entry: enriched ticket plus the number of comments (not the comments)."""

    comment_count: int = 0


class TicketDetail(TicketOut):
    """Single ticket with its comments, oldest first."""

    comments: list[CommentOut] = Field(default_factory=list)


class PaginationInfo(BaseModel):
    current_page: int
    limit: int
    total_pages: int
    total_tickets: int
    has_next_page: bool
    has_prev_page: bool


class TicketListResponse(BaseModel):
    """Response for GET /tickets."""

    tickets: list[TicketListItem]
    pagination: PaginationInfo


class TicketStats(BaseModel):
    """Counts over the caller's visible tickets."""

    total: int
    open: int
    in_progress: int
    resolved: int
    closed: int
    high_priority: int
    medium_priority: int
    low_priority: int
