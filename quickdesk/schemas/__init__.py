"""Pydantic request/response schemas."""

from quickdesk.schemas.auth import CurrentUser, LoginRequest, RegisterRequest, TokenResponse
from quickdesk.schemas.category import (
    CategoryCreate,
    CategoryOut,
    CategorySummary,
    CategoryUpdate,
)
from quickdesk.schemas.comment import CommentCreate, CommentOut
from quickdesk.schemas.health import HealthResponse
from quickdesk.schemas.ticket import (
    PaginationInfo,
    TicketCreate,
    TicketDetail,
    TicketListItem,
    TicketListParams,
    TicketOut,
    TicketUpdate,
)
from quickdesk.schemas.user import CommentAuthor, UserPublic, UserSummary

__all__ = [
    "CategoryCreate",
    "CategoryOut",
    "CategorySummary",
    "CategoryUpdate",
    "CommentAuthor",
    "CommentCreate",
    "CommentOut",
    "CurrentUser",
    "HealthResponse",
    "LoginRequest",
    "PaginationInfo",
    "RegisterRequest",
    "TicketCreate",
    "TicketDetail",
    "TicketListItem",
    "TicketListParams",
    "TicketOut",
    "TicketUpdate",
    "TokenResponse",
    "UserPublic",
    "UserSummary",
]
