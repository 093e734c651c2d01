"""User management endpoints (admin only). Password hashes are never returned."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from quickdesk.api.v1.auth import ResourceId, get_current_user, get_store
from quickdesk.core.config import Settings, get_settings
from quickdesk.schemas.auth import CurrentUser
from quickdesk.schemas.user import UserCreate, UserPublic, UsersListResponse, UserStats, UserUpdate
from quickdesk.services import users as user_service
from quickdesk.services.store import Store

router = APIRouter()


@router.get("", response_model=UsersListResponse)
def list_users(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Store, Depends(get_store)],
) -> UsersListResponse:
    return UsersListResponse(users=user_service.list_users(store, current_user))


@router.get("/stats", response_model=UserStats)
def get_user_stats(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Store, Depends(get_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> UserStats:
    """Totals by role plus users created within the last RECENT_USERS_DAYS days."""
    return user_service.user_stats(store, current_user, settings)


@router.get("/{user_id}", response_model=UserPublic)
def get_user(
    user_id: ResourceId,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Store, Depends(get_store)],
) -> UserPublic:
    return user_service.get_user(store, current_user, user_id)


@router.post("", response_model=UserPublic, status_code=status.HTTP_201_CREATED)
def create_user(
    body: UserCreate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Store, Depends(get_store)],
) -> UserPublic:
    return user_service.create_user(store, current_user, body)


@router.put("/{user_id}", response_model=UserPublic)
def update_user(
    user_id: ResourceId,
    body: UserUpdate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Store, Depends(get_store)],
) -> UserPublic:
    return user_service.update_user(store, current_user, user_id, body)


@router.delete("/{user_id}", response_model=UserPublic)
def delete_user(
    user_id: ResourceId,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Store, Depends(get_store)],
) -> UserPublic:
    """Delete a user and return the deleted record. Users with tickets or comments are kept (409)."""
    return user_service.delete_user(store, current_user, user_id)
