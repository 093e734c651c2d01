"""Category endpoints: any authenticated caller may read; only admins may write."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from quickdesk.api.v1.auth import ResourceId, get_current_user, get_store
from quickdesk.core.config import Settings, get_settings
from quickdesk.schemas.auth import CurrentUser
from quickdesk.schemas.category import (
    CategoriesListResponse,
    CategoryCreate,
    CategoryOut,
    CategoryUpdate,
)
from quickdesk.services import categories as category_service
from quickdesk.services.store import Store

router = APIRouter()


@router.get("", response_model=CategoriesListResponse)
def list_categories(
    _user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Store, Depends(get_store)],
) -> CategoriesListResponse:
    return CategoriesListResponse(categories=category_service.list_categories(store))


@router.get("/{category_id}", response_model=CategoryOut)
def get_category(
    category_id: ResourceId,
    _user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Store, Depends(get_store)],
) -> CategoryOut:
    return category_service.get_category(store, category_id)


@router.post("", response_model=CategoryOut, status_code=status.HTTP_201_CREATED)
def create_category(
    body: CategoryCreate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Store, Depends(get_store)],
) -> CategoryOut:
    return category_service.create_category(store, current_user, body)


@router.put("/{category_id}", response_model=CategoryOut)
def update_category(
    category_id: ResourceId,
    body: CategoryUpdate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Store, Depends(get_store)],
) -> CategoryOut:
    return category_service.update_category(store, current_user, category_id, body)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: ResourceId,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Store, Depends(get_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> None:
    """
    Delete a category. Tickets filed under it lose their category unless
    BLOCK_CATEGORY_DELETE_IN_USE is enabled, in which case this returns 409.
    """
    category_service.delete_category(store, current_user, category_id, settings)
