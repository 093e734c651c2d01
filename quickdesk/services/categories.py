"""Ticket categories: read for everyone, create/update/delete for admins."""

import logging
from typing import TYPE_CHECKING

from quickdesk.models.base import utcnow
from quickdesk.schemas.category import CategoryCreate, CategoryOut, CategoryUpdate
from quickdesk.services.errors import ConflictError, NotFoundError
from quickdesk.services.policy import ensure_admin

if TYPE_CHECKING:
    from quickdesk.core.config import Settings
    from quickdesk.models import Category
    from quickdesk.schemas.auth import CurrentUser
    from quickdesk.services.store import Store

logger = logging.getLogger(__name__)


def _get_or_404(store: "Store", category_id: int) -> "Category":
    category = store.get_category(category_id)
    if category is None:
        raise NotFoundError("Category not found")
    return category


def list_categories(store: "Store") -> list[CategoryOut]:
    return [CategoryOut.model_validate(c) for c in store.list_categories()]


def get_category(store: "Store", category_id: int) -> CategoryOut:
    return CategoryOut.model_validate(_get_or_404(store, category_id))


def create_category(store: "Store", caller: "CurrentUser", body: CategoryCreate) -> CategoryOut:
    """Create a category; names are unique ignoring case ('billing' clashes with 'Billing')."""
    ensure_admin(caller, "category.manage")
    if store.category_name_taken(body.name):
        raise ConflictError("Category with this name already exists")
    category = store.add_category(
        name=body.name,
        description=body.description,
        color=body.color,
        created_at=utcnow(),
    )
    store.commit()
    logger.info("Category created: id=%s name=%r", category.id, category.name)
    return CategoryOut.model_validate(category)


def update_category(
    store: "Store",
    caller: "CurrentUser",
    category_id: int,
    body: CategoryUpdate,
) -> CategoryOut:
    ensure_admin(caller, "category.manage")
    category = _get_or_404(store, category_id)
    if body.name is not None and body.name != category.name:
        if store.category_name_taken(body.name, exclude_category_id=category.id):
            raise ConflictError("Category with this name already exists")
        category.name = body.name
    if body.description is not None:
        category.description = body.description
    if body.color is not None:
        category.color = body.color
    store.commit()
    logger.info("Category updated: id=%s", category.id)
    return CategoryOut.model_validate(category)


def delete_category(
    store: "Store",
    caller: "CurrentUser",
    category_id: int,
    settings: "Settings",
) -> None:
    """
    Delete a category.

    Tickets still filed under it keep their rows with category_id cleared, unless
    BLOCK_CATEGORY_DELETE_IN_USE is set, in which case the delete is a conflict.
    """
    ensure_admin(caller, "category.manage")
    category = _get_or_404(store, category_id)
    in_use = store.count_tickets_in_category(category.id)
    if in_use and settings.BLOCK_CATEGORY_DELETE_IN_USE:
        raise ConflictError(f"Category is used by {in_use} ticket(s) and cannot be deleted")
    if in_use:
        store.clear_category_from_tickets(category.id)
        logger.warning(
            "Category %s deleted while in use; %s ticket(s) no longer have a category",
            category.id,
            in_use,
        )
    store.delete_category(category)
    store.commit()
    logger.info("Category deleted: id=%s by admin_id=%s", category_id, caller.id)
