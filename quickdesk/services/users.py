"""User accounts: registration, login, profile and password changes, admin management, statistics."""

import logging
import random
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from quickdesk.core.security import hash_password, verify_password
from quickdesk.models.base import utcnow
from quickdesk.schemas.auth import PasswordChangeRequest, ProfileUpdate, RegisterRequest
from quickdesk.schemas.user import UserCreate, UserPublic, UserStats, UserUpdate
from quickdesk.services.errors import ConflictError, NotFoundError, ValidationFailed
from quickdesk.services.policy import ensure_admin

if TYPE_CHECKING:
    from quickdesk.core.config import Settings
    from quickdesk.models import User
    from quickdesk.schemas.auth import CurrentUser
    from quickdesk.services.store import Store

logger = logging.getLogger(__name__)

AVATAR_COLORS = (
    "1976d2",
    "2e7d32",
    "ed6c02",
    "9c27b0",
    "d32f2f",
    "0288d1",
    "388e3c",
    "f57c00",
)


def avatar_url(name: str) -> str:
    """Placeholder avatar: colored square with the name's initial."""
    initial = (name.strip()[:1] or "?").upper()
    color = random.choice(AVATAR_COLORS)
    return f"https://via.placeholder.com/40/{color}/ffffff?text={initial}"


def _ensure_email_free(store: "Store", email: str, exclude_user_id: int | None = None) -> None:
    if store.email_taken(email, exclude_user_id=exclude_user_id):
        raise ConflictError("Email is already taken")


def _new_user(store: "Store", name: str, email: str, password: str, role: str) -> "User":
    _ensure_email_free(store, email)
    user = store.add_user(
        name=name,
        email=email,
        password_hash=hash_password(password),
        role=role,
        avatar=avatar_url(name),
        created_at=utcnow(),
    )
    store.commit()
    logger.info("User created: id=%s role=%s", user.id, role)
    return user


def register_user(store: "Store", body: RegisterRequest) -> "User":
    """Self-service registration; the account always gets role 'user'."""
    return _new_user(store, body.name, body.email, body.password, "user")


def authenticate(store: "Store", email: str, password: str) -> "User | None":
    """Return the user for valid credentials, else None (caller reports a generic 401)."""
    user = store.get_user_by_email(email)
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user


def update_profile(store: "Store", caller: "CurrentUser", body: ProfileUpdate) -> UserPublic:
    """Edit the caller's own name/email; role is never changed here."""
    user = store.get_user(caller.id)
    if user is None:
        raise NotFoundError("User not found")
    if body.email is not None and body.email != user.email:
        _ensure_email_free(store, body.email, exclude_user_id=user.id)
        user.email = body.email
    if body.name is not None:
        user.name = body.name
    user.updated_at = utcnow()
    store.commit()
    logger.info("Profile updated: id=%s", user.id)
    return UserPublic.model_validate(user)


def change_password(store: "Store", caller: "CurrentUser", body: PasswordChangeRequest) -> None:
    user = store.get_user(caller.id)
    if user is None:
        raise NotFoundError("User not found")
    if not verify_password(body.current_password, user.password_hash):
        raise ValidationFailed.for_field("current_password", "Current password is incorrect")
    user.password_hash = hash_password(body.new_password)
    user.updated_at = utcnow()
    store.commit()
    logger.info("Password changed: user_id=%s", user.id)


def list_users(store: "Store", caller: "CurrentUser") -> list[UserPublic]:
    ensure_admin(caller, "user.manage")
    return [UserPublic.model_validate(u) for u in store.list_users()]


def get_user(store: "Store", caller: "CurrentUser", user_id: int) -> UserPublic:
    ensure_admin(caller, "user.manage")
    user = store.get_user(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return UserPublic.model_validate(user)


def create_user(store: "Store", caller: "CurrentUser", body: UserCreate) -> UserPublic:
    """Admin creates an account with any role."""
    ensure_admin(caller, "user.manage")
    user = _new_user(store, body.name, body.email, body.password, body.role)
    return UserPublic.model_validate(user)


def update_user(
    store: "Store",
    caller: "CurrentUser",
    user_id: int,
    body: UserUpdate,
) -> UserPublic:
    """Admin update of name, email and role. Email must not belong to another user."""
    ensure_admin(caller, "user.manage")
    user = store.get_user(user_id)
    if user is None:
        raise NotFoundError("User not found")
    if body.email is not None and body.email != user.email:
        _ensure_email_free(store, body.email, exclude_user_id=user.id)
        user.email = body.email
    if body.name is not None:
        user.name = body.name
    if body.role is not None:
        user.role = body.role
    user.updated_at = utcnow()
    store.commit()
    logger.info("User updated: id=%s by admin_id=%s", user.id, caller.id)
    return UserPublic.model_validate(user)


def delete_user(store: "Store", caller: "CurrentUser", user_id: int) -> UserPublic:
    """
    Hard-delete a user.

    Admins cannot delete themselves. Users who created tickets or wrote comments cannot be
    deleted, so tickets and comments never lose their author. Tickets assigned to the
    deleted user are unassigned.
    """
    ensure_admin(caller, "user.manage")
    user = store.get_user(user_id)
    if user is None:
        raise NotFoundError("User not found")
    if user.id == caller.id:
        raise ConflictError("You cannot delete your own account")
    if store.user_has_authored_content(user.id):
        raise ConflictError("User has tickets or comments and cannot be deleted")

    deleted = UserPublic.model_validate(user)
    unassigned = store.unassign_tickets_for(user.id)
    store.delete_user(user)
    store.commit()
    if unassigned:
        logger.warning("User %s deleted; %s assigned tickets are now unassigned", user_id, unassigned)
    logger.info("User deleted: id=%s by admin_id=%s", user_id, caller.id)
    return deleted


def user_stats(
    store: "Store",
    caller: "CurrentUser",
    settings: "Settings",
    now: datetime | None = None,
) -> UserStats:
    """Totals by role and the number of users created within RECENT_USERS_DAYS of now."""
    ensure_admin(caller, "user.manage")
    by_role = store.count_users_by_role()
    since = (now or datetime.now(UTC)) - timedelta(days=settings.RECENT_USERS_DAYS)
    return UserStats(
        total_users=sum(by_role.values()),
        user_count=by_role.get("user", 0),
        agent_count=by_role.get("agent", 0),
        admin_count=by_role.get("admin", 0),
        recent_users=store.count_users_created_since(since),
    )

