"""Role-based authorization: capability presets, allow/deny decisions, per-field ticket update rules.

Every gate in the service layer goes through authorize(); services never compare role strings.
"""

from typing import TYPE_CHECKING, Any, Literal

from quickdesk.services.errors import AccessDeniedError, NotFoundError

if TYPE_CHECKING:
    from quickdesk.models import Ticket
    from quickdesk.schemas.auth import CurrentUser
    from quickdesk.services.store import Store

Capability = Literal[
    "can_create_tickets",
    "can_assign_tickets",
    "can_view_all_tickets",
    "can_manage_users",
    "can_manage_categories",
]

Action = Literal[
    "ticket.create",
    "ticket.list_all",
    "ticket.read",
    "ticket.update",
    "ticket.comment",
    "ticket.assign",
    "user.manage",
    "category.manage",
]

_BASE_CAPABILITIES: frozenset[Capability] = frozenset({"can_create_tickets"})

ROLE_CAPABILITIES: dict[str, frozenset[Capability]] = {
    "user": _BASE_CAPABILITIES,
    "agent": _BASE_CAPABILITIES | {"can_assign_tickets", "can_view_all_tickets"},
    "admin": _BASE_CAPABILITIES
    | {
        "can_assign_tickets",
        "can_view_all_tickets",
        "can_manage_users",
        "can_manage_categories",
    },
}

# Ticket patch fields each role may change. Fields outside the set are dropped silently.
TICKET_FIELD_POLICY: dict[str, frozenset[str]] = {
    "user": frozenset({"priority"}),
    "agent": frozenset({"status", "assigned_to", "priority", "status_change_reason"}),
    "admin": frozenset({"status", "assigned_to", "priority", "status_change_reason"}),
}

# Actions granted by a capability alone.
_ACTION_CAPABILITY: dict[str, Capability] = {
    "ticket.create": "can_create_tickets",
    "ticket.list_all": "can_view_all_tickets",
    "ticket.assign": "can_assign_tickets",
    "user.manage": "can_manage_users",
    "category.manage": "can_manage_categories",
}

# Per-ticket actions: allowed with can_view_all_tickets, otherwise only for the ticket's creator.
_OWNERSHIP_ACTIONS = frozenset({"ticket.read", "ticket.update", "ticket.comment"})


def role_capabilities(role: str) -> frozenset[Capability]:
    """Capability preset for a role; unknown roles get the plain-user preset."""
    return ROLE_CAPABILITIES.get(role, _BASE_CAPABILITIES)


def authorize(
    role: str,
    action: Action,
    caller_id: int | None = None,
    owner_id: int | None = None,
) -> bool:
    """
    Return True if a caller with this role may perform action.

    For per-ticket actions pass caller_id and the ticket's owner_id (creator).
    """
    capabilities = role_capabilities(role)
    if action in _OWNERSHIP_ACTIONS:
        if "can_view_all_tickets" in capabilities:
            return True
        return caller_id is not None and owner_id is not None and caller_id == owner_id
    required = _ACTION_CAPABILITY.get(action)
    return required is not None and required in capabilities


def ensure_allowed(caller: "CurrentUser", action: Action, message: str = "Access denied") -> None:
    """Raise AccessDeniedError unless the caller may perform a non-ownership action."""
    if not authorize(caller.role, action, caller_id=caller.id):
        raise AccessDeniedError(message)


def ensure_admin(caller: "CurrentUser", action: Action) -> None:
    """Gate for user/category management endpoints."""
    ensure_allowed(caller, action, message="Admin access required")


def allowed_ticket_fields(role: str) -> frozenset[str]:
    return TICKET_FIELD_POLICY.get(role, frozenset())


def filter_ticket_patch(role: str, patch: dict[str, Any]) -> dict[str, Any]:
    """Drop patch fields the role may not change (silently, by policy)."""
    allowed = allowed_ticket_fields(role)
    return {field: value for field, value in patch.items() if field in allowed}


def get_accessible_ticket(
    store: "Store",
    caller: "CurrentUser",
    ticket_id: int,
    action: Action = "ticket.read",
    for_update: bool = False,
) -> "Ticket":
    """
    Load a ticket and apply the ownership check.

    Existence is checked first (NotFoundError regardless of role), then ownership
    (AccessDeniedError for a plain user who did not create the ticket).
    """
    ticket = store.get_ticket(ticket_id, for_update=for_update)
    if ticket is None:
        raise NotFoundError("Ticket not found")
    if not authorize(caller.role, action, caller_id=caller.id, owner_id=ticket.user_id):
        raise AccessDeniedError("Access denied")
    return ticket
