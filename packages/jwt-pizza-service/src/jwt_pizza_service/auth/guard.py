"""Authorization decisions.

:func:`authorize` is the single place that decides who may do what. It reads
only the caller's role assignments and the target resource, never the
database, and returns a decision value instead of raising. Routes turn a
:class:`Deny` into an HTTP error with :func:`enforce`.

Rules, first match wins:

1. no caller                                  -> Deny(UNAUTHENTICATED)
2. self-service on own resource,
   or an action open to any signed-in user    -> Allow
3. global admin                               -> Allow
4. franchise-scoped action                    -> Allow if franchisee of that franchise
5. everything else (other users' profiles,
   menu edits, franchise create/delete)       -> Deny(FORBIDDEN)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from jwt_pizza_service.auth.models import CurrentUser, Role
from jwt_pizza_service.errors import Forbidden, Unauthenticated


class Action(str, Enum):
    VIEW_PROFILE = "view_profile"
    UPDATE_PROFILE = "update_profile"
    DELETE_USER = "delete_user"
    LIST_USERS = "list_users"
    VIEW_ORDERS = "view_orders"
    PLACE_ORDER = "place_order"
    LOGOUT = "logout"
    UPDATE_MENU = "update_menu"
    VIEW_USER_FRANCHISES = "view_user_franchises"
    VIEW_FRANCHISE = "view_franchise"
    CREATE_FRANCHISE = "create_franchise"
    DELETE_FRANCHISE = "delete_franchise"
    CREATE_STORE = "create_store"
    DELETE_STORE = "delete_store"


SELF_SERVICE = frozenset(
    {Action.VIEW_PROFILE, Action.UPDATE_PROFILE, Action.VIEW_ORDERS, Action.VIEW_USER_FRANCHISES}
)
ANY_AUTHENTICATED = frozenset({Action.PLACE_ORDER, Action.LOGOUT})
FRANCHISE_SCOPED = frozenset({Action.CREATE_STORE, Action.DELETE_STORE, Action.VIEW_FRANCHISE})


@dataclass(frozen=True)
class Resource:
    owner_id: int | None = None
    franchise_id: int | None = None


class DenyReason(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"


@dataclass(frozen=True)
class Allow:
    pass


@dataclass(frozen=True)
class Deny:
    reason: DenyReason


Decision = Allow | Deny

ALLOW = Allow()


def authorize(user: CurrentUser | None, action: Action, resource: Resource | None = None) -> Decision:
    resource = resource or Resource()

    if user is None:
        return Deny(DenyReason.UNAUTHENTICATED)

    if action in ANY_AUTHENTICATED:
        return ALLOW
    if action in SELF_SERVICE and resource.owner_id == user.id:
        return ALLOW

    if user.is_admin:
        return ALLOW

    if action in FRANCHISE_SCOPED:
        if resource.franchise_id is not None and (
            user.has_role(Role.FRANCHISEE, resource.franchise_id)
            or user.has_role(Role.ADMIN, resource.franchise_id)
        ):
            return ALLOW
        return Deny(DenyReason.FORBIDDEN)

    # Cross-user profile access, menu edits and franchise create/delete are admin-only.
    return Deny(DenyReason.FORBIDDEN)


def enforce(decision: Decision, message: str | None = None) -> None:
    """Raise the boundary error for a Deny; do nothing for Allow."""
    if isinstance(decision, Allow):
        return
    if decision.reason is DenyReason.UNAUTHENTICATED:
        raise Unauthenticated()
    raise Forbidden(message)
