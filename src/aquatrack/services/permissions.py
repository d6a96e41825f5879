"""Role predicates shared by the ledger services and the HTTP routes."""

from __future__ import annotations

from typing import Iterable

from ..errors import AuthenticationError, AuthorizationError
from ..models.domain import Order, OrderType, Role

PRIVILEGED_ROLES = frozenset({Role.ADMIN})
APPROVED_ROLES = frozenset({Role.STAFF, Role.ADMIN})


def is_privileged(role: Role) -> bool:
    return role in PRIVILEGED_ROLES


def can_edit(order: Order, role: Role) -> bool:
    """Whether ``role`` may change the payment state of ``order``.

    Regular and event orders are editable by anyone allowed to use the ledger;
    bulk orders only by privileged roles.
    """
    if order.order_type is OrderType.BULK:
        return is_privileged(role)
    return True


def can_create_bulk_order(role: Role) -> bool:
    return is_privileged(role)


def require_role(role: Role, allowed: Iterable[Role], action: str) -> None:
    if role is Role.NONE:
        raise AuthenticationError(f"Sign in required to {action}")
    if role not in set(allowed):
        raise AuthorizationError(f"Role '{role.value}' may not {action}")
