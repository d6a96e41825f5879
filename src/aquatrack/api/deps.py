"""FastAPI dependencies wiring collaborators into the routes."""

from __future__ import annotations

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..models.domain import Role
from ..persistence.store import DataStore, get_store
from ..services.accounts import RoleProvider, UserDirectory, get_role_provider
from ..services.customers import CustomerDirectory
from ..services.ledger import ContainerLedger, OrderLedger
from ..services.permissions import APPROVED_ROLES, PRIVILEGED_ROLES, require_role

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_role(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    provider: RoleProvider = Depends(get_role_provider),
) -> Role:
    token = credentials.credentials if credentials else None
    return provider.role_for_token(token)


def require_staff(role: Role = Depends(get_current_role)) -> Role:
    require_role(role, APPROVED_ROLES, "use the delivery ledger")
    return role


def require_admin(role: Role = Depends(get_current_role)) -> Role:
    require_role(role, PRIVILEGED_ROLES, "perform administrative actions")
    return role


def get_order_ledger(store: DataStore = Depends(get_store)) -> OrderLedger:
    return OrderLedger(store)


def get_container_ledger(store: DataStore = Depends(get_store)) -> ContainerLedger:
    return ContainerLedger(store)


def get_customer_directory(store: DataStore = Depends(get_store)) -> CustomerDirectory:
    return CustomerDirectory(store)


def get_user_directory(store: DataStore = Depends(get_store)) -> UserDirectory:
    return UserDirectory(store)
