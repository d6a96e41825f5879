"""Resolve the caller's role from a Supabase session token."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Any, Optional

from supabase import AuthApiError, AuthError

from ...config import settings
from ...db.supabase import get_supabase_client
from ...errors import StoreError
from ...models.domain import Role
from ...persistence.store import get_store
from .users import UserDirectory


class RoleProvider(ABC):
    @abstractmethod
    def role_for_token(self, token: Optional[str]) -> Role:
        raise NotImplementedError


class StaticRoleProvider(RoleProvider):
    """Grants the same role to every caller."""

    def __init__(self, role: Role) -> None:
        self.role = role

    def role_for_token(self, token: Optional[str]) -> Role:
        return self.role


class SupabaseRoleProvider(RoleProvider):
    """Validates the access token with Supabase Auth and looks up ``user_roles``."""

    def __init__(self, client: Any, users: UserDirectory) -> None:
        self.client = client
        self.users = users

    def role_for_token(self, token: Optional[str]) -> Role:
        if not token:
            return Role.NONE
        try:
            response = self.client.auth.get_user(token)
        except AuthApiError as e:
            if (getattr(e, "status", None) or 0) >= 500:
                raise StoreError(f"Supabase Auth failed: {e}") from e
            logging.warning(f"Rejected access token: {e}")
            return Role.NONE
        except AuthError as e:
            # transport failure
            raise StoreError(f"Supabase Auth unreachable: {e}") from e
        user = getattr(response, "user", None)
        if user is None:
            return Role.NONE
        return self.users.role_of(str(user.id))


@lru_cache()
def get_role_provider() -> RoleProvider:
    client = get_supabase_client()
    if client is None:
        role = Role(settings.dev_role or Role.NONE.value)
        logging.warning(f"Supabase auth not configured - every caller is treated as '{role.value}'")
        return StaticRoleProvider(role)
    return SupabaseRoleProvider(client, UserDirectory(get_store()))
