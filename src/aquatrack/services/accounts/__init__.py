"""User accounts and role resolution."""

from .roles import RoleProvider, StaticRoleProvider, SupabaseRoleProvider, get_role_provider
from .users import UserDirectory

__all__ = [
    "RoleProvider",
    "StaticRoleProvider",
    "SupabaseRoleProvider",
    "UserDirectory",
    "get_role_provider",
]
