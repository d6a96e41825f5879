"""Staff account approval and role management."""

from __future__ import annotations

import logging
from typing import Optional

from ...errors import NotFoundError, ValidationError
from ...models.domain import Role, UserAccount, parse_timestamp
from ...persistence.store import DataStore, Record
from ..permissions import PRIVILEGED_ROLES, require_role

ASSIGNABLE_ROLES = frozenset({Role.ADMIN, Role.STAFF})


def _coerce_assignable(new_role: Role | str) -> Role:
    try:
        role = Role(new_role)
    except ValueError as exc:
        raise ValidationError(f"Unknown role '{new_role}'") from exc
    if role not in ASSIGNABLE_ROLES:
        raise ValidationError(f"Role '{role.value}' cannot be assigned")
    return role


def _account(profile: Record, role: Optional[str]) -> UserAccount:
    return UserAccount(
        user_id=str(profile["user_id"]),
        name=profile.get("name") or "",
        phone=profile.get("phone"),
        email=profile.get("email"),
        created_at=parse_timestamp(profile.get("created_at")),
        role=Role(role) if role else None,
    )


class UserDirectory:
    """Reads ``profiles`` and ``user_roles``; a profile without a role is pending approval."""

    def __init__(self, store: DataStore) -> None:
        self.store = store

    def role_of(self, user_id: str) -> Role:
        rows = self.store.select("user_roles", {"user_id": user_id}, limit=1)
        if not rows or not rows[0].get("role"):
            return Role.PENDING
        return Role(rows[0]["role"])

    def _roles_by_user(self) -> dict[str, str]:
        return {str(row["user_id"]): row["role"] for row in self.store.select("user_roles")}

    def _profile(self, user_id: str) -> Record:
        rows = self.store.select("profiles", {"user_id": user_id}, limit=1)
        if not rows:
            raise NotFoundError(f"User {user_id} not found")
        return rows[0]

    def list_users(self, *, role: Role) -> list[UserAccount]:
        require_role(role, PRIVILEGED_ROLES, "manage users")
        roles = self._roles_by_user()
        profiles = self.store.select("profiles", order_by="created_at", descending=True)
        return [_account(profile, roles.get(str(profile["user_id"]))) for profile in profiles]

    def list_pending_users(self, *, role: Role) -> list[UserAccount]:
        return [account for account in self.list_users(role=role) if account.is_pending]

    def approve_user(self, user_id: str, new_role: Role | str, *, role: Role) -> UserAccount:
        require_role(role, PRIVILEGED_ROLES, "approve users")
        assigned = _coerce_assignable(new_role)
        profile = self._profile(user_id)
        if self.role_of(user_id) is not Role.PENDING:
            raise ValidationError(f"User {user_id} is already approved")
        self.store.insert("user_roles", {"user_id": user_id, "role": assigned.value})
        logging.info(f"Approved user {user_id} as {assigned.value}")
        return _account(profile, assigned.value)

    def update_user_role(self, user_id: str, new_role: Role | str, *, role: Role) -> UserAccount:
        require_role(role, PRIVILEGED_ROLES, "change user roles")
        assigned = _coerce_assignable(new_role)
        profile = self._profile(user_id)
        rows = self.store.update("user_roles", {"user_id": user_id}, {"role": assigned.value})
        if not rows:
            raise ValidationError(f"User {user_id} has not been approved yet")
        logging.info(f"Changed role of user {user_id} to {assigned.value}")
        return _account(profile, assigned.value)

    def delete_user(self, user_id: str, *, role: Role) -> None:
        require_role(role, PRIVILEGED_ROLES, "delete users")
        self._profile(user_id)
        self.store.delete("user_roles", {"user_id": user_id})
        self.store.delete("profiles", {"user_id": user_id})
        logging.info(f"Deleted user {user_id}")
