"""User management API schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

from ..models.domain import Role


class UserModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    created_at: Optional[datetime] = None
    role: Optional[Role] = None


class RoleAssignment(BaseModel):
    role: Literal["admin", "staff"]


class MeResponse(BaseModel):
    role: Role
    is_admin: bool
    is_staff: bool
    can_create_bulk_order: bool
