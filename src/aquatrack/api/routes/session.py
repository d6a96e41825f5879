"""Caller identity endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ...models.domain import Role
from ...schemas.users import MeResponse
from ...services.permissions import can_create_bulk_order
from ..deps import get_current_role

router = APIRouter(tags=["session"])


@router.get("/me", response_model=MeResponse)
def who_am_i(role: Role = Depends(get_current_role)) -> MeResponse:
    return MeResponse(
        role=role,
        is_admin=role is Role.ADMIN,
        is_staff=role is Role.STAFF,
        can_create_bulk_order=can_create_bulk_order(role),
    )
