"""Staff account management endpoints (administrators only)."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Response, status

from ...models.domain import Role
from ...schemas.users import RoleAssignment, UserModel
from ...services.accounts import UserDirectory
from ..deps import get_user_directory, require_admin

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=List[UserModel])
def list_users(
    role: Role = Depends(require_admin),
    users: UserDirectory = Depends(get_user_directory),
) -> List[UserModel]:
    return [UserModel.model_validate(account) for account in users.list_users(role=role)]


@router.get("/pending", response_model=List[UserModel])
def list_pending_users(
    role: Role = Depends(require_admin),
    users: UserDirectory = Depends(get_user_directory),
) -> List[UserModel]:
    return [UserModel.model_validate(account) for account in users.list_pending_users(role=role)]


@router.post("/{user_id}/approve", response_model=UserModel)
def approve_user(
    user_id: str,
    payload: RoleAssignment,
    role: Role = Depends(require_admin),
    users: UserDirectory = Depends(get_user_directory),
) -> UserModel:
    return UserModel.model_validate(users.approve_user(user_id, payload.role, role=role))


@router.put("/{user_id}/role", response_model=UserModel)
def update_user_role(
    user_id: str,
    payload: RoleAssignment,
    role: Role = Depends(require_admin),
    users: UserDirectory = Depends(get_user_directory),
) -> UserModel:
    return UserModel.model_validate(users.update_user_role(user_id, payload.role, role=role))


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: str,
    role: Role = Depends(require_admin),
    users: UserDirectory = Depends(get_user_directory),
) -> Response:
    users.delete_user(user_id, role=role)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
