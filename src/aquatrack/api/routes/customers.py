"""Customer registry endpoints."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from ...models.domain import Role
from ...schemas.customers import CustomerCreate, CustomerModel, CustomerUpdate
from ...services.customers import CustomerDirectory
from ..deps import get_customer_directory, require_admin, require_staff

router = APIRouter(prefix="/customers", tags=["customers"])


@router.get("", response_model=List[CustomerModel])
def search_customers(
    search: str = Query(default="", description="Matches name, address or phone"),
    is_regular: Optional[bool] = Query(default=None, description="Filter by subscription status"),
    _: Role = Depends(require_staff),
    directory: CustomerDirectory = Depends(get_customer_directory),
) -> List[CustomerModel]:
    customers = directory.search_customers(search, is_regular=is_regular)
    return [CustomerModel.model_validate(customer) for customer in customers]


@router.post("", response_model=CustomerModel, status_code=status.HTTP_201_CREATED)
def create_customer(
    payload: CustomerCreate,
    role: Role = Depends(require_admin),
    directory: CustomerDirectory = Depends(get_customer_directory),
) -> CustomerModel:
    customer = directory.create_customer(**payload.model_dump(), role=role)
    return CustomerModel.model_validate(customer)


@router.get("/{customer_id}", response_model=CustomerModel)
def get_customer(
    customer_id: str,
    _: Role = Depends(require_staff),
    directory: CustomerDirectory = Depends(get_customer_directory),
) -> CustomerModel:
    return CustomerModel.model_validate(directory.get_customer(customer_id))


@router.patch("/{customer_id}", response_model=CustomerModel)
def update_customer(
    customer_id: str,
    payload: CustomerUpdate,
    role: Role = Depends(require_admin),
    directory: CustomerDirectory = Depends(get_customer_directory),
) -> CustomerModel:
    customer = directory.update_customer(customer_id, payload.model_dump(exclude_unset=True), role=role)
    return CustomerModel.model_validate(customer)


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_customer(
    customer_id: str,
    role: Role = Depends(require_admin),
    directory: CustomerDirectory = Depends(get_customer_directory),
) -> Response:
    directory.delete_customer(customer_id, role=role)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
