"""Container return endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from ...models.domain import ProductType, Role
from ...schemas.containers import ContainerAdjustRequest, ContainerReturnRequest, DeliveryBatchModel
from ...schemas.customers import CustomerModel
from ...services.ledger import ContainerLedger
from ..deps import get_container_ledger, require_staff

router = APIRouter(prefix="/containers", tags=["containers"])


@router.get("/pending-returns", response_model=List[CustomerModel])
def pending_returns(
    _: Role = Depends(require_staff),
    ledger: ContainerLedger = Depends(get_container_ledger),
) -> List[CustomerModel]:
    return [CustomerModel.model_validate(customer) for customer in ledger.pending_returns()]


@router.get("/{customer_id}/last-batch", response_model=DeliveryBatchModel)
def last_delivery_batch(
    customer_id: str,
    _: Role = Depends(require_staff),
    ledger: ContainerLedger = Depends(get_container_ledger),
) -> DeliveryBatchModel:
    batch = ledger.last_delivery_batch(customer_id)
    return DeliveryBatchModel(
        customer_id=batch.customer_id,
        created_at=batch.created_at,
        bottles=batch.units_for(ProductType.BOTTLE),
        jugs=batch.units_for(ProductType.JUG),
    )


@router.post("/{customer_id}/adjust", response_model=CustomerModel)
def adjust_containers(
    customer_id: str,
    payload: ContainerAdjustRequest,
    _: Role = Depends(require_staff),
    ledger: ContainerLedger = Depends(get_container_ledger),
) -> CustomerModel:
    return CustomerModel.model_validate(ledger.update_container_count(customer_id, payload.delta))


@router.post("/{customer_id}/return", response_model=CustomerModel)
def return_containers(
    customer_id: str,
    payload: ContainerReturnRequest,
    _: Role = Depends(require_staff),
    ledger: ContainerLedger = Depends(get_container_ledger),
) -> CustomerModel:
    customer = ledger.return_containers(
        customer_id,
        payload.count,
        bottles=payload.bottles,
        jugs=payload.jugs,
    )
    return CustomerModel.model_validate(customer)
