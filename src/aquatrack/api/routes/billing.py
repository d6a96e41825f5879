"""Billing and settlement endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from ...models.domain import Role
from ...schemas.orders import BillModel, OrderModel, SettlementResponse
from ...services.ledger import OrderLedger
from ..deps import get_order_ledger, require_staff

router = APIRouter(prefix="/billing", tags=["billing"])


@router.get("", response_model=List[BillModel])
def outstanding_bills(
    _: Role = Depends(require_staff),
    ledger: OrderLedger = Depends(get_order_ledger),
) -> List[BillModel]:
    return [BillModel.model_validate(bill) for bill in ledger.outstanding_bills()]


@router.get("/{customer_id}", response_model=BillModel)
def customer_bill(
    customer_id: str,
    _: Role = Depends(require_staff),
    ledger: OrderLedger = Depends(get_order_ledger),
) -> BillModel:
    return BillModel.model_validate(ledger.bill_for(customer_id))


@router.post("/{customer_id}/settle", response_model=SettlementResponse)
def settle_bill(
    customer_id: str,
    _: Role = Depends(require_staff),
    ledger: OrderLedger = Depends(get_order_ledger),
) -> SettlementResponse:
    settled = ledger.settle_customer_bill(customer_id)
    return SettlementResponse(
        customer_id=customer_id,
        settled_count=len(settled),
        settled_amount=round(sum(order.amount for order in settled), 2),
        orders=[OrderModel.model_validate(order) for order in settled],
    )
