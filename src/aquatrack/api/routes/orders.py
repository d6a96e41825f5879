"""Delivery logging and activity endpoints."""

from __future__ import annotations

from datetime import date
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query, status

from ...models.domain import OrderEntry, Role
from ...schemas.orders import DailySummaryModel, OrderCreate, OrderModel
from ...services.ledger import OrderLedger
from ..deps import get_order_ledger, require_staff

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("", response_model=List[OrderModel], status_code=status.HTTP_201_CREATED)
def log_order(
    payload: OrderCreate,
    role: Role = Depends(require_staff),
    ledger: OrderLedger = Depends(get_order_ledger),
) -> List[OrderModel]:
    orders = ledger.log_order(
        payload.customer_id,
        [OrderEntry(product_type=entry.product_type, units=entry.units) for entry in payload.entries],
        is_paid=payload.is_paid,
        delivered_at=payload.delivered_at,
        scheduled=payload.scheduled,
        bulk=payload.bulk,
        uses_company_container=payload.uses_company_container,
        role=role,
    )
    return [OrderModel.model_validate(order) for order in orders]


@router.get("", response_model=List[OrderModel])
def list_orders(
    on: Optional[date] = Query(default=None, alias="date", description="Calendar day; defaults to today"),
    _: Role = Depends(require_staff),
    ledger: OrderLedger = Depends(get_order_ledger),
) -> List[OrderModel]:
    return [OrderModel.model_validate(order) for order in ledger.orders_on(on)]


@router.get("/summary", response_model=DailySummaryModel)
def daily_summary(
    on: Optional[date] = Query(default=None, alias="date", description="Calendar day; defaults to today"),
    _: Role = Depends(require_staff),
    ledger: OrderLedger = Depends(get_order_ledger),
) -> DailySummaryModel:
    return DailySummaryModel.model_validate(ledger.daily_summary(on))


@router.get("/events", response_model=List[OrderModel])
def event_orders(
    when: Literal["upcoming", "past"] = Query(default="upcoming"),
    _: Role = Depends(require_staff),
    ledger: OrderLedger = Depends(get_order_ledger),
) -> List[OrderModel]:
    return [OrderModel.model_validate(order) for order in ledger.event_orders(when)]


@router.get("/upcoming", response_model=List[OrderModel])
def upcoming_deliveries(
    _: Role = Depends(require_staff),
    ledger: OrderLedger = Depends(get_order_ledger),
) -> List[OrderModel]:
    return [OrderModel.model_validate(order) for order in ledger.upcoming_deliveries()]


@router.post("/{order_id}/toggle-payment", response_model=OrderModel)
def toggle_payment(
    order_id: str,
    role: Role = Depends(require_staff),
    ledger: OrderLedger = Depends(get_order_ledger),
) -> OrderModel:
    return OrderModel.model_validate(ledger.toggle_payment(order_id, role))
