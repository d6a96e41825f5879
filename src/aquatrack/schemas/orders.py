"""Pydantic request/response models for order and billing endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.domain import OrderType, ProductType
from .customers import CustomerModel


class OrderEntryModel(BaseModel):
    product_type: ProductType
    units: int = Field(..., ge=0)


class OrderCreate(BaseModel):
    customer_id: str
    entries: List[OrderEntryModel] = Field(..., min_length=1)
    is_paid: bool = False
    delivered_at: Optional[datetime] = Field(
        default=None, description="Delivery time; omit for an immediate delivery."
    )
    scheduled: bool = Field(default=False, description="Require delivered_at to be a future time.")
    bulk: bool = Field(default=False, description="Record as a one-time bulk order (admin only).")
    uses_company_container: Optional[bool] = Field(
        default=None, description="Override the configured container tracking policy."
    )


class OrderModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    customer_id: str
    units: int
    product_type: ProductType
    order_type: OrderType
    price: float
    amount: float
    is_paid: bool
    delivered_at: datetime
    created_at: datetime
    customer: Optional[CustomerModel] = None


class DailySummaryModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_units: int
    paid_units: int
    pending_units: int
    order_count: int
    amount_collected: float
    amount_pending: float


class BillModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    customer_id: str
    total_due: float
    unpaid_order_count: int
    total_bottle_units: int
    total_jug_units: int
    customer: Optional[CustomerModel] = None


class SettlementResponse(BaseModel):
    customer_id: str
    settled_count: int
    settled_amount: float
    orders: List[OrderModel]
