"""Domain models for customers, orders and user accounts."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class ProductType(str, Enum):
    BOTTLE = "bottle"
    JUG = "jug"


class OrderType(str, Enum):
    REGULAR = "regular"
    BULK = "bulk"
    EVENT = "event"


class Role(str, Enum):
    NONE = "none"
    PENDING = "pending"
    STAFF = "staff"
    ADMIN = "admin"


def parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


@dataclass(slots=True)
class Customer:
    """A delivery customer; one-time customers carry a loaned container count."""

    id: str
    name: str
    phone: str
    address: str
    is_regular: bool = True
    containers_held: int = 0
    default_units: Optional[int] = None
    route_id: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Customer":
        return cls(
            id=str(record["id"]),
            name=record.get("name") or "",
            phone=record.get("phone") or "",
            address=record.get("address") or "",
            is_regular=bool(record.get("is_regular", True)),
            containers_held=int(record.get("containers_held") or 0),
            default_units=record.get("default_units"),
            route_id=record.get("route_id"),
            created_at=parse_timestamp(record.get("created_at")),
        )


@dataclass(slots=True)
class Order:
    """One product line of a delivery, priced at the moment it was logged."""

    id: str
    customer_id: str
    units: int
    product_type: ProductType
    order_type: OrderType
    price: float
    is_paid: bool
    delivered_at: datetime
    created_at: datetime
    customer: Optional[Customer] = None

    @property
    def amount(self) -> float:
        return self.units * self.price

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Order":
        embedded = record.get("customer")
        return cls(
            id=str(record["id"]),
            customer_id=str(record["customer_id"]),
            units=int(record["units"]),
            product_type=ProductType(record["product_type"]),
            order_type=OrderType(record["order_type"]),
            price=float(record["price"]),
            is_paid=bool(record["is_paid"]),
            delivered_at=parse_timestamp(record["delivered_at"]),
            created_at=parse_timestamp(record["created_at"]),
            customer=Customer.from_record(embedded) if embedded else None,
        )


@dataclass(slots=True)
class UserAccount:
    """A registered staff profile and its assigned role, if any."""

    user_id: str
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    created_at: Optional[datetime] = None
    role: Optional[Role] = None

    @property
    def is_pending(self) -> bool:
        return self.role is None


@dataclass(slots=True)
class OrderEntry:
    product_type: ProductType
    units: int


@dataclass(slots=True)
class BillSummary:
    customer_id: str
    total_due: float = 0.0
    unpaid_order_count: int = 0
    total_bottle_units: int = 0
    total_jug_units: int = 0
    customer: Optional[Customer] = None


@dataclass(slots=True)
class DailySummary:
    total_units: int = 0
    paid_units: int = 0
    pending_units: int = 0
    order_count: int = 0
    amount_collected: float = 0.0
    amount_pending: float = 0.0


@dataclass(slots=True)
class DeliveryBatch:
    """Units per product delivered in a customer's most recent logging action."""

    customer_id: str
    created_at: Optional[datetime] = None
    units: dict[ProductType, int] = field(default_factory=dict)

    def units_for(self, product_type: ProductType) -> int:
        return self.units.get(product_type, 0)
