"""Order logging, payment toggling and bill settlement."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Callable, Iterable, Literal, Mapping, Optional, Sequence
from zoneinfo import ZoneInfo

from ...config import settings
from ...errors import AuthorizationError, NotFoundError, ScheduleError, ValidationError
from ...models.domain import (
    BillSummary,
    DailySummary,
    Order,
    OrderEntry,
    OrderType,
    ProductType,
    Role,
)
from ...persistence.store import DataStore
from ..customers.directory import load_customer
from ..permissions import can_create_bulk_order, can_edit

CUSTOMER_EMBED = ("customer", "customers", "customer_id")

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class PriceList:
    """Unit prices applied to newly logged orders."""

    bottle: float
    jug: float

    @classmethod
    def from_settings(cls) -> "PriceList":
        return cls(bottle=settings.bottle_price, jug=settings.jug_price)

    def unit_price(self, product_type: ProductType) -> float:
        if product_type is ProductType.BOTTLE:
            return self.bottle
        return self.jug


def compute_due(customer_id: str, orders: Iterable[Order]) -> BillSummary:
    """Aggregate the unpaid regular orders of one customer."""
    summary = BillSummary(customer_id=customer_id)
    for order in orders:
        if order.customer_id != customer_id or order.order_type is not OrderType.REGULAR or order.is_paid:
            continue
        summary.total_due += order.amount
        summary.unpaid_order_count += 1
        if order.product_type is ProductType.BOTTLE:
            summary.total_bottle_units += order.units
        else:
            summary.total_jug_units += order.units
        if summary.customer is None and order.customer is not None:
            summary.customer = order.customer
    summary.total_due = round(summary.total_due, 2)
    return summary


def normalize_entries(entries: Sequence[OrderEntry | Mapping[str, Any]]) -> list[OrderEntry]:
    """Validate order entries and drop zero-unit lines."""
    seen: set[ProductType] = set()
    normalized: list[OrderEntry] = []
    for entry in entries:
        if isinstance(entry, OrderEntry):
            product_type, units = entry.product_type, entry.units
        else:
            try:
                product_type, units = entry["product_type"], entry["units"]
            except KeyError as exc:
                raise ValidationError(f"Order entry is missing {exc.args[0]}") from exc
        try:
            product_type = ProductType(product_type)
        except ValueError as exc:
            raise ValidationError(f"Unknown product type '{product_type}'") from exc
        if isinstance(units, bool) or not isinstance(units, int):
            raise ValidationError(f"Units for {product_type.value} must be a whole number")
        if units < 0:
            raise ValidationError(f"Units for {product_type.value} cannot be negative")
        if product_type in seen:
            raise ValidationError(f"Only one {product_type.value} entry is allowed per order")
        seen.add(product_type)
        if units > 0:
            normalized.append(OrderEntry(product_type=product_type, units=units))
    if not normalized:
        raise ValidationError("At least one product needs a quantity above zero")
    return normalized


def _as_utc(value: Any) -> datetime:
    if not isinstance(value, datetime):
        raise ScheduleError(f"Invalid delivery timestamp: {value!r}")
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class OrderLedger:
    """Creates delivery records and keeps their payment state."""

    def __init__(
        self,
        store: DataStore,
        *,
        prices: PriceList | None = None,
        container_tracking: Literal["auto", "explicit"] | None = None,
        timezone_name: str | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.store = store
        self.prices = prices or PriceList.from_settings()
        self.container_tracking = container_tracking or settings.container_tracking
        self.tz = ZoneInfo(timezone_name or settings.business_timezone)
        self._clock = clock or utc_now

    def now(self) -> datetime:
        return self._clock()

    def today(self) -> date:
        return self.now().astimezone(self.tz).date()

    def _local_day(self, moment: datetime) -> date:
        return _as_utc(moment).astimezone(self.tz).date()

    def _resolve_order_type(
        self, *, delivered_at: datetime, now: datetime, bulk: bool, role: Role
    ) -> OrderType:
        if bulk:
            if not can_create_bulk_order(role):
                raise AuthorizationError("Only administrators can create bulk orders")
            return OrderType.BULK
        if delivered_at > now:
            return OrderType.EVENT
        return OrderType.REGULAR

    def _tracks_containers(self, uses_company_container: Optional[bool]) -> bool:
        if uses_company_container is not None:
            return uses_company_container
        return self.container_tracking == "auto"

    def log_order(
        self,
        customer_id: str,
        entries: Sequence[OrderEntry | Mapping[str, Any]],
        *,
        is_paid: bool = False,
        delivered_at: datetime | None = None,
        scheduled: bool = False,
        bulk: bool = False,
        uses_company_container: Optional[bool] = None,
        role: Role = Role.STAFF,
    ) -> list[Order]:
        """Record one delivery as one order row per product type.

        All rows, and the container count change for one-time customers, are
        sent to the store as a single request.
        """
        lines = normalize_entries(entries)

        now = self.now()
        if scheduled and delivered_at is None:
            raise ScheduleError("A scheduled delivery needs a delivery time")
        when = _as_utc(delivered_at) if delivered_at is not None else now
        if scheduled and when <= now:
            raise ScheduleError("Scheduled delivery time must be in the future")

        order_type = self._resolve_order_type(delivered_at=when, now=now, bulk=bulk, role=role)
        customer = load_customer(self.store, customer_id)

        total_units = sum(line.units for line in lines)
        container_delta = 0
        if not customer.is_regular and self._tracks_containers(uses_company_container):
            container_delta = total_units

        rows = [
            {
                "units": line.units,
                "product_type": line.product_type.value,
                "order_type": order_type.value,
                "price": self.prices.unit_price(line.product_type),
                "is_paid": bool(is_paid),
                "delivered_at": when.isoformat(),
            }
            for line in lines
        ]
        created = self.store.rpc(
            "log_order",
            {
                "p_customer_id": customer.id,
                "p_orders": rows,
                "p_container_delta": container_delta,
            },
        )
        logging.info(
            f"Logged {order_type.value} delivery for customer {customer.id}: "
            f"{total_units} units in {len(created)} rows, container delta {container_delta}"
        )
        return [Order.from_record(row) for row in created]

    def get_order(self, order_id: str) -> Order:
        record = self.store.get("orders", order_id, embed=CUSTOMER_EMBED)
        if record is None:
            raise NotFoundError(f"Order {order_id} not found")
        return Order.from_record(record)

    def toggle_payment(self, order_id: str, role: Role) -> Order:
        order = self.get_order(order_id)
        if not can_edit(order, role):
            raise AuthorizationError("Only administrators can change payment on bulk orders")
        rows = self.store.rpc("toggle_order_payment", {"p_order_id": order_id})
        if not rows:
            raise NotFoundError(f"Order {order_id} not found")
        toggled = Order.from_record(rows[0])
        logging.info(f"Order {order_id} marked {'paid' if toggled.is_paid else 'unpaid'}")
        return toggled

    def settle_customer_bill(self, customer_id: str) -> list[Order]:
        """Mark every unpaid regular order of the customer as paid in one update."""
        customer = load_customer(self.store, customer_id)
        rows = self.store.update(
            "orders",
            {"customer_id": customer.id, "order_type": OrderType.REGULAR.value, "is_paid": False},
            {"is_paid": True},
        )
        settled = [Order.from_record(row) for row in rows]
        if settled:
            amount = round(sum(order.amount for order in settled), 2)
            logging.info(f"Settled {len(settled)} orders ({amount}) for customer {customer.id}")
        return settled

    def bill_for(self, customer_id: str) -> BillSummary:
        customer = load_customer(self.store, customer_id)
        rows = self.store.select(
            "orders",
            {"customer_id": customer.id, "order_type": OrderType.REGULAR.value, "is_paid": False},
        )
        summary = compute_due(customer.id, (Order.from_record(row) for row in rows))
        summary.customer = customer
        return summary

    def outstanding_bills(self) -> list[BillSummary]:
        rows = self.store.select(
            "orders",
            {"order_type": OrderType.REGULAR.value, "is_paid": False},
            embed=CUSTOMER_EMBED,
        )
        by_customer: dict[str, list[Order]] = defaultdict(list)
        for row in rows:
            order = Order.from_record(row)
            by_customer[order.customer_id].append(order)
        bills = [compute_due(customer_id, orders) for customer_id, orders in by_customer.items()]
        bills = [bill for bill in bills if bill.total_due > 0]
        bills.sort(key=lambda bill: bill.total_due, reverse=True)
        return bills

    def _all_orders(self, order_types: Sequence[OrderType] | None = None) -> list[Order]:
        filters = {"order_type": [t.value for t in order_types]} if order_types else None
        rows = self.store.select("orders", filters, embed=CUSTOMER_EMBED)
        return [Order.from_record(row) for row in rows]

    def orders_on(self, day: date | None = None) -> list[Order]:
        target = day or self.today()
        orders = [order for order in self._all_orders() if self._local_day(order.delivered_at) == target]
        orders.sort(key=lambda order: order.created_at, reverse=True)
        return orders

    def daily_summary(self, day: date | None = None) -> DailySummary:
        summary = DailySummary()
        for order in self.orders_on(day):
            summary.order_count += 1
            summary.total_units += order.units
            if order.is_paid:
                summary.paid_units += order.units
                summary.amount_collected += order.amount
            else:
                summary.pending_units += order.units
                summary.amount_pending += order.amount
        summary.amount_collected = round(summary.amount_collected, 2)
        summary.amount_pending = round(summary.amount_pending, 2)
        return summary

    def event_orders(self, when: Literal["upcoming", "past"] = "upcoming") -> list[Order]:
        today = self.today()
        orders = self._all_orders([OrderType.EVENT, OrderType.BULK])
        if when == "upcoming":
            selected = [order for order in orders if self._local_day(order.delivered_at) >= today]
            selected.sort(key=lambda order: order.delivered_at)
        elif when == "past":
            selected = [order for order in orders if self._local_day(order.delivered_at) < today]
            selected.sort(key=lambda order: order.delivered_at, reverse=True)
        else:
            raise ValidationError(f"Unknown event filter '{when}'")
        return selected

    def upcoming_deliveries(self) -> list[Order]:
        today = self.today()
        orders = [
            order
            for order in self._all_orders([OrderType.EVENT])
            if self._local_day(order.delivered_at) >= today
        ]
        orders.sort(key=lambda order: order.delivered_at)
        return orders
