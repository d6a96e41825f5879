"""Loaned container tracking for one-time customers."""

from __future__ import annotations

import logging
from typing import Optional

from ...errors import InvalidReturnError, NotFoundError, ValidationError
from ...models.domain import Customer, DeliveryBatch, ProductType, parse_timestamp
from ...persistence.store import DataStore
from ..customers.directory import load_customer


class ContainerLedger:
    """Moves a customer's ``containers_held`` through atomic store-side deltas."""

    def __init__(self, store: DataStore) -> None:
        self.store = store

    def update_container_count(self, customer_id: str, delta: int) -> Customer:
        if isinstance(delta, bool) or not isinstance(delta, int):
            raise ValidationError("Container delta must be a whole number")
        if delta == 0:
            raise ValidationError("Container delta cannot be zero")
        rows = self.store.rpc("adjust_containers_held", {"p_customer_id": customer_id, "p_delta": delta})
        if not rows:
            raise NotFoundError(f"Customer {customer_id} not found")
        customer = Customer.from_record(rows[0])
        logging.info(f"Customer {customer.id} containers {delta:+d} -> {customer.containers_held}")
        return customer

    def last_delivery_batch(self, customer_id: str) -> DeliveryBatch:
        """Units per product in the customer's most recent logging action."""
        customer = load_customer(self.store, customer_id)
        rows = self.store.select("orders", {"customer_id": customer.id}, order_by="created_at", descending=True)
        batch = DeliveryBatch(customer_id=customer.id)
        if not rows:
            return batch
        latest = rows[0]["created_at"]
        for row in rows:
            if row["created_at"] != latest:
                break
            product_type = ProductType(row["product_type"])
            batch.units[product_type] = batch.units.get(product_type, 0) + int(row["units"])
        batch.created_at = parse_timestamp(latest)
        return batch

    def return_containers(
        self,
        customer_id: str,
        count: Optional[int] = None,
        *,
        bottles: Optional[int] = None,
        jugs: Optional[int] = None,
    ) -> Customer:
        """Record containers coming back, given as a total or per product."""
        breakdown = {ProductType.BOTTLE: bottles, ProductType.JUG: jugs}
        has_breakdown = any(value is not None for value in breakdown.values())
        if count is not None and has_breakdown:
            raise ValidationError("Give either a total count or a per-product breakdown, not both")

        for value in (count, bottles, jugs):
            if value is not None and (isinstance(value, bool) or not isinstance(value, int) or value < 0):
                raise ValidationError("Returned quantities must be non-negative whole numbers")

        if has_breakdown:
            total = sum(value or 0 for value in breakdown.values())
        else:
            total = count or 0
        if total <= 0:
            raise ValidationError("Return at least one container")

        if has_breakdown:
            batch = self.last_delivery_batch(customer_id)
            for product_type, returned in breakdown.items():
                if returned and returned > batch.units_for(product_type):
                    raise ValidationError(
                        f"Cannot return {returned} {product_type.value}s; "
                        f"last delivery had {batch.units_for(product_type)}"
                    )

        customer = load_customer(self.store, customer_id)
        if total > customer.containers_held:
            raise InvalidReturnError(
                f"Customer {customer.id} holds {customer.containers_held} containers, cannot return {total}"
            )
        return self.update_container_count(customer.id, -total)

    def pending_returns(self) -> list[Customer]:
        customers = [Customer.from_record(row) for row in self.store.select("customers")]
        pending = [customer for customer in customers if customer.containers_held > 0]
        pending.sort(key=lambda customer: (-customer.containers_held, customer.name.lower()))
        return pending
