"""Customer registry operations."""

from __future__ import annotations

import logging
from typing import Any, Optional

from ...errors import ConflictError, NotFoundError, ValidationError
from ...models.domain import Customer, Role
from ...persistence.store import DataStore
from ..permissions import PRIVILEGED_ROLES, require_role

EDITABLE_FIELDS = frozenset({"name", "phone", "address", "is_regular", "default_units", "route_id"})
REQUIRED_TEXT_FIELDS = ("name", "phone", "address")


def load_customer(store: DataStore, customer_id: str) -> Customer:
    record = store.get("customers", customer_id)
    if record is None:
        raise NotFoundError(f"Customer {customer_id} not found")
    return Customer.from_record(record)


def _clean_text(field_name: str, value: Any) -> str:
    text = (value or "").strip() if isinstance(value, str) or value is None else str(value).strip()
    if not text:
        raise ValidationError(f"Customer {field_name} is required")
    return text


class CustomerDirectory:
    def __init__(self, store: DataStore) -> None:
        self.store = store

    def get_customer(self, customer_id: str) -> Customer:
        return load_customer(self.store, customer_id)

    def create_customer(
        self,
        *,
        name: str,
        phone: str,
        address: str,
        is_regular: bool = True,
        default_units: Optional[int] = None,
        route_id: Optional[str] = None,
        role: Role,
    ) -> Customer:
        require_role(role, PRIVILEGED_ROLES, "add customers")
        if default_units is not None and default_units < 0:
            raise ValidationError("Default units cannot be negative")
        record = {
            "name": _clean_text("name", name),
            "phone": _clean_text("phone", phone),
            "address": _clean_text("address", address),
            "is_regular": bool(is_regular),
            "containers_held": 0,
            "default_units": default_units,
            "route_id": route_id,
        }
        created = self.store.insert("customers", record)
        customer = Customer.from_record(created[0])
        logging.info(f"Added {'regular' if customer.is_regular else 'one-time'} customer {customer.id}")
        return customer

    def search_customers(self, query: str = "", *, is_regular: Optional[bool] = None) -> list[Customer]:
        """Case-insensitive match on name or address, substring match on phone."""
        filters = {"is_regular": is_regular} if is_regular is not None else None
        customers = [Customer.from_record(row) for row in self.store.select("customers", filters)]
        needle = query.strip()
        if needle:
            lowered = needle.lower()
            customers = [
                customer
                for customer in customers
                if lowered in customer.name.lower()
                or lowered in customer.address.lower()
                or needle in customer.phone
            ]
        customers.sort(key=lambda customer: customer.name.lower())
        return customers

    def update_customer(self, customer_id: str, patch: dict[str, Any], *, role: Role) -> Customer:
        require_role(role, PRIVILEGED_ROLES, "edit customers")
        unknown = set(patch) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update customer fields: {', '.join(sorted(unknown))}")
        changes = dict(patch)
        if "is_regular" in changes and not isinstance(changes["is_regular"], bool):
            raise ValidationError("Customer is_regular must be true or false")
        for field_name in REQUIRED_TEXT_FIELDS:
            if field_name in changes:
                changes[field_name] = _clean_text(field_name, changes[field_name])
        if changes.get("default_units") is not None and changes["default_units"] < 0:
            raise ValidationError("Default units cannot be negative")
        if not changes:
            return load_customer(self.store, customer_id)
        rows = self.store.update("customers", {"id": customer_id}, changes)
        if not rows:
            raise NotFoundError(f"Customer {customer_id} not found")
        return Customer.from_record(rows[0])

    def delete_customer(self, customer_id: str, *, role: Role) -> None:
        require_role(role, PRIVILEGED_ROLES, "delete customers")
        try:
            removed = self.store.delete("customers", {"id": customer_id})
        except ConflictError as exc:
            raise ConflictError(f"Customer {customer_id} has orders and cannot be deleted") from exc
        if not removed:
            raise NotFoundError(f"Customer {customer_id} not found")
        logging.info(f"Deleted customer {customer_id}")
