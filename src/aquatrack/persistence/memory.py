"""In-process DataStore used for local development and tests."""

from __future__ import annotations

import copy
import logging
import threading
import uuid
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable, Sequence

from ..errors import ConflictError, InvalidReturnError, NotFoundError, StoreError
from .store import DataStore, Embed, Filters, Record

# table -> (referencing table, foreign key column); deletes are restricted while references exist
_RESTRICTED_BY: dict[str, tuple[tuple[str, str], ...]] = {
    "customers": (("orders", "customer_id"),),
}


def _normalize(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _matches(record: Record, filters: Filters | None) -> bool:
    for column, expected in (filters or {}).items():
        actual = record.get(column)
        if expected is None:
            if actual is not None:
                return False
        elif isinstance(expected, (list, tuple, set)):
            if actual not in {_normalize(item) for item in expected}:
                return False
        elif actual != _normalize(expected):
            return False
    return True


def _sort_key(value: Any) -> tuple[bool, Any]:
    # nulls sort last ascending
    return (value is None, 0 if value is None else value)


class InMemoryStore(DataStore):
    """Dictionary-backed store; each request runs under one lock, so it is atomic."""

    def __init__(self) -> None:
        self._tables: dict[str, dict[str, Record]] = {}
        self._lock = threading.Lock()
        self._last_timestamp: datetime | None = None
        self._procedures: dict[str, Callable[[Record], list[Record]]] = {
            "log_order": self._log_order,
            "adjust_containers_held": self._adjust_containers_held,
            "toggle_order_payment": self._toggle_order_payment,
        }

    def _timestamp(self) -> str:
        # strictly increasing, so rows written by one request share a value no other request gets
        moment = datetime.now(timezone.utc)
        if self._last_timestamp is not None and moment <= self._last_timestamp:
            moment = self._last_timestamp + timedelta(microseconds=1)
        self._last_timestamp = moment
        return moment.isoformat(timespec="microseconds")

    def _table(self, name: str) -> dict[str, Record]:
        return self._tables.setdefault(name, {})

    def _insert_one(self, table: str, record: Record) -> Record:
        row = {key: _normalize(value) for key, value in record.items()}
        row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("created_at", self._timestamp())
        rows = self._table(table)
        if row["id"] in rows:
            raise StoreError(f"duplicate key value violates unique constraint on {table}.id")
        rows[row["id"]] = row
        return copy.deepcopy(row)

    def insert(self, table: str, records: Record | Sequence[Record]) -> list[Record]:
        batch = [records] if isinstance(records, dict) else list(records)
        with self._lock:
            return [self._insert_one(table, record) for record in batch]

    def update(self, table: str, filters: Filters, patch: Record) -> list[Record]:
        if not filters:
            raise StoreError(f"Refusing to update every row of {table}")
        changes = {key: _normalize(value) for key, value in patch.items()}
        with self._lock:
            updated = []
            for row in self._table(table).values():
                if _matches(row, filters):
                    row.update(changes)
                    updated.append(copy.deepcopy(row))
            return updated

    def select(
        self,
        table: str,
        filters: Filters | None = None,
        *,
        embed: Embed | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[Record]:
        with self._lock:
            rows = [copy.deepcopy(row) for row in self._table(table).values() if _matches(row, filters)]
            if embed is not None:
                alias, related, foreign_key = embed
                related_rows = self._table(related)
                for row in rows:
                    target = related_rows.get(row.get(foreign_key))
                    row[alias] = copy.deepcopy(target) if target else None
        if order_by:
            rows.sort(key=lambda row: _sort_key(row.get(order_by)), reverse=descending)
        if limit is not None:
            rows = rows[:limit]
        return rows

    def delete(self, table: str, filters: Filters) -> list[Record]:
        if not filters:
            raise StoreError(f"Refusing to delete every row of {table}")
        with self._lock:
            rows = self._table(table)
            doomed = [key for key, row in rows.items() if _matches(row, filters)]
            for referencing, column in _RESTRICTED_BY.get(table, ()):
                for row in self._table(referencing).values():
                    if row.get(column) in doomed:
                        raise ConflictError(
                            f"{table} row {row[column]} is still referenced from {referencing}.{column}"
                        )
            return [rows.pop(key) for key in doomed]

    def rpc(self, function: str, params: Record) -> list[Record]:
        procedure = self._procedures.get(function)
        if procedure is None:
            raise StoreError(f"Could not find the function public.{function}")
        with self._lock:
            return procedure(params)

    def describe(self) -> dict[str, Any]:
        with self._lock:
            counts = {name: len(rows) for name, rows in self._tables.items()}
        return {"backend": "memory", "tables": counts}

    # Stored procedure equivalents; callers already hold the lock.

    def _customer_row(self, customer_id: str) -> Record:
        customer = self._table("customers").get(customer_id)
        if customer is None:
            raise NotFoundError(f"Customer {customer_id} not found")
        return customer

    def _log_order(self, params: Record) -> list[Record]:
        customer = self._customer_row(params["p_customer_id"])
        delta = int(params.get("p_container_delta") or 0)
        if customer.get("containers_held", 0) + delta < 0:
            raise InvalidReturnError("containers_held cannot become negative")
        created_at = self._timestamp()
        created = [
            self._insert_one("orders", {**row, "customer_id": customer["id"], "created_at": created_at})
            for row in params["p_orders"]
        ]
        customer["containers_held"] = customer.get("containers_held", 0) + delta
        logging.debug(f"memory log_order: {len(created)} rows, container delta {delta}")
        return created

    def _adjust_containers_held(self, params: Record) -> list[Record]:
        customer = self._customer_row(params["p_customer_id"])
        new_count = customer.get("containers_held", 0) + int(params["p_delta"])
        if new_count < 0:
            raise InvalidReturnError(
                f"Customer {customer['id']} holds {customer.get('containers_held', 0)} containers"
            )
        customer["containers_held"] = new_count
        return [copy.deepcopy(customer)]

    def _toggle_order_payment(self, params: Record) -> list[Record]:
        order = self._table("orders").get(params["p_order_id"])
        if order is None:
            raise NotFoundError(f"Order {params['p_order_id']} not found")
        order["is_paid"] = not order["is_paid"]
        return [copy.deepcopy(order)]
