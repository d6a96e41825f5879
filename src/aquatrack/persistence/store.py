"""Persistence contract used by the ledger and its Supabase implementation."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from functools import lru_cache
from typing import Any, Mapping, Sequence

from postgrest.exceptions import APIError

from ..db.supabase import get_supabase_client
from ..errors import ConflictError, InvalidReturnError, LedgerError, NotFoundError, StoreError

Record = dict[str, Any]
Filters = Mapping[str, Any]
# (alias, related table, foreign key column on the selected table)
Embed = tuple[str, str, str]

# SQLSTATE codes raised by the stored procedures or by foreign keys in supabase/migrations
_SQLSTATE_ERRORS: dict[str, type[LedgerError]] = {
    "P0002": NotFoundError,
    "AQ001": InvalidReturnError,
    "23503": ConflictError,
}


def _filter_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


class DataStore(ABC):
    """Contract for the remote data store the ledger writes through.

    Every mutating call is a single request so the backend can apply it
    atomically. ``filters`` map a column to a value (equality), a list
    (membership) or ``None`` (is null).
    """

    @abstractmethod
    def insert(self, table: str, records: Record | Sequence[Record]) -> list[Record]:
        raise NotImplementedError

    @abstractmethod
    def update(self, table: str, filters: Filters, patch: Record) -> list[Record]:
        raise NotImplementedError

    @abstractmethod
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
        raise NotImplementedError

    @abstractmethod
    def delete(self, table: str, filters: Filters) -> list[Record]:
        raise NotImplementedError

    @abstractmethod
    def rpc(self, function: str, params: Record) -> list[Record]:
        """Invoke a stored procedure; always returns a list of rows."""
        raise NotImplementedError

    def get(self, table: str, record_id: str, *, embed: Embed | None = None) -> Record | None:
        rows = self.select(table, {"id": record_id}, embed=embed, limit=1)
        return rows[0] if rows else None

    def describe(self) -> dict[str, Any]:
        return {"backend": type(self).__name__}


class SupabaseStore(DataStore):
    """DataStore backed by a Supabase (PostgREST) project."""

    def __init__(self, client: Any) -> None:
        self.client = client

    @staticmethod
    def _apply_filters(query: Any, filters: Filters | None) -> Any:
        for column, value in (filters or {}).items():
            if value is None:
                query = query.is_(column, "null")
            elif isinstance(value, (list, tuple, set)):
                query = query.in_(column, [_filter_value(item) for item in value])
            else:
                query = query.eq(column, _filter_value(value))
        return query

    @staticmethod
    def _translate(exc: APIError, action: str) -> LedgerError:
        error_type = _SQLSTATE_ERRORS.get(exc.code or "")
        if error_type is not None:
            return error_type(exc.message or str(exc))
        logging.error(f"Supabase {action} failed: {exc}")
        return StoreError(f"{action} failed: {exc.message or exc}")

    def insert(self, table: str, records: Record | Sequence[Record]) -> list[Record]:
        try:
            response = self.client.table(table).insert(records).execute()
        except APIError as exc:
            raise self._translate(exc, f"insert into {table}") from exc
        return list(response.data or [])

    def update(self, table: str, filters: Filters, patch: Record) -> list[Record]:
        if not filters:
            raise StoreError(f"Refusing to update every row of {table}")
        try:
            query = self._apply_filters(self.client.table(table).update(patch), filters)
            response = query.execute()
        except APIError as exc:
            raise self._translate(exc, f"update of {table}") from exc
        return list(response.data or [])

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
        columns = "*"
        if embed is not None:
            alias, related, _ = embed
            columns = f"*, {alias}:{related}(*)"
        try:
            query = self._apply_filters(self.client.table(table).select(columns), filters)
            if order_by:
                query = query.order(order_by, desc=descending)
            if limit is not None:
                query = query.limit(limit)
            response = query.execute()
        except APIError as exc:
            raise self._translate(exc, f"select from {table}") from exc
        return list(response.data or [])

    def delete(self, table: str, filters: Filters) -> list[Record]:
        if not filters:
            raise StoreError(f"Refusing to delete every row of {table}")
        try:
            response = self._apply_filters(self.client.table(table).delete(), filters).execute()
        except APIError as exc:
            raise self._translate(exc, f"delete from {table}") from exc
        return list(response.data or [])

    def rpc(self, function: str, params: Record) -> list[Record]:
        try:
            response = self.client.rpc(function, params).execute()
        except APIError as exc:
            raise self._translate(exc, f"rpc {function}") from exc
        data = response.data
        if data is None:
            return []
        if isinstance(data, dict):
            return [data]
        return list(data)


@lru_cache()
def get_store() -> DataStore:
    """Return the process-wide store, falling back to memory when Supabase is absent."""
    client = get_supabase_client()
    if client is None:
        from .memory import InMemoryStore

        logging.warning("Supabase not configured - ledger data will only be kept in memory")
        return InMemoryStore()
    return SupabaseStore(client)
