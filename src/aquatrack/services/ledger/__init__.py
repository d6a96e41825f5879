"""Order, billing and container ledgers."""

from .containers import ContainerLedger
from .orders import OrderLedger, PriceList, compute_due, normalize_entries
from ..permissions import can_create_bulk_order, can_edit, require_role

__all__ = [
    "OrderLedger",
    "ContainerLedger",
    "PriceList",
    "compute_due",
    "normalize_entries",
    "can_edit",
    "can_create_bulk_order",
    "require_role",
]
