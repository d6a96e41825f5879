"""Route group exports."""

from . import billing, containers, customers, health, orders, session, users

__all__ = ["health", "session", "customers", "orders", "billing", "containers", "users"]
