"""Customer service helpers."""

from .directory import CustomerDirectory, load_customer

__all__ = ["CustomerDirectory", "load_customer"]
