"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ...db.supabase import supabase_configured
from ...persistence.store import DataStore, get_store
from ...errors import StoreError

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/database", status_code=status.HTTP_200_OK)
def check_database(store: DataStore = Depends(get_store)) -> dict:
    """Check which store backs the ledger and whether it answers queries."""
    configured = supabase_configured()
    try:
        store.select("customers", limit=1)
    except StoreError as exc:
        return {
            "configured": configured,
            "connected": False,
            "store": store.describe(),
            "error": exc.message,
        }
    return {
        "configured": configured,
        "connected": True,
        "store": store.describe(),
        "message": "Database connected." if configured else "Supabase not configured. Using in-memory store.",
    }
