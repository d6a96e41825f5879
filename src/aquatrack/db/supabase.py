"""Supabase client shared by the ledger store and the auth role provider."""

import logging
from functools import lru_cache

from supabase import Client, create_client
from supabase.lib.client_options import ClientOptions

from ..config import settings


def supabase_configured() -> bool:
    return bool(settings.supabase_url and settings.supabase_key)


@lru_cache()
def get_supabase_client() -> Client | None:
    """Get the cached client, or ``None`` when credentials are missing.

    Creating the client does not contact the server, so a bad URL or key only
    surfaces on the first query.
    """
    if not supabase_configured():
        logging.warning("Supabase credentials not configured (missing URL or key)")
        return None

    options = ClientOptions(
        schema=settings.supabase_schema,
        postgrest_client_timeout=settings.supabase_timeout,
    )
    try:
        client = create_client(settings.supabase_url, settings.supabase_key, options=options)
    except Exception as e:
        logging.error(f"Failed to create Supabase client for {settings.supabase_url}: {e}")
        return None
    logging.info(f"Supabase client ready (schema '{settings.supabase_schema}')")
    return client
