# streamrent/core/supabase_client.py
import logging
from contextlib import contextmanager

import httpx
from postgrest.exceptions import APIError
from supabase import AsyncClient, acreate_client

from streamrent.core.config import Settings, get_settings
from streamrent.core.errors import BackendUnavailable

logger = logging.getLogger(__name__)

# Postgres error code for unique_violation
UNIQUE_VIOLATION = "23505"

_client: AsyncClient | None = None


@contextmanager
def backend_errors(operation: str):
    """
    Translate Supabase/PostgREST and transport failures into
    BackendUnavailable.

    Usage in repositories:

        with backend_errors("fetch user"):
            resp = await client.table("users").select("*").execute()
    """
    try:
        yield
    except (APIError, httpx.HTTPError) as exc:
        logger.error("Supabase call failed (%s): %s", operation, exc)
        raise BackendUnavailable() from exc


async def supabase_client(settings: Settings | None = None) -> AsyncClient:
    """
    Return the process-wide async Supabase client, creating it on first use.

    Key selection:
      - SUPABASE_SERVICE_ROLE_KEY if set (bypasses RLS; backend only)
      - otherwise SUPABASE_KEY (anon key, respects RLS)

    The client is cached for the lifetime of the process, like the
    settings object it is built from.
    """
    global _client
    if _client is None:
        settings = settings or get_settings()
        key = settings.SUPABASE_SERVICE_ROLE_KEY or settings.SUPABASE_KEY
        _client = await acreate_client(settings.SUPABASE_URL, key)
    return _client
