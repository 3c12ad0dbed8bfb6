"""Async HTTP client singleton for the REST backend.

Creates a cached httpx.AsyncClient configured with the backend URL and API
key from application settings. No transport-level retries: the persistence
pipeline retries with tenacity to avoid double-retry behavior.
"""

import httpx

from notezero.config import get_settings

_client: httpx.AsyncClient | None = None


async def get_http_client() -> httpx.AsyncClient:
    """Return a cached async HTTP client instance.

    Creates the client on first call using backend_url/backend_api_key from
    settings. Subsequent calls return the cached instance.
    """
    global _client
    if _client is None:
        settings = get_settings()
        _client = httpx.AsyncClient(
            base_url=settings.backend_url,
            headers={
                "apikey": settings.backend_api_key,
                "Authorization": f"Bearer {settings.backend_api_key}",
            },
            timeout=settings.persistence_timeout_seconds,
        )
    return _client


async def close_client() -> None:
    """Close and drop the cached client (application shutdown)."""
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None


def reset_client() -> None:
    """Reset the cached client instance. Used for testing."""
    global _client
    _client = None
