"""Async HTTP client helpers for the remote store."""

from __future__ import annotations

import time

import httpx

from watools.config import get_api_key, get_server_url, get_timeout

# Collection listing the store always serves; reachable means it answers 2xx
REACHABILITY_PATH = "/api/jobs"
REACHABILITY_TIMEOUT = 2.0
REACHABILITY_TTL = 30.0

# (online, monotonic time of the check)
_last_check: tuple[bool, float] | None = None


def _auth_headers() -> dict[str, str]:
    api_key = get_api_key()
    return {"X-API-Key": api_key} if api_key else {}


def create_client() -> httpx.AsyncClient:
    """Create an async HTTP client with configured base URL and headers."""
    return httpx.AsyncClient(
        base_url=get_server_url(), headers=_auth_headers(), timeout=get_timeout()
    )


async def is_online() -> bool:
    """Check whether the remote store answers authenticated requests.

    Lists jobs with a short timeout, so a reachable host that rejects the
    configured API key counts as offline. The answer is remembered for
    ``REACHABILITY_TTL`` seconds.

    Returns:
        True if the store answered with a success status
    """
    global _last_check

    if _last_check is not None:
        online, checked_at = _last_check
        if time.monotonic() - checked_at < REACHABILITY_TTL:
            return online

    try:
        async with httpx.AsyncClient(
            base_url=get_server_url(),
            headers=_auth_headers(),
            timeout=REACHABILITY_TIMEOUT,
        ) as client:
            response = await client.get(REACHABILITY_PATH)
    except httpx.HTTPError:
        online = False
    else:
        online = response.is_success

    _last_check = (online, time.monotonic())
    return online


def clear_online_cache() -> None:
    """Forget the last reachability answer so the next call checks again."""
    global _last_check
    _last_check = None
