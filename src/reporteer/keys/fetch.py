"""Derived key retrieval and fingerprinting."""
from __future__ import annotations

from typing import Optional

import httpx

from ..crypto.digest import sha256_hex
from ..errors import FetchError

FINGERPRINT_SENTINEL = "ERROR_FETCHING_KEY"


async def fetch_derived_key(
    endpoint_url: str,
    *,
    client: Optional[httpx.AsyncClient] = None,
    timeout_s: float = 10.0,
) -> str:
    """GET the derived key once and return the SHA-256 hex of the body text.

    Transport, read and non-2xx failures surface as FetchError. No retries.
    """
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=timeout_s) as c:
                resp = await c.get(endpoint_url)
                resp.raise_for_status()
                derived_key = resp.text
        else:
            resp = await client.get(endpoint_url)
            resp.raise_for_status()
            derived_key = resp.text
    except httpx.HTTPError as e:
        raise FetchError(f"Failed to fetch derived key: {e}") from e
    return sha256_hex(derived_key)
