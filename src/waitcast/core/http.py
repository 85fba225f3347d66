"""
Async HTTP GET for the backend client.

One request per call, each with its own short-lived `httpx.AsyncClient`; the
backend is hit a handful of times per session, so there is no pooling to manage.
Non-2xx responses raise, and the caller maps them onto `waitcast.core.errors`.
"""

from __future__ import annotations

from typing import Any

import httpx

from waitcast import __version__

DEFAULT_USER_AGENT = f"waitcast/{__version__} (+https://local)"


async def get_json(
    url: str,
    *,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    timeout_seconds: float = 15,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Any:
    """Fetch `url` and decode its JSON body.

    `transport` lets tests plug in `httpx.MockTransport`.

    Raises:
        httpx.HTTPStatusError: Non-2xx status.
        httpx.RequestError: The request never got a response.
        ValueError: The body is not JSON.
    """
    merged = {"User-Agent": DEFAULT_USER_AGENT, "Accept": "application/json", **(headers or {})}
    async with httpx.AsyncClient(timeout=timeout_seconds, transport=transport) as client:
        response = await client.get(url, params=params, headers=merged)
    response.raise_for_status()
    return response.json()
