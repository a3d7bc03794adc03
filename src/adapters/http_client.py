"""httpx wrapper.

Why a wrapper:
- Standardizes timeouts, auth and version headers for every API call.
- Eases testing: a `transport` can be injected (e.g. `httpx.MockTransport`).
"""

from __future__ import annotations

import httpx

from core.config import AppSettings


def build_async_client(
    settings: AppSettings | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create an `httpx.AsyncClient` bound to the Webflow API.

    Why a builder:
    - Centralizes base URL/timeouts/headers so every request behaves the same.
    - The bearer token is only attached when configured; the API answers 401
      otherwise and the adapter maps that to `Unauthorized`.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json",
        "accept-version": settings.api_version,
    }
    if settings.api_token:
        headers["Authorization"] = f"Bearer {settings.api_token}"
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        base_url=settings.api_base_url,
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        transport=transport,
    )
