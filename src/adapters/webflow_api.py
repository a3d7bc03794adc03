"""Webflow CMS API adapter (v1).

Implements `core.interfaces.content_api.ContentAPI` over HTTP. This module is
pure I/O: it fetches JSON, validates it into domain models and translates
HTTP failures into the domain error taxonomy. It never retries.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from adapters.http_client import build_async_client
from core.config import AppSettings
from core.domain.errors import NotFound, RateLimited, TransportError, Unauthorized
from core.domain.models import Collection, CollectionSummary, RawItem

logger = structlog.get_logger(__name__)


def _retry_after(response: httpx.Response) -> float | None:
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        detail = payload.get("msg") or payload.get("message") or payload.get("err")
        if isinstance(detail, str) and detail.strip():
            return f"HTTP {response.status_code}: {detail.strip()}"
    return f"HTTP {response.status_code}"


def raise_for_api_status(response: httpx.Response) -> None:
    """Map a non-2xx response to a `ContentAPIError` subclass."""

    status = response.status_code
    if 200 <= status < 300:
        return

    message = f"{response.request.method} {response.request.url.path} -> {_error_message(response)}"
    if status in (401, 403):
        raise Unauthorized(message)
    if status == 404:
        raise NotFound(message)
    if status == 429:
        raise RateLimited(message, retry_after=_retry_after(response))
    raise TransportError(message)


class WebflowClient:
    """Async Webflow API client.

    Use as an async context manager so the underlying connection pool is
    closed at the end of the run:

        async with WebflowClient(settings) as api:
            await api.list_collections(site_id)
    """

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._client = client or build_async_client(self._settings)

    async def __aenter__(self) -> "WebflowClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        logger.debug("api_request", path=path, params=params)
        try:
            response = await self._client.get(path, params=params)
        except httpx.HTTPError as exc:
            raise TransportError(f"GET {path} failed: {exc}") from exc

        raise_for_api_status(response)
        try:
            return response.json()
        except ValueError as exc:
            raise TransportError(f"GET {path} returned invalid JSON") from exc

    async def list_collections(self, site_id: str) -> list[CollectionSummary]:
        data = await self._get_json(f"/sites/{site_id}/collections")
        if not isinstance(data, list):
            raise TransportError(f"Unexpected collections payload for site {site_id}")
        try:
            return [CollectionSummary.model_validate(entry) for entry in data]
        except ValidationError as exc:
            raise TransportError(f"Invalid collection summary for site {site_id}: {exc}") from exc

    async def get_collection(self, collection_id: str) -> Collection:
        data = await self._get_json(f"/collections/{collection_id}")
        try:
            return Collection.model_validate(data)
        except ValidationError as exc:
            raise TransportError(f"Invalid schema for collection {collection_id}: {exc}") from exc

    async def list_items(self, collection_id: str) -> list[RawItem]:
        data = await self._get_json(
            f"/collections/{collection_id}/items",
            params={"limit": self._settings.items_page_limit},
        )
        items = data.get("items") if isinstance(data, dict) else None
        if not isinstance(items, list):
            raise TransportError(f"Unexpected items payload for collection {collection_id}")
        if not all(isinstance(item, dict) for item in items):
            raise TransportError(f"Non-object item in payload for collection {collection_id}")
        total = data.get("total")
        if isinstance(total, int) and total > len(items):
            logger.warning(
                "items_truncated",
                collection_id=collection_id,
                fetched=len(items),
                total=total,
            )
        return items

    async def get_item(self, collection_id: str, item_id: str) -> RawItem:
        data = await self._get_json(f"/collections/{collection_id}/items/{item_id}")
        items = data.get("items") if isinstance(data, dict) else None
        if not isinstance(items, list):
            raise TransportError(f"Unexpected item payload for {collection_id}/{item_id}")
        if not items:
            raise NotFound(f"Item {item_id} not found in collection {collection_id}")
        if not isinstance(items[0], dict):
            raise TransportError(f"Non-object item in payload for {collection_id}/{item_id}")
        return items[0]
