"""Per-run memoization of schema and item-list lookups.

Recursive population asks for the same collection schema once per referenced
item; these caches turn that into one round trip per collection. A `RunCache`
is built at the start of an invocation and dropped at its end, so nothing
survives between runs.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Generic, TypeVar

import structlog

from core.domain.models import Collection, RawItem
from core.interfaces.content_api import ContentAPI

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class KeyedCache(Generic[T]):
    """Get-or-fetch cache with one in-flight fetch per key.

    Concurrent callers asking for the same uncached key await the same
    future. A failed fetch is not stored: every waiter sees the error and a
    later call fetches again.
    """

    def __init__(self, name: str, fetch: Callable[[str], Awaitable[T]]) -> None:
        self._name = name
        self._fetch = fetch
        self._values: dict[str, T] = {}
        self._pending: dict[str, asyncio.Future[T]] = {}
        self.fetch_count = 0

    def __contains__(self, key: str) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    async def get(self, key: str) -> T:
        if key in self._values:
            return self._values[key]

        pending = self._pending.get(key)
        if pending is not None:
            return await pending

        future: asyncio.Future[T] = asyncio.get_running_loop().create_future()
        self._pending[key] = future
        self.fetch_count += 1
        logger.debug("cache_miss", cache=self._name, key=key)
        try:
            value = await self._fetch(key)
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as exc:
            future.set_exception(exc)
            # Mark retrieved so an unawaited failure does not warn at GC time.
            future.exception()
            raise
        else:
            self._values[key] = value
            future.set_result(value)
            return value
        finally:
            del self._pending[key]


class SchemaCache(KeyedCache[Collection]):
    def __init__(self, api: ContentAPI) -> None:
        super().__init__("schema", api.get_collection)

    async def get_schema(self, collection_id: str) -> Collection:
        return await self.get(collection_id)


class ItemListCache(KeyedCache[list[RawItem]]):
    def __init__(self, api: ContentAPI) -> None:
        super().__init__("items", api.list_items)

    async def get_items(self, collection_id: str) -> list[RawItem]:
        return await self.get(collection_id)


class RunCache:
    """State scoped to one population run."""

    def __init__(self, api: ContentAPI) -> None:
        self.schemas = SchemaCache(api)
        self.items = ItemListCache(api)
