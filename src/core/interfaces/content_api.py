"""Content API contract.

Why Protocol:
- Structural contract (duck typing) without rigid inheritance.
- The HTTP adapter and the in-memory fakes used by tests are interchangeable
  without coupling the core to a concrete client.
"""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable

from core.domain.models import Collection, CollectionSummary, RawItem


@runtime_checkable
class ContentAPI(Protocol):
    """Minimal capability set the population engine needs from the remote API.

    Design rules:
    - Every call is async because it performs I/O (HTTP).
    - Failures are raised as `core.domain.errors.ContentAPIError` subclasses;
      implementations never retry.
    """

    async def list_collections(self, site_id: str) -> Sequence[CollectionSummary]:
        """List every collection of a site (without field definitions)."""

        ...

    async def get_collection(self, collection_id: str) -> Collection:
        """Fetch one collection schema, including its field definitions."""

        ...

    async def list_items(self, collection_id: str) -> list[RawItem]:
        """Fetch the items of a collection."""

        ...

    async def get_item(self, collection_id: str, item_id: str) -> RawItem:
        """Fetch one item of a collection."""

        ...
