"""Item population.

Builds the denormalized form of one raw item: every raw key is copied under
its camelCase name, then every schema field is resolved (references expanded,
options named) and written on top.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping

import structlog

from core.domain.errors import DepthExceeded, SchemaMismatch
from core.domain.models import PopulatedItem, RawItem
from core.domain.naming import normalize_field_name
from core.interfaces.content_api import ContentAPI
from core.services.field_resolver import FieldResolver
from core.services.run_cache import RunCache

logger = structlog.get_logger(__name__)


class ItemPopulator:
    """Recursively populates items of one run.

    Args:
        api: content API used to fetch referenced items.
        cache: per-run caches; schemas are read through it.
        max_depth: deepest reference nesting allowed below a root item.
    """

    def __init__(self, api: ContentAPI, cache: RunCache, *, max_depth: int = 32) -> None:
        self._cache = cache
        self._max_depth = max_depth
        self.resolver = FieldResolver(api, self)

    async def populate(
        self,
        raw_item: RawItem,
        collection_id: str,
        root_collection_id: str | None = None,
        depth: int = 0,
    ) -> PopulatedItem:
        if depth > self._max_depth:
            raise DepthExceeded(self._max_depth, collection_id)
        if not isinstance(raw_item, Mapping):
            raise SchemaMismatch(
                "",
                "Item",
                raw_item,
                message=f"Item of collection {collection_id} is not an object: {raw_item!r}",
            )

        root_collection_id = root_collection_id or collection_id
        schema = await self._cache.schemas.get_schema(collection_id)
        item = copy.deepcopy(raw_item)

        # System keys (_id, created-on, ...) are not declared in the schema.
        populated: PopulatedItem = {normalize_field_name(key): value for key, value in item.items()}

        # Declared fields win over the raw copies above.
        for field in schema.fields:
            populated[normalize_field_name(field.slug)] = await self.resolver.resolve(
                item.get(field.slug),
                field,
                root_collection_id,
                depth,
            )

        logger.debug(
            "item_populated",
            collection_id=collection_id,
            item_id=item.get("_id"),
            depth=depth,
        )
        return populated
