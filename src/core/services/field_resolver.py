"""Field value resolution.

Turns one raw field value into its populated form according to the field's
type: scalars pass through, options become their display name and references
are fetched and populated recursively through the `ItemPopulator`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Awaitable, Callable

import structlog

from core.domain.errors import OptionNotFound, SchemaMismatch
from core.domain.models import FieldDefinition, FieldKind
from core.interfaces.content_api import ContentAPI

if TYPE_CHECKING:
    from core.services.item_populator import ItemPopulator

logger = structlog.get_logger(__name__)

_Handler = Callable[[Any, FieldDefinition, str, int], Awaitable[Any]]


class FieldResolver:
    def __init__(self, api: ContentAPI, populator: "ItemPopulator") -> None:
        self._api = api
        self._populator = populator
        self._handlers: dict[FieldKind, _Handler] = {
            FieldKind.SINGLE_REFERENCE: self.resolve_reference,
            FieldKind.REFERENCE_SET: self.resolve_reference_set,
            FieldKind.OPTION: self.resolve_option,
        }

    async def resolve(
        self,
        raw_value: Any,
        field: FieldDefinition,
        root_collection_id: str,
        depth: int = 0,
    ) -> Any:
        """Resolve `raw_value` as declared by `field`.

        `depth` is the nesting level of the item that owns the field; items
        fetched through references are populated one level deeper.
        """

        handler = self._handlers.get(field.kind)
        if handler is None:
            # Scalars and any type tag we do not know pass through untouched.
            return raw_value
        return await handler(raw_value, field, root_collection_id, depth)

    async def resolve_option(
        self,
        option_id: Any,
        field: FieldDefinition,
        root_collection_id: str,
        depth: int = 0,
    ) -> str | None:
        if option_id is None:
            return None
        name = field.option_name(option_id)
        if name is None:
            raise OptionNotFound(option_id, field.slug)
        return name

    async def resolve_reference(
        self,
        item_id: Any,
        field: FieldDefinition,
        root_collection_id: str,
        depth: int = 0,
    ) -> Any:
        if item_id is None:
            return None
        if not isinstance(item_id, str):
            raise SchemaMismatch(field.slug, field.type, item_id)

        collection_id = field.target_collection_id
        if not collection_id:
            raise SchemaMismatch(field.slug, field.type, item_id)

        if collection_id == root_collection_id:
            # Pointing back at the root collection: keep the id to stop the cycle.
            logger.debug(
                "reference_to_root_collection",
                field=field.slug,
                collection_id=collection_id,
                item_id=item_id,
            )
            return item_id

        item = await self._api.get_item(collection_id, item_id)
        return await self._populator.populate(item, collection_id, root_collection_id, depth + 1)

    async def resolve_reference_set(
        self,
        item_ids: Any,
        field: FieldDefinition,
        root_collection_id: str,
        depth: int = 0,
    ) -> list[Any]:
        if not item_ids:
            return []
        if not isinstance(item_ids, (list, tuple)):
            raise SchemaMismatch(field.slug, field.type, item_ids)

        # One reference at a time, nested fetches included, to bound fan-out.
        resolved: list[Any] = []
        for item_id in item_ids:
            if not isinstance(item_id, str):
                raise SchemaMismatch(field.slug, field.type, item_id)
            resolved.append(await self.resolve_reference(item_id, field, root_collection_id, depth))
        return resolved
