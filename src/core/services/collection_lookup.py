"""Collection lookup by human-readable name."""

from __future__ import annotations

import structlog

from core.domain.errors import CollectionNotFound
from core.domain.models import CollectionSummary
from core.interfaces.content_api import ContentAPI

logger = structlog.get_logger(__name__)


async def find_collection_by_name(api: ContentAPI, site_id: str, name: str) -> CollectionSummary:
    """Return the first collection of `site_id` whose name or singular name is `name`.

    Matching is case-sensitive. Raises `CollectionNotFound` when nothing matches.
    """

    collections = await api.list_collections(site_id)
    for collection in collections:
        if collection.matches_name(name):
            logger.debug("collection_found", name=name, collection_id=collection.id)
            return collection
    raise CollectionNotFound(name)
