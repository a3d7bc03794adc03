"""Collection population orchestration.

This module holds the whole "name in, populated JSON tree out" flow so the
CLI only deals with arguments, spinners and printing. Keeping side-effects
(progress output) behind hooks makes the pipeline reusable from tests or
other entry-points.

Each logical step (collection lookup, item listing, population) is tagged:
a failure is re-raised as `StepFailed` naming the step that was running.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Callable

import structlog

from core.config import AppSettings
from core.domain.errors import PopulateError, StepFailed
from core.domain.models import CollectionSummary, PopulateOptions
from core.interfaces.content_api import ContentAPI
from core.services.batch_populator import Output, populate_all
from core.services.collection_lookup import find_collection_by_name
from core.services.item_populator import ItemPopulator
from core.services.run_cache import RunCache

logger = structlog.get_logger(__name__)

STEP_COLLECTION_LOOKUP = "collection lookup"
STEP_ITEM_LISTING = "item listing"
STEP_POPULATION = "population"


@dataclass
class PopulateRequest:
    """Parameters that control one population run."""

    site_id: str
    collection_name: str
    options: PopulateOptions = field(default_factory=PopulateOptions)
    max_depth: int | None = None


@dataclass
class PipelineHooks:
    """Optional callbacks for UI layers (spinners, progress)."""

    step_start: Callable[[str, str], None] | None = None
    step_end: Callable[[str, str], None] | None = None


@dataclass
class PipelineResult:
    """Output of a pipeline invocation."""

    collection: CollectionSummary
    item_count: int
    output: Output
    schema_fetches: int = 0


@asynccontextmanager
async def _step(step: str, description: str, hooks: PipelineHooks) -> AsyncIterator[None]:
    if hooks.step_start:
        hooks.step_start(step, description)
    logger.info("step_started", step=step, description=description)
    try:
        yield
    except PopulateError as exc:
        logger.info("step_failed", step=step, error=str(exc))
        raise StepFailed(step, exc) from exc
    logger.info("step_finished", step=step)
    if hooks.step_end:
        hooks.step_end(step, description)


async def populate_collection(
    *,
    api: ContentAPI,
    settings: AppSettings,
    request: PopulateRequest,
    hooks: PipelineHooks | None = None,
) -> PipelineResult:
    hooks = hooks or PipelineHooks()
    cache = RunCache(api)
    populator = ItemPopulator(api, cache, max_depth=request.max_depth or settings.max_depth)
    name = request.collection_name

    async with _step(STEP_COLLECTION_LOOKUP, f"Get {name} Collection", hooks):
        collection = await find_collection_by_name(api, request.site_id, name)

    async with _step(STEP_ITEM_LISTING, f"Get {name} Items", hooks):
        items = await cache.items.get_items(collection.id)

    description = f"Populate all fields for {len(items)} {name} item(s)"
    async with _step(STEP_POPULATION, description, hooks):
        output = await populate_all(populator, items, collection.id, request.options)

    return PipelineResult(
        collection=collection,
        item_count=len(items),
        output=output,
        schema_fetches=cache.schemas.fetch_count,
    )
