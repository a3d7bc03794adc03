"""Batch population and output shaping.

Populates every item of a collection (one at a time), then optionally:
- remaps fields with `FieldRule`s (dotted source path -> dotted destination path);
- indexes the list into a mapping keyed by one field.
"""

from __future__ import annotations

import copy
from typing import Any, Iterable, Sequence

import structlog

from core.domain.errors import AmbiguousIndexKey, FieldRuleConflict
from core.domain.models import FieldRule, PopulatedItem, PopulateOptions, RawItem
from core.domain.naming import normalize_field_name
from core.services.item_populator import ItemPopulator

logger = structlog.get_logger(__name__)

_MISSING = object()

Output = list[PopulatedItem] | dict[str, PopulatedItem]


def get_path(obj: Any, path: str) -> Any:
    """Value at dotted `path` in nested dicts, or `_MISSING`."""

    value = obj
    for name in path.split("."):
        if not isinstance(value, dict) or name not in value:
            return _MISSING
        value = value[name]
    return value


def set_path(obj: dict[str, Any], path: str, value: Any) -> None:
    """Write `value` at dotted `path`, creating intermediate dicts.

    Raises `FieldRuleConflict` when a parent on the path already holds a
    non-dict value.
    """

    *parents, leaf = path.split(".")
    target = obj
    for position, name in enumerate(parents):
        child = target.setdefault(name, {})
        if not isinstance(child, dict):
            parent = ".".join(parents[: position + 1])
            raise FieldRuleConflict(f"Cannot write '{path}': '{parent}' already holds {child!r}")
        target = child
    target[leaf] = value


def delete_path(obj: dict[str, Any], path: str) -> None:
    *parents, leaf = path.split(".")
    target: Any = obj
    for name in parents:
        target = target.get(name) if isinstance(target, dict) else None
    if isinstance(target, dict):
        target.pop(leaf, None)


def apply_field_rules(item: PopulatedItem, rules: Sequence[FieldRule]) -> PopulatedItem:
    """Move fields according to `rules`.

    Evaluation order is fixed: every source is read first, then every source
    is deleted, then the new fields are merged on top of what is left (new
    fields win on key collision). Missing sources are ignored.

    Destinations are written in rule order: a destination equal to an earlier
    one replaces it, and a destination below a scalar written by an earlier
    rule (`meta`, then `meta.x`) raises `FieldRuleConflict`.
    """

    moved: dict[str, Any] = {}
    for rule in rules:
        value = get_path(item, rule.source)
        if value is not _MISSING:
            set_path(moved, rule.destination, copy.deepcopy(value))

    remaining = copy.deepcopy(item)
    for rule in rules:
        delete_path(remaining, rule.source)

    return {**remaining, **moved}


def index_items(items: Iterable[PopulatedItem], index_by: str) -> dict[str, PopulatedItem]:
    """Key items by the value of `index_by`.

    `index_by` is a field name (normalized like slugs, so `id` and `_id` both
    select the item id) or a dotted path. Raises `AmbiguousIndexKey` when an
    item lacks the key, holds a non-scalar key, or repeats another item's key.
    """

    path = index_by if "." in index_by else normalize_field_name(index_by)
    indexed: dict[str, PopulatedItem] = {}
    for position, item in enumerate(items):
        value = get_path(item, path)
        if value is _MISSING or value is None:
            raise AmbiguousIndexKey(f"Item #{position} has no value for index key '{index_by}'")
        if isinstance(value, (dict, list)):
            raise AmbiguousIndexKey(
                f"Item #{position} has a non-scalar value for index key '{index_by}'"
            )
        key = str(value)
        if key in indexed:
            raise AmbiguousIndexKey(f"Duplicate value {key!r} for index key '{index_by}'")
        indexed[key] = item
    return indexed


async def populate_all(
    populator: ItemPopulator,
    raw_items: Sequence[RawItem],
    collection_id: str,
    options: PopulateOptions | None = None,
) -> Output:
    """Populate `raw_items` of `collection_id` and shape the output."""

    options = options or PopulateOptions()

    # One item at a time, each fully resolved before the next.
    output: list[PopulatedItem] = []
    for raw_item in raw_items:
        output.append(await populator.populate(raw_item, collection_id, collection_id))

    if options.rules:
        output = [apply_field_rules(item, options.rules) for item in output]

    if options.index:
        indexed = index_items(output, options.index_by)
        logger.debug("items_indexed", index_by=options.index_by, count=len(indexed))
        return indexed

    return output
