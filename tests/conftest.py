"""Shared fixtures: an in-memory content API that records every call."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from core.config import AppSettings
from core.domain.errors import NotFound
from core.domain.models import Collection, CollectionSummary, RawItem
from core.services.item_populator import ItemPopulator
from core.services.run_cache import RunCache


def make_collection(
    collection_id: str,
    name: str,
    singular_name: str | None = None,
    fields: list[dict[str, Any]] | None = None,
) -> Collection:
    return Collection.model_validate(
        {
            "_id": collection_id,
            "name": name,
            "singularName": singular_name or name.rstrip("s"),
            "slug": name.lower().replace(" ", "-"),
            "fields": fields or [],
        }
    )


def ref_field(slug: str, collection_id: str, *, many: bool = False) -> dict[str, Any]:
    return {
        "slug": slug,
        "name": slug.replace("-", " ").title(),
        "type": "ItemRefSet" if many else "ItemRef",
        "validations": {"collectionId": collection_id},
    }


def option_field(slug: str, options: list[tuple[str, str]]) -> dict[str, Any]:
    return {
        "slug": slug,
        "name": slug.title(),
        "type": "Option",
        "validations": {"options": [{"id": oid, "name": oname} for oid, oname in options]},
    }


def text_field(slug: str, type_tag: str = "PlainText") -> dict[str, Any]:
    return {"slug": slug, "name": slug.title(), "type": type_tag}


class FakeContentAPI:
    """ContentAPI double backed by dicts.

    `calls` records every request in issue order; `max_in_flight` is the
    highest number of `get_item` calls observed running at the same time.
    """

    def __init__(
        self,
        schemas: list[Collection],
        items: dict[str, list[RawItem]] | None = None,
    ) -> None:
        self.schemas = {schema.id: schema for schema in schemas}
        self.items = items or {}
        self.calls: list[tuple[str, ...]] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False

    async def __aenter__(self) -> "FakeContentAPI":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.closed = True

    def count(self, method: str) -> int:
        return sum(1 for call in self.calls if call[0] == method)

    async def list_collections(self, site_id: str) -> list[CollectionSummary]:
        self.calls.append(("list_collections", site_id))
        await asyncio.sleep(0)
        return [
            CollectionSummary(_id=s.id, name=s.name, singularName=s.singular_name, slug=s.slug)
            for s in self.schemas.values()
        ]

    async def get_collection(self, collection_id: str) -> Collection:
        self.calls.append(("get_collection", collection_id))
        await asyncio.sleep(0)
        if collection_id not in self.schemas:
            raise NotFound(f"collection {collection_id}")
        return self.schemas[collection_id]

    async def list_items(self, collection_id: str) -> list[RawItem]:
        self.calls.append(("list_items", collection_id))
        await asyncio.sleep(0)
        if collection_id not in self.items:
            raise NotFound(f"collection {collection_id}")
        return self.items[collection_id]

    async def get_item(self, collection_id: str, item_id: str) -> RawItem:
        self.calls.append(("get_item", collection_id, item_id))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            for item in self.items.get(collection_id, []):
                if item.get("_id") == item_id:
                    return item
            raise NotFound(f"item {collection_id}/{item_id}")
        finally:
            self.in_flight -= 1


@pytest.fixture
def blog_api() -> FakeContentAPI:
    """Posts -> Authors (ItemRef), Posts -> Tags (ItemRefSet), Posts -> Posts (self)."""

    posts = make_collection(
        "col-posts",
        "Posts",
        "Post",
        [
            text_field("name"),
            text_field("slug"),
            ref_field("author", "col-authors"),
            ref_field("tags", "col-tags", many=True),
            option_field("category", [("opt-news", "News"), ("opt-guide", "Guide")]),
            ref_field("related-post", "col-posts"),
        ],
    )
    authors = make_collection(
        "col-authors",
        "Authors",
        "Author",
        [text_field("name"), ref_field("city", "col-cities")],
    )
    cities = make_collection("col-cities", "Cities", "City", [text_field("name")])
    tags = make_collection("col-tags", "Tags", "Tag", [text_field("name")])
    return FakeContentAPI(
        [posts, authors, cities, tags],
        {
            "col-posts": [
                {
                    "_id": "p1",
                    "name": "Hello",
                    "slug": "hello",
                    "author": "a1",
                    "tags": ["t2", "t1"],
                    "category": "opt-news",
                    "related-post": "p2",
                    "created-on": "2020-01-01T00:00:00Z",
                },
                {
                    "_id": "p2",
                    "name": "Second",
                    "slug": "second",
                    "author": "a1",
                    "category": "opt-guide",
                },
            ],
            "col-authors": [{"_id": "a1", "name": "Ada", "city": "c1"}],
            "col-cities": [{"_id": "c1", "name": "London"}],
            "col-tags": [
                {"_id": "t1", "name": "python"},
                {"_id": "t2", "name": "cms"},
                {"_id": "t3", "name": "web"},
            ],
        },
    )


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(api_token="test-token", site_id="site-1", _env_file=None)


def build_populator(api: FakeContentAPI, *, max_depth: int = 32) -> ItemPopulator:
    return ItemPopulator(api, RunCache(api), max_depth=max_depth)
