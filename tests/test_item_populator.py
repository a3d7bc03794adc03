import copy

import pytest

from conftest import FakeContentAPI, build_populator, make_collection, ref_field, text_field
from core.domain.errors import DepthExceeded, SchemaMismatch
from core.domain.naming import normalize_field_name


@pytest.mark.asyncio
async def test_scalar_item_key_set_is_union_of_raw_keys_and_schema_slugs():
    schema = make_collection(
        "col-pages",
        "Pages",
        fields=[text_field("name"), text_field("hero-title"), text_field("footer-note")],
    )
    api = FakeContentAPI([schema])
    raw = {"_id": "x1", "name": "Home", "hero-title": "Welcome", "_draft": False}

    populated = await build_populator(api).populate(raw, "col-pages")

    expected = {normalize_field_name(k) for k in raw} | {
        normalize_field_name(f.slug) for f in schema.fields
    }
    assert set(populated) == expected
    assert populated["heroTitle"] == "Welcome"
    assert populated["draft"] is False
    assert populated["footerNote"] is None


@pytest.mark.asyncio
async def test_scenario_single_reference_end_to_end():
    posts = make_collection("col-posts", "Posts", fields=[text_field("title"), ref_field("author", "col-authors")])
    authors = make_collection("col-authors", "Authors", fields=[text_field("name")])
    api = FakeContentAPI(
        [posts, authors],
        {"col-authors": [{"_id": "a1", "name": "Ada"}]},
    )

    populated = await build_populator(api).populate(
        {"_id": "1", "title": "Hi", "author": "a1"}, "col-posts", "col-posts"
    )

    assert populated == {"id": "1", "title": "Hi", "author": {"id": "a1", "name": "Ada"}}


@pytest.mark.asyncio
async def test_schema_fields_override_raw_copies(blog_api):
    raw = blog_api.items["col-posts"][0]

    populated = await build_populator(blog_api).populate(raw, "col-posts")

    assert populated["author"]["name"] == "Ada"
    assert populated["category"] == "News"
    assert [tag["id"] for tag in populated["tags"]] == ["t2", "t1"]
    assert populated["relatedPost"] == "p2"
    assert populated["createdOn"] == "2020-01-01T00:00:00Z"


@pytest.mark.asyncio
async def test_raw_item_is_not_mutated_or_shared():
    schema = make_collection("col-pages", "Pages", fields=[text_field("meta", "Set")])
    api = FakeContentAPI([schema])
    raw = {"_id": "x1", "meta": {"tags": ["a"]}}
    snapshot = copy.deepcopy(raw)

    populated = await build_populator(api).populate(raw, "col-pages")
    populated["meta"]["tags"].append("b")

    assert raw == snapshot
    assert populated["meta"] is not raw["meta"]


@pytest.mark.asyncio
async def test_schema_fetched_once_per_collection_across_items(blog_api):
    populator = build_populator(blog_api)

    for raw in blog_api.items["col-posts"]:
        await populator.populate(raw, "col-posts")

    assert blog_api.count("get_collection") == 4
    assert blog_api.count("get_item") == 6


@pytest.mark.asyncio
async def test_depth_guard_stops_long_chains():
    schemas = [
        make_collection(f"col-{n}", f"Level{n}", fields=[ref_field("next", f"col-{n + 1}")])
        for n in range(5)
    ]
    schemas.append(make_collection("col-5", "Level5", fields=[text_field("name")]))
    items = {f"col-{n}": [{"_id": f"i{n}", "next": f"i{n + 1}"}] for n in range(5)}
    items["col-5"] = [{"_id": "i5", "name": "leaf"}]
    api = FakeContentAPI(schemas, items)

    with pytest.raises(DepthExceeded) as excinfo:
        await build_populator(api, max_depth=3).populate(items["col-0"][0], "col-0")
    assert excinfo.value.max_depth == 3

    populated = await build_populator(api, max_depth=5).populate(items["col-0"][0], "col-0")
    leaf = populated
    for _ in range(5):
        leaf = leaf["next"]
    assert leaf == {"id": "i5", "name": "leaf"}


@pytest.mark.asyncio
async def test_non_mapping_item_is_a_schema_mismatch(blog_api):
    with pytest.raises(SchemaMismatch) as excinfo:
        await build_populator(blog_api).populate("not-a-mapping", "col-tags")

    assert "col-tags" in str(excinfo.value)
    assert blog_api.calls == []
