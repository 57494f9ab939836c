"""Tests for search index building and the TTL cache."""

import asyncio
from unittest.mock import AsyncMock, Mock

import httpx
from factories import make_record

from notion_cms.models.config import SourceConfig
from notion_cms.models.search import SearchIndexEntry, StructuredData
from notion_cms.services.search import (
    SearchIndexCache,
    build_multi_source_search_index,
    build_search_index,
)


def _entry(entry_id: str) -> SearchIndexEntry:
    return SearchIndexEntry(
        id=entry_id,
        title="t",
        description="d",
        tag="blog",
        url=f"/blog/{entry_id}",
        structured_data=StructuredData(headline="t", description="d"),
    )


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class TestBuildSearchIndex:
    def test_entries_follow_record_mapping(self):
        client = Mock()
        client.get_published_records = AsyncMock(
            return_value=[
                make_record("p-1", title="Hello", description="World", slug="hello", keywords="greeting"),
                make_record("p-2", title=None),
                make_record("p-3"),
            ]
        )
        source = SourceConfig(database_id="db", base_path="/changelog")

        entries = asyncio.run(build_search_index(client, source))

        assert [e.id for e in entries] == ["p-1", "p-3"]
        first = entries[0]
        assert first.url == "/changelog/hello"
        assert first.keywords == "greeting"
        assert first.tag == "changelog"
        assert first.structured_data.headline == "Hello"
        assert entries[1].url == "/changelog/p-3"

    def test_failing_source_is_skipped(self):
        async def fetch(database_id, *args):
            if database_id == "broken":
                raise httpx.ConnectError("down")
            return [make_record("p-1")]

        client = Mock()
        client.get_published_records = AsyncMock(side_effect=fetch)
        sources = {
            "blog": SourceConfig(database_id="broken", base_path="/blog"),
            "news": SourceConfig(database_id="db", base_path="/news"),
        }

        entries = asyncio.run(build_multi_source_search_index(client, sources))
        assert [e.url for e in entries] == ["/news/p-1"]


class TestSearchIndexCache:
    def test_zero_ttl_always_rebuilds(self):
        build = AsyncMock(return_value=[_entry("a")])
        cache = SearchIndexCache(build, ttl=0, clock=FakeClock())
        asyncio.run(cache.get())
        asyncio.run(cache.get())
        assert build.await_count == 2

    def test_ttl_reuses_until_expiry(self):
        clock = FakeClock()
        build = AsyncMock(return_value=[_entry("a")])
        cache = SearchIndexCache(build, ttl=60, clock=clock)

        asyncio.run(cache.get())
        clock.now += 59
        asyncio.run(cache.get())
        assert build.await_count == 1

        clock.now += 1
        asyncio.run(cache.get())
        assert build.await_count == 2

    def test_empty_index_is_not_cached(self):
        build = AsyncMock(return_value=[])
        cache = SearchIndexCache(build, ttl=60, clock=FakeClock())
        asyncio.run(cache.get())
        asyncio.run(cache.get())
        assert build.await_count == 2

    def test_failure_degrades_to_empty(self):
        build = AsyncMock(side_effect=[[_entry("a")], RuntimeError("boom")])
        cache = SearchIndexCache(build, ttl=0, clock=FakeClock())
        assert len(asyncio.run(cache.get())) == 1
        assert asyncio.run(cache.get()) == []
