"""Tests for static path enumeration and the shared pagination arithmetic."""

import asyncio
import math
from unittest.mock import AsyncMock, Mock

import pytest
from factories import make_record

from notion_cms.models.config import SourceConfig
from notion_cms.models.content import Tag
from notion_cms.models.route import RouteKind
from notion_cms.services.pagination import page_window, pagination_links, total_pages
from notion_cms.services.routing import classify, page_number_of, tag_slug_of
from notion_cms.services.static_params import enumerate_static_params, generate_static_params


def _segments(params):
    return [p.segments for p in params]


def _list_pages(params):
    return [p for p in params if classify(p.segments).kind in (RouteKind.ROOT, RouteKind.PAGINATED_ROOT)]


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------

class TestPagination:
    def test_total_pages(self):
        assert total_pages(7, 3) == 3
        assert total_pages(6, 3) == 2
        assert total_pages(0, 3) == 0

    def test_window_is_half_open(self):
        items = list(range(7))
        assert page_window(items, 1, 3) == [0, 1, 2]
        assert page_window(items, 3, 3) == [6]
        assert page_window(items, 4, 3) == []

    def test_links_hidden_for_single_page(self):
        assert pagination_links(1, 1, "/blog") is None
        assert pagination_links(1, 0, "/blog") is None

    def test_links_for_middle_page(self):
        links = pagination_links(2, 3, "/blog")
        assert links.previous_href == "/blog"
        assert links.next_href == "/blog/page/3"

    def test_links_for_last_page(self):
        links = pagination_links(3, 3, "/blog/tag/docs")
        assert links.current_page == 3
        assert links.previous_href == "/blog/tag/docs/page/2"
        assert links.next_href is None

    def test_no_links_past_last_page(self):
        assert pagination_links(9, 3, "/blog/tag/docs") is None


# ---------------------------------------------------------------------------
# Enumeration
# ---------------------------------------------------------------------------

class TestEnumerateStaticParams:
    @pytest.mark.parametrize("count, page_size", [(0, 3), (1, 3), (3, 3), (7, 3), (10, 1), (5, 10)])
    def test_list_page_count(self, count, page_size):
        records = [make_record(f"p-{i}") for i in range(count)]
        params = enumerate_static_params(records, [], page_size)
        assert len(_list_pages(params)) == max(1, math.ceil(count / page_size))

    def test_empty_source_emits_only_root(self):
        assert _segments(enumerate_static_params([], [], 3)) == [[]]

    def test_boundary_seven_records(self):
        records = [make_record(f"p-{i}") for i in range(7)]
        assert _segments(enumerate_static_params(records, [], 3)) == [[], ["page", "2"], ["page", "3"]]

    def test_detail_paths_need_a_slug(self):
        records = [make_record("p-1", slug="one"), make_record("p-2"), make_record("p-3", slug="three")]
        segments = _segments(enumerate_static_params(records, [], 10))
        assert ["one"] in segments
        assert ["three"] in segments
        assert ["p-2"] not in segments

    def test_end_to_end_with_tags(self):
        tags = [
            Tag(id="t-docs", value="docs", label="Docs"),
            Tag(id="t-guide", value="guide", label="Guide"),
            Tag(id="t-misc", value="misc", label="Misc"),
        ]
        records = [
            make_record("p-1", slug="a", tag_ids=["t-docs"]),
            make_record("p-2", slug="b", tag_ids=["t-docs"]),
            make_record("p-3", slug="c"),
            make_record("p-4", slug="d"),
            make_record("p-5", slug="e"),
        ]
        segments = _segments(enumerate_static_params(records, tags, 2))

        assert segments == [
            [],
            ["page", "2"],
            ["page", "3"],
            ["a"],
            ["b"],
            ["c"],
            ["d"],
            ["e"],
            ["tag", "docs"],
        ]

    def test_tag_pagination(self):
        tags = [Tag(id="t-docs", value="docs", label="Docs")]
        records = [make_record(f"p-{i}", tag_ids=["t-docs"]) for i in range(5)]
        segments = _segments(enumerate_static_params(records, tags, 2))
        assert ["tag", "docs"] in segments
        assert ["tag", "docs", "page", "2"] in segments
        assert ["tag", "docs", "page", "3"] in segments
        assert ["tag", "docs", "page", "4"] not in segments

    def test_unlistable_records_do_not_count(self):
        records = [make_record("p-1"), make_record("p-2", title=None), make_record("p-3", date=None)]
        assert _segments(enumerate_static_params(records, [], 1)) == [[]]

    def test_no_duplicates(self):
        tags = [Tag(id="t-docs", value="docs", label="Docs")]
        records = [make_record(f"p-{i}", slug=f"s-{i}", tag_ids=["t-docs"]) for i in range(9)]
        segments = [tuple(s) for s in _segments(enumerate_static_params(records, tags, 2))]
        assert len(segments) == len(set(segments))

    def test_generated_paths_classify_as_intended(self):
        tags = [Tag(id="t-x", value="x", label="X")]
        records = [make_record(f"p-{i}", slug=f"post-{i}", tag_ids=["t-x"]) for i in range(4)]
        for param in enumerate_static_params(records, tags, 2):
            route = classify(param.segments)
            assert route.kind is not RouteKind.UNMATCHED
            if param.segments[:1] == ["tag"]:
                assert tag_slug_of(route) == "x"
            if param.segments[-2:-1] == ["page"]:
                assert page_number_of(route) == int(param.segments[-1])

    def test_paths_below_base_path(self):
        params = enumerate_static_params([make_record(f"p-{i}") for i in range(4)], [], 3)
        assert [p.path("/news") for p in params] == ["/news", "/news/page/2"]


class TestGenerateStaticParams:
    def test_fetches_tags_only_when_configured(self):
        client = Mock()
        client.get_published_records = AsyncMock(return_value=[make_record("p-1", slug="one")])
        client.get_tags = AsyncMock(return_value=[])

        source = SourceConfig(database_id="db", base_path="/updates", page_size=10)
        params = asyncio.run(generate_static_params(client, source))

        assert _segments(params) == [[], ["one"]]
        client.get_published_records.assert_awaited_once_with("db", "Published", "Done")
        client.get_tags.assert_not_awaited()

    def test_uses_tag_database(self):
        client = Mock()
        client.get_published_records = AsyncMock(
            return_value=[make_record("p-1", slug="one", tag_ids=["t-1"])]
        )
        client.get_tags = AsyncMock(return_value=[Tag(id="t-1", value="one-tag", label="One")])

        source = SourceConfig(database_id="db", tag_database_id="tags-db", base_path="/blog")
        params = asyncio.run(generate_static_params(client, source))

        assert ["tag", "one-tag"] in _segments(params)
        client.get_tags.assert_awaited_once_with("tags-db")
