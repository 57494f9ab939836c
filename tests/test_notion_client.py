"""Tests for NotionClient against an in-process httpx.MockTransport."""

import asyncio
import json

import httpx
import pytest
from factories import make_block, make_record, make_tag_record

from notion_cms.services.notion_client import NOTION_VERSION, NotionClient


def _client(handler) -> NotionClient:
    return NotionClient("secret-key", transport=httpx.MockTransport(handler))


class TestQueryDatabase:
    def test_follows_cursors(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            calls.append(body)
            assert request.headers["Authorization"] == "Bearer secret-key"
            assert request.headers["Notion-Version"] == NOTION_VERSION
            if "start_cursor" not in body:
                return httpx.Response(
                    200,
                    json={"results": [make_record("p-1")], "has_more": True, "next_cursor": "c-2"},
                )
            return httpx.Response(200, json={"results": [make_record("p-2")], "has_more": False})

        rows = asyncio.run(_client(handler).query_database("db"))

        assert [r["id"] for r in rows] == ["p-1", "p-2"]
        assert calls[1]["start_cursor"] == "c-2"

    def test_published_filter(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"results": [], "has_more": False})

        asyncio.run(_client(handler).get_published_records("db-1", "Published", "Done"))

        assert seen["path"] == "/v1/databases/db-1/query"
        assert seen["body"]["filter"] == {"property": "Published", "status": {"equals": "Done"}}

    def test_record_by_slug(self):
        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            assert body["filter"] == {"property": "Slug", "rich_text": {"equals": "hello"}}
            return httpx.Response(200, json={"results": [make_record("p-1", slug="hello")]})

        record = asyncio.run(_client(handler).get_record_by_slug("db", "hello"))
        assert record["id"] == "p-1"

    def test_record_by_slug_miss(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"results": []})

        assert asyncio.run(_client(handler).get_record_by_slug("db", "nope")) is None

    def test_http_errors_propagate(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"message": "unauthorized"})

        with pytest.raises(httpx.HTTPStatusError):
            asyncio.run(_client(handler).query_database("db"))


class TestTagsAndAuthors:
    def test_tags(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={"results": [make_tag_record("t-1", "docs", "Docs"), {"object": "page"}]},
            )

        tags = asyncio.run(_client(handler).get_tags("tags-db"))
        assert [(t.id, t.value, t.label) for t in tags] == [("t-1", "docs", "Docs")]

    def test_authors(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"results": [make_record("a-1", title="Ada")]})

        authors = asyncio.run(_client(handler).get_authors("authors-db"))
        assert [(a.id, a.name) for a in authors] == [("a-1", "Ada")]


class TestPages:
    def test_missing_page(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"object": "error", "code": "object_not_found"})

        assert asyncio.run(_client(handler).get_page("p-1")) is None

    def test_archived_page(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={**make_record("p-1"), "archived": True})

        assert asyncio.run(_client(handler).get_page("p-1")) is None

    def test_page(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/v1/pages/p-1"
            return httpx.Response(200, json=make_record("p-1", title="Hello"))

        page = asyncio.run(_client(handler).get_page("p-1"))
        assert page.text("Name") == "Hello"

    def test_block_children_are_nested(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/v1/blocks/p-1/children":
                parent = make_block("b-1", "toggle", "More", has_children=True)
                return httpx.Response(200, json={"results": [parent], "has_more": False})
            if request.url.path == "/v1/blocks/b-1/children":
                return httpx.Response(
                    200, json={"results": [make_block("b-2", "paragraph", "Inside")], "has_more": False}
                )
            return httpx.Response(404)

        blocks = asyncio.run(_client(handler).get_block_children("p-1"))
        assert blocks[0]["children"][0]["id"] == "b-2"


def test_api_key_is_required():
    with pytest.raises(ValueError):
        NotionClient("")
