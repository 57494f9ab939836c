"""Thin async client for the Notion REST API endpoints this service reads."""

import logging
from typing import Any, Dict, List, Optional

import httpx

from notion_cms.models.content import Author, Tag
from notion_cms.models.record import NotionPage
from notion_cms.services.mapper import decode_record

logger = logging.getLogger(__name__)

NOTION_API_URL = "https://api.notion.com/v1"
NOTION_VERSION = "2022-06-28"
TIMEOUT = 15  # seconds
_PAGE_SIZE = 100  # Notion's per-request maximum
_MAX_BLOCK_DEPTH = 3


class NotionClient:
    """Read-only access to Notion databases, pages and blocks.

    A fresh :class:`httpx.AsyncClient` is opened for every call; errors are
    not retried and propagate as :class:`httpx.HTTPError`.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = NOTION_API_URL,
        timeout: float = TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not api_key:
            raise ValueError("Notion API key is required")
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "Notion-Version": NOTION_VERSION,
            "Content-Type": "application/json",
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            headers=self._headers,
            timeout=self._timeout,
            transport=self._transport,
        )

    # ------------------------------------------------------------------
    # Databases
    # ------------------------------------------------------------------

    async def query_database(
        self, database_id: str, filter: Optional[Dict[str, Any]] = None
    ) -> List[dict]:
        """Return every row of *database_id* matching *filter*, following cursors."""
        results: List[dict] = []
        body: Dict[str, Any] = {"page_size": _PAGE_SIZE}
        if filter:
            body["filter"] = filter

        async with self._client() as client:
            while True:
                resp = await client.post(f"/databases/{database_id}/query", json=body)
                resp.raise_for_status()
                data = resp.json()
                results.extend(data.get("results", []))
                cursor = data.get("next_cursor")
                if not data.get("has_more") or not cursor:
                    break
                body["start_cursor"] = cursor

        logger.debug("Queried database %s: %d rows", database_id, len(results))
        return results

    async def get_published_records(
        self, database_id: str, status_property: str = "Published", status: str = "Done"
    ) -> List[dict]:
        """Return all records whose status property equals *status*."""
        return await self.query_database(
            database_id,
            filter={"property": status_property, "status": {"equals": status}},
        )

    async def get_record_by_slug(self, database_id: str, slug: str) -> Optional[dict]:
        """Return the first record whose ``Slug`` equals *slug* exactly, or *None*."""
        results = await self.query_database(
            database_id,
            filter={"property": "Slug", "rich_text": {"equals": slug}},
        )
        return results[0] if results else None

    async def get_tags(self, tag_database_id: str) -> List[Tag]:
        """Return every tag of the tag database, in query order."""
        tags: List[Tag] = []
        for raw in await self.query_database(tag_database_id):
            page = decode_record(raw)
            if page is None:
                continue
            tags.append(Tag(id=page.id, value=page.text("Slug"), label=page.text("Name")))
        return tags

    async def get_authors(self, author_database_id: str) -> List[Author]:
        authors: List[Author] = []
        for raw in await self.query_database(author_database_id):
            page = decode_record(raw)
            if page is None:
                continue
            authors.append(Author(id=page.id, name=page.text("Name")))
        return authors

    # ------------------------------------------------------------------
    # Pages and blocks
    # ------------------------------------------------------------------

    async def get_page(self, page_id: str) -> Optional[NotionPage]:
        """Return the page object, or *None* when it no longer exists or is trashed."""
        async with self._client() as client:
            resp = await client.get(f"/pages/{page_id}")
        if resp.status_code == 404:
            logger.info("Page %s not found upstream", page_id)
            return None
        resp.raise_for_status()

        page = decode_record(resp.json())
        if page is None or page.is_trashed:
            return None
        return page

    async def get_block_children(self, block_id: str, depth: int = 0) -> List[dict]:
        """Return the child blocks of *block_id*, nesting children under ``"children"``."""
        blocks: List[dict] = []
        params: Dict[str, Any] = {"page_size": _PAGE_SIZE}

        async with self._client() as client:
            while True:
                resp = await client.get(f"/blocks/{block_id}/children", params=params)
                resp.raise_for_status()
                data = resp.json()
                blocks.extend(data.get("results", []))
                cursor = data.get("next_cursor")
                if not data.get("has_more") or not cursor:
                    break
                params["start_cursor"] = cursor

        if depth + 1 < _MAX_BLOCK_DEPTH:
            for block in blocks:
                if block.get("has_children") and block.get("type") != "child_page":
                    block["children"] = await self.get_block_children(block["id"], depth + 1)
        return blocks
