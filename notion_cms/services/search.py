"""Search index export built from the same record mapping as the list pages."""

import logging
import time
from typing import Awaitable, Callable, List, Mapping, Optional

from notion_cms.models.config import SourceConfig
from notion_cms.models.search import SearchIndexEntry, StructuredData
from notion_cms.services.mapper import decode_record, map_record
from notion_cms.services.notion_client import NotionClient

logger = logging.getLogger(__name__)


async def build_search_index(client: NotionClient, source: SourceConfig) -> List[SearchIndexEntry]:
    """Return one entry per listable record of *source*."""
    records = await client.get_published_records(
        source.database_id, source.published_property, source.published_status
    )
    section = source.base_path.lstrip("/")

    entries: List[SearchIndexEntry] = []
    for raw in records:
        page = decode_record(raw)
        if page is None:
            continue
        item = map_record(page, base_path=source.base_path)
        if item is None:
            continue
        entries.append(
            SearchIndexEntry(
                id=item.id,
                title=item.title,
                description=item.description,
                keywords=page.text("Keywords"),
                tag=section,
                url=item.url,
                structured_data=StructuredData(headline=item.title, description=item.description),
            )
        )
    return entries


async def build_multi_source_search_index(
    client: NotionClient, sources: Mapping[str, SourceConfig]
) -> List[SearchIndexEntry]:
    """Combine the indexes of all *sources*; a failing source is logged and skipped."""
    entries: List[SearchIndexEntry] = []
    for name, source in sources.items():
        logger.info("Building search index for source %s", name)
        try:
            entries.extend(await build_search_index(client, source))
        except Exception as exc:
            logger.error("Error building search index for %s: %s", name, exc)
    return entries


class SearchIndexCache:
    """Holds the last built index for *ttl* seconds (0 disables reuse).

    The expiry check and the store are not locked; concurrent rebuilds
    write equivalent data.
    """

    def __init__(
        self,
        build: Callable[[], Awaitable[List[SearchIndexEntry]]],
        ttl: float = 0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._build = build
        self._ttl = ttl
        self._clock = clock
        self._entries: List[SearchIndexEntry] = []
        self._fetched_at: Optional[float] = None

    def _is_fresh(self, now: float) -> bool:
        return (
            bool(self._entries)
            and self._ttl > 0
            and self._fetched_at is not None
            and now - self._fetched_at < self._ttl
        )

    async def get(self) -> List[SearchIndexEntry]:
        """Return the cached index, rebuilding it when stale.

        A failed rebuild yields an empty index.
        """
        now = self._clock()
        if self._is_fresh(now):
            logger.info("Returning cached search index")
            return self._entries

        logger.info("Fetching fresh search index from Notion")
        try:
            self._entries = await self._build()
            self._fetched_at = now
        except Exception as exc:
            logger.error("Error fetching search index: %s", exc)
            self._entries = []

        logger.info("Search index entries: %d", len(self._entries))
        return self._entries
