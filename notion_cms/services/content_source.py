"""Content source orchestration: resolves a requested path to a render result."""

import asyncio
import logging
from typing import List, Optional, Sequence

from notion_cms.models.config import SourceConfig
from notion_cms.models.content import Author, Tag
from notion_cms.models.route import RouteKind
from notion_cms.models.views import DetailView, ListView, NotFound, PageMetadata, RenderResult
from notion_cms.services.blocks import fetch_page_content
from notion_cms.services.mapper import decode_record, map_records
from notion_cms.services.notion_client import NotionClient
from notion_cms.services.pagination import page_window, total_pages
from notion_cms.services.routing import classify, detail_slug_of, page_number_of, tag_slug_of
from notion_cms.services.static_params import generate_static_params

logger = logging.getLogger(__name__)


def _has_tag(raw: object, tag: Tag) -> bool:
    page = decode_record(raw)
    return page is not None and tag.id in page.tag_ids


class ContentSource:
    """Serves one configured source: list, tag and detail pages plus static params."""

    def __init__(
        self,
        name: str,
        source: SourceConfig,
        client: NotionClient,
        author_database_id: Optional[str] = None,
    ) -> None:
        self.name = name
        self.source = source
        self.client = client
        self.author_database_id = author_database_id

    @property
    def base_path(self) -> str:
        return self.source.base_path

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    async def _fetch_tags(self) -> List[Tag]:
        if not self.source.tag_database_id:
            return []
        return await self.client.get_tags(self.source.tag_database_id)

    async def _fetch_authors(self) -> List[Author]:
        if not self.author_database_id:
            return []
        return await self.client.get_authors(self.author_database_id)

    async def _fetch_all(self):
        """Fetch records, tags and authors concurrently."""
        return await asyncio.gather(
            self.client.get_published_records(
                self.source.database_id,
                self.source.published_property,
                self.source.published_status,
            ),
            self._fetch_tags(),
            self._fetch_authors(),
        )

    async def static_params(self):
        return await generate_static_params(self.client, self.source)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    async def resolve(self, segments: Sequence[str]) -> RenderResult:
        """Return the :class:`ListView`, :class:`DetailView` or :class:`NotFound` for *segments*.

        Upstream errors are not caught here and propagate as
        :class:`httpx.HTTPError`.
        """
        route = classify(segments)
        if route.kind is RouteKind.UNMATCHED:
            logger.info("Unmatched path", extra={"base_path": self.base_path, "segments": list(segments)})
            return NotFound()

        records, tags, authors = await self._fetch_all()

        # ── Detail page ───────────────────────────────────────────────────────
        if route.kind is RouteKind.DETAIL:
            return await self._resolve_detail(detail_slug_of(route), tags)

        page = page_number_of(route) or 1

        # ── Tag pages ─────────────────────────────────────────────────────────
        if route.kind in (RouteKind.TAG, RouteKind.PAGINATED_TAG):
            tag_slug = tag_slug_of(route)
            tag = next((t for t in tags if t.value == tag_slug), None)
            if tag is None:
                logger.info("Tag not found", extra={"base_path": self.base_path, "tag": tag_slug})
                return NotFound(message="Tag not found.")

            tagged = [raw for raw in records if _has_tag(raw, tag)]
            return self._list_view(
                tagged,
                tags,
                authors,
                page,
                heading=f"{self.source.tag_heading_prefix} {tag.label}",
                base_path=f"{self.base_path}/tag/{tag.value}",
                tag=tag,
            )

        # ── Root pages ────────────────────────────────────────────────────────
        return self._list_view(
            records, tags, authors, page, heading=self.source.list_heading, base_path=self.base_path
        )

    async def _resolve_detail(self, slug: Optional[str], tags: Sequence[Tag]) -> RenderResult:
        if not slug:
            return NotFound()

        record = await self.client.get_record_by_slug(self.source.database_id, slug)
        page = decode_record(record) if record is not None else None
        if page is None:
            return NotFound(message=f"{self.source.content_label} not found.")

        content = await fetch_page_content(self.client, page.id, tags)
        if content is None:
            # deleted or unpublished since the slug lookup
            return NotFound(message=f"{self.source.content_label} not found.")

        info, blocks = content
        return DetailView(page=info, blocks=blocks, base_path=self.base_path, slug=slug)

    def _list_view(
        self,
        records: Sequence[object],
        tags: Sequence[Tag],
        authors: Sequence[Author],
        page: int,
        heading: str,
        base_path: str,
        tag: Optional[Tag] = None,
    ) -> ListView:
        items = map_records(records, tags, self.base_path, authors)
        page_size = self.source.page_size
        return ListView(
            items=page_window(items, page, page_size),
            current_page=page,
            total_pages=total_pages(len(items), page_size),
            heading=heading,
            base_path=base_path,
            tag=tag,
        )

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    def build_metadata(
        self,
        result: RenderResult,
        site_name: Optional[str] = None,
        base_url: Optional[str] = None,
        og_image_base: Optional[str] = None,
    ) -> PageMetadata:
        """Return the ``<head>`` metadata for a resolved page."""
        label = self.source.content_label

        def og_image(*parts: str) -> Optional[str]:
            if not og_image_base:
                return None
            suffix = "".join(f"/{p}" for p in parts)
            return f"/{og_image_base.strip('/')}{suffix}/image.png"

        def canonical(path: str) -> Optional[str]:
            return f"{base_url}{path}" if base_url else None

        if isinstance(result, DetailView):
            image = og_image(result.slug) or result.page.cover
            return PageMetadata(
                title=result.page.title,
                description=result.page.description,
                og_type="article",
                site_name=site_name,
                canonical=canonical(f"{self.base_path}/{result.slug}"),
                image=image,
                twitter_card="summary_large_image" if image else "summary",
            )

        if isinstance(result, ListView):
            if result.tag is not None:
                return PageMetadata(
                    title=result.heading,
                    description=f"{label}s tagged with {result.tag.label}",
                    site_name=site_name,
                    canonical=canonical(result.base_path),
                    image=og_image("tag", result.tag.value),
                )
            page = result.current_page
            title = f"{result.heading} - Page {page}" if page > 1 else result.heading
            path = f"{self.base_path}/page/{page}" if page > 1 else self.base_path
            return PageMetadata(
                title=title,
                description=f"Browse all {label.lower()}s",
                site_name=site_name,
                canonical=canonical(path),
                image=og_image(),
            )

        return PageMetadata(title="Not Found", description=result.message, site_name=site_name)

