"""Static path enumeration: every route a source can pre-render."""

import logging
from collections import Counter
from typing import List, Sequence

from notion_cms.models.config import SourceConfig
from notion_cms.models.content import Tag
from notion_cms.models.route import StaticParam, page_segment, tag_segments
from notion_cms.services.mapper import decode_record, has_required_fields
from notion_cms.services.notion_client import NotionClient
from notion_cms.services.pagination import total_pages

logger = logging.getLogger(__name__)


def enumerate_static_params(
    records: Sequence[object],
    tags: Sequence[Tag],
    page_size: int,
) -> List[StaticParam]:
    """Return the static params for *records* and *tags*.

    List and tag pages count only records that can be listed (those the
    mapper keeps), so their page counts agree with request-time listings.
    Page 1 of every list is its unpaginated route. Tags without listed
    records produce no paths.
    """
    pages = [p for p in (decode_record(r) for r in records) if p is not None]
    listed = [p for p in pages if has_required_fields(p)]

    params: List[StaticParam] = [StaticParam(segments=[])]

    for page in range(2, total_pages(len(listed), page_size) + 1):
        params.append(StaticParam(segments=page_segment(page)))

    seen_slugs: set = set()
    for record in pages:
        slug = record.slug
        if slug and slug not in seen_slugs:
            seen_slugs.add(slug)
            params.append(StaticParam(segments=[slug]))

    tag_counts = Counter(tag_id for record in listed for tag_id in set(record.tag_ids))
    for tag in tags:
        count = tag_counts.get(tag.id, 0)
        if count == 0 or not tag.value:
            continue
        params.append(StaticParam(segments=tag_segments(tag.value)))
        for page in range(2, total_pages(count, page_size) + 1):
            params.append(StaticParam(segments=tag_segments(tag.value, page)))

    return params


async def generate_static_params(client: NotionClient, source: SourceConfig) -> List[StaticParam]:
    """Fetch a source's records (and tags, when configured) and enumerate its paths."""
    records = await client.get_published_records(
        source.database_id, source.published_property, source.published_status
    )
    tags: List[Tag] = []
    if source.tag_database_id:
        tags = await client.get_tags(source.tag_database_id)

    params = enumerate_static_params(records, tags, source.page_size)
    logger.info(
        "Generated static params",
        extra={"base_path": source.base_path, "records": len(records), "params": len(params)},
    )
    return params
