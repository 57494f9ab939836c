"""Record mapping: raw Notion rows to :class:`ContentItem` values."""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

from pydantic import ValidationError

from notion_cms.models.content import Author, ContentItem, Tag
from notion_cms.models.record import NotionPage

logger = logging.getLogger(__name__)


def decode_record(raw: object) -> Optional[NotionPage]:
    """Decode a raw API object into a :class:`NotionPage`.

    Returns *None* for anything without an ``id`` and a ``properties`` map.
    """
    if not isinstance(raw, dict):
        return None
    try:
        return NotionPage.model_validate(raw)
    except ValidationError as exc:
        logger.debug("Not a content record (%s): %s", raw.get("id", "?"), exc.error_count())
        return None


# ---------------------------------------------------------------------------
# Author resolution
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DirectAuthor:
    names: Tuple[str, ...]


@dataclass(frozen=True)
class RelationAuthor:
    ids: Tuple[str, ...]


@dataclass(frozen=True)
class NoAuthor:
    pass


AuthorRef = Union[DirectAuthor, RelationAuthor, NoAuthor]


def author_ref(page: NotionPage) -> AuthorRef:
    """Classify the ``Author`` property; ``people`` takes precedence over ``relation``."""
    prop = page.properties.get("Author")
    if prop is None:
        return NoAuthor()
    if prop.people:
        return DirectAuthor(tuple(p.name for p in prop.people if p.name))
    if prop.relation:
        return RelationAuthor(tuple(r.id for r in prop.relation))
    return NoAuthor()


def resolve_author(ref: AuthorRef, authors: Sequence[Author] = ()) -> Optional[str]:
    """Return the display name(s) for *ref*, joined with ``", "``."""
    if isinstance(ref, DirectAuthor):
        names = list(ref.names)
    elif isinstance(ref, RelationAuthor):
        by_id = {a.id: a.name for a in authors}
        names = [by_id[i] for i in ref.ids if by_id.get(i)]
    else:
        return None
    return ", ".join(names) if names else None


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------

def cover_url(page: NotionPage) -> Optional[str]:
    cover = page.cover
    if cover is None:
        return None
    if cover.external and cover.external.url:
        return cover.external.url
    if cover.file and cover.file.url:
        return cover.file.url
    return None


def page_slug(page: NotionPage) -> str:
    """The explicit slug, falling back to the record id.

    Detail pages are looked up by the ``Slug`` property only, so the id
    fallback yields a list link that resolves to NotFound.
    """
    return page.slug or page.id


def tag_labels(page: NotionPage, tags: Sequence[Tag]) -> list:
    wanted = set(page.tag_ids)
    return [tag.label for tag in tags if tag.id in wanted]


def has_required_fields(page: NotionPage) -> bool:
    return bool(page.text("Name") and page.text("Description") and page.date_start())


# ---------------------------------------------------------------------------
# Mapping
# ---------------------------------------------------------------------------

def map_record(
    raw: object,
    tags: Sequence[Tag] = (),
    base_path: str = "/blog",
    authors: Sequence[Author] = (),
) -> Optional[ContentItem]:
    """Map one raw record to a :class:`ContentItem`.

    Returns *None* when *raw* is not a content record or lacks a title,
    description or date.
    """
    page = raw if isinstance(raw, NotionPage) else decode_record(raw)
    if page is None:
        return None

    if not has_required_fields(page):
        logger.warning("Skipping page %s due to missing required fields", page.id)
        return None

    slug = page_slug(page)
    return ContentItem(
        id=page.id,
        url=f"{base_path}/{slug}",
        slug=slug,
        title=page.text("Name"),
        description=page.text("Description"),
        date=page.date_start(),
        author=resolve_author(author_ref(page), authors),
        tags=tag_labels(page, tags),
        cover=cover_url(page),
    )


def map_records(
    raws: Sequence[object],
    tags: Sequence[Tag] = (),
    base_path: str = "/blog",
    authors: Sequence[Author] = (),
) -> list:
    """Map *raws* in order, dropping the ones :func:`map_record` discards."""
    items = []
    for raw in raws:
        item = map_record(raw, tags, base_path, authors)
        if item is not None:
            items.append(item)
    return items
