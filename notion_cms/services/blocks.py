"""Detail page content: block tree fetch, HTML rendering and table of contents."""

import logging
from typing import Iterable, List, Optional, Sequence

from bs4 import BeautifulSoup, Tag as HtmlTag
from pydantic import ValidationError

from notion_cms.models.content import PageInfo, Tag, TOCEntry
from notion_cms.models.record import Block
from notion_cms.services.mapper import cover_url
from notion_cms.services.notion_client import NotionClient

logger = logging.getLogger(__name__)

_HEADING_LEVELS = {"heading_1": 1, "heading_2": 2, "heading_3": 3}

# List item block type -> wrapping list element
_LIST_TYPES = {"bulleted_list_item": "ul", "numbered_list_item": "ol", "to_do": "ul"}

# Annotation -> element, applied innermost first
_ANNOTATION_TAGS = (
    ("code", "code"),
    ("bold", "strong"),
    ("italic", "em"),
    ("strikethrough", "s"),
    ("underline", "u"),
)


def parse_blocks(raw_blocks: Iterable[dict]) -> List[Block]:
    blocks: List[Block] = []
    for raw in raw_blocks:
        try:
            blocks.append(Block.model_validate(raw))
        except ValidationError as exc:
            logger.warning("Skipping malformed block %s: %s", raw.get("id", "?"), exc.error_count())
    return blocks


def plain_text(rich_text: Sequence[dict]) -> str:
    return "".join(part.get("plain_text", "") for part in rich_text or [])


def table_of_contents(blocks: Sequence[Block]) -> List[TOCEntry]:
    """Heading blocks in document order, including headings nested in toggles."""
    toc: List[TOCEntry] = []
    for block in blocks:
        level = _HEADING_LEVELS.get(block.type)
        if level is not None:
            text = plain_text(block.payload.get("rich_text", []))
            if text:
                toc.append(TOCEntry(id=block.id, text=text, level=level))
        if block.children:
            toc.extend(table_of_contents(block.children))
    return toc


# ---------------------------------------------------------------------------
# HTML rendering
# ---------------------------------------------------------------------------

def _rich_text(soup: BeautifulSoup, parent: HtmlTag, rich_text: Sequence[dict]) -> None:
    for part in rich_text or []:
        node = soup.new_string(part.get("plain_text", ""))
        annotations = part.get("annotations") or {}
        for flag, name in _ANNOTATION_TAGS:
            if annotations.get(flag):
                wrapper = soup.new_tag(name)
                wrapper.append(node)
                node = wrapper
        href = part.get("href")
        if href:
            link = soup.new_tag("a", href=href)
            link.append(node)
            node = link
        parent.append(node)


def _file_url(payload: dict) -> Optional[str]:
    for key in ("external", "file"):
        url = (payload.get(key) or {}).get("url")
        if url:
            return url
    return None


def _render_block(soup: BeautifulSoup, block: Block) -> Optional[HtmlTag]:
    payload = block.payload
    text = payload.get("rich_text", [])
    kind = block.type

    if kind in _HEADING_LEVELS:
        el = soup.new_tag(f"h{_HEADING_LEVELS[kind] + 1}", id=block.id.replace("-", ""))
        _rich_text(soup, el, text)
    elif kind == "paragraph":
        el = soup.new_tag("p")
        _rich_text(soup, el, text)
    elif kind in _LIST_TYPES:
        el = soup.new_tag("li")
        if kind == "to_do":
            box = soup.new_tag("input", type="checkbox", disabled="")
            if payload.get("checked"):
                box["checked"] = ""
            el.append(box)
        _rich_text(soup, el, text)
    elif kind == "quote":
        el = soup.new_tag("blockquote")
        _rich_text(soup, el, text)
    elif kind == "callout":
        el = soup.new_tag("aside", attrs={"class": "callout"})
        emoji = (payload.get("icon") or {}).get("emoji")
        if emoji:
            icon = soup.new_tag("span", attrs={"class": "callout-icon"})
            icon.string = emoji
            el.append(icon)
        _rich_text(soup, el, text)
    elif kind == "code":
        el = soup.new_tag("pre")
        code = soup.new_tag("code")
        language = payload.get("language")
        if language:
            code["class"] = f"language-{language}"
        code.string = plain_text(text)
        el.append(code)
    elif kind == "divider":
        el = soup.new_tag("hr")
    elif kind == "image":
        url = _file_url(payload)
        if not url:
            return None
        el = soup.new_tag("figure")
        caption_text = payload.get("caption", [])
        el.append(soup.new_tag("img", src=url, alt=plain_text(caption_text)))
        if caption_text:
            caption = soup.new_tag("figcaption")
            _rich_text(soup, caption, caption_text)
            el.append(caption)
    elif kind == "bookmark":
        url = payload.get("url")
        if not url:
            return None
        el = soup.new_tag("p", attrs={"class": "bookmark"})
        link = soup.new_tag("a", href=url)
        link.string = plain_text(payload.get("caption", [])) or url
        el.append(link)
    elif kind == "toggle":
        el = soup.new_tag("details")
        summary = soup.new_tag("summary")
        _rich_text(soup, summary, text)
        el.append(summary)
    else:
        logger.debug("Unsupported block type %s (%s)", kind, block.id)
        return None

    # nested blocks (sub-lists included) render inside their parent element
    for child in _render_sequence(soup, block.children):
        el.append(child)
    return el


def _render_sequence(soup: BeautifulSoup, blocks: Sequence[Block]) -> List[HtmlTag]:
    """Render sibling blocks, grouping consecutive list items into one list."""
    elements: List[HtmlTag] = []
    current_list: Optional[HtmlTag] = None
    current_type: Optional[str] = None

    for block in blocks:
        el = _render_block(soup, block)
        if el is None:
            continue
        list_tag = _LIST_TYPES.get(block.type)
        if list_tag is None:
            current_list, current_type = None, None
            elements.append(el)
            continue
        if current_list is None or current_type != block.type:
            current_list = soup.new_tag(list_tag)
            if block.type == "to_do":
                current_list["class"] = "todo-list"
            current_type = block.type
            elements.append(current_list)
        current_list.append(el)

    return elements


def render_blocks(blocks: Sequence[Block]) -> str:
    """Render *blocks* to an HTML fragment; all text content is escaped."""
    soup = BeautifulSoup("", "lxml")
    return "\n".join(str(el) for el in _render_sequence(soup, blocks))


# ---------------------------------------------------------------------------
# Fetching
# ---------------------------------------------------------------------------

async def fetch_page_content(
    client: NotionClient, page_id: str, tags: Sequence[Tag] = ()
) -> Optional[tuple]:
    """Return ``(PageInfo, blocks)`` for *page_id*, or *None* when the page is gone."""
    page = await client.get_page(page_id)
    if page is None:
        return None

    blocks = parse_blocks(await client.get_block_children(page.id))
    wanted = set(page.tag_ids)
    info = PageInfo(
        id=page.id,
        title=page.text("Name") or "Untitled",
        description=page.text("Description"),
        created_at=page.created_time,
        last_edited_at=page.last_edited_time,
        cover=cover_url(page),
        tags=[tag for tag in tags if tag.id in wanted],
        toc=table_of_contents(blocks),
    )
    return info, blocks
