"""Page arithmetic shared by static path generation and request-time listing."""

import math
from typing import List, NamedTuple, Optional, Sequence, TypeVar

T = TypeVar("T")


def total_pages(count: int, page_size: int) -> int:
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    return math.ceil(count / page_size)


def page_window(items: Sequence[T], page: int, page_size: int) -> List[T]:
    """Return the items of 1-indexed *page*: ``[(page-1)*size, page*size)``."""
    start = (page - 1) * page_size
    return list(items[start:start + page_size])


def page_href(base_path: str, page: int) -> str:
    return base_path if page <= 1 else f"{base_path}/page/{page}"


class PaginationLinks(NamedTuple):
    current_page: int
    total_pages: int
    previous_href: Optional[str]
    next_href: Optional[str]


def pagination_links(current_page: int, total: int, base_path: str) -> Optional[PaginationLinks]:
    """Previous/next links for a list page.

    *None* when there is one page or none, or when *current_page* is past
    the last page (an empty window gets no navigation).
    """
    if total <= 1 or current_page > total:
        return None
    current = max(1, current_page)
    previous_href = page_href(base_path, current - 1) if current > 1 else None
    next_href = page_href(base_path, current + 1) if current < total else None
    return PaginationLinks(current, total, previous_href, next_href)
