"""Route classification for the path segments below a source's base path.

Recognised shapes::

    []                          root
    ["page", N]                 paginated root
    ["tag", slug]               tag
    ["tag", slug, "page", N]    paginated tag
    [slug]                      detail

Anything else is unmatched. Nothing here raises; absence is ``None``.
"""

import re
from typing import Optional, Sequence

from notion_cms.models.route import Route, RouteKind

_PAGE_NUMBER_RE = re.compile(r"[0-9]+")


def _is_page_number(segment: str) -> bool:
    return bool(_PAGE_NUMBER_RE.fullmatch(segment))


def is_root_page(segments: Sequence[str]) -> bool:
    return len(segments) == 0


def is_paginated_page(segments: Sequence[str]) -> bool:
    return len(segments) == 2 and segments[0] == "page" and _is_page_number(segments[1])


def is_tag_page(segments: Sequence[str]) -> bool:
    return len(segments) == 2 and segments[0] == "tag" and bool(segments[1])


def is_paginated_tag_page(segments: Sequence[str]) -> bool:
    return (
        len(segments) == 4
        and segments[0] == "tag"
        and bool(segments[1])
        and segments[2] == "page"
        and _is_page_number(segments[3])
    )


def is_content_page(segments: Sequence[str]) -> bool:
    return len(segments) == 1 and bool(segments[0])


def classify(segments: Sequence[str]) -> Route:
    """Return the single :class:`Route` that *segments* describe."""
    parts = tuple(segments)
    if is_root_page(parts):
        kind = RouteKind.ROOT
    elif is_paginated_page(parts):
        kind = RouteKind.PAGINATED_ROOT
    elif is_tag_page(parts):
        kind = RouteKind.TAG
    elif is_paginated_tag_page(parts):
        kind = RouteKind.PAGINATED_TAG
    elif is_content_page(parts):
        kind = RouteKind.DETAIL
    else:
        kind = RouteKind.UNMATCHED
    return Route(kind, parts)


def split_path(path: str) -> list:
    """Split a URL path below the base path into its non-empty segments."""
    return [part for part in path.split("/") if part]


def tag_slug_of(route: Route) -> Optional[str]:
    if route.kind in (RouteKind.TAG, RouteKind.PAGINATED_TAG):
        return route.segments[1]
    return None


def page_number_of(route: Route) -> Optional[int]:
    """Return the requested page for list routes; values below 1 become 1."""
    if route.kind in (RouteKind.ROOT, RouteKind.TAG):
        return 1
    if route.kind is RouteKind.PAGINATED_ROOT:
        return max(1, int(route.segments[1]))
    if route.kind is RouteKind.PAGINATED_TAG:
        return max(1, int(route.segments[3]))
    return None


def detail_slug_of(route: Route) -> Optional[str]:
    if route.kind is RouteKind.DETAIL:
        return route.segments[0]
    return None
