from enum import Enum
from typing import List, NamedTuple, Optional, Tuple

from pydantic import BaseModel


class RouteKind(str, Enum):
    ROOT = "root"
    PAGINATED_ROOT = "paginated_root"
    TAG = "tag"
    PAGINATED_TAG = "paginated_tag"
    DETAIL = "detail"
    UNMATCHED = "unmatched"


class Route(NamedTuple):
    """A classified path: the kind plus the raw segments it was derived from."""

    kind: RouteKind
    segments: Tuple[str, ...]


class StaticParam(BaseModel):
    """One statically generated route, as path segments below a base path."""

    segments: List[str]

    def path(self, base_path: str) -> str:
        if not self.segments:
            return base_path
        return f"{base_path}/{'/'.join(self.segments)}"


class StaticParamEntry(BaseModel):
    segments: List[str]
    path: str


def page_segment(page: int) -> List[str]:
    return ["page", str(page)]


def tag_segments(tag_value: str, page: Optional[int] = None) -> List[str]:
    segments = ["tag", tag_value]
    if page is not None:
        segments.extend(page_segment(page))
    return segments
