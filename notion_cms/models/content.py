from typing import List, Optional

from pydantic import BaseModel


class Tag(BaseModel):
    id: str
    value: str  # URL slug
    label: str  # display name


class Author(BaseModel):
    id: str
    name: str


class ContentItem(BaseModel):
    """A record mapped for list views and the search index."""

    id: str
    url: str
    slug: str
    title: str
    description: str
    date: str
    author: Optional[str] = None
    tags: List[str] = []
    cover: Optional[str] = None


class TOCEntry(BaseModel):
    id: str
    text: str
    level: int  # 1, 2 or 3 for h1, h2, h3

    @property
    def anchor(self) -> str:
        return self.id.replace("-", "")


class PageInfo(BaseModel):
    """Header data of a detail page, read from the full page fetch."""

    id: str
    title: str
    description: str = ""
    created_at: str = ""
    last_edited_at: str = ""
    cover: Optional[str] = None
    tags: List[Tag] = []
    toc: List[TOCEntry] = []
