"""Render results produced by a content source for one requested path."""

from typing import List, Literal, Optional, Union

from pydantic import BaseModel

from notion_cms.models.content import ContentItem, PageInfo, Tag
from notion_cms.models.record import Block


class ListView(BaseModel):
    kind: Literal["list"] = "list"
    items: List[ContentItem]
    current_page: int
    total_pages: int
    heading: str
    base_path: str
    tag: Optional[Tag] = None


class DetailView(BaseModel):
    kind: Literal["detail"] = "detail"
    page: PageInfo
    blocks: List[Block]
    base_path: str
    slug: str


class NotFound(BaseModel):
    kind: Literal["not_found"] = "not_found"
    message: str = "The requested page could not be found."


RenderResult = Union[ListView, DetailView, NotFound]


class PageMetadata(BaseModel):
    """Values for the document ``<head>`` (title, Open Graph, Twitter card)."""

    title: str
    description: str = ""
    og_type: Literal["website", "article"] = "website"
    site_name: Optional[str] = None
    canonical: Optional[str] = None
    image: Optional[str] = None
    twitter_card: Literal["summary", "summary_large_image"] = "summary_large_image"
