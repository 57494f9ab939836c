from typing import Dict, Optional

from pydantic import BaseModel, Field, field_validator

DEFAULT_PAGE_SIZE = 3


class SourceConfig(BaseModel):
    """One content vertical (blog, changelog, ...) backed by a Notion database."""

    database_id: str = Field(min_length=1)
    tag_database_id: Optional[str] = None
    base_path: str = Field(min_length=1)
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, gt=0)
    list_heading: str = "Latest"
    tag_heading_prefix: str = "Tagged with:"
    content_label: str = "Post"
    published_property: str = "Published"
    published_status: str = "Done"

    @field_validator("tag_database_id")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        return value or None

    @field_validator("base_path")
    @classmethod
    def _normalise_base_path(cls, value: str) -> str:
        path = "/" + value.strip().strip("/")
        if path == "/":
            raise ValueError("base_path must name a path below the site root")
        return path


class NotionConfig(BaseModel):
    api_key: str = Field(min_length=1)
    author_database_id: Optional[str] = None
    sources: Dict[str, SourceConfig]
    site_name: Optional[str] = None
    base_url: Optional[str] = None
    og_image_base: Optional[str] = None
    search_cache_ttl: float = Field(
        default=0,
        ge=0,
        description="Seconds a built search index is reused (0 = always refetch).",
    )

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: Optional[str]) -> Optional[str]:
        return value.rstrip("/") if value else None
