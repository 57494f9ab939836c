from typing import List

from pydantic import BaseModel, Field


class StructuredData(BaseModel):
    headline: str
    description: str
    contents: List[str] = []
    headings: List[str] = []


class SearchIndexEntry(BaseModel):
    """One flattened, searchable record."""

    id: str
    title: str
    description: str
    keywords: str = ""
    tag: str = Field(description="Source section the record belongs to, e.g. ``blog``.")
    url: str
    structured_data: StructuredData
