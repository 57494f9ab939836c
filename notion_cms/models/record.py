"""Typed view of the Notion page objects returned by database queries."""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class RichText(BaseModel):
    model_config = ConfigDict(extra="ignore")

    plain_text: str = ""
    href: Optional[str] = None


class DateValue(BaseModel):
    start: Optional[str] = None
    end: Optional[str] = None


class Person(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = ""
    name: Optional[str] = None


class Relation(BaseModel):
    id: str


class StatusValue(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None


class PropertyValue(BaseModel):
    """One entry of a page's ``properties`` map.

    Notion tags each value with ``type``; only the members this service
    reads are declared, everything else is ignored.
    """

    model_config = ConfigDict(extra="ignore")

    type: Optional[str] = None
    title: Optional[List[RichText]] = None
    rich_text: Optional[List[RichText]] = None
    date: Optional[DateValue] = None
    people: Optional[List[Person]] = None
    relation: Optional[List[Relation]] = None
    status: Optional[StatusValue] = None


class FileUrl(BaseModel):
    url: Optional[str] = None


class FileRef(BaseModel):
    """Cover reference: external URL or uploaded file."""

    model_config = ConfigDict(extra="ignore")

    type: Optional[str] = None
    external: Optional[FileUrl] = None
    file: Optional[FileUrl] = None


class NotionPage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    object: str = "page"
    id: str = Field(min_length=1)
    properties: Dict[str, PropertyValue]
    cover: Optional[FileRef] = None
    created_time: str = ""
    last_edited_time: str = ""
    archived: bool = False
    in_trash: bool = False

    def text(self, name: str) -> str:
        """Return the plain text of a ``title`` or ``rich_text`` property."""
        prop = self.properties.get(name)
        if prop is None:
            return ""
        parts = prop.title if prop.title is not None else prop.rich_text
        return "".join(part.plain_text for part in parts or [])

    def date_start(self, name: str = "Date") -> str:
        prop = self.properties.get(name)
        if prop is None or prop.date is None:
            return ""
        return prop.date.start or ""

    def relation_ids(self, name: str) -> List[str]:
        prop = self.properties.get(name)
        if prop is None or not prop.relation:
            return []
        return [rel.id for rel in prop.relation]

    @property
    def slug(self) -> str:
        """The explicit ``Slug`` property verbatim, empty when the record has none.

        Not normalised: detail lookups compare it with Notion's exact-equals filter.
        """
        return self.text("Slug")

    @property
    def tag_ids(self) -> List[str]:
        return self.relation_ids("Tags")

    @property
    def is_trashed(self) -> bool:
        return self.archived or self.in_trash


class Block(BaseModel):
    """A content block; the payload lives under the key named by ``type``."""

    model_config = ConfigDict(extra="allow")

    id: str
    type: str
    has_children: bool = False
    children: List["Block"] = []

    @property
    def payload(self) -> dict:
        data = (self.model_extra or {}).get(self.type)
        return data if isinstance(data, dict) else {}
