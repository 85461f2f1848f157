# entities/documents.py
from datetime import date, datetime, time, timezone
from typing import Optional, Tuple

from .base import BaseEntity, BaseIndex, Field


def as_utc(value) -> Optional[datetime]:
    """Normalize a front-matter date to an aware UTC datetime."""
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    raise TypeError(f"Not a date: {value!r}")


class Document(BaseEntity):
    """
    One article or page.

    All attributes here are thin accessors over `self.data`.
    """

    RECOGNIZED = (
        "title",
        "date",
        "author",
        "authors",
        "summary",
        "categories",
        "tags",
        "draft",
        "series",
        "type",
        "weight",
        "url",
    )

    # Core metadata
    title: str = Field("title", default="")
    date = Field("date")
    summary: Optional[str] = Field("summary")
    draft: bool = Field("draft", default=False)
    type: Optional[str] = Field("type")
    weight: Optional[int] = Field("weight")
    url: Optional[str] = Field("url")

    # Grouping
    series: Optional[str] = Field("series")
    categories: Tuple[str, ...] = Field("categories", default_factory=tuple, convert=tuple)
    tags: Tuple[str, ...] = Field("tags", default_factory=tuple, convert=tuple)

    @property
    def authors(self) -> Tuple[str, ...]:
        """Author identifiers from `authors`, falling back to `author`."""
        value = self.data.get("authors")
        if value is None:
            value = self.data.get("author")
        if value is None:
            return ()
        if isinstance(value, str):
            return (value,)
        return tuple(value)

    @property
    def timestamp(self) -> Optional[datetime]:
        """The publish date as an aware UTC datetime, or None for undated drafts."""
        return as_utc(self.date)

    def to_dict(self):
        record = super().to_dict()
        record["authors"] = list(self.authors)
        record["timestamp"] = self.timestamp.isoformat() if self.timestamp else None
        return record

    def sort_key(self) -> Tuple[datetime, str]:
        ts = self.timestamp or datetime.min.replace(tzinfo=timezone.utc)
        return (ts, self.id)


class DocumentIndex(BaseIndex[Document]):
    ENTITY_CLS = Document
    NAME = "documents"
