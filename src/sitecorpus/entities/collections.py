# entities/collections.py
from typing import Optional, Tuple

from .base import BaseEntity, BaseIndex, Field

MEMBER_KEYS = ("members", "chapters", "pages")


class Collection(BaseEntity):
    """
    A series or tutorial: a named grouping of documents.

    Members are either declared explicitly (ordered) under one of
    MEMBER_KEYS, or implicit: documents whose `series` names this
    collection, or that share the collection's `category` / `tag`.
    """

    ID_PREFIX = "series:"
    RECOGNIZED = ("title", "summary", "type", "weight", "url", "draft", "category", "tag") + MEMBER_KEYS

    title: str = Field("title", default="")
    summary: Optional[str] = Field("summary")
    url: Optional[str] = Field("url")
    category: Optional[str] = Field("category")
    tag: Optional[str] = Field("tag")

    @property
    def members(self) -> Tuple[str, ...]:
        for key in MEMBER_KEYS:
            value = self.data.get(key)
            if value:
                return tuple(str(v).strip("/") for v in value)
        return ()

    @property
    def ordered(self) -> bool:
        return bool(self.members)

    def matches(self, document) -> bool:
        """Whether `document` belongs here implicitly."""
        if document.series and self.normalize_id(document.series) == self.id:
            return True
        if self.category and self.category in document.categories:
            return True
        if self.tag and self.tag in document.tags:
            return True
        return False


class CollectionIndex(BaseIndex[Collection]):
    ENTITY_CLS = Collection
    NAME = "collections"
