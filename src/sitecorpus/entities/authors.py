# entities/authors.py
from typing import Any, List, Mapping, Optional, Tuple

from .base import BaseEntity, BaseIndex, Field


def social_pairs(value: Any) -> Tuple[Tuple[str, str], ...]:
    """
    Normalize `social` front-matter into (platform, url) pairs.

    Accepted shapes:
        social: {github: https://github.com/x, twitter: https://x.com/x}
        social:
          - {platform: github, url: https://github.com/x}
          - {name: twitter, link: https://x.com/x}
    """
    if not value:
        return ()
    if isinstance(value, Mapping):
        return tuple((str(k), str(v)) for k, v in value.items())

    pairs: List[Tuple[str, str]] = []
    for item in value:
        if isinstance(item, Mapping):
            platform = item.get("platform") or item.get("name") or item.get("icon")
            url = item.get("url") or item.get("link")
            if platform and url:
                pairs.append((str(platform), str(url)))
        elif isinstance(item, (list, tuple)) and len(item) == 2:
            pairs.append((str(item[0]), str(item[1])))
    return tuple(pairs)


class Author(BaseEntity):
    """A person referenced by documents through their identifier."""

    ID_PREFIX = "author:"
    RECOGNIZED = ("name", "title", "social", "type", "weight", "url", "draft")

    url: Optional[str] = Field("url")

    @property
    def name(self) -> str:
        return self.data.get("name") or self.data.get("title") or self.id

    @property
    def bio(self) -> str:
        return self.body.strip()

    @property
    def social(self) -> Tuple[Tuple[str, str], ...]:
        return social_pairs(self.data.get("social"))

    def to_dict(self):
        record = super().to_dict()
        record["name"] = self.name
        record["social"] = [list(pair) for pair in self.social]
        return record


class AuthorIndex(BaseIndex[Author]):
    ENTITY_CLS = Author
    NAME = "authors"
