"""
Front-matter splitting, validation and re-serialization.

A document looks like:

    ---
    title: Hexagonal Architecture with Java and Spring
    date: 2019-11-03
    authors: [tom]
    categories: [Software Craft]
    ---

    Body text, left untouched.

The header is parsed with PyYAML; everything here only validates the
resulting mapping and turns it into an immutable record.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .entities.authors import Author
from .entities.base import BaseEntity
from .entities.collections import MEMBER_KEYS, Collection
from .entities.documents import Document
from .exceptions import FrontMatterError, InvalidDateError, MissingFieldError

DELIMITER = "---"

_TRUE = {"true", "yes", "on"}
_FALSE = {"false", "no", "off"}


# ------------------------------------------------------------------ #
# Splitting
# ------------------------------------------------------------------ #


def split(text: str, path: Optional[str] = None) -> Tuple[str, str]:
    """
    Split raw text into (header, body).

    The header must open on the first line and be closed by a second
    delimiter line. The body is everything after the closing line.
    """
    if text.startswith("\ufeff"):
        text = text[1:]
    text = text.replace("\r\n", "\n")

    lines = text.split("\n")
    if not lines or lines[0].rstrip() != DELIMITER:
        raise FrontMatterError(detail="Document has no front-matter header", path=path)

    for i in range(1, len(lines)):
        if lines[i].rstrip() == DELIMITER:
            header = "\n".join(lines[1:i])
            body = "\n".join(lines[i + 1:])
            return header, body

    raise FrontMatterError(detail="Front-matter header is not terminated", path=path)


def _load_header(header: str, path: Optional[str]) -> Dict[str, Any]:
    try:
        data = yaml.safe_load(header)
    except yaml.YAMLError as exc:
        raise FrontMatterError(detail=f"Invalid YAML front-matter: {exc}", path=path) from exc
    except ValueError as exc:
        # YAML timestamps that are not real dates, e.g. 2023-02-30
        raise InvalidDateError(detail=f"Malformed timestamp in front-matter: {exc}", path=path) from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise FrontMatterError(
            detail=f"Front-matter must be a mapping, got {type(data).__name__}",
            path=path,
        )
    return {str(k): v for k, v in data.items()}


def read_header(text: str, path: Optional[str] = None) -> Dict[str, Any]:
    """Parsed front-matter mapping, without validation."""
    header, _body = split(text, path)
    return _load_header(header, path)


# ------------------------------------------------------------------ #
# Value coercion
# ------------------------------------------------------------------ #


def parse_date(value: Any, path: Optional[str] = None):
    """Return `value` as a date or datetime, or raise InvalidDateError."""
    if isinstance(value, (date, datetime)):
        return value
    if isinstance(value, str):
        raw = value.strip()
        try:
            if len(raw) == 10:
                return date.fromisoformat(raw)
            return datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            pass
    raise InvalidDateError(detail=f"Malformed date {value!r}", path=path, field="date")


def _as_bool(value: Any, key: str, path: Optional[str]) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in _TRUE | _FALSE:
        return value.strip().lower() in _TRUE
    raise FrontMatterError(detail=f"'{key}' must be a boolean, got {value!r}", path=path, field=key)


def _as_list(value: Any, key: str, path: Optional[str]) -> List[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        items = []
        for item in value:
            if isinstance(item, (dict, list)):
                raise FrontMatterError(
                    detail=f"'{key}' must be a list of strings", path=path, field=key
                )
            items.append(str(item))
        return items
    raise FrontMatterError(detail=f"'{key}' must be a string or a list", path=path, field=key)


def _require_title(data: Dict[str, Any], path: Optional[str], *keys: str) -> None:
    for key in keys:
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            return
        if value is not None and not isinstance(value, str):
            raise FrontMatterError(detail=f"'{key}' must be a string", path=path, field=key)
    raise MissingFieldError(
        detail=f"Missing required field '{keys[0]}'", path=path, field=keys[0]
    )


def _require_identifier(identifier: str, path: Optional[str]) -> None:
    if not identifier or not identifier.strip().strip("/"):
        raise MissingFieldError(detail="Missing document identifier", path=path, field="id")


def _normalize_common(data: Dict[str, Any], path: Optional[str]) -> None:
    if "draft" in data and data["draft"] is not None:
        data["draft"] = _as_bool(data["draft"], "draft", path)
    weight = data.get("weight")
    if weight is not None and (isinstance(weight, bool) or not isinstance(weight, int)):
        raise FrontMatterError(detail=f"'weight' must be an integer, got {weight!r}", path=path, field="weight")


# ------------------------------------------------------------------ #
# Parsing
# ------------------------------------------------------------------ #


def parse_document(text: str, identifier: str, source: Optional[str] = None) -> Document:
    """
    Parse and validate one document.

    Raises FrontMatterError, MissingFieldError or InvalidDateError.
    Author references are not checked here.
    """
    where = source or identifier
    _require_identifier(identifier, where)
    header, body = split(text, where)
    data = _load_header(header, where)

    _require_title(data, where, "title")
    _normalize_common(data, where)

    if data.get("date") is not None:
        data["date"] = parse_date(data["date"], where)
    elif not data.get("draft", False):
        raise MissingFieldError(
            detail="Missing required field 'date' on a published document",
            path=where,
            field="date",
        )

    for key in ("categories", "tags", "authors"):
        if data.get(key) is not None:
            data[key] = _as_list(data[key], key, where)
    if isinstance(data.get("author"), list):
        data["author"] = _as_list(data["author"], "author", where)
    elif data.get("author") is not None and not isinstance(data["author"], str):
        raise FrontMatterError(detail="'author' must be a string or a list", path=where, field="author")
    if data.get("series") is not None and not isinstance(data["series"], str):
        raise FrontMatterError(detail="'series' must be a string", path=where, field="series")

    return Document(id=Document.normalize_id(identifier), data=data, body=body, source=source)


def parse_author(text: str, identifier: str, source: Optional[str] = None) -> Author:
    """Parse an author profile page; needs a `name` or `title`."""
    where = source or identifier
    _require_identifier(identifier, where)
    header, body = split(text, where)
    data = _load_header(header, where)

    _require_title(data, where, "name", "title")
    _normalize_common(data, where)

    social = data.get("social")
    if social is not None and not isinstance(social, (dict, list)):
        raise FrontMatterError(detail="'social' must be a mapping or a list", path=where, field="social")

    return Author(id=Author.normalize_id(identifier), data=data, body=body, source=source)


def parse_collection(text: str, identifier: str, source: Optional[str] = None) -> Collection:
    """Parse a series / tutorial index page; needs a `title`."""
    where = source or identifier
    _require_identifier(identifier, where)
    header, body = split(text, where)
    data = _load_header(header, where)

    _require_title(data, where, "title")
    _normalize_common(data, where)

    for key in MEMBER_KEYS:
        if data.get(key) is not None:
            data[key] = _as_list(data[key], key, where)

    return Collection(id=Collection.normalize_id(identifier), data=data, body=body, source=source)


# ------------------------------------------------------------------ #
# Serialization
# ------------------------------------------------------------------ #


def dump(entity: BaseEntity) -> str:
    """
    Re-serialize a record as front-matter + body.

    Recognized keys come first in canonical order, then the remaining keys
    in their original order.
    """
    ordered: Dict[str, Any] = {}
    for key in entity.RECOGNIZED:
        if key in entity.data:
            ordered[key] = entity.data[key]
    for key, value in entity.data.items():
        if key not in ordered:
            ordered[key] = value

    header = yaml.safe_dump(
        ordered,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    ) if ordered else ""
    return f"{DELIMITER}\n{header}{DELIMITER}\n{entity.body}"
