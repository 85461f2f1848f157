from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple


@dataclass(eq=False)
class ContentError(Exception):
    """
    Base content error.

    Every error can be turned into a plain record and back, so a build
    report can be shipped as JSON:
        {
          "code": "document/missing_field",
          "detail": "Missing required field 'title'",
          "path": "posts/hexagonal.md",
          "field": "title",
          "paths": []
        }
    """

    detail: str = ""
    path: Optional[str] = None          # source path of the offending file
    field: Optional[str] = None         # front-matter key, when relevant
    paths: Tuple[str, ...] = ()         # every path involved (duplicates)
    code: Optional[str] = None          # e.g. "document/missing_field"

    CODE = "content/error"

    def __post_init__(self) -> None:
        if self.code is None:
            self.code = self.CODE
        self.paths = tuple(self.paths)
        msg = self.detail or self.code
        if self.path:
            msg = f"{self.path}: {msg}"
        super().__init__(msg)

    def __eq__(self, other: object) -> bool:
        if type(self) is not type(other):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self) -> int:
        return hash((type(self), self.code, self.detail, self.path, self.field, self.paths))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "detail": self.detail,
            "path": self.path,
            "field": self.field,
            "paths": list(self.paths),
        }


# -------------------------------------------------
# Per-document errors
# -------------------------------------------------

@dataclass(eq=False)
class FrontMatterError(ContentError):
    CODE = "document/frontmatter"


@dataclass(eq=False)
class MissingFieldError(ContentError):
    CODE = "document/missing_field"


@dataclass(eq=False)
class InvalidDateError(ContentError):
    CODE = "document/invalid_date"


@dataclass(eq=False)
class UnreadableSourceError(ContentError):
    CODE = "source/unreadable"


# -------------------------------------------------
# Cross-document errors
# -------------------------------------------------

@dataclass(eq=False)
class DanglingReferenceError(ContentError):
    target: Optional[str] = None        # the identifier that did not resolve

    CODE = "reference/dangling"

    def to_dict(self) -> Dict[str, Any]:
        record = super().to_dict()
        record["target"] = self.target
        return record


@dataclass(eq=False)
class DuplicateIdentifierError(ContentError):
    identifier: Optional[str] = None

    CODE = "identifier/duplicate"

    def to_dict(self) -> Dict[str, Any]:
        record = super().to_dict()
        record["identifier"] = self.identifier
        return record


class BuildError(Exception):
    """Raised by `BuildReport.raise_for_errors` when a build reported errors."""

    def __init__(self, errors: List[ContentError]) -> None:
        self.errors = list(errors)
        noun = "error" if len(self.errors) == 1 else "errors"
        lines = [f"Build failed with {len(self.errors)} {noun}:"]
        lines.extend(f"  - {e}" for e in self.errors)
        super().__init__("\n".join(lines))


# -------------------------------------------------
# Remote source errors
# -------------------------------------------------

@dataclass(eq=False)
class SourceError(Exception):
    """HTTP failure while fetching content from a remote source."""

    status_code: int
    detail: str = ""
    url: Optional[str] = None

    def __post_init__(self) -> None:
        msg = self.detail or f"HTTP {self.status_code}"
        if self.url:
            msg = f"{msg} ({self.url})"
        super().__init__(msg)

    @property
    def retryable(self) -> bool:
        """Whether a retry might make sense."""
        return self.status_code == 429 or 500 <= self.status_code < 600


class AuthenticationError(SourceError):
    pass


class AuthorizationError(SourceError):
    pass


class NotFoundError(SourceError):
    pass


class RateLimitError(SourceError):
    pass


class ServerError(SourceError):
    pass


# -------------------------------------------------
# Mapping helpers
# -------------------------------------------------

# Map record `code` → content exception
_CODE_TO_EXCEPTION = {
    cls.CODE: cls
    for cls in (
        ContentError,
        FrontMatterError,
        MissingFieldError,
        InvalidDateError,
        UnreadableSourceError,
        DanglingReferenceError,
        DuplicateIdentifierError,
    )
}
_CODE_TO_EXCEPTION["document/near-duplicate"] = DuplicateIdentifierError

_STATUS_TO_EXCEPTION = {
    401: AuthenticationError,
    403: AuthorizationError,
    404: NotFoundError,
    429: RateLimitError,
}


def _pick_exception_class(code: Optional[str]) -> type[ContentError]:
    if code and code in _CODE_TO_EXCEPTION:
        return _CODE_TO_EXCEPTION[code]
    if code and code.startswith("document/"):
        return FrontMatterError
    return ContentError


def error_from_record(record: Dict[str, Any]) -> ContentError:
    """
    Rebuild a concrete ContentError subclass from a record produced by
    `ContentError.to_dict()`.

    Unknown codes fall back to the generic ContentError (or FrontMatterError
    for "document/..." codes) and keep the original code.
    """
    code = record.get("code")
    exc_cls = _pick_exception_class(code)

    kwargs: Dict[str, Any] = {
        "detail": record.get("detail") or "",
        "path": record.get("path"),
        "field": record.get("field"),
        "paths": tuple(record.get("paths") or ()),
        "code": code,
    }
    if exc_cls is DanglingReferenceError:
        kwargs["target"] = record.get("target")
    if exc_cls is DuplicateIdentifierError:
        kwargs["identifier"] = record.get("identifier")
    return exc_cls(**kwargs)


def raise_for_source_error(response) -> None:
    """
    Inspect a `requests.Response` and raise a suitable SourceError subclass
    if the content host reported a failure. 2xx/3xx responses return
    silently.
    """
    status = response.status_code
    if status < 400:
        return

    detail = (response.text or "").strip()[:200] or f"HTTP {status}"
    url = getattr(response, "url", None)

    if status in _STATUS_TO_EXCEPTION:
        raise _STATUS_TO_EXCEPTION[status](status_code=status, detail=detail, url=url)
    if status >= 500:
        raise ServerError(status_code=status, detail=detail, url=url)
    raise SourceError(status_code=status, detail=detail, url=url)
