"""
Site assembly: load → filter → resolve.

    >>> report = build("content", now=datetime.now(timezone.utc))
    >>> report.ok
    True
    >>> [d.id for d in report.site.by_author["tom"]]
    ['posts/junit5', 'posts/hexagonal']
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from .config import BuildConfig
from .drafts import partition
from .entities.documents import Document
from .exceptions import BuildError, ContentError
from .loader import FileSystemSource, load
from .resolver import Resolution, resolve

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildReport:
    """
    Outcome of one build.

    `site` holds only published documents. `errors` covers the whole
    corpus: per-file parse errors first, then integrity errors.
    """

    site: Resolution = field(default_factory=Resolution)
    excluded: Tuple[Document, ...] = ()
    reasons: Mapping[str, str] = field(default_factory=dict, hash=False)
    errors: Tuple[ContentError, ...] = ()
    warnings: Tuple[ContentError, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors

    def raise_for_errors(self) -> None:
        """Raise BuildError if the build reported any error."""
        if self.errors:
            raise BuildError(list(self.errors))

    def to_records(self) -> Dict[str, Any]:
        """JSON-serializable snapshot for an external renderer."""
        site = self.site

        def ids(index: Mapping[str, Tuple[Document, ...]]) -> Dict[str, list]:
            return {key: [d.id for d in docs] for key, docs in index.items()}

        return {
            "ok": self.ok,
            "documents": [d.to_dict() for d in site.documents],
            "authors": [a.to_dict() for a in site.authors],
            "collections": [c.to_dict() for c in site.collections],
            "by_author": ids(site.by_author),
            "by_series": ids(site.by_series),
            "by_category": ids(site.by_category),
            "by_tag": ids(site.by_tag),
            "excluded": [
                {"id": d.id, "reason": self.reasons.get(d.id)} for d in self.excluded
            ],
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
        }


def build(
    source: Union[str, Path, Any, None] = None,
    *,
    now: datetime,
    config: Optional[BuildConfig] = None,
) -> BuildReport:
    """
    Build the content model from `source`.

    `source` is a directory path or any object with `paths()` / `read()`;
    it defaults to `config.content_dir`. The clock is injected through
    `now` so the future-dated policy is reproducible.
    """
    config = config or BuildConfig()
    if source is None:
        source = config.content_dir
    if isinstance(source, (str, Path)):
        source = FileSystemSource(source, config.extensions)

    corpus = load(source, config)

    # integrity is checked against everything that was authored
    full = resolve(corpus.documents, corpus.authors, corpus.collections)

    split = partition(corpus.documents, now, include_future=config.include_future)
    site = resolve(
        split.published,
        corpus.authors,
        corpus.collections,
        known_ids=[d.id for d in split.excluded],
    )

    errors = corpus.errors + full.errors
    if errors:
        logger.warning("Build reported %d errors", len(errors))

    return BuildReport(
        site=site,
        excluded=split.excluded,
        reasons=split.reasons,
        errors=errors,
        warnings=full.warnings,
    )
