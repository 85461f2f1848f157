"""
Cross-document resolution.

Builds the author → documents, series → documents and taxonomy indices
from a complete set of parsed records, and collects every integrity problem
(duplicate identifiers, dangling references) instead of stopping at the
first one.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, TypeVar

from .entities.authors import Author, AuthorIndex
from .entities.base import BaseEntity
from .entities.collections import Collection, CollectionIndex
from .entities.documents import Document, DocumentIndex
from .exceptions import ContentError, DanglingReferenceError, DuplicateIdentifierError

logger = logging.getLogger(__name__)

NEAR_DUPLICATE = "document/near-duplicate"

E = TypeVar("E", bound=BaseEntity)


@dataclass(frozen=True)
class Resolution:
    documents: DocumentIndex = field(default_factory=DocumentIndex)
    authors: AuthorIndex = field(default_factory=AuthorIndex)
    collections: CollectionIndex = field(default_factory=CollectionIndex)
    by_author: Mapping[str, Tuple[Document, ...]] = field(default_factory=dict, hash=False)
    by_series: Mapping[str, Tuple[Document, ...]] = field(default_factory=dict, hash=False)
    by_category: Mapping[str, Tuple[Document, ...]] = field(default_factory=dict, hash=False)
    by_tag: Mapping[str, Tuple[Document, ...]] = field(default_factory=dict, hash=False)
    errors: Tuple[ContentError, ...] = ()
    warnings: Tuple[ContentError, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors


# ------------------------------------------------------------------ #
# Ordering helpers
# ------------------------------------------------------------------ #


def newest_first(documents: Iterable[Document]) -> Tuple[Document, ...]:
    """Date descending; equal dates by identifier ascending."""
    by_id = sorted(documents, key=lambda d: d.id)
    return tuple(sorted(by_id, key=lambda d: d.sort_key()[0], reverse=True))


def oldest_first(documents: Iterable[Document]) -> Tuple[Document, ...]:
    """Date ascending; equal dates by identifier ascending."""
    return tuple(sorted(documents, key=lambda d: d.sort_key()))


def _error_key(error: ContentError):
    return (error.code or "", error.path or "", error.field or "", error.detail)


# ------------------------------------------------------------------ #
# Duplicate detection
# ------------------------------------------------------------------ #


def deduplicate(
    entities: Iterable[E], kind: str
) -> Tuple[List[E], List[DuplicateIdentifierError]]:
    """
    Keep one record per identifier.

    Returns the kept records sorted by identifier plus exactly one
    DuplicateIdentifierError per identifier that occurs more than once.
    The first record by source path wins.
    """
    groups: Dict[str, List[E]] = {}
    for entity in entities:
        groups.setdefault(entity.id, []).append(entity)

    kept: List[E] = []
    errors: List[DuplicateIdentifierError] = []
    for ident in sorted(groups):
        group = sorted(groups[ident], key=lambda e: (e.source or "", e.body, repr(sorted(e.data.items()))))
        kept.append(group[0])
        if len(group) > 1:
            paths = tuple(e.source or e.id for e in group)
            errors.append(
                DuplicateIdentifierError(
                    detail=f"{kind} identifier '{ident}' is used by {len(group)} files: {', '.join(paths)}",
                    path=group[0].source,
                    paths=paths,
                    identifier=ident,
                )
            )
            logger.debug("Duplicate %s identifier %s in %s", kind, ident, paths)
    return kept, errors


def _normalized_title(title: str) -> str:
    return re.sub(r"\s+", " ", title).strip().casefold()


def near_duplicates(documents: Sequence[Document]) -> List[DuplicateIdentifierError]:
    """
    Flag documents with different identifiers but the same title.

    These are reported for human review; nothing is merged or dropped.
    """
    groups: Dict[str, List[Document]] = {}
    for doc in documents:
        key = _normalized_title(doc.title)
        if key:
            groups.setdefault(key, []).append(doc)

    warnings = []
    for key in sorted(groups):
        group = sorted(groups[key], key=lambda d: d.id)
        if len(group) < 2:
            continue
        ids = [d.id for d in group]
        warnings.append(
            DuplicateIdentifierError(
                detail=f"Documents {', '.join(ids)} share the title '{group[0].title}'",
                path=group[0].source,
                paths=tuple(d.source or d.id for d in group),
                identifier=group[0].id,
                code=NEAR_DUPLICATE,
            )
        )
    return warnings


# ------------------------------------------------------------------ #
# Resolution
# ------------------------------------------------------------------ #


def resolve(
    documents: Iterable[Document],
    authors: Iterable[Author] = (),
    collections: Iterable[Collection] = (),
    *,
    known_ids: Optional[Iterable[str]] = None,
) -> Resolution:
    """
    Resolve author, series and taxonomy indices.

    `known_ids` names documents that exist in the corpus but are not part
    of `documents` (e.g. drafts filtered out before resolution); series
    members pointing at them are skipped rather than reported as dangling.
    """
    documents = list(documents)
    collections = list(collections)

    # a series index page and a document share one path namespace
    _, errors = deduplicate(documents + collections, "Document")
    docs, _ = deduplicate(documents, "Document")
    series, _ = deduplicate(collections, "Collection")
    people, author_dupes = deduplicate(authors, "Author")
    errors = errors + author_dupes

    doc_by_id = {d.id: d for d in docs}
    author_ids = {a.id for a in people}
    series_ids = {c.id for c in series}
    known = set(doc_by_id) | {Document.normalize_id(i) for i in (known_ids or ())}

    # author → documents
    by_author: Dict[str, List[Document]] = {a.id: [] for a in people}
    for doc in docs:
        seen = set()
        for ref in doc.authors:
            aid = Author.normalize_id(ref)
            if aid in seen:
                continue
            seen.add(aid)
            if aid in author_ids:
                by_author[aid].append(doc)
            else:
                errors.append(
                    DanglingReferenceError(
                        detail=f"Unknown author '{aid}'",
                        path=doc.source or doc.id,
                        field="authors",
                        target=aid,
                    )
                )

        if doc.series is not None:
            sid = Collection.normalize_id(doc.series)
            if sid not in series_ids:
                errors.append(
                    DanglingReferenceError(
                        detail=f"Unknown series '{sid}'",
                        path=doc.source or doc.id,
                        field="series",
                        target=sid,
                    )
                )

    # series → documents
    by_series: Dict[str, Tuple[Document, ...]] = {}
    for coll in series:
        declared: List[Document] = []
        declared_ids = set()
        for ref in coll.members:
            mid = Document.normalize_id(ref)
            if mid in declared_ids:
                continue
            declared_ids.add(mid)
            if mid in doc_by_id:
                declared.append(doc_by_id[mid])
            elif mid not in known:
                errors.append(
                    DanglingReferenceError(
                        detail=f"Unknown member '{mid}' in series '{coll.id}'",
                        path=coll.source or coll.id,
                        field="members",
                        target=mid,
                    )
                )
        implicit = [d for d in docs if d.id not in declared_ids and coll.matches(d)]
        by_series[coll.id] = tuple(declared) + oldest_first(implicit)

    # taxonomies
    by_category: Dict[str, List[Document]] = {}
    by_tag: Dict[str, List[Document]] = {}
    for doc in docs:
        for term in dict.fromkeys(doc.categories):
            by_category.setdefault(term, []).append(doc)
        for term in dict.fromkeys(doc.tags):
            by_tag.setdefault(term, []).append(doc)

    errors.sort(key=_error_key)
    warnings = near_duplicates(docs)

    logger.info(
        "Resolved %d documents, %d authors, %d collections (%d errors, %d warnings)",
        len(docs), len(people), len(series), len(errors), len(warnings),
    )

    return Resolution(
        documents=DocumentIndex(docs),
        authors=AuthorIndex(people),
        collections=CollectionIndex(series),
        by_author={k: newest_first(v) for k, v in sorted(by_author.items())},
        by_series=dict(sorted(by_series.items())),
        by_category={k: newest_first(v) for k, v in sorted(by_category.items())},
        by_tag={k: newest_first(v) for k, v in sorted(by_tag.items())},
        errors=tuple(errors),
        warnings=tuple(warnings),
    )
