"""Split documents into published and excluded sets."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterable, Tuple

from .entities.documents import Document

logger = logging.getLogger(__name__)

DRAFT = "draft"
FUTURE = "future"


@dataclass(frozen=True)
class Partition:
    published: Tuple[Document, ...] = ()
    excluded: Tuple[Document, ...] = ()
    reasons: Dict[str, str] = field(default_factory=dict, hash=False)


def partition(
    documents: Iterable[Document],
    now: datetime,
    *,
    include_future: bool = False,
) -> Partition:
    """
    Partition `documents` against the injected clock `now`.

    Drafts are always excluded. Documents dated strictly after `now` are
    excluded unless `include_future` is set. A naive `now` is taken as UTC.
    Input order is preserved in both sets.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    published = []
    excluded = []
    reasons: Dict[str, str] = {}

    for doc in documents:
        if doc.draft:
            reason = DRAFT
        elif not include_future and doc.timestamp is not None and doc.timestamp > now:
            reason = FUTURE
        else:
            published.append(doc)
            continue

        excluded.append(doc)
        reasons[doc.id] = reason
        logger.debug("Excluding %s (%s)", doc.id, reason)

    return Partition(published=tuple(published), excluded=tuple(excluded), reasons=reasons)
