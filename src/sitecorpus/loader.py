"""
Reading a corpus from a content source.

A source is any object with two methods:

    paths() -> list of content paths, relative, posix-style, sorted
    read(path) -> the raw text of one file

`FileSystemSource` reads a local directory; `client.RemoteSource` reads a
corpus published on an HTTP host.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import List, Optional, Sequence, Tuple, Union

import requests

from .config import BuildConfig
from .entities.authors import Author
from .entities.collections import Collection
from .entities.documents import Document
from .exceptions import ContentError, SourceError, UnreadableSourceError
from .frontmatter import parse_author, parse_collection, parse_document, read_header

logger = logging.getLogger(__name__)

INDEX_NAMES = {"index", "_index"}

Record = Union[Document, Author, Collection]


class FileSystemSource:
    """Content files below a local directory."""

    def __init__(self, root: Union[str, Path], extensions: Sequence[str] = (".md", ".markdown")) -> None:
        self.root = Path(root)
        self.extensions = tuple(e.lower() for e in extensions)

    def paths(self) -> List[str]:
        if not self.root.is_dir():
            raise FileNotFoundError(f"Content directory not found: {self.root}")
        found = [
            p.relative_to(self.root).as_posix()
            for p in self.root.rglob("*")
            if p.is_file() and p.suffix.lower() in self.extensions
        ]
        return sorted(found)

    def read(self, path: str) -> str:
        return (self.root / path).read_text(encoding="utf-8")

    def __repr__(self) -> str:
        return f"<FileSystemSource root='{self.root}'>"


@dataclass(frozen=True)
class Corpus:
    """Everything read from a source, before filtering and resolution."""

    documents: Tuple[Document, ...] = ()
    authors: Tuple[Author, ...] = ()
    collections: Tuple[Collection, ...] = ()
    errors: Tuple[ContentError, ...] = ()


def identifier_for(path: str) -> str:
    """
    Document identifier for a content path.

        posts/hexagonal.md          → posts/hexagonal
        tutorials/junit5/_index.md  → tutorials/junit5
        _index.md                   → index
    """
    pure = PurePosixPath(path.replace("\\", "/").strip("/"))
    if pure.stem in INDEX_NAMES:
        parent = pure.parent.as_posix()
        return "index" if parent in ("", ".") else parent
    return pure.with_suffix("").as_posix()


def _kind(ident: str, header: dict, config: BuildConfig) -> Optional[str]:
    page_type = str(header.get("type") or "").lower()
    if page_type in config.author_types:
        return "author"
    if page_type in config.series_types:
        return "collection"

    section = ident.split("/", 1)[0]
    if section in config.author_sections:
        # the section's own list page is not a profile
        if ident == section:
            return None
        return "author"
    return "document"


def parse_entry(path: str, text: str, config: BuildConfig) -> Optional[Record]:
    """Parse one file into a Document, Author or Collection (None when skipped)."""
    ident = identifier_for(path)
    header = read_header(text, path)
    kind = _kind(ident, header, config)

    if kind is None:
        logger.debug("Skipping section page %s", path)
        return None
    if kind == "author":
        return parse_author(text, ident.rsplit("/", 1)[-1], source=path)
    if kind == "collection":
        return parse_collection(text, ident, source=path)
    return parse_document(text, ident, source=path)


def _load_one(source, path: str, config: BuildConfig):
    try:
        text = source.read(path)
    except UnicodeDecodeError as exc:
        return UnreadableSourceError(detail=f"Not valid UTF-8: {exc.reason}", path=path)
    except (OSError, SourceError, requests.RequestException) as exc:
        return UnreadableSourceError(detail=str(exc), path=path)

    try:
        return parse_entry(path, text, config)
    except ContentError as exc:
        return exc


def load(source, config: Optional[BuildConfig] = None) -> Corpus:
    """
    Read and parse every file of `source`.

    Errors in one file are collected and never stop the others from being
    parsed. With `config.max_workers > 1` files are read and parsed on a
    thread pool; results keep path order either way.
    """
    config = config or BuildConfig()
    paths = source.paths()
    logger.info("Loading %d files from %r", len(paths), source)

    if config.max_workers > 1:
        with ThreadPoolExecutor(max_workers=config.max_workers) as pool:
            results = list(pool.map(lambda p: _load_one(source, p, config), paths))
    else:
        results = [_load_one(source, p, config) for p in paths]

    documents, authors, collections, errors = [], [], [], []
    for result in results:
        if isinstance(result, ContentError):
            logger.warning("%s", result)
            errors.append(result)
        elif isinstance(result, Author):
            authors.append(result)
        elif isinstance(result, Collection):
            collections.append(result)
        elif isinstance(result, Document):
            documents.append(result)

    return Corpus(
        documents=tuple(documents),
        authors=tuple(authors),
        collections=tuple(collections),
        errors=tuple(errors),
    )
