"""sitecorpus - A small content model for front-matter document corpora: parse, validate, filter and resolve."""

from .build import BuildReport, build
from .client import Credentials, RemoteSource
from .config import BuildConfig
from .drafts import Partition, partition
from .entities.authors import Author
from .entities.collections import Collection
from .entities.documents import Document
from .frontmatter import dump, parse_author, parse_collection, parse_document
from .loader import FileSystemSource, load
from .resolver import Resolution, resolve

__all__ = [
    "Author",
    "BuildConfig",
    "BuildReport",
    "Collection",
    "Credentials",
    "Document",
    "FileSystemSource",
    "Partition",
    "RemoteSource",
    "Resolution",
    "build",
    "dump",
    "load",
    "parse_author",
    "parse_collection",
    "parse_document",
    "partition",
    "resolve",
]
__version__ = "0.1.0"
