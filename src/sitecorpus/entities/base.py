# entities/base.py
from __future__ import annotations

import json
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import (
    Any,
    Callable,
    ClassVar,
    Dict,
    Generic,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Tuple,
    TypeVar,
)

T = TypeVar("T")


class Field(Generic[T]):
    """
    Read-only descriptor mapping an attribute to a key in `entity.data`.

    Example:
        title: str = Field("title", default="")
        tags: Tuple[str, ...] = Field("tags", default_factory=tuple, convert=tuple)
    """

    def __init__(
        self,
        key: Optional[str] = None,
        *,
        default: Optional[T] = None,
        default_factory: Optional[Callable[[], T]] = None,
        convert: Optional[Callable[[Any], T]] = None,
    ) -> None:
        self.key = key
        self.default = default
        self.default_factory = default_factory
        self.convert = convert
        self.name: Optional[str] = None

    def __set_name__(self, owner, name: str) -> None:
        if self.key is None:
            self.key = name
        self.name = name

    def __get__(self, instance, owner=None) -> T:
        if instance is None:
            return self

        key = self.key
        assert key is not None

        if key in instance.data and instance.data[key] is not None:
            value = instance.data[key]
            return self.convert(value) if self.convert else value

        if self.default_factory is not None:
            return self.default_factory()

        return self.default

    def __set__(self, instance, value: T) -> None:
        raise AttributeError(f"Field '{self.name}' is read-only")


@dataclass(frozen=True)
class BaseEntity:
    """
    Immutable snapshot of one authored record.

    `data` holds the validated front-matter; `body` the opaque text that
    follows it. Subclasses declare `Field` accessors and the front-matter
    keys they interpret in `RECOGNIZED` (in canonical serialization order).
    """

    id: str
    data: Mapping[str, Any] = field(default_factory=dict, hash=False)
    body: str = field(default="", repr=False)
    source: Optional[str] = field(default=None, compare=False)

    ID_PREFIX: ClassVar[str] = ""
    RECOGNIZED: ClassVar[Tuple[str, ...]] = ()

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError(f"{type(self).__name__} requires a non-empty identifier")
        if not isinstance(self.data, MappingProxyType):
            object.__setattr__(self, "data", MappingProxyType(dict(self.data)))

    # ------------------------------------------------------------------ #
    # Identifier handling
    # ------------------------------------------------------------------ #

    @classmethod
    def normalize_id(cls, ref: str) -> str:
        """Strip slashes and the optional type prefix, e.g. 'author:jane' → 'jane'."""
        ref = ref.strip().strip("/")
        if cls.ID_PREFIX and ref.startswith(cls.ID_PREFIX):
            ref = ref[len(cls.ID_PREFIX):]
        return ref

    @property
    def extra(self) -> Dict[str, Any]:
        """Front-matter keys this record does not interpret, in original order."""
        return {k: v for k, v in self.data.items() if k not in self.RECOGNIZED}

    # ------------------------------------------------------------------ #
    # Representation / display helpers
    # ------------------------------------------------------------------ #

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly record: identifier, source, metadata and body."""
        return {
            "id": self.id,
            "source": self.source,
            "data": {k: _jsonable(v) for k, v in self.data.items()},
            "body": self.body,
        }

    def __str__(self) -> str:
        title = self.data.get("title") or self.data.get("name")
        if title:
            return f"{self.__class__.__name__}(id='{self.id}', title='{title}')"
        return f"{self.__class__.__name__}(id='{self.id}')"

    def show(self) -> None:
        """Pretty-print the full metadata payload."""
        print(json.dumps(self.to_dict()["data"], indent=2, ensure_ascii=False))


def _jsonable(value: Any) -> Any:
    if hasattr(value, "isoformat"):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, Mapping):
        return {str(k): _jsonable(v) for k, v in value.items()}
    return value


TEntity = TypeVar("TEntity", bound=BaseEntity)


class BaseIndex(Generic[TEntity]):
    """
    Read-only, indexable view over a resolved set of records.

    Supports:
      - view[0]            → record by position
      - view[1:10]         → list of records
      - view["id"]         → record by identifier
      - view["author:id"]  → record by prefixed identifier
      - view["text"]       → substring search over identifiers
    """

    ENTITY_CLS: ClassVar[type] = BaseEntity
    NAME: ClassVar[str] = "records"

    def __init__(self, entities: Iterable[TEntity] = ()) -> None:
        self._entities: Tuple[TEntity, ...] = tuple(entities)
        self._by_id: Dict[str, TEntity] = {e.id: e for e in self._entities}

    # ------------------------------------------------------------------ #
    # Python container protocol
    # ------------------------------------------------------------------ #

    def __len__(self) -> int:
        return len(self._entities)

    def __iter__(self) -> Iterator[TEntity]:
        return iter(self._entities)

    def __contains__(self, key: object) -> bool:
        if isinstance(key, str):
            return self.ENTITY_CLS.normalize_id(key) in self._by_id
        return key in self._entities

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BaseIndex):
            return NotImplemented
        return type(self) is type(other) and self._entities == other._entities

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._entities))

    def __getitem__(self, key):
        if isinstance(key, int):
            return self._entities[key]

        if isinstance(key, slice):
            if key.step not in (None, 1):
                raise ValueError("Step other than 1 is not supported for slices.")
            return list(self._entities[key])

        if isinstance(key, str):
            ident = self.ENTITY_CLS.normalize_id(key)

            # exact identifier
            if ident in self._by_id:
                return self._by_id[ident]

            # substring search
            q = ident.lower()
            matches = [e for e in self._entities if q in e.id.lower()]
            if not matches:
                raise KeyError(f"No {self.NAME} matching {key!r}")
            if len(matches) == 1:
                return matches[0]
            return matches

        raise TypeError(f"Unsupported key type: {type(key)!r}")

    def get(self, key: str, default: Optional[TEntity] = None) -> Optional[TEntity]:
        """Exact identifier lookup, no substring search."""
        return self._by_id.get(self.ENTITY_CLS.normalize_id(key), default)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {len(self)} {self.NAME}>"

    # ------------------------------------------------------------------ #
    # Helpers for editor / IPython completion
    # ------------------------------------------------------------------ #

    def ids(self) -> List[str]:
        """Identifiers of all records, in index order."""
        return [e.id for e in self._entities]

    def __dir__(self):
        return list(super().__dir__()) + self.ids()

    def _ipython_key_completions_(self):
        return self.ids()
