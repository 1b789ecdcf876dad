from abc import ABC, abstractmethod
from typing import Any

from docpage.core.helpers import is_empty


class QueryBuilder(ABC):
    """Bounded query returned by DocumentStore.find; chain, then await to_list()."""

    @abstractmethod
    def sort(self, spec: Any) -> "QueryBuilder":
        ...

    @abstractmethod
    def skip(self, n: int) -> "QueryBuilder":
        ...

    @abstractmethod
    def limit(self, n: int) -> "QueryBuilder":
        ...

    @abstractmethod
    def populate(self, spec: Any) -> "QueryBuilder":
        """Resolve the given reference field(s) when executed."""
        ...

    @abstractmethod
    async def to_list(self) -> list[Any]:
        """Execute and return the page's documents."""
        ...


class DocumentStore(ABC):
    name: str = "documents"

    @abstractmethod
    async def count(self, filter: Any) -> int:
        """Number of documents matching filter."""
        ...

    @abstractmethod
    def find(self, filter: Any, projection: Any = None) -> QueryBuilder:
        ...


def normalize_sort(spec: Any) -> list[tuple[str, int]]:
    """Sort spec as (field, direction) pairs.

    Accepts a mapping, a list of pairs or names, or a space separated string
    where a leading '-' means descending.
    """
    if is_empty(spec):
        return []
    if isinstance(spec, str):
        spec = spec.split()
    if isinstance(spec, dict):
        spec = list(spec.items())
    out: list[tuple[str, int]] = []
    for item in spec:
        if isinstance(item, str):
            if item.startswith("-"):
                out.append((item[1:], -1))
            else:
                out.append((item.lstrip("+"), 1))
            continue
        field, direction = item
        if isinstance(direction, str):
            direction = -1 if direction.lower() in ("-1", "desc", "descending") else 1
        out.append((field, -1 if direction < 0 else 1))
    return out


def normalize_populate(spec: Any) -> list[str]:
    """Populate spec as a list of field paths."""
    if is_empty(spec):
        return []
    if isinstance(spec, str):
        return spec.split()
    return [p for p in spec if p]


def normalize_projection(spec: Any) -> dict[str, Any] | None:
    """Projection as a mapping, or None for all fields."""
    if is_empty(spec):
        return None
    if isinstance(spec, str):
        spec = spec.split()
    if isinstance(spec, dict):
        return dict(spec)
    out: dict[str, Any] = {}
    for name in spec:
        if name.startswith("-"):
            out[name[1:]] = 0
        else:
            out[name] = 1
    return out
