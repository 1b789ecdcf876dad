"""In-memory store over a list of dicts. Understands a small subset of MongoDB filters."""

import copy
from typing import Any, Callable, Mapping

from docpage.core.helpers import nested_path
from docpage.store.base import (
    DocumentStore,
    QueryBuilder,
    normalize_populate,
    normalize_projection,
    normalize_sort,
)

_MISSING = object()


def _get(doc: Mapping[str, Any], path: str) -> Any:
    node: Any = doc
    for key in path.split("."):
        if not isinstance(node, Mapping) or key not in node:
            return _MISSING
        node = node[key]
    return node


def _sort_key(field: str) -> Callable[[Mapping[str, Any]], tuple[bool, Any]]:
    # missing and null rank together, below every other value
    def key(doc: Mapping[str, Any]) -> tuple[bool, Any]:
        value = _get(doc, field)
        if value is _MISSING or value is None:
            return (False, 0)
        return (True, value)
    return key


def _cmp(op: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    def check(value: Any, arg: Any) -> bool:
        if value is _MISSING or value is None:
            return False
        try:
            return op(value, arg)
        except TypeError:
            return False
    return check


OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "$eq": lambda v, a: v == a,
    "$ne": lambda v, a: v != a,
    "$gt": _cmp(lambda v, a: v > a),
    "$gte": _cmp(lambda v, a: v >= a),
    "$lt": _cmp(lambda v, a: v < a),
    "$lte": _cmp(lambda v, a: v <= a),
    "$in": lambda v, a: v in a,
    "$nin": lambda v, a: v not in a,
    "$exists": lambda v, a: (v is not _MISSING) == bool(a),
}


def matches(doc: Mapping[str, Any], filter: Mapping[str, Any] | None) -> bool:
    for key, cond in (filter or {}).items():
        if key == "$and":
            if not all(matches(doc, sub) for sub in cond):
                return False
            continue
        if key == "$or":
            if not any(matches(doc, sub) for sub in cond):
                return False
            continue
        value = _get(doc, key)
        if isinstance(cond, Mapping) and cond and all(k.startswith("$") for k in cond):
            for op, arg in cond.items():
                if op not in OPERATORS:
                    raise ValueError(f"unsupported operator {op}")
                if not OPERATORS[op](value, arg):
                    return False
        elif value is _MISSING or value != cond:
            return False
    return True


def project(doc: dict[str, Any], projection: dict[str, Any] | None) -> dict[str, Any]:
    if not projection:
        return doc
    include = {k for k, v in projection.items() if v and k != "_id"}
    if include:
        out = {k: doc[k] for k in include if k in doc}
        if projection.get("_id", 1) and "_id" in doc:
            out["_id"] = doc["_id"]
        return out
    return {k: v for k, v in doc.items() if projection.get(k, 1)}


class MemoryQuery(QueryBuilder):
    def __init__(self, store: "MemoryStore", filter: Any, projection: Any = None) -> None:
        self._store = store
        self._filter = filter or {}
        self._projection = normalize_projection(projection)
        self._sort: list[tuple[str, int]] = []
        self._skip = 0
        self._limit = 0
        self._populate: list[str] = []

    def sort(self, spec: Any) -> "MemoryQuery":
        self._sort = normalize_sort(spec)
        return self

    def skip(self, n: int) -> "MemoryQuery":
        self._skip = n
        return self

    def limit(self, n: int) -> "MemoryQuery":
        self._limit = n
        return self

    def populate(self, spec: Any) -> "MemoryQuery":
        self._populate = normalize_populate(spec)
        return self

    async def to_list(self) -> list[dict[str, Any]]:
        docs = [d for d in self._store.docs if matches(d, self._filter)]
        # stable sorts applied last key first
        for field, direction in reversed(self._sort):
            docs.sort(key=_sort_key(field), reverse=direction < 0)
        docs = docs[self._skip:]
        if self._limit:
            docs = docs[: self._limit]
        docs = [project(copy.deepcopy(d), self._projection) for d in docs]
        for path in self._populate:
            self._store.populate_path(docs, path)
        return docs


class MemoryStore(DocumentStore):
    """``refs`` maps a populate path to the MemoryStore its ids point into."""

    def __init__(
        self,
        docs: list[dict[str, Any]] | None = None,
        refs: Mapping[str, "MemoryStore"] | None = None,
        name: str = "memory",
    ) -> None:
        self.docs = list(docs or [])
        self.refs = dict(refs or {})
        self.name = name

    def insert(self, doc: dict[str, Any]) -> dict[str, Any]:
        doc.setdefault("_id", len(self.docs) + 1)
        self.docs.append(doc)
        return doc

    async def count(self, filter: Any) -> int:
        return sum(1 for d in self.docs if matches(d, filter))

    def find(self, filter: Any, projection: Any = None) -> MemoryQuery:
        return MemoryQuery(self, filter, projection)

    def populate_path(self, docs: list[dict[str, Any]], path: str) -> None:
        target = self.refs.get(path)
        if target is None:
            return
        by_id = {d["_id"]: d for d in target.docs}
        for doc in docs:
            value = nested_path(doc, path)
            if isinstance(value, list):
                nested_path(doc, path, [copy.deepcopy(by_id[v]) for v in value if v in by_id])
            elif value is not None:
                nested_path(doc, path, copy.deepcopy(by_id.get(value)))
