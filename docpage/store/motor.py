"""Motor-backed store: count_documents plus a cursor with manual population."""

from typing import Any, Mapping

from bson import DBRef
from motor.motor_asyncio import AsyncIOMotorCollection

from docpage.core.helpers import nested_path
from docpage.core.logging import get_logger
from docpage.store.base import (
    DocumentStore,
    QueryBuilder,
    normalize_populate,
    normalize_projection,
    normalize_sort,
)

log = get_logger(__name__)


def _ref_id(value: Any) -> Any:
    if isinstance(value, DBRef):
        return value.id
    if isinstance(value, Mapping):
        return value.get("$id", value.get("_id"))
    return value


class MotorQuery(QueryBuilder):
    def __init__(self, store: "MotorStore", filter: Any, projection: Any = None) -> None:
        self._store = store
        self._filter = filter or {}
        self._projection = normalize_projection(projection)
        self._sort: list[tuple[str, int]] = []
        self._skip = 0
        self._limit = 0
        self._populate: list[str] = []

    def sort(self, spec: Any) -> "MotorQuery":
        self._sort = normalize_sort(spec)
        return self

    def skip(self, n: int) -> "MotorQuery":
        self._skip = n
        return self

    def limit(self, n: int) -> "MotorQuery":
        self._limit = n
        return self

    def populate(self, spec: Any) -> "MotorQuery":
        self._populate = normalize_populate(spec)
        return self

    async def to_list(self) -> list[dict[str, Any]]:
        cursor = self._store.get_collection().find(self._filter, self._projection)
        if self._sort:
            cursor = cursor.sort(self._sort)
        if self._skip:
            cursor = cursor.skip(self._skip)
        if self._limit:
            cursor = cursor.limit(self._limit)
        docs = await cursor.to_list(length=None)
        for path in self._populate:
            await self._store.populate_path(docs, path)
        return docs


class MotorStore(DocumentStore):
    """Store over a motor collection.

    ``refs`` maps a populate path to the collection (or collection name in the
    same database) its ids point into. Values may be ObjectIds, DBRefs or lists
    of either.
    """

    def __init__(
        self,
        collection: AsyncIOMotorCollection,
        refs: Mapping[str, AsyncIOMotorCollection | str] | None = None,
        name: str | None = None,
    ) -> None:
        self._collection = collection
        self._refs = dict(refs or {})
        self.name = name or collection.name

    def get_collection(self) -> AsyncIOMotorCollection:
        return self._collection

    def get_refs(self) -> dict[str, AsyncIOMotorCollection | str]:
        return self._refs

    async def count(self, filter: Any) -> int:
        return await self.get_collection().count_documents(filter or {})

    def find(self, filter: Any, projection: Any = None) -> MotorQuery:
        return MotorQuery(self, filter, projection)

    async def populate_path(self, docs: list[dict[str, Any]], path: str) -> None:
        target = self.get_refs().get(path)
        if target is None:
            log.debug("populate_skipped", collection=self.name, path=path)
            return
        if isinstance(target, str):
            target = self.get_collection().database[target]

        ids = set()
        for doc in docs:
            value = nested_path(doc, path)
            for ref in value if isinstance(value, list) else [value]:
                ref_id = _ref_id(ref)
                if ref_id is not None:
                    ids.add(ref_id)
        if not ids:
            return

        found = {d["_id"]: d for d in await target.find({"_id": {"$in": list(ids)}}).to_list(length=None)}
        for doc in docs:
            value = nested_path(doc, path)
            if isinstance(value, list):
                resolved = [found[_ref_id(v)] for v in value if _ref_id(v) in found]
                nested_path(doc, path, resolved)
            elif value is not None:
                nested_path(doc, path, found.get(_ref_id(value)))
