import pytest

from docpage.store.memory import MemoryStore, matches, project


def _store():
    authors = MemoryStore([{"_id": "a1", "name": "Ann"}, {"_id": "a2", "name": "Bo"}], name="authors")
    return MemoryStore(
        [
            {"_id": 1, "n": 3, "tag": "x", "author": "a1", "meta": {"editors": ["a1", "a2"]}},
            {"_id": 2, "n": 1, "tag": "y", "author": "a2", "meta": {"editors": []}},
            {"_id": 3, "n": 2, "tag": "x", "author": "gone"},
        ],
        refs={"author": authors, "meta.editors": authors},
        name="posts",
    )


@pytest.mark.asyncio
async def test_count_with_operators():
    store = _store()
    assert await store.count({}) == 3
    assert await store.count({"tag": "x"}) == 2
    assert await store.count({"n": {"$gte": 2, "$lt": 3}}) == 1
    assert await store.count({"tag": {"$in": ["y"]}}) == 1
    assert await store.count({"meta": {"$exists": False}}) == 1
    assert await store.count({"$or": [{"n": 1}, {"n": 2}]}) == 2


@pytest.mark.asyncio
async def test_find_sort_skip_limit():
    docs = await _store().find({}).sort("-n").skip(1).limit(1).to_list()
    assert [d["_id"] for d in docs] == [3]


@pytest.mark.asyncio
async def test_find_populates_single_and_nested_lists():
    docs = await _store().find({}).sort({"_id": 1}).populate(["author", "meta.editors"]).to_list()
    assert docs[0]["author"]["name"] == "Ann"
    assert [e["name"] for e in docs[0]["meta"]["editors"]] == ["Ann", "Bo"]
    assert docs[2]["author"] is None


@pytest.mark.asyncio
async def test_find_does_not_mutate_stored_docs():
    store = _store()
    await store.find({}).populate("author").to_list()
    assert store.docs[0]["author"] == "a1"


def test_project_inclusive_and_exclusive():
    doc = {"_id": 1, "a": 1, "b": 2}
    assert project(dict(doc), {"a": 1}) == {"_id": 1, "a": 1}
    assert project(dict(doc), {"a": 1, "_id": 0}) == {"a": 1}
    assert project(dict(doc), {"b": 0}) == {"_id": 1, "a": 1}


def test_unknown_operator_raises():
    with pytest.raises(ValueError):
        matches({"a": 1}, {"a": {"$regex": "x"}})


@pytest.mark.asyncio
async def test_sort_ranks_null_with_missing():
    store = MemoryStore([{"_id": 1, "n": 2}, {"_id": 2, "n": None}, {"_id": 3}, {"_id": 4, "n": 1}])
    ascending = await store.find({}).sort({"n": 1}).to_list()
    assert [d["_id"] for d in ascending][2:] == [4, 1]
    descending = await store.find({}).sort({"n": -1}).to_list()
    assert [d["_id"] for d in descending][:2] == [1, 4]
