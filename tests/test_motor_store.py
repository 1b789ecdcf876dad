"""MotorStore / BeanieStore against a live MongoDB; skipped when none is reachable."""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from beanie import Document, Link
from pymongo.errors import PyMongoError

from docpage import install_pagination
from docpage.core.config import get_settings
from docpage.db.init import get_client, init_db
from docpage.store.motor import MotorStore

pytestmark = pytest.mark.asyncio


class PaginateFoo(Document):
    seq: int

    class Settings:
        name = "paginate_foo"


class PaginateBar(Document):
    seq: int
    name: str = ""
    foo: Link[PaginateFoo] | None = None

    class Settings:
        name = "paginate_bar"


@pytest_asyncio.fixture
async def database() -> AsyncGenerator:
    client = get_client(serverSelectionTimeoutMS=500)
    try:
        await client.admin.command("ping")
    except PyMongoError:
        client.close()
        pytest.skip("MongoDB not reachable")
    db = await init_db([PaginateFoo, PaginateBar], client=client)
    await db.drop_collection("paginate_foo")
    await db.drop_collection("paginate_bar")
    foos = [PaginateFoo(seq=x) for x in range(1, 56)]
    await PaginateFoo.insert_many(foos)
    last_foo = await PaginateFoo.find_one(PaginateFoo.seq == 55)
    await PaginateBar.insert_many([PaginateBar(seq=x, name="foobar", foo=last_foo) for x in range(1, 56)])
    yield db
    await client.drop_database(get_settings().mongodb_db_name)
    client.close()


async def test_motor_store_paginates_and_populates(database):
    store = MotorStore(database["paginate_bar"], refs={"foo": "paginate_foo"})
    count = await store.count({"seq": {"$gt": 10}})
    assert count == 45
    docs = await (
        store.find({"seq": {"$gt": 10}}, {"seq": 1, "foo": 1})
        .sort({"seq": -1})
        .skip(5)
        .limit(5)
        .populate("foo")
        .to_list()
    )
    assert [d["seq"] for d in docs] == [50, 49, 48, 47, 46]
    assert "name" not in docs[0]
    assert docs[0]["foo"]["seq"] == 55


async def test_installed_on_beanie_document(database):
    install_pagination(
        PaginateBar,
        default_limit=20,
        default_query={"seq": {"$gt": 10}},
        default_fields={"seq": 1, "foo": 1},
        default_sort={"seq": 1},
        default_populate="foo",
        remember=True,
    )
    first = await PaginateBar.paginate()
    assert (first.count, first.pages, first.page, len(first.docs)) == (45, 3, 1, 20)
    assert first.docs[0]["seq"] == 11

    await PaginateBar.paginate({"page": 2, "limit": 5})
    remembered = await PaginateBar.paginate({"page": 7})
    assert (remembered.pages, remembered.page, len(remembered.docs)) == (9, 7, 5)
    assert remembered.docs[0]["foo"]["seq"] == 55

    last = await PaginateBar.last_page()
    assert (last.page, len(last.docs)) == (9, 5)
