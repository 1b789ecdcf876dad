import os

import pytest

# Use test DB
os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017")
os.environ.setdefault("MONGODB_DB_NAME", "docpage_test")

from docpage.core.config import get_settings  # noqa: E402
from docpage.core.logging import configure_logging  # noqa: E402
from docpage.store.memory import MemoryStore  # noqa: E402

configure_logging(debug=True)


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def foo_store() -> MemoryStore:
    """55 documents with count 1..55."""
    store = MemoryStore(name="paginate_foo")
    for x in range(1, 56):
        store.insert({"count": x})
    return store


@pytest.fixture
def bar_store(foo_store: MemoryStore) -> MemoryStore:
    """55 documents referencing the last foo document."""
    last_foo = foo_store.docs[-1]["_id"]
    store = MemoryStore(name="paginate_bar", refs={"foo": foo_store})
    for x in range(1, 56):
        store.insert({"count": x, "name": "foobar", "foo": last_foo})
    return store
