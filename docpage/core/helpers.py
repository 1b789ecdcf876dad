"""Small helpers shared by the resolver, the planner and the stores."""

from collections.abc import Mapping, MutableMapping
from typing import Any, Callable

from pydantic import BaseModel

_MISSING: Any = object()


def nested_path(obj: Any, path: str, value: Any = _MISSING) -> Any:
    """Get (or set, when value is given) a dotted key path inside nested mappings.

    A non-mapping met along the way stops the walk and is returned as is.
    """
    if not isinstance(obj, Mapping):
        return obj
    head, _, rest = path.partition(".")
    if rest:
        return nested_path(obj.get(head), rest, value)
    if value is not _MISSING and isinstance(obj, MutableMapping):
        obj[head] = value
    return obj.get(head)


def object_or_function(value: Any | Callable[[], Any]) -> Any:
    """Call zero-arg producers, return anything else unchanged."""
    if callable(value):
        return value()
    return value


def data_to_objects(data: Any) -> Any:
    """Convert a document (or list of documents) to plain dicts."""
    if data is None:
        return None
    if isinstance(data, list):
        return [data_to_objects(doc) for doc in data]
    if isinstance(data, BaseModel):
        return data.model_dump(by_alias=True)
    return data


def positive_int(value: Any) -> int | None:
    """Return value as an int >= 1, or None when it is not one."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    elif isinstance(value, str):
        value = value.strip()
        if not value.isdecimal():
            return None
        value = int(value)
    if isinstance(value, int) and value >= 1:
        return value
    return None


def is_empty(value: Any) -> bool:
    """None or an empty container."""
    if value is None:
        return True
    try:
        return len(value) == 0
    except TypeError:
        return False
