"""Option resolution: per-call options over remembered options over collection defaults."""

import asyncio
from typing import Any, Callable, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator

from docpage.core.config import get_settings
from docpage.core.helpers import is_empty, object_or_function, positive_int


def _default_limit() -> int:
    return get_settings().pagination_default_limit


class PaginationConfig(BaseModel):
    """Per-collection defaults, fixed at install time.

    Every default except ``remember`` may also be a zero-argument callable,
    evaluated each time a call falls back to it.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    default_limit: int | Callable[[], int] = Field(default_factory=_default_limit)
    default_query: dict[str, Any] | Callable[[], Any] = Field(default_factory=dict)
    default_fields: Any = Field(default_factory=dict)
    default_sort: Any = Field(default_factory=dict)
    default_populate: str | list[str] | Callable[[], Any] = ""
    remember: bool = False

    @field_validator("default_limit")
    @classmethod
    def _check_limit(cls, v: Any) -> Any:
        if not callable(v) and positive_int(v) != v:
            raise ValueError("default_limit must be a positive integer")
        return v


class CallOptions(BaseModel):
    """Options supplied for one call. Anything left as None falls back."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    query: Any = None
    fields: Any = None
    sort: Any = None
    populate: Any = None
    page: Any = None
    limit: Any = None

    @classmethod
    def coerce(cls, options: "CallOptions | Mapping[str, Any] | None" = None, **overrides: Any) -> "CallOptions":
        if options is None:
            data: dict[str, Any] = {}
        elif isinstance(options, CallOptions):
            data = options.model_dump(exclude_unset=True)
        else:
            data = {k: v for k, v in dict(options).items() if k in cls.model_fields}
        data.update(overrides)
        return cls(**data)


class QueryPlan(BaseModel):
    """Concrete, fully resolved plan for one call."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    query: Any
    fields: Any
    sort: Any
    populate: Any
    page: int | float
    limit: int


class RememberedOptions:
    """Last resolved plan of one installation, written under a lock."""

    def __init__(self) -> None:
        self.plan: QueryPlan | None = None
        self.lock = asyncio.Lock()

    def clear(self) -> None:
        self.plan = None


def _pick(supplied: Any, remembered: Any, default: Any) -> Any:
    if supplied is not None:
        return supplied
    if remembered is not None:
        return remembered
    return object_or_function(default)


def resolve_options(
    config: PaginationConfig,
    options: CallOptions | None = None,
    remembered: QueryPlan | None = None,
) -> QueryPlan:
    """Merge the three layers into one QueryPlan.

    ``remembered`` is ignored unless ``config.remember`` is set. The caller's
    options object is never modified.
    """
    if options is None:
        options = CallOptions()
    last = remembered if config.remember else None

    # the query is never remembered: omitted or empty means the collection default
    query = options.query
    if is_empty(query):
        query = object_or_function(config.default_query)

    limit = positive_int(options.limit)
    if limit is None:
        limit = last.limit if last else positive_int(object_or_function(config.default_limit))
    if limit is None:
        limit = get_settings().pagination_default_limit
    max_limit = get_settings().pagination_max_limit
    if max_limit is not None:
        limit = min(limit, max_limit)

    page = positive_int(options.page)
    if page is None:
        page = last.page if last else 1

    return QueryPlan(
        query=query,
        fields=_pick(options.fields, last.fields if last else None, config.default_fields),
        sort=_pick(options.sort, last.sort if last else None, config.default_sort),
        populate=_pick(options.populate, last.populate if last else None, config.default_populate),
        page=page,
        limit=limit,
    )
