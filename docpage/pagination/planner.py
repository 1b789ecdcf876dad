"""Page arithmetic and the count -> bounded find -> envelope sequence."""

import inspect
import math
from typing import Any, Callable, Mapping

from pydantic import BaseModel, Field

from docpage.core.helpers import data_to_objects, is_empty
from docpage.core.logging import get_logger
from docpage.pagination.options import (
    CallOptions,
    PaginationConfig,
    QueryPlan,
    RememberedOptions,
    resolve_options,
)
from docpage.store.base import DocumentStore

log = get_logger(__name__)

# Requested page meaning "whatever the last page turns out to be"
LAST_PAGE = math.inf

Callback = Callable[[BaseException | None, "ResultEnvelope | None"], Any]
Options = CallOptions | Mapping[str, Any] | None


class ResultEnvelope(BaseModel):
    count: int = Field(ge=0)
    pages: int = Field(ge=1)
    page: int = Field(ge=1)
    docs: list[Any] = Field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return {
            "count": self.count,
            "pages": self.pages,
            "page": self.page,
            "docs": data_to_objects(self.docs),
        }


def page_count(count: int, limit: int) -> int:
    """ceil(count / limit), never below 1."""
    return max(1, (count + limit - 1) // limit)


def clamp_page(requested: int | float, pages: int) -> int:
    return int(min(max(requested, 1), pages))


def skip_for(page: int, limit: int) -> int:
    return (page - 1) * limit


def _split_args(options: Any, callback: Callback | None) -> tuple[Options, Callback | None]:
    # paginate(callback) is the same as paginate(None, callback)
    if callback is None and callable(options) and not isinstance(options, (Mapping, CallOptions)):
        return None, options
    return options, callback


async def _deliver(callback: Callback, error: BaseException | None, envelope: "ResultEnvelope | None") -> None:
    result = callback(error, envelope)
    if inspect.isawaitable(result):
        await result


class Paginator:
    """Pagination bound to one store and one PaginationConfig."""

    def __init__(
        self,
        store: DocumentStore,
        config: PaginationConfig | None = None,
        remembered: RememberedOptions | None = None,
    ) -> None:
        self.store = store
        self.config = config or PaginationConfig()
        self.remembered = remembered or RememberedOptions()

    async def resolve(self, options: Options = None, **overrides: Any) -> QueryPlan:
        """Resolve options into a plan against the last remembered one."""
        call = CallOptions.coerce(options, **overrides)
        async with self.remembered.lock:
            return resolve_options(self.config, call, self.remembered.plan)

    async def remember(self, plan: QueryPlan) -> None:
        if self.config.remember:
            async with self.remembered.lock:
                self.remembered.plan = plan

    async def execute(self, plan: QueryPlan) -> ResultEnvelope:
        count = await self.store.count(plan.query)
        pages = page_count(count, plan.limit)
        page = clamp_page(plan.page, pages)
        skip = skip_for(page, plan.limit)

        query = self.store.find(plan.query, plan.fields).sort(plan.sort).skip(skip).limit(plan.limit)
        if not is_empty(plan.populate):
            query = query.populate(plan.populate)
        docs = await query.to_list()

        log.debug(
            "paginate",
            collection=self.store.name,
            count=count,
            pages=pages,
            page=page,
            skip=skip,
            limit=plan.limit,
        )
        return ResultEnvelope(count=count, pages=pages, page=page, docs=docs)

    async def _run(
        self,
        options: Any,
        callback: Callback | None,
        overrides: dict[str, Any],
        force_page: int | float | None = None,
    ) -> ResultEnvelope | None:
        options, callback = _split_args(options, callback)
        try:
            plan = await self.resolve(options, **overrides)
            forced = plan if force_page is None else plan.model_copy(update={"page": force_page})
            envelope = await self.execute(forced)
            # only plans that ran to completion are remembered
            await self.remember(plan)
        except Exception as e:
            log.warning("paginate_failed", collection=self.store.name, error=str(e))
            if callback is None:
                raise
            await _deliver(callback, e, None)
            return None
        if callback is not None:
            await _deliver(callback, None, envelope)
        return envelope

    async def paginate(self, options: Any = None, callback: Callback | None = None, **overrides: Any) -> ResultEnvelope | None:
        """Run one paginated query.

        Accepts ``paginate(options, callback)``, ``paginate(callback)`` or
        keyword options. With a callback, it is called exactly once with
        ``(error, None)`` or ``(None, envelope)`` and store errors are not
        raised; without one, store errors propagate unchanged.
        """
        return await self._run(options, callback, overrides)

    async def first_page(self, options: Any = None, callback: Callback | None = None, **overrides: Any) -> ResultEnvelope | None:
        return await self._run(options, callback, overrides, force_page=1)

    async def last_page(self, options: Any = None, callback: Callback | None = None, **overrides: Any) -> ResultEnvelope | None:
        return await self._run(options, callback, overrides, force_page=LAST_PAGE)
