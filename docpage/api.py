"""FastAPI glue: query parameters in, envelope out."""

from typing import Any

from fastapi import FastAPI, Query
from pydantic import BaseModel

from docpage.core.exceptions import AppError, app_exception_handler, generic_exception_handler
from docpage.core.helpers import data_to_objects
from docpage.pagination.options import CallOptions
from docpage.pagination.planner import ResultEnvelope


class PageResponse(BaseModel):
    count: int
    pages: int
    page: int
    docs: list[Any]

    @classmethod
    def from_envelope(cls, envelope: ResultEnvelope) -> "PageResponse":
        docs = data_to_objects(envelope.docs)
        return cls(count=envelope.count, pages=envelope.pages, page=envelope.page, docs=[_jsonable(d) for d in docs])


def _jsonable(doc: Any) -> Any:
    if isinstance(doc, dict):
        return {k: _jsonable(v) for k, v in doc.items()}
    if isinstance(doc, list):
        return [_jsonable(v) for v in doc]
    if doc is None or isinstance(doc, (str, int, float, bool)):
        return doc
    return str(doc)


def pagination_params(
    page: str | None = Query(None, description="Page number, clamped into range"),
    limit: str | None = Query(None, description="Page size"),
    sort: str | None = Query(None, description="Space or comma separated fields, '-' for descending"),
) -> CallOptions:
    """Dependency: build CallOptions from query params. Bad values fall back instead of failing."""
    data: dict[str, Any] = {}
    if page is not None:
        data["page"] = page
    if limit is not None:
        data["limit"] = limit
    if sort:
        data["sort"] = sort.replace(",", " ")
    return CallOptions(**data)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
