from docpage.pagination.install import install_pagination
from docpage.pagination.options import CallOptions, PaginationConfig, QueryPlan, RememberedOptions, resolve_options
from docpage.pagination.planner import LAST_PAGE, Paginator, ResultEnvelope, clamp_page, page_count, skip_for
from docpage.store.base import DocumentStore, QueryBuilder
from docpage.store.memory import MemoryStore

__all__ = [
    "install_pagination",
    "CallOptions",
    "PaginationConfig",
    "QueryPlan",
    "RememberedOptions",
    "resolve_options",
    "LAST_PAGE",
    "Paginator",
    "ResultEnvelope",
    "clamp_page",
    "page_count",
    "skip_for",
    "DocumentStore",
    "QueryBuilder",
    "MemoryStore",
]
