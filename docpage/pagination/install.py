"""Attach paginate / first_page / last_page to a collection-level namespace."""

from typing import Any

from docpage.core.exceptions import PaginationAlreadyInstalledError, StoreNotConfiguredError
from docpage.core.logging import get_logger
from docpage.pagination.options import PaginationConfig
from docpage.pagination.planner import Paginator
from docpage.store.base import DocumentStore

log = get_logger(__name__)

ENTRY_POINTS = ("paginate", "first_page", "last_page")


def _target_name(target: Any) -> str:
    return getattr(target, "__name__", None) or type(target).__name__


def _default_store(target: Any) -> DocumentStore:
    from beanie import Document

    if isinstance(target, type) and issubclass(target, Document):
        from docpage.store.beanie import BeanieStore
        return BeanieStore(target)
    raise StoreNotConfiguredError(_target_name(target))


def install_pagination(
    target: Any,
    config: PaginationConfig | None = None,
    store: DocumentStore | None = None,
    **config_kwargs: Any,
) -> Paginator:
    """Install pagination on target (a beanie Document class or any object) once.

    ``config`` and ``config_kwargs`` are alternatives; keyword arguments are
    validated into a PaginationConfig.
    """
    name = _target_name(target)
    if "__paginator__" in vars(target):
        raise PaginationAlreadyInstalledError(name)
    if config is None:
        config = PaginationConfig(**config_kwargs)
    if store is None:
        store = _default_store(target)

    paginator = Paginator(store, config)
    # bound methods are returned as is from the class and from its instances
    setattr(target, "__paginator__", paginator)
    for entry in ENTRY_POINTS:
        setattr(target, entry, getattr(paginator, entry))
    log.info("pagination_installed", target=name, collection=store.name, remember=config.remember)
    return paginator
