"""Persistence backends."""

from .pages import (
    PageConflictError,
    PageExistsError,
    PageNotFoundError,
    PageStore,
    PageStoreError,
)

__all__ = [
    "PageConflictError",
    "PageExistsError",
    "PageNotFoundError",
    "PageStore",
    "PageStoreError",
]
