"""JSON-backed page store holding full page content and ordering metadata."""

from __future__ import annotations

import json
import threading
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from ..logging import get_logger
from ..models import Page

_STORE_VERSION = 1


class PageStoreError(RuntimeError):
    """Base error for page store failures."""


class PageNotFoundError(PageStoreError):
    """Raised when a page key does not exist."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Page not found: {key}")
        self.key = key


class PageExistsError(PageStoreError):
    """Raised when creating a page whose key is already taken."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Page already exists: {key}")
        self.key = key


class PageConflictError(PageStoreError):
    """Raised when a write was based on an outdated version of the page."""

    def __init__(self, key: str, expected: Optional[str], actual: Optional[str]) -> None:
        super().__init__(
            f"Page {key} was modified concurrently (expected {expected}, found {actual})"
        )
        self.key = key
        self.expected = expected
        self.actual = actual


class PageStore:
    """Stores pages keyed by title; every page is mutated by full-content replacement.

    Pages live in memory and are written back to ``path`` after each change. A store
    without a path keeps everything in memory, which is what the tests use.
    """

    def __init__(self, path: Path | None) -> None:
        self._path = path
        self._pages: Dict[str, Dict[str, Optional[str]]] = {}
        self._order: Dict[str, List[str]] = {}
        self._guard = threading.RLock()
        self._locks: Dict[str, threading.Lock] = {}
        self.logger = get_logger("stores.pages")
        if self._path is not None:
            self._load(self._path)

    @property
    def path(self) -> Path | None:
        return self._path

    def lock(self, key: str) -> threading.Lock:
        """Return the lock serialising read-modify-write cycles on ``key``."""
        with self._guard:
            page_lock = self._locks.get(key)
            if page_lock is None:
                page_lock = threading.Lock()
                self._locks[key] = page_lock
            return page_lock

    def list_pages(self) -> List[Page]:
        with self._guard:
            return [self._to_page(key, self._pages[key]) for key in sorted(self._pages)]

    def get_page(self, key: str) -> Page:
        with self._guard:
            record = self._pages.get(key)
            if record is None:
                raise PageNotFoundError(key)
            return self._to_page(key, record)

    def create_page(self, key: str, content: str, *, author: Optional[str] = None) -> Page:
        with self._guard:
            if key in self._pages:
                raise PageExistsError(key)
            now = _timestamp()
            self._pages[key] = {
                "content": content,
                "author": author,
                "created_at": now,
                "updated_at": now,
            }
            self._persist()
            self.logger.info("Created page %s", key)
            return self._to_page(key, self._pages[key])

    def set_page(
        self,
        key: str,
        content: str,
        *,
        author: Optional[str] = None,
        expected_updated_at: Optional[str] = None,
    ) -> Page:
        """Replace the content of ``key``.

        When ``expected_updated_at`` is given the write only happens if the page has
        not been modified since that version; otherwise :class:`PageConflictError`.
        """
        with self._guard:
            record = self._pages.get(key)
            if record is None:
                raise PageNotFoundError(key)
            current = record.get("updated_at")
            if expected_updated_at is not None and expected_updated_at != current:
                raise PageConflictError(key, expected_updated_at, current)
            record["content"] = content
            if author is not None:
                record["author"] = author
            record["updated_at"] = _timestamp(after=current)
            self._persist()
            self.logger.info("Updated page %s", key)
            return self._to_page(key, record)

    def delete_page(self, key: str) -> None:
        with self._guard:
            if key not in self._pages:
                raise PageNotFoundError(key)
            del self._pages[key]
            self._order.pop(key, None)
            self._persist()
            self.logger.info("Deleted page %s", key)

    def get_section_order(self, key: str) -> List[str]:
        with self._guard:
            if key not in self._pages:
                raise PageNotFoundError(key)
            return list(self._order.get(key, []))

    def set_section_order(self, key: str, section_ids: Sequence[str]) -> None:
        with self._guard:
            if key not in self._pages:
                raise PageNotFoundError(key)
            ordered = list(dict.fromkeys(str(section_id) for section_id in section_ids))
            if ordered:
                self._order[key] = ordered
            else:
                self._order.pop(key, None)
            self._persist()
            self.logger.debug("Stored section order for %s: %s", key, ", ".join(ordered))

    # ------------------------------------------------------------------
    # Internal helpers

    @staticmethod
    def _to_page(key: str, record: Dict[str, Optional[str]]) -> Page:
        return Page(
            key=key,
            content=record.get("content") or "",
            author=record.get("author"),
            created_at=record.get("created_at"),
            updated_at=record.get("updated_at"),
        )

    def _persist(self) -> None:
        if self._path is None:
            return
        payload = {
            "version": _STORE_VERSION,
            "pages": self._pages,
            "order": self._order,
        }
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False),
            encoding="utf-8",
        )

    def _load(self, path: Path) -> None:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return
        except json.JSONDecodeError as exc:
            raise PageStoreError(f"Failed to parse page store {path}: {exc}") from exc
        if not isinstance(data, dict) or data.get("version") != _STORE_VERSION:
            raise PageStoreError(f"Unsupported page store format in {path}")
        pages = data.get("pages")
        if not isinstance(pages, dict):
            raise PageStoreError(f"Page store {path} has no pages mapping")
        for key, raw in pages.items():
            if not isinstance(key, str) or not isinstance(raw, dict):
                continue
            content = raw.get("content")
            if not isinstance(content, str):
                continue
            self._pages[key] = {
                "content": content,
                "author": _as_optional_str(raw.get("author")),
                "created_at": _as_optional_str(raw.get("created_at")),
                "updated_at": _as_optional_str(raw.get("updated_at")),
            }
        order = data.get("order")
        if isinstance(order, dict):
            for key, ids in order.items():
                if key in self._pages and isinstance(ids, list):
                    self._order[key] = [str(section_id) for section_id in ids]


def _timestamp(after: Optional[str] = None) -> str:
    now = datetime.now(UTC)
    if after is not None:
        previous = _parse_timestamp(after)
        if previous is not None and now <= previous:
            now = previous + timedelta(microseconds=1)
    return now.isoformat(timespec="microseconds").replace("+00:00", "Z")


def _parse_timestamp(value: str) -> Optional[datetime]:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _as_optional_str(value: object) -> Optional[str]:
    return value if isinstance(value, str) else None


__all__ = [
    "PageConflictError",
    "PageExistsError",
    "PageNotFoundError",
    "PageStore",
    "PageStoreError",
]
