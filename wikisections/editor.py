"""Section editing pipeline on top of the page store."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Sequence, Tuple

from .config import SectionsConfig, WikiConfig
from .logging import get_logger
from .models import MAIN_CONTENT_ID, Page, Section
from .sections import (
    NEW_SECTION_TITLE,
    SectionIdGenerator,
    append_section,
    enrich_page_with_sections,
    get_grammar,
    is_valid_section_id,
    parse_sections,
    remove_section,
    rename_section_title,
    set_section_body,
)
from .stores import PageStore


class SectionNotFoundError(LookupError):
    """Raised when a page has no section with the requested id."""

    def __init__(self, key: str, section_id: str) -> None:
        super().__init__(f"Section {section_id} not found on page {key}")
        self.key = key
        self.section_id = section_id


@dataclass
class SectionEditOutcome:
    """Result of a section mutation."""

    page: Page
    section_id: str
    changed: bool


class SectionEditor:
    """Coordinates fetch, patch and persist for section edits.

    Each mutation runs under the page lock on content re-fetched inside that lock and
    is written back with the fetched ``updated_at`` as precondition, so concurrent
    edits to different sections of one page never overwrite each other.
    """

    def __init__(self, store: PageStore, settings: SectionsConfig | None = None) -> None:
        self.store = store
        self.settings = settings or SectionsConfig()
        self.grammar = get_grammar(self.settings.title_grammar)
        self.id_generator = SectionIdGenerator(self.settings.id_strategy, self.grammar)
        self.logger = get_logger("editor")

    @classmethod
    def from_config(cls, config: WikiConfig) -> "SectionEditor":
        return cls(PageStore(config.store.path), config.sections)

    # ------------------------------------------------------------------
    # Reading

    def view(self, key: str) -> Page:
        """Fetch ``key`` with its sections, in the page's stored order."""
        return self._ordered(self._enrich(self.store.get_page(key)))

    def list_pages(self) -> List[Page]:
        return [self._enrich(page) for page in self.store.list_pages()]

    def get_section(self, key: str, section_id: str) -> Section:
        for section in self.view(key).sections or []:
            if section.id == section_id:
                return section
        raise SectionNotFoundError(key, section_id)

    def create_page(self, key: str, content: str, *, author: Optional[str] = None) -> Page:
        return self._enrich(self.store.create_page(key, content, author=author))

    # ------------------------------------------------------------------
    # Mutations

    def update_body(
        self,
        key: str,
        section_id: str,
        body: str,
        *,
        author: Optional[str] = None,
        fallback_title: Optional[str] = None,
    ) -> SectionEditOutcome:
        _require_valid_id(section_id)

        def _patch(content: str) -> Tuple[str, str]:
            self._log_promotion(key, content, section_id)
            title = fallback_title or self._current_title(content, section_id)
            patched = set_section_body(
                content, section_id, body, fallback_title=title, grammar=self.grammar
            )
            return patched, section_id

        return self._apply(key, _patch, author=author, action="Updated body of")

    def rename(
        self,
        key: str,
        section_id: str,
        title: str,
        *,
        author: Optional[str] = None,
    ) -> SectionEditOutcome:
        _require_valid_id(section_id)

        def _patch(content: str) -> Tuple[str, str]:
            self._log_promotion(key, content, section_id)
            return rename_section_title(content, section_id, title, grammar=self.grammar), section_id

        return self._apply(key, _patch, author=author, action="Renamed")

    def append(
        self, key: str, title: str, *, author: Optional[str] = None
    ) -> SectionEditOutcome:
        def _patch(content: str) -> Tuple[str, str]:
            result = append_section(
                content, title, generator=self.id_generator, grammar=self.grammar
            )
            return result.content, result.section_id

        return self._apply(key, _patch, author=author, action="Appended")

    def remove(
        self, key: str, section_id: str, *, author: Optional[str] = None
    ) -> SectionEditOutcome:
        def _patch(content: str) -> Tuple[str, str]:
            return remove_section(content, section_id, grammar=self.grammar), section_id

        def _prune_order() -> None:
            order = self.store.get_section_order(key)
            if section_id in order:
                self.store.set_section_order(key, [item for item in order if item != section_id])

        return self._apply(
            key, _patch, author=author, action="Removed", after_write=_prune_order
        )

    def reorder(self, key: str, section_ids: Sequence[str]) -> Page:
        """Store the display order of sections; content bytes are not touched."""
        with self.store.lock(key):
            self.store.set_section_order(key, section_ids)
        return self.view(key)

    # ------------------------------------------------------------------
    # Internal helpers

    def _apply(
        self,
        key: str,
        patch: Callable[[str], Tuple[str, str]],
        *,
        author: Optional[str],
        action: str,
        after_write: Optional[Callable[[], None]] = None,
    ) -> SectionEditOutcome:
        # ``after_write`` runs under the page lock once the new content is stored.
        with self.store.lock(key):
            page = self.store.get_page(key)
            content, section_id = patch(page.content)
            if content == page.content:
                self.logger.debug(
                    "%s section %s on %s left content unchanged; skipping write",
                    action,
                    section_id,
                    key,
                )
                return SectionEditOutcome(
                    page=self._ordered(self._enrich(page)), section_id=section_id, changed=False
                )
            updated = self.store.set_page(
                key, content, author=author, expected_updated_at=page.updated_at
            )
            if after_write is not None:
                after_write()
        self.logger.info("%s section %s on page %s", action, section_id, key)
        return SectionEditOutcome(
            page=self._ordered(self._enrich(updated)), section_id=section_id, changed=True
        )

    def _ordered(self, page: Page) -> Page:
        order = self.store.get_section_order(page.key)
        if order and page.sections:
            return replace(page, sections=_apply_order(page.sections, order))
        return page

    def _enrich(self, page: Page) -> Page:
        return enrich_page_with_sections(
            page, self.grammar, default_title=self.settings.default_title
        )

    def _current_title(self, content: str, section_id: str) -> str:
        for section in parse_sections(
            content, self.grammar, default_title=self.settings.default_title
        ):
            if section.id == section_id:
                return section.title
        if section_id == MAIN_CONTENT_ID:
            return self.settings.default_title
        return NEW_SECTION_TITLE

    def _log_promotion(self, key: str, content: str, section_id: str) -> None:
        if self.grammar.find(content, section_id) is None:
            self.logger.debug("Promoting section %s on page %s", section_id, key)


def _apply_order(sections: Sequence[Section], order: Sequence[str]) -> List[Section]:
    rank = {section_id: index for index, section_id in enumerate(order)}
    positioned = sorted(
        enumerate(sections),
        key=lambda item: (rank.get(item[1].id, len(rank)), item[0]),
    )
    return [section for _, section in positioned]


def _require_valid_id(section_id: str) -> None:
    if not is_valid_section_id(section_id):
        raise ValueError(f"Invalid section id: {section_id!r}")


__all__ = ["SectionEditOutcome", "SectionEditor", "SectionNotFoundError"]
