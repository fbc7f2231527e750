"""Attach the section view to pages fetched from the page store."""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from ..models import DEFAULT_SECTION_TITLE, Page
from .markers import MarkerGrammar
from .parser import parse_sections


def enrich_page_with_sections(
    page: Page,
    grammar: Optional[MarkerGrammar] = None,
    *,
    default_title: str = DEFAULT_SECTION_TITLE,
) -> Page:
    """Return ``page`` with ``sections`` filled in from its content.

    Pages that already carry sections are returned as-is. Each parsed section
    inherits the page's ``updated_at`` and ``author``. The page store is never touched.
    """
    if page.sections:
        return page

    sections = [
        replace(section, last_modified=page.updated_at, author=page.author)
        for section in parse_sections(page.content, grammar, default_title=default_title)
    ]
    return replace(page, sections=sections)


__all__ = ["enrich_page_with_sections"]
