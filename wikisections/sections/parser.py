"""Decode page content into its ordered sections."""

from __future__ import annotations

from typing import List, Optional

from ..models import DEFAULT_SECTION_TITLE, MAIN_CONTENT_ID, Section
from .markers import MarkerGrammar, get_grammar


def parse_sections(
    content: str,
    grammar: Optional[MarkerGrammar] = None,
    *,
    default_title: str = DEFAULT_SECTION_TITLE,
) -> List[Section]:
    """Return the sections encoded in ``content``.

    Well-formed marker pairs become sections in document order. Text before the
    first pair is surfaced as a leading ``main-content`` section. Content without any
    well-formed pair is a single ``main-content`` section holding everything, titled
    from an unterminated ``main-content`` marker when one is present.

    The result only depends on the arguments; blank content yields no sections.
    """
    if not content or not content.strip():
        return []

    grammar = grammar or get_grammar()
    pairs = grammar.scan(content)

    if not pairs:
        title = grammar.find_orphan_title(content, MAIN_CONTENT_ID) or default_title
        return [Section(id=MAIN_CONTENT_ID, title=title, body=content.strip())]

    sections = [
        Section(
            id=pair.id,
            title=pair.title.strip(),
            body=content[pair.body_start : pair.body_end].strip(),
        )
        for pair in pairs
    ]

    leading = content[: pairs[0].open_start].strip()
    if leading and all(pair.id != MAIN_CONTENT_ID for pair in pairs):
        sections.insert(
            0, Section(id=MAIN_CONTENT_ID, title=default_title, body=leading)
        )
    return sections


__all__ = ["parse_sections"]
