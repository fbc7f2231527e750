"""Re-encode section edits into the full page content.

Every function here takes the current content string and returns a new one. Only
the span belonging to the targeted section is rewritten; all other bytes, including
text outside any marker pair, are carried over untouched.

When the targeted id has no well-formed marker pair the section is *promoted*:

* ``main-content`` on a page without pairs wraps the whole content in a new pair.
* ``main-content`` on a page with pairs wraps only the leading content.
* any other id gets a new pair appended after the existing content.

Promotion never wraps existing marker pairs, so sections cannot end up nested.
Stray markers for the promoted id are dropped from the wrapped text first.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from ..models import DEFAULT_SECTION_TITLE, MAIN_CONTENT_ID
from .ids import SectionIdGenerator
from .markers import MarkerGrammar, MarkerPair, get_grammar

NEW_SECTION_TITLE = "New section"
PLACEHOLDER_TEXT = "Write the content of this section here."


@dataclass(frozen=True)
class AppendResult:
    """Content after appending a section, with the id that was assigned."""

    content: str
    section_id: str


def set_section_body(
    content: str,
    section_id: str,
    new_body: str,
    *,
    fallback_title: Optional[str] = None,
    grammar: Optional[MarkerGrammar] = None,
) -> str:
    """Replace the body of ``section_id`` with ``new_body``.

    Marker syntax quoted in ``new_body`` is escaped so it cannot open or close a
    section once written.
    """
    grammar = grammar or get_grammar()
    new_body = grammar.neutralize(new_body)
    pair = grammar.find(content, section_id)
    if pair is not None:
        return (
            content[: pair.body_start]
            + f"\n{new_body.strip()}\n"
            + content[pair.body_end :]
        )

    title = _title_or_default(fallback_title, DEFAULT_SECTION_TITLE)
    pairs = grammar.scan(content)
    if section_id == MAIN_CONTENT_ID:
        return _replace_main_region(content, pairs, grammar.wrap(section_id, title, new_body))
    return _append_block(content, grammar.wrap(section_id, title, new_body))


def rename_section_title(
    content: str,
    section_id: str,
    new_title: str,
    *,
    grammar: Optional[MarkerGrammar] = None,
) -> str:
    """Rewrite the title of ``section_id``, leaving every body untouched."""
    grammar = grammar or get_grammar()
    title = _title_or_default(new_title, DEFAULT_SECTION_TITLE)
    pair = grammar.find(content, section_id)
    if pair is not None:
        return (
            content[: pair.open_start]
            + grammar.open_marker(section_id, title)
            + content[pair.open_end :]
        )

    pairs = grammar.scan(content)
    if not pairs:
        return grammar.wrap(section_id, title, grammar.strip_markers(content, section_id))
    if section_id == MAIN_CONTENT_ID:
        leading = grammar.strip_markers(content[: pairs[0].open_start], section_id)
        return _replace_main_region(content, pairs, grammar.wrap(section_id, title, leading))
    return _append_block(content, grammar.wrap(section_id, title, ""))


def append_section(
    content: str,
    title: str,
    *,
    generator: Optional[SectionIdGenerator] = None,
    grammar: Optional[MarkerGrammar] = None,
) -> AppendResult:
    """Append a new section built from ``title`` and return it with its id."""
    grammar = grammar or get_grammar()
    generator = generator or SectionIdGenerator(grammar=grammar)
    section_id = generator.generate(content)
    title = _title_or_default(title, NEW_SECTION_TITLE)
    block = grammar.wrap(section_id, title, grammar.neutralize(placeholder_body(title)))
    return AppendResult(content=_append_block(content, block), section_id=section_id)


def remove_section(
    content: str,
    section_id: str,
    *,
    grammar: Optional[MarkerGrammar] = None,
) -> str:
    """Delete ``section_id`` together with the blank line separating it."""
    grammar = grammar or get_grammar()
    pairs = grammar.scan(content)
    pair = next((candidate for candidate in pairs if candidate.id == section_id), None)
    if pair is None:
        if section_id != MAIN_CONTENT_ID:
            return content
        if not pairs:
            return ""
        return content[pairs[0].open_start :]

    start, end = pair.open_start, pair.close_end
    rest = content[end:]
    if rest.strip():
        end += len(rest) - len(rest.lstrip())
    else:
        start = len(content[:start].rstrip())
    return content[:start] + content[end:]


def placeholder_body(title: str) -> str:
    """Body given to a freshly appended section."""
    return f"## {title}\n\n{PLACEHOLDER_TEXT}"


def _title_or_default(title: Optional[str], default: str) -> str:
    if title is None or not title.strip():
        return default
    return title.strip()


def _replace_main_region(content: str, pairs: List[MarkerPair], block: str) -> str:
    if not pairs:
        return block
    return f"{block}\n\n{content[pairs[0].open_start :]}"


def _append_block(content: str, block: str) -> str:
    if not content.strip():
        return block
    if content.endswith("\n\n"):
        return content + block
    if content.endswith("\n"):
        return f"{content}\n{block}"
    return f"{content}\n\n{block}"


__all__ = [
    "AppendResult",
    "NEW_SECTION_TITLE",
    "PLACEHOLDER_TEXT",
    "append_section",
    "placeholder_body",
    "remove_section",
    "rename_section_title",
    "set_section_body",
]
