"""Marker grammar for sections embedded in page content."""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, List, Optional, Pattern, Set

TITLE_STYLES = ("extended", "legacy")

_ID_PATTERN = r"[^\s:]+"
# Ids we write must not contain ">", or "END_SECTION:a-->" would also close "a".
_WRITABLE_ID_PATTERN = r"[^\s:>]+"
_TITLE_PATTERNS = {
    # Anything on the marker line up to the first literal "-->".
    "extended": r"[^\n]*?",
    # Historical grammar: titles never contain a hyphen.
    "legacy": r"[^\-\n]*?",
}
_LEGACY_HYPHEN_REPLACEMENT = "‐"


@dataclass(frozen=True)
class MarkerPair:
    """Offsets of one well-formed open/close marker pair inside a content string."""

    id: str
    title: str
    open_start: int
    open_end: int
    close_start: int
    close_end: int

    @property
    def body_start(self) -> int:
        return self.open_end

    @property
    def body_end(self) -> int:
        return self.close_start


class MarkerGrammar:
    """Reads and writes ``SECTION``/``END_SECTION`` comment markers."""

    OPEN_FMT = "<!-- SECTION:{id}:{title} -->"
    CLOSE_FMT = "<!-- END_SECTION:{id} -->"

    def __init__(self, title_style: str = "extended") -> None:
        if title_style not in _TITLE_PATTERNS:
            raise ValueError(
                f"Unknown title style {title_style!r}; expected one of {', '.join(TITLE_STYLES)}"
            )
        self.title_style = title_style
        self._open_re = re.compile(
            r"<!--[ \t]*SECTION:(?P<id>%s):(?P<title>%s)[ \t]*-->"
            % (_ID_PATTERN, _TITLE_PATTERNS[title_style])
        )
        self._any_close_re = re.compile(r"<!--[ \t]*END_SECTION:(?P<id>[^\s:]+?)[ \t]*-->")

    # ------------------------------------------------------------------
    # Reading

    def scan(self, content: str) -> List[MarkerPair]:
        """Return the well-formed marker pairs of ``content`` in document order.

        An open marker is paired with the first close marker carrying the same id,
        unless another open marker for that id comes first, in which case the earlier
        one is an orphan and stays literal text. Markers inside a matched pair belong
        to its body. Only the first pair of a duplicated id is returned; later ones are
        still consumed so their bodies are not scanned.
        """
        opens = list(self._open_re.finditer(content))
        pairs: List[MarkerPair] = []
        seen: Set[str] = set()
        cursor = 0
        for index, match in enumerate(opens):
            if match.start() < cursor:
                continue
            section_id = match.group("id")
            close = _close_pattern(section_id).search(content, match.end())
            if close is None:
                continue
            if self._reopened_before(opens, index, section_id, close.start()):
                continue
            cursor = close.end()
            if section_id in seen:
                continue
            seen.add(section_id)
            pairs.append(
                MarkerPair(
                    id=section_id,
                    title=match.group("title"),
                    open_start=match.start(),
                    open_end=match.end(),
                    close_start=close.start(),
                    close_end=close.end(),
                )
            )
        return pairs

    def find(self, content: str, section_id: str) -> Optional[MarkerPair]:
        """Return the pair for ``section_id`` or ``None`` when it is not well-formed."""
        for pair in self.scan(content):
            if pair.id == section_id:
                return pair
        return None

    def find_orphan_title(self, content: str, section_id: str) -> Optional[str]:
        """Return the title of the first open marker for ``section_id``, paired or not."""
        for match in self._open_re.finditer(content):
            if match.group("id") == section_id:
                return match.group("title").strip()
        return None

    def marker_ids(self, content: str) -> Set[str]:
        """Every id named by any open or close marker, well-formed or not."""
        ids = {match.group("id") for match in self._open_re.finditer(content)}
        ids.update(match.group("id") for match in self._any_close_re.finditer(content))
        return ids

    # ------------------------------------------------------------------
    # Writing

    def sanitize_title(self, title: str) -> str:
        """Make ``title`` safe to embed in an open marker under this grammar."""
        cleaned = title
        while "-->" in cleaned:
            cleaned = cleaned.replace("-->", "")
        cleaned = cleaned.replace("\r\n", " ").replace("\r", " ").replace("\n", " ").strip()
        if self.title_style == "legacy":
            cleaned = cleaned.replace("-", _LEGACY_HYPHEN_REPLACEMENT)
        return cleaned

    def open_marker(self, section_id: str, title: str) -> str:
        return self.OPEN_FMT.format(id=section_id, title=self.sanitize_title(title))

    def close_marker(self, section_id: str) -> str:
        return self.CLOSE_FMT.format(id=section_id)

    def wrap(self, section_id: str, title: str, body: str) -> str:
        """Wrap ``body`` in a fresh marker pair."""
        return (
            f"{self.open_marker(section_id, title)}\n"
            f"{body.strip()}\n"
            f"{self.close_marker(section_id)}"
        )

    def neutralize(self, text: str) -> str:
        """Escape every marker-shaped comment in ``text`` so it reads as plain text.

        Used on bodies and placeholders before they are spliced into a pair. A quoted
        marker keeps its visible form once rendered (``&lt;!--`` shows as ``<!--``)
        but can no longer open or close a section.
        """
        # Each pass escapes at least one "<!--"; markers nested in a quoted title
        # only surface once the outer one is gone.
        while True:
            escaped = self._open_re.sub(_escape_marker, text)
            escaped = self._any_close_re.sub(_escape_marker, escaped)
            if escaped == text:
                return text
            text = escaped

    def strip_markers(self, text: str, section_id: str) -> str:
        """Drop open and close markers naming ``section_id`` from ``text``.

        Promotion wraps existing text in a new pair; a stale orphan marker for the
        same id left inside it would take over the pair.
        """
        text = self._open_re.sub(
            lambda match: "" if match.group("id") == section_id else match.group(0), text
        )
        return _close_pattern(section_id).sub("", text)

    # ------------------------------------------------------------------
    # Internal helpers

    @staticmethod
    def _reopened_before(
        opens: List[re.Match[str]], index: int, section_id: str, limit: int
    ) -> bool:
        for later in opens[index + 1 :]:
            if later.start() >= limit:
                return False
            if later.group("id") == section_id:
                return True
        return False


@lru_cache(maxsize=256)
def _close_pattern(section_id: str) -> Pattern[str]:
    return re.compile(r"<!--[ \t]*END_SECTION:%s[ \t]*-->" % re.escape(section_id))


def _escape_marker(match: re.Match[str]) -> str:
    return "&lt;" + match.group(0)[1:]


_GRAMMARS: Dict[str, MarkerGrammar] = {}


def get_grammar(title_style: str = "extended") -> MarkerGrammar:
    """Return a shared grammar instance for ``title_style``."""
    grammar = _GRAMMARS.get(title_style)
    if grammar is None:
        grammar = MarkerGrammar(title_style)
        _GRAMMARS[title_style] = grammar
    return grammar


def is_valid_section_id(section_id: str) -> bool:
    """True when ``section_id`` can be written into a marker."""
    return bool(section_id) and re.fullmatch(_WRITABLE_ID_PATTERN, section_id) is not None


__all__ = [
    "MarkerGrammar",
    "MarkerPair",
    "TITLE_STYLES",
    "get_grammar",
    "is_valid_section_id",
]
