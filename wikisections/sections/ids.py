"""Identifiers for newly appended sections."""

from __future__ import annotations

import re
import secrets
from typing import Optional

from .markers import MarkerGrammar, get_grammar

ID_STRATEGIES = ("counter", "random")
ID_PREFIX = "section-"

_COUNTER_RE = re.compile(r"^section-(\d+)$")
_RANDOM_BYTES = 6
_MAX_RANDOM_ATTEMPTS = 32


class SectionIdGenerator:
    """Produces ids unique among the markers already present in a page.

    ``counter`` continues from the highest ``section-<n>`` id in the content. Older
    pages may carry millisecond timestamps as ``<n>``; they are opaque and the counter
    simply continues above them. ``random`` draws a hex token from :mod:`secrets` and
    retries on collision.
    """

    def __init__(
        self, strategy: str = "counter", grammar: Optional[MarkerGrammar] = None
    ) -> None:
        if strategy not in ID_STRATEGIES:
            raise ValueError(
                f"Unknown id strategy {strategy!r}; expected one of {', '.join(ID_STRATEGIES)}"
            )
        self.strategy = strategy
        self._grammar = grammar or get_grammar()

    def generate(self, content: str) -> str:
        existing = self._grammar.marker_ids(content)
        if self.strategy == "random":
            return self._random_id(existing)
        return self._counter_id(existing)

    @staticmethod
    def _counter_id(existing: set[str]) -> str:
        highest = 0
        for section_id in existing:
            match = _COUNTER_RE.match(section_id)
            if match:
                highest = max(highest, int(match.group(1)))
        return f"{ID_PREFIX}{highest + 1}"

    @staticmethod
    def _random_id(existing: set[str]) -> str:
        for _ in range(_MAX_RANDOM_ATTEMPTS):
            candidate = f"{ID_PREFIX}{secrets.token_hex(_RANDOM_BYTES)}"
            if candidate not in existing:
                return candidate
        raise RuntimeError("Unable to generate a unique section id")


__all__ = ["ID_STRATEGIES", "SectionIdGenerator"]
