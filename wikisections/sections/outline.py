"""Heading outline of a section body, used for in-page navigation."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List

_HEADING_RE = re.compile(r"^(#{1,6})\s+(.+)$")
_CLOSING_HASHES_RE = re.compile(r"\s+#+$")


@dataclass(frozen=True)
class Heading:
    """A markdown heading with its navigation anchor."""

    id: str
    title: str
    level: int
    anchor: str


def build_outline(body: str, prefix: str) -> List[Heading]:
    """Collect ATX headings of ``body``, skipping fenced code blocks."""
    headings: List[Heading] = []
    in_code = False
    for line in body.splitlines():
        stripped = line.strip()
        if stripped.startswith("```") or stripped.startswith("~~~"):
            in_code = not in_code
            continue
        if in_code:
            continue
        match = _HEADING_RE.match(stripped)
        if not match:
            continue
        title = _CLOSING_HASHES_RE.sub("", match.group(2)).strip()
        headings.append(
            Heading(
                id=f"{prefix}-section-{len(headings)}",
                title=title,
                level=len(match.group(1)),
                anchor=slugify(title),
            )
        )
    return headings


def slugify(title: str) -> str:
    slug = title.lower()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


__all__ = ["Heading", "build_outline", "slugify"]
