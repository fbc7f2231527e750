"""Core data models shared across wikisections components."""

from dataclasses import dataclass
from typing import List, Optional

MAIN_CONTENT_ID = "main-content"
DEFAULT_SECTION_TITLE = "Main content"


@dataclass(frozen=True)
class Section:
    """A named block of a page's content, derived from its markers."""

    id: str
    title: str
    body: str
    last_modified: Optional[str] = None
    author: Optional[str] = None


@dataclass
class Page:
    """A wiki page as held by the page store."""

    key: str
    content: str
    author: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    sections: Optional[List[Section]] = None
