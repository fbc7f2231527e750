"""Section-in-document encoding: grammar, parser, patcher and page enrichment."""

from .enrich import enrich_page_with_sections
from .ids import ID_STRATEGIES, SectionIdGenerator
from .markers import TITLE_STYLES, MarkerGrammar, MarkerPair, get_grammar, is_valid_section_id
from .outline import Heading, build_outline, slugify
from .parser import parse_sections
from .patcher import (
    NEW_SECTION_TITLE,
    AppendResult,
    append_section,
    placeholder_body,
    remove_section,
    rename_section_title,
    set_section_body,
)

__all__ = [
    "AppendResult",
    "NEW_SECTION_TITLE",
    "Heading",
    "ID_STRATEGIES",
    "MarkerGrammar",
    "MarkerPair",
    "SectionIdGenerator",
    "TITLE_STYLES",
    "append_section",
    "build_outline",
    "enrich_page_with_sections",
    "get_grammar",
    "is_valid_section_id",
    "parse_sections",
    "placeholder_body",
    "remove_section",
    "rename_section_title",
    "set_section_body",
    "slugify",
]
