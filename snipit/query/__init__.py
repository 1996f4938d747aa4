"""Structured search, side filters and sorting."""

from .matcher import PREDICATES, matches, search
from .parser import FieldTag, Term, parse_query
from .pipeline import (
    SortOption,
    available_languages,
    build_view,
    compare_snippets,
    filter_by_search,
    filter_by_side,
    sort_snippets,
    top_tags,
    use_system_collation,
)

__all__ = [
    "FieldTag",
    "PREDICATES",
    "SortOption",
    "Term",
    "available_languages",
    "build_view",
    "compare_snippets",
    "filter_by_search",
    "filter_by_side",
    "matches",
    "parse_query",
    "search",
    "sort_snippets",
    "top_tags",
    "use_system_collation",
]
