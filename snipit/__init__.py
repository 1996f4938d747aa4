"""Core package for the SnipIt snippet manager."""

from .query import SortOption, build_view, filter_by_search, filter_by_side, sort_snippets
from .settings import Collection, CollectionRegistry, Settings, SettingsStore
from .snippet import Snippet, SnippetRepository

__all__ = [
    "Collection",
    "CollectionRegistry",
    "Settings",
    "SettingsStore",
    "Snippet",
    "SnippetRepository",
    "SortOption",
    "build_view",
    "filter_by_search",
    "filter_by_side",
    "sort_snippets",
]
