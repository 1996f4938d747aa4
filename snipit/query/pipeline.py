"""Side filters, text search and ordering for the snippet list view."""

from __future__ import annotations

import locale
import logging
from collections import Counter
from datetime import datetime, timezone
from enum import Enum
from functools import cmp_to_key
from typing import Iterable, List, Sequence

from ..snippet import Snippet
from .matcher import search

logger = logging.getLogger("snipit")

STARRED_FILTER = "starred"
UNLABELED_FILTER = "unlabeled"

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


class SortOption(str, Enum):
    DATE_DESC = "date-desc"
    DATE_ASC = "date-asc"
    TITLE_ASC = "title-asc"
    TITLE_DESC = "title-desc"


def available_languages(snippets: Iterable[Snippet]) -> List[str]:
    """Distinct non-empty languages in first-seen order."""
    seen: dict[str, None] = {}
    for snippet in snippets:
        if snippet.language:
            seen.setdefault(snippet.language, None)
    return list(seen)


def top_tags(snippets: Iterable[Snippet], limit: int = 5) -> List[str]:
    counts: Counter[str] = Counter()
    for snippet in snippets:
        counts.update(snippet.tags)
    return [tag for tag, _ in counts.most_common(limit)]


def filter_by_side(
    snippets: Sequence[Snippet],
    filters: Iterable[str],
    languages: Iterable[str] | None = None,
) -> List[Snippet]:
    """Apply side-panel toggles.

    ``starred`` and ``unlabeled`` are keywords; any other token naming a known
    language restricts to that language. Remaining tokens have no effect.
    """
    active = {token.lower() for token in filters}
    if languages is None:
        languages = available_languages(snippets)
    known_languages = {language.lower() for language in languages}
    chosen_languages = active & known_languages

    result: List[Snippet] = []
    for snippet in snippets:
        if STARRED_FILTER in active and not snippet.starred:
            continue
        if UNLABELED_FILTER in active and snippet.tags:
            continue
        if chosen_languages and snippet.language.lower() not in chosen_languages:
            continue
        result.append(snippet)
    return result


def filter_by_search(snippets: Sequence[Snippet], query: str | None) -> List[Snippet]:
    return search(snippets, query)


def parse_timestamp(value: str | None) -> datetime:
    """Parse an ISO-8601 date; unparsable values sort as the oldest."""
    if not value:
        return _OLDEST
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return _OLDEST
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def use_system_collation() -> bool:
    """Collate titles by the user's locale; the C locale stays on failure."""
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as exc:
        logger.warning("Could not apply the system collation locale: %s", exc)
        return False
    return True


def _compare_titles(left: str, right: str) -> int:
    left_key = locale.strxfrm(left.casefold())
    right_key = locale.strxfrm(right.casefold())
    if left_key != right_key:
        return -1 if left_key < right_key else 1
    return (left > right) - (left < right)


def compare_snippets(
    a: Snippet,
    b: Snippet,
    sort_option: SortOption | str = SortOption.DATE_DESC,
    starred_first: bool = False,
) -> int:
    option = SortOption(sort_option)

    if starred_first and a.starred != b.starred:
        return -1 if a.starred else 1

    if option in (SortOption.DATE_ASC, SortOption.DATE_DESC):
        left, right = parse_timestamp(a.date), parse_timestamp(b.date)
        order = (left > right) - (left < right)
        return order if option is SortOption.DATE_ASC else -order

    order = _compare_titles(a.title, b.title)
    return order if option is SortOption.TITLE_ASC else -order


def sort_snippets(
    snippets: Iterable[Snippet],
    sort_option: SortOption | str = SortOption.DATE_DESC,
    starred_first: bool = False,
) -> List[Snippet]:
    """Stable sort; equal snippets keep their input order."""
    option = SortOption(sort_option)
    key = cmp_to_key(lambda a, b: compare_snippets(a, b, option, starred_first))
    return sorted(snippets, key=key)


def build_view(
    snippets: Sequence[Snippet],
    *,
    filters: Iterable[str] = (),
    query: str | None = None,
    sort_option: SortOption | str = SortOption.DATE_DESC,
    starred_first: bool = True,
    languages: Iterable[str] | None = None,
) -> List[Snippet]:
    """Side filters first, then the text query, then ordering."""
    if languages is None:
        languages = available_languages(snippets)
    side_filtered = filter_by_side(snippets, filters, languages)
    searched = filter_by_search(side_filtered, query)
    return sort_snippets(searched, sort_option, starred_first)


__all__ = [
    "STARRED_FILTER",
    "SortOption",
    "UNLABELED_FILTER",
    "available_languages",
    "build_view",
    "compare_snippets",
    "filter_by_search",
    "filter_by_side",
    "parse_timestamp",
    "sort_snippets",
    "top_tags",
    "use_system_collation",
]
