from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Sequence

from ..snippet import Snippet
from .parser import FieldTag, Term, parse_query

Predicate = Callable[[Snippet, str], bool]


def _title(snippet: Snippet, value: str) -> bool:
    return value in snippet.title.lower()


def _description(snippet: Snippet, value: str) -> bool:
    return value in (snippet.description or "").lower()


def _content(snippet: Snippet, value: str) -> bool:
    return value in snippet.code.lower()


def _language(snippet: Snippet, value: str) -> bool:
    return value in snippet.language.lower()


def _tag(snippet: Snippet, value: str) -> bool:
    return any(value in tag.lower() for tag in snippet.tags)


def _all(snippet: Snippet, value: str) -> bool:
    return (
        _title(snippet, value)
        or _description(snippet, value)
        or _content(snippet, value)
        or _language(snippet, value)
        or _tag(snippet, value)
    )


PREDICATES: Dict[FieldTag, Predicate] = {
    FieldTag.TITLE: _title,
    FieldTag.DESCRIPTION: _description,
    FieldTag.CONTENT: _content,
    FieldTag.LANGUAGE: _language,
    FieldTag.TAG: _tag,
    FieldTag.ALL: _all,
}

_missing = set(FieldTag) - set(PREDICATES)
if _missing:
    raise RuntimeError(f"No predicate registered for {sorted(tag.value for tag in _missing)}")


def matches_term(snippet: Snippet, term: Term) -> bool:
    return PREDICATES[term.field](snippet, term.value.lower())


def matches(snippet: Snippet, terms: Iterable[Term]) -> bool:
    """True when ``snippet`` satisfies every term."""
    return all(matches_term(snippet, term) for term in terms)


def search(snippets: Sequence[Snippet], query: str | None) -> List[Snippet]:
    terms = parse_query(query)
    if not terms:
        return list(snippets)
    return [snippet for snippet in snippets if matches(snippet, terms)]


__all__ = ["PREDICATES", "Predicate", "matches", "matches_term", "search"]
