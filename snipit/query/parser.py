"""Tokenizer for the ``field:value`` search syntax.

``title:react content:"use state" hooks`` parses into three terms; the bare
word ``hooks`` searches every field. Matching is done by
:mod:`snipit.query.matcher`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import List


class FieldTag(str, Enum):
    TITLE = "title"
    DESCRIPTION = "description"
    CONTENT = "content"
    LANGUAGE = "language"
    TAG = "tag"
    ALL = "all"


FIELD_NAMES = {
    "title": FieldTag.TITLE,
    "description": FieldTag.DESCRIPTION,
    "content": FieldTag.CONTENT,
    "language": FieldTag.LANGUAGE,
    "tag": FieldTag.TAG,
    "tags": FieldTag.TAG,
    "all": FieldTag.ALL,
}

# Quoted values are not an escape grammar: the first closing quote ends them.
_TERM_PATTERN = re.compile(r'\w+:"[^"]+"|\w+:\S+|\S+')


@dataclass(frozen=True, slots=True)
class Term:
    field: FieldTag
    value: str


def _strip_quotes(value: str) -> str:
    if value.startswith('"'):
        value = value[1:]
    if value.endswith('"'):
        value = value[:-1]
    return value


def tokenize(query: str) -> List[str]:
    return _TERM_PATTERN.findall(query.lower())


def parse_term(token: str) -> Term:
    name, sep, value = token.partition(":")
    field = FIELD_NAMES.get(name) if sep else None
    if field is None:
        # Unknown prefixes search their value everywhere; URLs and a bare
        # trailing colon keep the whole token.
        if not sep or not value or value.startswith("//"):
            return Term(FieldTag.ALL, _strip_quotes(token))
        return Term(FieldTag.ALL, _strip_quotes(value))
    return Term(field, _strip_quotes(value))


def parse_query(query: str | None) -> List[Term]:
    """Split ``query`` into lowercase terms; blank input yields no terms."""
    if not query or not query.strip():
        return []
    return [parse_term(token) for token in tokenize(query)]


__all__ = ["FIELD_NAMES", "FieldTag", "Term", "parse_query", "parse_term", "tokenize"]
