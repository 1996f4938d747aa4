"""Precondition checks run before a snippet reaches the repository."""

from __future__ import annotations

from enum import Enum
from typing import Any, Mapping


class ValidationFailure(str, Enum):
    MISSING_TITLE = "missing_title"
    MISSING_CODE = "missing_code"
    NO_COLLECTION = "no_collection"

    @property
    def message(self) -> str:
        return _MESSAGES[self]


_MESSAGES = {
    ValidationFailure.MISSING_TITLE: "Title and code are required.",
    ValidationFailure.MISSING_CODE: "Title and code are required.",
    ValidationFailure.NO_COLLECTION: "No collection selected. Please select a collection first.",
}


def validate_draft(
    title: str | None,
    code: str | None,
    collection_path: str | None,
) -> ValidationFailure | None:
    """Return the first failed precondition, or ``None`` when the draft can be saved."""
    if not title or not title.strip():
        return ValidationFailure.MISSING_TITLE
    if not code or not code.strip():
        return ValidationFailure.MISSING_CODE
    if not collection_path:
        return ValidationFailure.NO_COLLECTION
    return None


def validate_changes(changes: Mapping[str, Any]) -> ValidationFailure | None:
    """Like :func:`validate_draft` for a partial edit: only fields present are checked."""
    if "title" in changes and not (changes["title"] or "").strip():
        return ValidationFailure.MISSING_TITLE
    if "code" in changes and not (changes["code"] or "").strip():
        return ValidationFailure.MISSING_CODE
    return None


__all__ = ["ValidationFailure", "validate_changes", "validate_draft"]
