"""Snippet model, validation and file-backed storage."""

from .model import Snippet, UNLABELED_TAG, generate_snippet_id
from .repository import SnippetRepository
from .validation import ValidationFailure, validate_changes, validate_draft

__all__ = [
    "Snippet",
    "SnippetRepository",
    "UNLABELED_TAG",
    "ValidationFailure",
    "generate_snippet_id",
    "validate_changes",
    "validate_draft",
]
