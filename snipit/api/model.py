"""Pydantic models for the public API surface."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field

from ..query import SortOption
from ..settings import Collection
from ..snippet import Snippet


class SnippetCreateRequest(BaseModel):
    title: str = Field("", description="Snippet title (required)")
    code: str = Field("", description="Snippet body (required)")
    description: str | None = None
    language: str = ""
    tags: List[str] = Field(default_factory=list, description="Empty means ['unlabeled']")
    starred: bool = False
    collection_id: str | None = Field(
        None, description="Target collection; defaults to the selected one"
    )


class SnippetUpdateRequest(BaseModel):
    title: str | None = None
    code: str | None = None
    description: str | None = None
    language: str | None = None
    tags: List[str] | None = None
    starred: bool | None = None


class SnippetResponse(BaseModel):
    id: str
    title: str
    description: str | None = None
    code: str
    language: str
    tags: List[str]
    starred: bool
    date: str
    last_edited: str | None = None

    @classmethod
    def from_snippet(cls, snippet: Snippet) -> "SnippetResponse":
        return cls(
            id=snippet.id,
            title=snippet.title,
            description=snippet.description,
            code=snippet.code,
            language=snippet.language,
            tags=list(snippet.tags),
            starred=snippet.starred,
            date=snippet.date,
            last_edited=snippet.last_edited,
        )


class SnippetListResponse(BaseModel):
    query: str
    filters: List[str]
    sort: SortOption
    starred_first: bool
    languages: List[str]
    top_tags: List[str]
    total: int
    skipped: int = Field(0, description="Snippet files that could not be read")
    results: List[SnippetResponse]


class CollectionCreateRequest(BaseModel):
    name: str = Field(..., min_length=1)
    path: str = Field(..., min_length=1, description="Absolute directory path")
    id: str | None = None


class CollectionRenameRequest(BaseModel):
    name: str = Field(..., min_length=1)


class SettingsUpdateRequest(BaseModel):
    theme: str | None = None
    model: str | None = None
    selected_collection_id: str | None = Field(None, alias="selectedCollectionId")
    collection_path: str | None = Field(None, alias="collectionPath")

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())


class MetadataRequest(BaseModel):
    code: str
    model: str | None = None
    title: str | None = None
    description: str | None = None
    language: str | None = None
    tags: List[str] | None = None

    model_config = ConfigDict(protected_namespaces=())


class MetadataResponse(BaseModel):
    title: str
    description: str
    code_language: str
    framework: str
    tags: List[str]
    error: str | None = None


class ErrorDetail(BaseModel):
    reason: str
    message: str


__all__ = [
    "CollectionCreateRequest",
    "CollectionRenameRequest",
    "Collection",
    "ErrorDetail",
    "MetadataRequest",
    "MetadataResponse",
    "SettingsUpdateRequest",
    "SnippetCreateRequest",
    "SnippetListResponse",
    "SnippetResponse",
    "SnippetUpdateRequest",
]
