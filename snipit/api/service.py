"""Service-layer helpers behind the HTTP routes."""

from __future__ import annotations

import logging
from typing import List, Sequence

from fastapi import HTTPException

from ..agent import MetadataCompleter, MetadataFailure, MetadataFailureReason
from ..query import SortOption, available_languages, build_view, top_tags
from ..settings import Collection, CollectionRegistry, Settings, SettingsStore
from ..snippet import SnippetRepository, ValidationFailure, validate_changes, validate_draft
from .model import (
    CollectionCreateRequest,
    ErrorDetail,
    MetadataRequest,
    MetadataResponse,
    SettingsUpdateRequest,
    SnippetCreateRequest,
    SnippetListResponse,
    SnippetResponse,
    SnippetUpdateRequest,
)

logger = logging.getLogger("snipit")


def validation_error(failure: ValidationFailure) -> HTTPException:
    return HTTPException(
        status_code=422,
        detail=ErrorDetail(reason=failure.value, message=failure.message).model_dump(),
    )


async def lookup_collection_path(
    collection_id: str | None,
    registry: CollectionRegistry,
    repository: SnippetRepository,
) -> str | None:
    """Path of ``collection_id``, or of the selected collection when omitted."""
    if collection_id:
        collection = await registry.get(collection_id)
        if collection is None:
            raise HTTPException(status_code=404, detail="Collection not found")
        return collection.path

    path = await repository.resolve_path()
    return str(path) if path is not None else None


async def resolve_collection_path(
    collection_id: str | None,
    registry: CollectionRegistry,
    repository: SnippetRepository,
) -> str:
    path = await lookup_collection_path(collection_id, registry, repository)
    if path is None:
        raise validation_error(ValidationFailure.NO_COLLECTION)
    return path


# Settings ---------------------------------------------------------------------


async def get_settings_service(store: SettingsStore) -> Settings:
    return await store.load()


async def update_settings_service(payload: SettingsUpdateRequest, store: SettingsStore) -> Settings:
    partial = payload.model_dump(by_alias=True, exclude_unset=True)
    if "theme" in partial and partial["theme"] not in ("light", "dark", "system"):
        raise HTTPException(status_code=422, detail=f"Unknown theme: {partial['theme']}")
    if partial and not await store.save(partial):
        raise HTTPException(status_code=500, detail="Failed to save settings")
    return await store.load()


# Collections ------------------------------------------------------------------


async def list_collections_service(registry: CollectionRegistry) -> List[Collection]:
    return await registry.list()


async def add_collection_service(payload: CollectionCreateRequest, registry: CollectionRegistry) -> Collection:
    fields = payload.model_dump(exclude_none=True)
    collection = Collection(**fields)
    if not await registry.add(collection):
        raise HTTPException(status_code=409, detail="A collection with this path already exists")
    return collection


async def remove_collection_service(collection_id: str, registry: CollectionRegistry) -> None:
    if not await registry.remove(collection_id):
        raise HTTPException(status_code=404, detail="Collection not found")


async def rename_collection_service(collection_id: str, name: str, registry: CollectionRegistry) -> Collection:
    if not await registry.rename(collection_id, name):
        raise HTTPException(status_code=404, detail="Collection not found")
    collection = await registry.get(collection_id)
    if collection is None:  # pragma: no cover - removed concurrently
        raise HTTPException(status_code=404, detail="Collection not found")
    return collection


async def select_collection_service(collection_id: str, registry: CollectionRegistry) -> Collection:
    if not await registry.select(collection_id):
        raise HTTPException(status_code=404, detail="Collection not found")
    collection = await registry.get(collection_id)
    if collection is None:  # pragma: no cover - removed concurrently
        raise HTTPException(status_code=404, detail="Collection not found")
    return collection


# Snippets ---------------------------------------------------------------------


async def list_snippets_service(
    repository: SnippetRepository,
    registry: CollectionRegistry,
    *,
    query: str = "",
    filters: Sequence[str] = (),
    sort: SortOption = SortOption.DATE_DESC,
    starred_first: bool = True,
    collection_id: str | None = None,
) -> SnippetListResponse:
    path = await resolve_collection_path(collection_id, registry, repository)
    snippets = await repository.list(path)
    languages = available_languages(snippets)
    ordered = build_view(
        snippets,
        filters=filters,
        query=query,
        sort_option=sort,
        starred_first=starred_first,
        languages=languages,
    )
    return SnippetListResponse(
        query=query,
        filters=list(filters),
        sort=sort,
        starred_first=starred_first,
        languages=languages,
        top_tags=top_tags(snippets),
        total=len(snippets),
        skipped=repository.error_handler.get_error_summary()["total_errors"],
        results=[SnippetResponse.from_snippet(snippet) for snippet in ordered],
    )


async def get_snippet_service(
    snippet_id: str,
    repository: SnippetRepository,
    registry: CollectionRegistry,
    *,
    collection_id: str | None = None,
) -> SnippetResponse:
    path = await resolve_collection_path(collection_id, registry, repository)
    snippet = await repository.get(snippet_id, path)
    if snippet is None:
        raise HTTPException(status_code=404, detail="Snippet not found")
    return SnippetResponse.from_snippet(snippet)


async def create_snippet_service(
    payload: SnippetCreateRequest,
    repository: SnippetRepository,
    registry: CollectionRegistry,
) -> SnippetResponse:
    path = await lookup_collection_path(payload.collection_id, registry, repository)
    failure = validate_draft(payload.title, payload.code, path)
    if failure is not None:
        raise validation_error(failure)

    snippet = await repository.create(
        title=payload.title,
        code=payload.code,
        description=payload.description,
        language=payload.language,
        tags=payload.tags,
        starred=payload.starred,
        path=path,
    )
    if snippet is None:
        raise HTTPException(status_code=500, detail="Failed to save snippet")
    return SnippetResponse.from_snippet(snippet)


async def update_snippet_service(
    snippet_id: str,
    payload: SnippetUpdateRequest,
    repository: SnippetRepository,
    registry: CollectionRegistry,
    *,
    collection_id: str | None = None,
) -> SnippetResponse:
    changes = payload.model_dump(exclude_unset=True)
    failure = validate_changes(changes)
    if failure is not None:
        raise validation_error(failure)

    path = await resolve_collection_path(collection_id, registry, repository)
    if await repository.get(snippet_id, path) is None:
        raise HTTPException(status_code=404, detail="Snippet not found")
    snippet = await repository.update(snippet_id, changes, path)
    if snippet is None:
        raise HTTPException(status_code=500, detail="Failed to save snippet")
    return SnippetResponse.from_snippet(snippet)


async def delete_snippet_service(
    snippet_id: str,
    repository: SnippetRepository,
    registry: CollectionRegistry,
    *,
    collection_id: str | None = None,
) -> None:
    path = await resolve_collection_path(collection_id, registry, repository)
    if not await repository.delete(snippet_id, path):
        raise HTTPException(status_code=500, detail="Failed to delete snippet")


async def toggle_star_service(
    snippet_id: str,
    repository: SnippetRepository,
    registry: CollectionRegistry,
    *,
    collection_id: str | None = None,
) -> SnippetResponse:
    path = await resolve_collection_path(collection_id, registry, repository)
    if not await repository.toggle_star(snippet_id, path):
        raise HTTPException(status_code=404, detail="Snippet not found")
    snippet = await repository.get(snippet_id, path)
    if snippet is None:  # pragma: no cover - deleted concurrently
        raise HTTPException(status_code=404, detail="Snippet not found")
    return SnippetResponse.from_snippet(snippet)


# Metadata ---------------------------------------------------------------------


async def complete_metadata_service(
    payload: MetadataRequest,
    completer: MetadataCompleter,
    store: SettingsStore,
) -> MetadataResponse:
    model = payload.model
    if model is None:
        model = (await store.load()).model

    result = await completer.complete(
        payload.code,
        model,
        title=payload.title,
        description=payload.description,
        language=payload.language,
        tags=payload.tags,
    )
    if isinstance(result, MetadataFailure):
        status_code = 422 if result.reason is MetadataFailureReason.EMPTY_CODE else 502
        raise HTTPException(
            status_code=status_code,
            detail=ErrorDetail(reason=result.reason.value, message=result.message).model_dump(),
        )
    return MetadataResponse(**result.model_dump())


__all__ = [
    "add_collection_service",
    "complete_metadata_service",
    "create_snippet_service",
    "delete_snippet_service",
    "get_settings_service",
    "get_snippet_service",
    "list_collections_service",
    "list_snippets_service",
    "lookup_collection_path",
    "remove_collection_service",
    "rename_collection_service",
    "resolve_collection_path",
    "select_collection_service",
    "toggle_star_service",
    "update_settings_service",
    "update_snippet_service",
]
