"""FastAPI routes over settings, collections, snippets and metadata completion."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query, Request, Response, status

from ..agent import MetadataCompleter
from ..config import AppSettings
from ..error_handler import ErrorHandler
from ..query import SortOption
from ..settings import Collection, CollectionRegistry, Settings, SettingsStore
from ..snippet import SnippetRepository
from .model import (
    CollectionCreateRequest,
    CollectionRenameRequest,
    MetadataRequest,
    MetadataResponse,
    SettingsUpdateRequest,
    SnippetCreateRequest,
    SnippetListResponse,
    SnippetResponse,
    SnippetUpdateRequest,
)
from .service import (
    add_collection_service,
    complete_metadata_service,
    create_snippet_service,
    delete_snippet_service,
    get_settings_service,
    get_snippet_service,
    list_collections_service,
    list_snippets_service,
    remove_collection_service,
    rename_collection_service,
    select_collection_service,
    toggle_star_service,
    update_settings_service,
    update_snippet_service,
)


def get_app_settings(request: Request) -> AppSettings:
    settings = getattr(request.app.state, "settings", None)
    if not isinstance(settings, AppSettings):
        raise RuntimeError("App settings have not been initialised")
    return settings


def get_store(
    request: Request,
    settings: AppSettings = Depends(get_app_settings),
) -> SettingsStore:
    store = getattr(request.app.state, "settings_store", None)
    if store is None:
        store = SettingsStore(settings.settings_path)
        request.app.state.settings_store = store
    return store


def get_registry(store: SettingsStore = Depends(get_store)) -> CollectionRegistry:
    return CollectionRegistry(store)


def get_repository(store: SettingsStore = Depends(get_store)) -> SnippetRepository:
    # Skipped-file reports are per request.
    return SnippetRepository(store, error_handler=ErrorHandler())


def get_completer(
    request: Request,
    settings: AppSettings = Depends(get_app_settings),
) -> MetadataCompleter:
    completer = getattr(request.app.state, "metadata_completer", None)
    if completer is None:
        completer = MetadataCompleter(
            timeout=settings.metadata_timeout,
            default_model=settings.default_model,
        )
        request.app.state.metadata_completer = completer
    return completer


router = APIRouter()


@router.get("/settings", response_model=Settings, response_model_by_alias=True)
async def read_settings(store: SettingsStore = Depends(get_store)) -> Settings:
    return await get_settings_service(store)


@router.patch("/settings", response_model=Settings, response_model_by_alias=True)
async def update_settings(
    payload: SettingsUpdateRequest,
    store: SettingsStore = Depends(get_store),
) -> Settings:
    return await update_settings_service(payload, store)


@router.get("/collections", response_model=List[Collection])
async def list_collections(registry: CollectionRegistry = Depends(get_registry)) -> List[Collection]:
    return await list_collections_service(registry)


@router.post("/collections", response_model=Collection, status_code=status.HTTP_201_CREATED)
async def add_collection(
    payload: CollectionCreateRequest,
    registry: CollectionRegistry = Depends(get_registry),
) -> Collection:
    return await add_collection_service(payload, registry)


@router.delete("/collections/{collection_id}", response_class=Response)
async def remove_collection(
    collection_id: str,
    registry: CollectionRegistry = Depends(get_registry),
) -> Response:
    """Unregister a collection; its snippet files stay on disk."""

    await remove_collection_service(collection_id, registry)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/collections/{collection_id}", response_model=Collection)
async def rename_collection(
    collection_id: str,
    payload: CollectionRenameRequest,
    registry: CollectionRegistry = Depends(get_registry),
) -> Collection:
    return await rename_collection_service(collection_id, payload.name, registry)


@router.post("/collections/{collection_id}/select", response_model=Collection)
async def select_collection(
    collection_id: str,
    registry: CollectionRegistry = Depends(get_registry),
) -> Collection:
    return await select_collection_service(collection_id, registry)


@router.get("/snippets", response_model=SnippetListResponse)
async def list_snippets(
    query: str = Query("", description="Structured search, e.g. title:react content:\"useState\""),
    filters: List[str] | None = Query(None, description="Side filters: starred, unlabeled, or a language"),
    sort: SortOption = Query(SortOption.DATE_DESC),
    starred_first: bool = Query(True),
    collection_id: str | None = Query(None, description="Defaults to the selected collection"),
    repository: SnippetRepository = Depends(get_repository),
    registry: CollectionRegistry = Depends(get_registry),
) -> SnippetListResponse:
    return await list_snippets_service(
        repository,
        registry,
        query=query,
        filters=filters or [],
        sort=sort,
        starred_first=starred_first,
        collection_id=collection_id,
    )


@router.post("/snippets", response_model=SnippetResponse, status_code=status.HTTP_201_CREATED)
async def create_snippet(
    payload: SnippetCreateRequest,
    repository: SnippetRepository = Depends(get_repository),
    registry: CollectionRegistry = Depends(get_registry),
) -> SnippetResponse:
    return await create_snippet_service(payload, repository, registry)


@router.get("/snippets/{snippet_id}", response_model=SnippetResponse)
async def get_snippet(
    snippet_id: str,
    collection_id: str | None = Query(None),
    repository: SnippetRepository = Depends(get_repository),
    registry: CollectionRegistry = Depends(get_registry),
) -> SnippetResponse:
    return await get_snippet_service(snippet_id, repository, registry, collection_id=collection_id)


@router.put("/snippets/{snippet_id}", response_model=SnippetResponse)
async def update_snippet(
    snippet_id: str,
    payload: SnippetUpdateRequest,
    collection_id: str | None = Query(None),
    repository: SnippetRepository = Depends(get_repository),
    registry: CollectionRegistry = Depends(get_registry),
) -> SnippetResponse:
    return await update_snippet_service(
        snippet_id, payload, repository, registry, collection_id=collection_id
    )


@router.delete("/snippets/{snippet_id}", response_class=Response)
async def delete_snippet(
    snippet_id: str,
    collection_id: str | None = Query(None),
    repository: SnippetRepository = Depends(get_repository),
    registry: CollectionRegistry = Depends(get_registry),
) -> Response:
    await delete_snippet_service(snippet_id, repository, registry, collection_id=collection_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/snippets/{snippet_id}/star", response_model=SnippetResponse)
async def toggle_star(
    snippet_id: str,
    collection_id: str | None = Query(None),
    repository: SnippetRepository = Depends(get_repository),
    registry: CollectionRegistry = Depends(get_registry),
) -> SnippetResponse:
    return await toggle_star_service(snippet_id, repository, registry, collection_id=collection_id)


@router.post("/metadata", response_model=MetadataResponse)
async def complete_metadata(
    payload: MetadataRequest,
    completer: MetadataCompleter = Depends(get_completer),
    store: SettingsStore = Depends(get_store),
) -> MetadataResponse:
    return await complete_metadata_service(payload, completer, store)


__all__ = ["router"]
