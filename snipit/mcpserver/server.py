"""FastMCP server exposing snippet search over the user's collections."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

from ..config import AppSettings
from ..error_handler import ErrorHandler
from ..query import SortOption, build_view
from ..settings import CollectionRegistry, SettingsStore
from ..snippet import SnippetRepository

logger = logging.getLogger("snipit")


class ServiceContext:
    """Lazy dependency container for MCP tool handlers."""

    def __init__(self, settings: AppSettings | None = None) -> None:
        self._settings = settings
        self._store: SettingsStore | None = None

    @property
    def settings(self) -> AppSettings:
        if self._settings is None:
            self._settings = AppSettings.from_env()
        return self._settings

    @property
    def store(self) -> SettingsStore:
        if self._store is None:
            self._store = SettingsStore(self.settings.settings_path)
        return self._store

    def registry(self) -> CollectionRegistry:
        return CollectionRegistry(self.store)

    def repository(self) -> SnippetRepository:
        return SnippetRepository(self.store, error_handler=ErrorHandler())


def create_server(settings: AppSettings | None = None) -> FastMCP:
    """Create a FastMCP server wired to the local snippet collections."""

    services = ServiceContext(settings)
    server = FastMCP("SnipIt MCP Server")

    @server.tool(
        name="list_collections",
        description="List the registered snippet collections (id, name, path).",
        tags={"snippets", "collections"},
    )
    async def list_collections() -> Dict[str, Any]:
        collections = await services.registry().list()
        return {"collections": [collection.model_dump() for collection in collections]}

    @server.tool(
        name="search_snippets",
        description=(
            "Search stored snippets. `query` accepts field terms such as title:react,"
            ' content:"useState", language:python, tag:cli and bare words that match any field;'
            " all terms must match. `filters` takes side filters: starred, unlabeled or a"
            " language name. `sort` is one of date-desc, date-asc, title-asc, title-desc."
            " Omit `collection_id` to search the selected collection."
        ),
        tags={"snippets", "search"},
    )
    async def search_snippets(
        query: str = "",
        filters: List[str] | None = None,
        sort: str = SortOption.DATE_DESC.value,
        starred_first: bool = True,
        limit: int = 20,
        collection_id: str | None = None,
    ) -> Dict[str, Any]:
        try:
            sort_option = SortOption(sort)
        except ValueError:
            raise ToolError(f"Unknown sort option: {sort}")
        if limit <= 0:
            raise ToolError("Limit must be a positive integer.")

        path: str | None = None
        if collection_id:
            collection = await services.registry().get(collection_id)
            if collection is None:
                raise ToolError(f"Unknown collection: {collection_id}")
            path = collection.path

        repository = services.repository()
        if path is None and await repository.resolve_path() is None:
            raise ToolError("No collection selected.")

        snippets = await repository.list(path)
        ordered = build_view(
            snippets,
            filters=filters or [],
            query=query,
            sort_option=sort_option,
            starred_first=starred_first,
        )
        logger.debug("MCP search %r matched %d of %d snippets", query, len(ordered), len(snippets))
        return {
            "query": query,
            "total": len(ordered),
            "skipped": repository.error_handler.get_error_summary()["total_errors"],
            "results": [snippet.to_record() for snippet in ordered[:limit]],
        }

    return server


__all__ = ["ServiceContext", "create_server"]
