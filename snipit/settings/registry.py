from __future__ import annotations

import logging
from typing import List

from .model import Collection, Settings
from .store import SettingsPort

logger = logging.getLogger("snipit")


def _dump(collections: List[Collection]) -> list[dict]:
    return [collection.model_dump() for collection in collections]


class CollectionRegistry:
    """CRUD over the ``collections`` list stored in the settings document.

    Operations are read-then-write against the settings backend; callers must
    await each one before starting the next.
    """

    def __init__(self, settings: SettingsPort) -> None:
        self.settings = settings

    async def _current(self) -> tuple[Settings, List[Collection]]:
        settings = await self.settings.load()
        return settings, list(settings.collections or [])

    async def list(self) -> List[Collection]:
        settings = await self.settings.load()
        if settings.collections is None:
            logger.warning("`collections` missing or invalid in settings; returning an empty list")
            return []
        return list(settings.collections)

    async def get(self, collection_id: str) -> Collection | None:
        settings = await self.settings.load()
        return settings.find_collection(collection_id)

    async def add(self, collection: Collection) -> bool:
        _, collections = await self._current()

        if any(existing.path == collection.path for existing in collections):
            logger.warning("Collection already exists: %s", collection.path)
            return False

        collections.append(collection)
        if not await self.settings.save({"collections": _dump(collections)}):
            return False
        logger.info("Collection added: %s", collection.path)
        return True

    async def remove(self, collection_id: str) -> bool:
        _, collections = await self._current()
        remaining = [collection for collection in collections if collection.id != collection_id]

        if len(remaining) == len(collections):
            logger.warning("Collection id not found: %s", collection_id)
            return False

        if not await self.settings.save({"collections": _dump(remaining)}):
            return False
        logger.info("Collection removed: %s", collection_id)
        return True

    async def rename(self, collection_id: str, name: str) -> bool:
        _, collections = await self._current()
        for collection in collections:
            if collection.id == collection_id:
                collection.name = name
                return await self.settings.save({"collections": _dump(collections)})
        logger.warning("Collection id not found: %s", collection_id)
        return False

    async def verify_exists(self) -> None:
        """Persist an empty ``collections`` list when it is missing or malformed."""
        settings = await self.settings.load()
        if settings.collections is None:
            logger.warning("`collections` missing or invalid in settings; resetting to []")
            await self.settings.save({"collections": []})

    async def select(self, collection_id: str) -> bool:
        if await self.get(collection_id) is None:
            logger.warning("Cannot select unknown collection %s", collection_id)
            return False
        return await self.settings.save({"selectedCollectionId": collection_id})

    async def selected(self) -> Collection | None:
        settings = await self.settings.load()
        return settings.selected_collection()


__all__ = ["CollectionRegistry"]
