"""First-run bootstrap: app directory, settings document and default collection."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from .model import Collection
from .registry import CollectionRegistry
from .store import SettingsStore

logger = logging.getLogger("snipit")

DEFAULT_COLLECTION_ID = "default"
DEFAULT_COLLECTION_NAME = "Default Collection"


async def initialize(
    home: str | Path,
    *,
    store: SettingsStore | None = None,
    default_collection_path: str | Path | None = None,
) -> SettingsStore:
    """Make sure the settings document and the default collection exist.

    Safe to call on every start; existing data is left alone.
    """
    home_dir = Path(home)
    await asyncio.to_thread(home_dir.mkdir, parents=True, exist_ok=True)

    store = store or SettingsStore(home_dir / "settings.json")
    registry = CollectionRegistry(store)

    # Creates the document with defaults on first run.
    await store.load()
    await registry.verify_exists()

    collection_dir = Path(default_collection_path or home_dir / "snippets").resolve()
    collections = await registry.list()
    if not any(collection.id == DEFAULT_COLLECTION_ID for collection in collections):
        logger.info("Default collection not found; adding %s", collection_dir)
        await asyncio.to_thread(collection_dir.mkdir, parents=True, exist_ok=True)
        await registry.add(
            Collection(id=DEFAULT_COLLECTION_ID, name=DEFAULT_COLLECTION_NAME, path=str(collection_dir))
        )

    return store


__all__ = ["DEFAULT_COLLECTION_ID", "DEFAULT_COLLECTION_NAME", "initialize"]
