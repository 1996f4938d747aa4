"""Settings document, collection registry and first-run bootstrap."""

from .model import Collection, Settings
from .registry import CollectionRegistry
from .startup import initialize
from .store import SettingsPort, SettingsStore

__all__ = [
    "Collection",
    "CollectionRegistry",
    "Settings",
    "SettingsPort",
    "SettingsStore",
    "initialize",
]
