"""JSON-file persistence for the settings document."""

from __future__ import annotations

import asyncio
import json
import logging
import platform
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Mapping, Protocol

from pydantic import ValidationError

from .model import Settings

logger = logging.getLogger("snipit")


class SettingsPort(Protocol):
    """What the registry and repository need from a settings backend."""

    async def load(self) -> Settings: ...

    async def save(self, partial: Mapping[str, Any]) -> bool: ...


def describe_os() -> str:
    system = platform.system()
    release = platform.release()
    if system == "Darwin":
        return f"macOS {release}"
    if system == "Windows":
        return f"Windows {release}"
    if system == "Linux":
        return f"Linux {release}"
    return f"Unknown OS: {system} {release}"


class SettingsStore:
    """Single settings document with shallow merge-on-save.

    There is no locking: two overlapping ``save`` calls may clobber each
    other, so callers await one before issuing the next.
    """

    def __init__(self, path: str | Path, *, os_name: str | None = None) -> None:
        self.path = Path(path)
        self._os_name = os_name

    def _defaults(self) -> Dict[str, Any]:
        return {
            "collectionPath": None,
            "os": self._os_name or describe_os(),
            "firstStartup": datetime.now(timezone.utc).isoformat(),
        }

    def _read_or_create(self) -> Dict[str, Any]:
        if not self.path.exists():
            logger.info("Creating settings document at %s", self.path)
            defaults = self._defaults()
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._write(defaults)
            return defaults

        data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"settings document must be a JSON object, got {type(data).__name__}")
        return data

    def _write(self, data: Mapping[str, Any]) -> None:
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    async def load_raw(self) -> Dict[str, Any]:
        """Return the persisted document as a plain dict (created on first use)."""
        return await asyncio.to_thread(self._read_or_create)

    async def load(self) -> Settings:
        try:
            raw = await self.load_raw()
            return Settings.model_validate(raw)
        except (OSError, ValueError, ValidationError) as exc:
            logger.error("Error loading settings from %s: %s", self.path, exc)
            return Settings(collection_path=None)

    async def save(self, partial: Mapping[str, Any]) -> bool:
        """Merge ``partial`` onto the current document and write it back.

        A document that exists but cannot be read is left untouched.
        """
        try:
            current = await self.load_raw()
        except (OSError, ValueError) as exc:
            logger.error("Settings at %s unreadable (%s); not overwriting it", self.path, exc)
            return False

        merged = {**current, **dict(partial)}
        try:
            await asyncio.to_thread(self._write, merged)
        except (OSError, TypeError, ValueError) as exc:
            logger.error("Error saving settings to %s: %s", self.path, exc)
            return False

        logger.debug("Settings saved to %s", self.path)
        return True

    async def update_model(self, model_name: str) -> bool:
        return await self.save({"model": model_name})

    async def update_theme(self, theme: str) -> bool:
        if theme not in ("light", "dark", "system"):
            logger.warning("Ignoring unknown theme %r", theme)
            return False
        return await self.save({"theme": theme})


__all__ = ["SettingsPort", "SettingsStore", "describe_os"]
