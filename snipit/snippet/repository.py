"""One-file-per-snippet persistence inside a collection directory."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Any, List, Mapping

from pydantic import ValidationError

from ..error_handler import ErrorHandler
from ..settings.store import SettingsPort
from .model import Snippet, generate_snippet_id

logger = logging.getLogger("snipit")

RECORD_EXTENSION = ".json"


def _is_safe_id(snippet_id: str) -> bool:
    if not snippet_id or snippet_id in (".", "..") or "\x00" in snippet_id:
        return False
    separators = {"/", "\\", os.sep}
    if os.altsep:
        separators.add(os.altsep)
    return not any(sep in snippet_id for sep in separators)


class SnippetRepository:
    """CRUD over the snippet files of a collection.

    Every operation takes an optional collection ``path``; without one it
    falls back to the collection currently selected in settings. Failures
    come back as ``None``/``False``/``[]`` rather than exceptions.
    """

    ID_ATTEMPTS = 10

    def __init__(
        self,
        settings: SettingsPort,
        *,
        extension: str = RECORD_EXTENSION,
        error_handler: ErrorHandler | None = None,
    ) -> None:
        self.settings = settings
        self.extension = extension
        self.error_handler = error_handler or ErrorHandler()

    async def resolve_path(self, path: str | Path | None = None) -> Path | None:
        if path:
            return Path(path)
        settings = await self.settings.load()
        active = settings.active_collection_path()
        return Path(active) if active else None

    def _record_path(self, directory: Path, snippet_id: str) -> Path | None:
        if not _is_safe_id(snippet_id):
            logger.error("Rejecting unsafe snippet id %r", snippet_id)
            return None
        return directory / f"{snippet_id}{self.extension}"

    @staticmethod
    def _read_record(file_path: Path) -> Snippet:
        data = json.loads(file_path.read_text(encoding="utf-8"))
        return Snippet.from_record(data)

    def _scan(self, directory: Path) -> List[Snippet]:
        snippets: List[Snippet] = []
        for entry in sorted(directory.iterdir()):
            if not entry.is_file() or not entry.name.endswith(self.extension):
                continue
            try:
                snippets.append(self._read_record(entry))
            except (OSError, ValueError, TypeError, ValidationError) as exc:
                self.error_handler.collect_record_error(exc, str(entry), "list")
        return snippets

    async def list(self, path: str | Path | None = None) -> List[Snippet]:
        directory = await self.resolve_path(path)
        if directory is None:
            logger.warning("No collection path specified or found in settings.")
            return []
        try:
            return await asyncio.to_thread(self._scan, directory)
        except (OSError, ValueError) as exc:
            logger.error("Error loading snippets from %s: %s", directory, exc)
            return []

    async def get(self, snippet_id: str, path: str | Path | None = None) -> Snippet | None:
        directory = await self.resolve_path(path)
        if directory is None:
            return None
        file_path = self._record_path(directory, snippet_id)
        if file_path is None:
            return None
        try:
            return await asyncio.to_thread(self._read_record, file_path)
        except FileNotFoundError:
            logger.debug("Snippet %s not found in %s", snippet_id, directory)
            return None
        except (OSError, ValueError, TypeError, ValidationError) as exc:
            logger.error("Error loading snippet %s: %s", snippet_id, exc)
            return None

    async def save(self, snippet: Snippet, path: str | Path | None = None) -> bool:
        directory = await self.resolve_path(path)
        if directory is None:
            logger.error("No collection path provided!")
            return False
        file_path = self._record_path(directory, snippet.id)
        if file_path is None:
            return False

        payload = json.dumps(snippet.to_record(), indent=2)
        try:
            await asyncio.to_thread(file_path.write_text, payload, encoding="utf-8")
        except (OSError, ValueError) as exc:
            logger.error("Error saving snippet %s: %s", snippet.id, exc)
            return False
        return True

    async def delete(self, snippet_id: str, path: str | Path | None = None) -> bool:
        directory = await self.resolve_path(path)
        if directory is None:
            return False
        file_path = self._record_path(directory, snippet_id)
        if file_path is None:
            return False
        try:
            await asyncio.to_thread(file_path.unlink)
        except FileNotFoundError:
            logger.debug("Snippet %s already absent from %s", snippet_id, directory)
        except (OSError, ValueError) as exc:
            logger.error("Error deleting snippet %s: %s", snippet_id, exc)
            return False
        return True

    async def toggle_star(self, snippet_id: str, path: str | Path | None = None) -> bool:
        """Flip ``starred``. Two unawaited toggles on one id can cancel out."""
        snippet = await self.get(snippet_id, path)
        if snippet is None:
            return False
        snippet.starred = not snippet.starred
        return await self.save(snippet, path)

    async def allocate_id(self, path: str | Path | None = None) -> str | None:
        """Draw a 9-digit id that no file in the collection uses yet."""
        directory = await self.resolve_path(path)
        if directory is None:
            return None
        for _ in range(self.ID_ATTEMPTS):
            candidate = generate_snippet_id()
            file_path = directory / f"{candidate}{self.extension}"
            try:
                taken = await asyncio.to_thread(file_path.exists)
            except (OSError, ValueError) as exc:
                logger.error("Cannot check snippet ids in %s: %s", directory, exc)
                return None
            if not taken:
                return candidate
            logger.warning("Snippet id %s already taken in %s; retrying", candidate, directory)
        logger.error("Could not allocate a free snippet id in %s", directory)
        return None

    async def create(
        self,
        *,
        title: str,
        code: str,
        description: str | None = None,
        language: str = "",
        tags: List[str] | None = None,
        starred: bool = False,
        path: str | Path | None = None,
    ) -> Snippet | None:
        snippet_id = await self.allocate_id(path)
        if snippet_id is None:
            return None
        try:
            snippet = Snippet.create(
                title=title,
                code=code,
                description=description,
                language=language,
                tags=tags,
                starred=starred,
                snippet_id=snippet_id,
            )
        except ValidationError as exc:
            logger.error("Refusing to create invalid snippet: %s", exc)
            return None
        if not await self.save(snippet, path):
            return None
        return snippet

    async def update(
        self,
        snippet_id: str,
        changes: Mapping[str, Any],
        path: str | Path | None = None,
    ) -> Snippet | None:
        current = await self.get(snippet_id, path)
        if current is None:
            return None
        try:
            revised = current.revise(**dict(changes))
        except ValidationError as exc:
            logger.error("Refusing invalid update for snippet %s: %s", snippet_id, exc)
            return None
        if not await self.save(revised, path):
            return None
        return revised


__all__ = ["RECORD_EXTENSION", "SnippetRepository"]
