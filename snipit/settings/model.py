from __future__ import annotations

import logging
import uuid
from typing import Any, List, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

logger = logging.getLogger("snipit")

Theme = Literal["light", "dark", "system"]

# Optional text fields, by field name and document key.
_TEXT_FIELDS = {
    "collection_path": "collectionPath",
    "os": "os",
    "first_startup": "firstStartup",
    "selected_collection_id": "selectedCollectionId",
    "model": "model",
}


class Collection(BaseModel):
    """A named directory holding one JSON file per snippet."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    path: str

    model_config = ConfigDict(extra="ignore")


class Settings(BaseModel):
    """Typed view over the settings document.

    Unknown keys are allowed through so a load/dump cycle does not drop them.
    """

    collection_path: str | None = Field(None, alias="collectionPath")
    os: str | None = None
    first_startup: str | None = Field(None, alias="firstStartup")
    selected_collection_id: str | None = Field(None, alias="selectedCollectionId")
    collections: List[Collection] | None = None
    theme: Theme = "system"
    model: str | None = None

    model_config = ConfigDict(populate_by_name=True, extra="allow", protected_namespaces=())

    @model_validator(mode="before")
    @classmethod
    def _drop_mistyped_fields(cls, data: Any) -> Any:
        """Ignore known keys holding the wrong type instead of rejecting the document."""
        if not isinstance(data, dict):
            return data
        healed = dict(data)
        for name, key in _TEXT_FIELDS.items():
            for candidate in {name, key}:
                value = healed.get(candidate)
                if value is not None and not isinstance(value, str):
                    logger.warning("Ignoring `%s` in settings: expected text, got %s", candidate, type(value).__name__)
                    healed.pop(candidate)
        return healed

    @field_validator("collections", mode="before")
    @classmethod
    def _heal_collections(cls, value: Any) -> Any:
        if value is None:
            return None
        if not isinstance(value, list):
            logger.warning("`collections` in settings is not a list (%s); ignoring it", type(value).__name__)
            return None
        healed = []
        for entry in value:
            try:
                healed.append(Collection.model_validate(entry))
            except ValidationError:
                logger.warning("Dropping malformed collection entry: %r", entry)
        return healed

    @field_validator("theme", mode="before")
    @classmethod
    def _default_theme(cls, value: Any) -> Any:
        if value not in ("light", "dark", "system"):
            return "system"
        return value

    def find_collection(self, collection_id: str | None) -> Collection | None:
        if not collection_id:
            return None
        for collection in self.collections or []:
            if collection.id == collection_id:
                return collection
        return None

    def selected_collection(self) -> Collection | None:
        """The saved selection if still registered, else the first collection."""
        chosen = self.find_collection(self.selected_collection_id)
        if chosen is not None:
            return chosen
        collections = self.collections or []
        return collections[0] if collections else None

    def active_collection_path(self) -> str | None:
        """Path of the selected collection, falling back to ``collectionPath``."""
        selected = self.selected_collection()
        if selected is not None:
            return selected.path
        return self.collection_path


__all__ = ["Collection", "Settings", "Theme"]
