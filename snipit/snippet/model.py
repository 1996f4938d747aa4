from __future__ import annotations

import random
from datetime import datetime, timezone
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

UNLABELED_TAG = "unlabeled"

ID_MIN = 100_000_000
ID_MAX = 999_999_999


def generate_snippet_id() -> str:
    """Return a random 9-digit decimal id."""
    return str(random.randint(ID_MIN, ID_MAX))


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class Snippet(BaseModel):
    """A stored code sample with its metadata.

    Keys found in a record that the model does not know are kept in
    ``extras`` and written back by :meth:`to_record`.
    """

    id: str
    title: str = Field(..., min_length=1)
    description: str | None = None
    code: str = Field(..., min_length=1)
    language: str = ""
    tags: List[str] = Field(default_factory=list)
    starred: bool = False
    date: str
    last_edited: str | None = Field(None, alias="lastEdited")
    extras: Dict[str, Any] = Field(default_factory=dict, exclude=True)

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("language", mode="before")
    @classmethod
    def _coerce_language(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("tags")
    @classmethod
    def _dedupe_tags(cls, value: List[str]) -> List[str]:
        seen: set[str] = set()
        unique: List[str] = []
        for tag in value:
            if tag not in seen:
                seen.add(tag)
                unique.append(tag)
        return unique

    @classmethod
    def known_keys(cls) -> set[str]:
        keys: set[str] = set()
        for name, info in cls.model_fields.items():
            if name == "extras":
                continue
            keys.add(name)
            if info.alias:
                keys.add(info.alias)
        return keys

    @classmethod
    def from_record(cls, data: Dict[str, Any]) -> "Snippet":
        """Build a snippet from a decoded JSON record."""
        if not isinstance(data, dict):
            raise TypeError(f"Snippet record must be an object, got {type(data).__name__}")
        known = cls.known_keys()
        fields = {key: value for key, value in data.items() if key in known}
        extras = {key: value for key, value in data.items() if key not in known}
        return cls.model_validate({**fields, "extras": extras})

    def to_record(self) -> Dict[str, Any]:
        """Serialise to the on-disk shape, unknown keys included."""
        record = dict(self.extras)
        record.update(self.model_dump(by_alias=True, exclude_none=True))
        return record

    @classmethod
    def create(
        cls,
        *,
        title: str,
        code: str,
        description: str | None = None,
        language: str = "",
        tags: List[str] | None = None,
        starred: bool = False,
        snippet_id: str | None = None,
    ) -> "Snippet":
        """Create a new snippet; an empty tag list becomes ``["unlabeled"]``."""
        return cls(
            id=snippet_id or generate_snippet_id(),
            title=title,
            description=description,
            code=code,
            language=language,
            tags=list(tags) if tags else [UNLABELED_TAG],
            starred=starred,
            date=utc_now_iso(),
        )

    def revise(self, **changes: Any) -> "Snippet":
        """Return an edited copy; ``id`` and ``date`` never change."""
        changes.pop("id", None)
        changes.pop("date", None)
        data = self.model_dump()
        data["extras"] = dict(self.extras)
        data.update(changes)
        data["last_edited"] = utc_now_iso()
        return type(self).model_validate(data)


__all__ = ["Snippet", "UNLABELED_TAG", "generate_snippet_id", "utc_now_iso"]
