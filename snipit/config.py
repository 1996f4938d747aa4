"""Process-level configuration read from the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger("snipit")

SETTINGS_FILE = "settings.json"
DEFAULT_COLLECTION_DIR = "snippets"
DEFAULT_MODEL = "claude-sonnet-4-5-20250929"


@dataclass(slots=True)
class AppSettings:
    """Where SnipIt keeps its data and how it talks to the metadata agent."""

    home: Path
    log_level: str = "INFO"
    metadata_timeout: float = 120.0
    default_model: str = DEFAULT_MODEL

    @property
    def settings_path(self) -> Path:
        return self.home / SETTINGS_FILE

    @property
    def default_collection_path(self) -> Path:
        return self.home / DEFAULT_COLLECTION_DIR

    @classmethod
    def from_env(cls) -> "AppSettings":
        def _float_env(name: str, default: float) -> float:
            raw = os.getenv(name)
            if not raw:
                return default
            try:
                return float(raw)
            except ValueError:
                logger.warning("Invalid number for %s: %s", name, raw)
                return default

        home = os.getenv("SNIPIT_HOME")
        return cls(
            home=Path(home).expanduser() if home else Path.home() / ".snipit",
            log_level=os.getenv("SNIPIT_LOG_LEVEL", "INFO"),
            metadata_timeout=_float_env("SNIPIT_METADATA_TIMEOUT", 120.0),
            default_model=os.getenv("SNIPIT_DEFAULT_MODEL", DEFAULT_MODEL),
        )


__all__ = ["AppSettings", "DEFAULT_MODEL", "SETTINGS_FILE"]
