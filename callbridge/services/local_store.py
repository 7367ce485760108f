"""Local key/value store backing the offline scorekeeper."""

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class LocalStore:
    """Stores one JSON document per key as a file in a directory."""

    def __init__(self, directory: Path | str) -> None:
        """Initialize the store.

        Args:
            directory: Where the JSON files live; created on first write

        """
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> dict[str, Any] | None:
        """Read a document, or None if it is missing or unreadable."""
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with path.open(encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError):
            logger.warning("Ignoring unreadable local state %s", path)
            return None

    def set(self, key: str, value: dict[str, Any]) -> None:
        """Write a document, replacing any previous one."""
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            json.dump(value, f, indent=2)
        tmp.replace(path)

    def delete(self, key: str) -> None:
        """Remove a document if present."""
        self._path(key).unlink(missing_ok=True)
