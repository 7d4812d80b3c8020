"""JSON file store for named collections."""

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

from loguru import logger

from mdshelf.config import resolve_data_directory

T = TypeVar("T")


class EntityStore:
    """Persist whole collections as JSON files in a single data directory.

    - Each name maps to one independent file; there are no cross-file
      transactions.
    - Reads favor availability: a missing, blank, or undecodable file loads
      as None.
    - Writes and deletes raise on failure, so a lost save is never silent.
    """

    def __init__(self, directory: str | Path | None = None) -> None:
        self.directory = Path(directory).expanduser() if directory else resolve_data_directory()
        logger.debug("Store ready, directory {!r}", str(self.directory))

    def _ensure_directory(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)

    def path_for(self, name: str) -> Path:
        """Return the backing file for name, rejecting names outside the directory."""
        if not name or Path(name).is_absolute():
            msg = f"must be a relative file name: {name!r}"
            raise ValueError(msg)
        path = (self.directory / name).resolve()
        if path.parent != self.directory.resolve():
            msg = f"Path escapes data directory: {name!r}"
            raise ValueError(msg)
        return path

    def load(self, name: str, *, parse: Callable[[Any], T] | None = None) -> T | Any | None:
        """Load a collection.

        Args:
            name: File name inside the data directory.
            parse: Optional converter applied to the decoded JSON. Errors it
                raises are treated like a corrupt file.

        Returns:
            The (parsed) collection, or None if the file is missing, blank,
            or cannot be decoded.
        """
        path = self.path_for(name)
        try:
            contents = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Cannot read {}: {}", path, e)
            return None

        if not contents.strip():
            return None

        try:
            data = json.loads(contents)
            return parse(data) if parse is not None else data
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("Ignoring unreadable data in {}: {}", path, e)
            return None

    def save(self, data: Any, name: str) -> None:
        """Serialize data to JSON and overwrite the named file."""
        path = self.path_for(name)
        contents = json.dumps(data, indent=4, ensure_ascii=False) + "\n"
        try:
            self._ensure_directory()
            path.write_text(contents, encoding="utf-8")
        except OSError:
            logger.error("Failed to save {}", path)
            raise
        logger.debug("Saved {}", path)

    def exists(self, name: str) -> bool:
        return self.path_for(name).is_file()

    def delete(self, name: str) -> None:
        """Remove the named file; does nothing if it is absent."""
        path = self.path_for(name)
        try:
            path.unlink(missing_ok=True)
        except OSError:
            logger.error("Failed to delete {}", path)
            raise
        logger.debug("Deleted {}", path)
