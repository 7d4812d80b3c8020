"""Recently opened documents, most recent first."""

from pathlib import Path
from typing import Any

from loguru import logger

from mdshelf.config import RECENT_FILE, RECENT_FILES_LIMIT
from mdshelf.models.document import utc_now
from mdshelf.models.records import RecentFile
from mdshelf.protocols import StoreProtocol


def _parse_recent(raw: Any) -> list[RecentFile]:
    if not isinstance(raw, list):
        msg = f"expected a list of recent files, got {type(raw).__name__}"
        raise TypeError(msg)
    return [RecentFile.from_dict(item) for item in raw]


class RecentFiles:
    def __init__(self, store: StoreProtocol, *, limit: int = RECENT_FILES_LIMIT) -> None:
        self._store = store
        self._limit = limit
        self._items: list[RecentFile] = []

    @property
    def items(self) -> list[RecentFile]:
        return list(self._items)

    def load(self) -> list[RecentFile]:
        self._items = (self._store.load(RECENT_FILE, parse=_parse_recent) or [])[: self._limit]
        return self.items

    def add(self, path: str | Path) -> RecentFile:
        """Move path to the front of the list, dropping the oldest entry past the limit."""
        resolved = str(Path(path).resolve())
        self._items = [item for item in self._items if item.path != resolved]
        entry = RecentFile(path=resolved, name=Path(resolved).name, opened_at=utc_now())
        self._items.insert(0, entry)
        del self._items[self._limit :]
        self._store.save([item.to_dict() for item in self._items], RECENT_FILE)
        logger.debug("Recent files: {} entries", len(self._items))
        return entry

    def clear(self) -> None:
        self._items = []
        self._store.delete(RECENT_FILE)
