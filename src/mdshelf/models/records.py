"""User-curated records persisted across sessions."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from mdshelf.models.document import DocumentNode, parse_timestamp, utc_now


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class ProjectRecord:
    """A named workspace folder with a cached list of its documents."""

    name: str
    folder_path: str
    description: str = ""
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=utc_now)
    last_opened_at: datetime = field(default_factory=utc_now)
    is_active: bool = False
    files: list[DocumentNode] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "folderPath": self.folder_path,
            "description": self.description,
            "createdAt": self.created_at.isoformat(),
            "lastOpenedAt": self.last_opened_at.isoformat(),
            "isActive": self.is_active,
            "files": [f.to_dict() for f in self.files],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProjectRecord":
        return cls(
            id=data["id"],
            name=data["name"],
            folder_path=data["folderPath"],
            description=data.get("description", ""),
            created_at=parse_timestamp(data["createdAt"]),
            last_opened_at=parse_timestamp(data["lastOpenedAt"]),
            is_active=bool(data.get("isActive", False)),
            files=[DocumentNode.from_dict(f) for f in data.get("files", [])],
        )


@dataclass
class FavoriteRecord:
    """A bookmarked document with access tracking."""

    title: str
    file_path: str
    description: str = ""
    category: str = ""
    id: str = field(default_factory=_new_id)
    added_at: datetime = field(default_factory=utc_now)
    last_accessed_at: datetime = field(default_factory=utc_now)
    access_count: int = 0
    is_pinned: bool = False

    @property
    def display_text(self) -> str:
        return f"{self.title} ({Path(self.file_path).name})"

    def mark_accessed(self) -> None:
        self.last_accessed_at = utc_now()
        self.access_count += 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "filePath": self.file_path,
            "description": self.description,
            "category": self.category,
            "addedAt": self.added_at.isoformat(),
            "lastAccessedAt": self.last_accessed_at.isoformat(),
            "accessCount": self.access_count,
            "isPinned": self.is_pinned,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FavoriteRecord":
        return cls(
            id=data["id"],
            title=data["title"],
            file_path=data["filePath"],
            description=data.get("description", ""),
            category=data.get("category", ""),
            added_at=parse_timestamp(data["addedAt"]),
            last_accessed_at=parse_timestamp(data["lastAccessedAt"]),
            access_count=int(data.get("accessCount", 0)),
            is_pinned=bool(data.get("isPinned", False)),
        )


@dataclass(frozen=True)
class RecentFile:
    """An entry in the recently-opened documents list."""

    path: str
    name: str
    opened_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "name": self.name, "openedAt": self.opened_at.isoformat()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RecentFile":
        return cls(path=data["path"], name=data["name"], opened_at=parse_timestamp(data["openedAt"]))
