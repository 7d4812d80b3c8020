"""Tree models for scanned workspaces and document outlines."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any


@dataclass(frozen=True)
class DocumentNode:
    """A file or folder discovered by a workspace scan."""

    name: str
    path: str
    is_folder: bool
    last_modified: datetime
    children: tuple["DocumentNode", ...] = ()

    def __post_init__(self) -> None:
        if not self.is_folder and self.children:
            msg = f"File node cannot have children: {self.path!r}"
            raise ValueError(msg)

    @property
    def files(self) -> tuple["DocumentNode", ...]:
        return tuple(c for c in self.children if not c.is_folder)

    @property
    def folders(self) -> tuple["DocumentNode", ...]:
        return tuple(c for c in self.children if c.is_folder)

    def to_dict(self) -> dict[str, Any]:
        """Serialize without children; cached file lists are flat."""
        return {
            "name": self.name,
            "path": self.path,
            "isFolder": self.is_folder,
            "lastModified": self.last_modified.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DocumentNode":
        return cls(
            name=data["name"],
            path=data["path"],
            is_folder=bool(data.get("isFolder", False)),
            last_modified=parse_timestamp(data["lastModified"]),
        )


@dataclass
class OutlineNode:
    """A heading and the headings nested below it."""

    title: str
    level: int
    children: list["OutlineNode"] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "level": self.level,
            "children": [c.to_dict() for c in self.children],
        }


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, assuming UTC when no offset is stored."""
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt
