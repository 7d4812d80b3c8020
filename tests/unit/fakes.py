"""Fake implementations for testing the services and renderer."""

import json
from collections.abc import Callable
from typing import Any


class FakeStore:
    """In-memory fake for EntityStore.

    Keeps collections as JSON strings so saved data goes through the same
    serialization as the real store, and records every save for assertions.
    """

    def __init__(self) -> None:
        self.files: dict[str, str] = {}
        self.saves: list[str] = []
        self.fail_saves = False

    def load(self, name: str, *, parse: Callable[[Any], Any] | None = None) -> Any | None:
        raw = self.files.get(name)
        if raw is None or not raw.strip():
            return None
        try:
            data = json.loads(raw)
            return parse(data) if parse is not None else data
        except (ValueError, KeyError, TypeError):
            return None

    def save(self, data: Any, name: str) -> None:
        if self.fail_saves:
            msg = f"FakeStore: save of {name!r} refused"
            raise OSError(msg)
        self.files[name] = json.dumps(data, indent=4)
        self.saves.append(name)

    def exists(self, name: str) -> bool:
        return name in self.files

    def delete(self, name: str) -> None:
        self.files.pop(name, None)

    def read(self, name: str) -> Any:
        """Return the decoded JSON of a saved collection."""
        return json.loads(self.files[name])


class FakeRenderer:
    """Records the markdown it receives and wraps it in a marker element."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    def render(self, text: str) -> str:
        self.calls.append(text)
        return f"<div class='fake'>{text}</div>"
