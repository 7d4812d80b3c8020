"""Protocols for dependency injection in the services and renderer."""

from collections.abc import Callable
from typing import Any, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")


@runtime_checkable
class StoreProtocol(Protocol):
    """Protocol for named-collection stores used by the services."""

    def load(self, name: str, *, parse: Callable[[Any], T] | None = None) -> T | Any | None:
        """Return the stored collection, or None if absent or unreadable."""
        ...

    def save(self, data: Any, name: str) -> None:
        """Overwrite the named collection with data."""
        ...

    def exists(self, name: str) -> bool:
        """Check whether the named collection has a backing file."""
        ...

    def delete(self, name: str) -> None:
        """Remove the named collection; no-op if absent."""
        ...


@runtime_checkable
class MarkupRendererProtocol(Protocol):
    """Protocol for the external markdown-to-HTML converter."""

    def render(self, text: str) -> str:
        """Render markdown text to an HTML fragment."""
        ...
