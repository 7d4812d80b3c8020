"""Favorites: bookmarked documents with access tracking."""

import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

from loguru import logger

from mdshelf.config import FAVORITES_FILE
from mdshelf.exceptions import DuplicateFavoriteError, ValidationError
from mdshelf.models.records import FavoriteRecord
from mdshelf.protocols import StoreProtocol

ChangeListener = Callable[[str], None]


def normalize_path(path: str | Path) -> str:
    """Key used for duplicate detection: absolute and case-insensitive."""
    return os.path.normcase(os.path.abspath(os.fspath(path))).casefold()


def _display_order(favorites: list[FavoriteRecord]) -> list[FavoriteRecord]:
    # Pinned first, then most recently accessed.
    return sorted(favorites, key=lambda f: (not f.is_pinned, -f.last_accessed_at.timestamp()))


def _parse_favorites(raw: Any) -> list[FavoriteRecord]:
    if not isinstance(raw, list):
        msg = f"expected a list of favorites, got {type(raw).__name__}"
        raise TypeError(msg)
    return [FavoriteRecord.from_dict(item) for item in raw]


class FavoriteService:
    """Owns the in-memory favorites collection; saves after every mutation."""

    def __init__(self, store: StoreProtocol) -> None:
        self._store = store
        self._favorites: list[FavoriteRecord] = []
        self._change_listeners: list[ChangeListener] = []

    @property
    def favorites(self) -> list[FavoriteRecord]:
        """All favorites, pinned first, then by last access (newest first)."""
        return _display_order(self._favorites)

    def on_change(self, listener: ChangeListener) -> None:
        self._change_listeners.append(listener)

    def _notify_change(self, operation: str) -> None:
        for listener in self._change_listeners:
            listener(operation)

    def load(self) -> list[FavoriteRecord]:
        favorites = self._store.load(FAVORITES_FILE, parse=_parse_favorites) or []
        self._favorites = _display_order(favorites)
        logger.debug("Loaded {} favorites", len(self._favorites))
        return self.favorites

    def save(self) -> None:
        self._store.save([f.to_dict() for f in self._favorites], FAVORITES_FILE)
        logger.debug("Saved {} favorites", len(self._favorites))

    def find_by_path(self, file_path: str | Path) -> FavoriteRecord | None:
        key = normalize_path(file_path)
        return next((f for f in self._favorites if normalize_path(f.file_path) == key), None)

    def is_favorite(self, file_path: str | Path) -> bool:
        return self.find_by_path(file_path) is not None

    def add(
        self,
        title: str,
        file_path: str | Path,
        description: str = "",
        category: str = "",
    ) -> FavoriteRecord:
        """Bookmark a document, newest first.

        Raises:
            ValidationError: If title or file_path is blank.
            DuplicateFavoriteError: If the path is already a favorite. Nothing
                is changed or saved in that case.
        """
        if not title or not title.strip():
            msg = "Favorite title must not be empty"
            raise ValidationError(msg)
        if not str(file_path).strip():
            msg = "Favorite file path must not be empty"
            raise ValidationError(msg)
        if self.find_by_path(file_path) is not None:
            raise DuplicateFavoriteError(str(file_path))

        favorite = FavoriteRecord(
            title=title.strip(),
            file_path=os.path.abspath(os.fspath(file_path)),
            description=description,
            category=category.strip(),
        )
        self._favorites.insert(0, favorite)
        self.save()

        logger.info("Added favorite {!r}", favorite.title)
        self._notify_change("add")
        return favorite

    def get(self, favorite_id: str) -> FavoriteRecord | None:
        return next((f for f in self._favorites if f.id == favorite_id), None)

    def remove(self, favorite_id: str) -> bool:
        """Delete a favorite; returns False if the id is unknown."""
        favorite = self.get(favorite_id)
        if favorite is None:
            return False
        self._favorites.remove(favorite)
        self.save()
        logger.info("Removed favorite {!r}", favorite.title)
        self._notify_change("remove")
        return True

    def update(self, favorite: FavoriteRecord) -> bool:
        """Replace the favorite with the same id; returns False if unknown.

        Raises:
            DuplicateFavoriteError: If the new path belongs to another favorite.
        """
        for index, existing in enumerate(self._favorites):
            if existing.id != favorite.id:
                continue
            other = self.find_by_path(favorite.file_path)
            if other is not None and other.id != favorite.id:
                raise DuplicateFavoriteError(favorite.file_path)
            self._favorites[index] = favorite
            self.save()
            self._notify_change("update")
            return True
        return False

    def mark_accessed(self, favorite_id: str) -> FavoriteRecord | None:
        """Count an open of the favorite's document; returns None if unknown."""
        favorite = self.get(favorite_id)
        if favorite is None:
            return None
        favorite.mark_accessed()
        self.save()
        self._notify_change("mark_accessed")
        return favorite

    def set_pinned(self, favorite_id: str, pinned: bool = True) -> FavoriteRecord | None:
        favorite = self.get(favorite_id)
        if favorite is None:
            return None
        favorite.is_pinned = pinned
        self.save()
        self._notify_change("set_pinned")
        return favorite

    def categories(self) -> list[str]:
        """Distinct non-blank categories, sorted."""
        return sorted({f.category for f in self._favorites if f.category.strip()})

    def by_category(self, category: str) -> list[FavoriteRecord]:
        wanted = category.casefold()
        return _display_order([f for f in self._favorites if f.category.casefold() == wanted])
