"""Markdown workspace indexing, outlines, PlantUML links, projects and favorites."""

from mdshelf.protocols import MarkupRendererProtocol, StoreProtocol
from mdshelf.services.favorites import FavoriteService
from mdshelf.services.projects import ProjectService
from mdshelf.store import EntityStore

__all__ = ["EntityStore", "FavoriteService", "MarkupRendererProtocol", "ProjectService", "StoreProtocol"]
