"""MCP server exposing workspace scanning, outlines, diagrams, and bookmarks."""

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from loguru import logger
from mcp.server.fastmcp import Context, FastMCP

from mdshelf.config import DATA_DIR_ENV, DEFAULT_SCAN_DEPTH
from mdshelf.core.diagram import diagram_url
from mdshelf.core.files import read_document
from mdshelf.core.indexer import collect_documents, count_nodes, scan_workspace, tree_to_dict
from mdshelf.core.outline import extract_outline
from mdshelf.exceptions import MdshelfError
from mdshelf.services.favorites import FavoriteService
from mdshelf.services.projects import ProjectService
from mdshelf.store import EntityStore

# --- Core functions (testable without MCP context) ---


def mdshelf_scan_workspace(path: str, *, max_depth: int = DEFAULT_SCAN_DEPTH) -> dict[str, Any]:
    """Scan a folder for markdown documents and return the tree."""
    max_depth = max(0, min(max_depth, 10))
    try:
        tree = scan_workspace(path, max_depth)
    except NotADirectoryError:
        return {"error": f"Folder '{path}' not found."}
    documents = collect_documents(tree)
    return {
        "tree": tree_to_dict(tree),
        "document_count": len(documents),
        "node_count": count_nodes(tree),
    }


def mdshelf_document_outline(path: str) -> dict[str, Any]:
    """Return the heading outline of a document."""
    try:
        text = read_document(path)
    except FileNotFoundError:
        return {"error": f"Document '{path}' not found."}
    outline = extract_outline(text)
    return {"path": str(Path(path).resolve()), "outline": [n.to_dict() for n in outline]}


def mdshelf_diagram_url(source: str) -> dict[str, Any]:
    """Build the PlantUML server URL for diagram source."""
    try:
        return {"url": diagram_url(source)}
    except MdshelfError as e:
        return {"error": str(e)}


def mdshelf_list_projects(projects: ProjectService) -> dict[str, Any]:
    active = projects.active
    return {
        "projects": [
            {
                "id": p.id,
                "name": p.name,
                "folder_path": p.folder_path,
                "description": p.description,
                "is_active": p.is_active,
                "file_count": len(p.files),
                "last_opened_at": p.last_opened_at.isoformat(),
            }
            for p in projects.projects
        ],
        "count": len(projects.projects),
        "active_id": active.id if active else None,
    }


def mdshelf_list_favorites(favorites: FavoriteService, *, category: str | None = None) -> dict[str, Any]:
    items = favorites.by_category(category) if category else favorites.favorites
    return {
        "favorites": [
            {
                "id": f.id,
                "title": f.title,
                "file_path": f.file_path,
                "category": f.category,
                "is_pinned": f.is_pinned,
                "access_count": f.access_count,
                "last_accessed_at": f.last_accessed_at.isoformat(),
            }
            for f in items
        ],
        "count": len(items),
        "categories": favorites.categories(),
    }


# --- MCP Server Setup ---


@dataclass
class ServerContext:
    """Collections loaded once for the server lifetime."""

    store: EntityStore
    projects: ProjectService
    favorites: FavoriteService


@asynccontextmanager
async def server_lifespan(_server: FastMCP) -> AsyncIterator[ServerContext]:
    """Load projects and favorites on startup."""
    data_dir = os.environ.get(DATA_DIR_ENV)
    store = EntityStore(data_dir)
    projects = ProjectService(store)
    favorites = FavoriteService(store)
    projects.load()
    favorites.load()
    logger.info(
        "mdshelf server ready: {} projects, {} favorites",
        len(projects.projects),
        len(favorites.favorites),
    )
    yield ServerContext(store=store, projects=projects, favorites=favorites)


mcp_server = FastMCP(
    "mdshelf",
    instructions="""\
mdshelf indexes folders of markdown documents.

1. Use mdshelf_list_projects_tool to find the user's workspaces (the active one
   is the folder they are currently working in).
2. Use mdshelf_scan_workspace_tool on a project folder to list its documents.
3. Use mdshelf_document_outline_tool to see a document's heading structure
   before reading it in full.
""",
    lifespan=server_lifespan,
)


def _ctx(mcp_ctx: Context) -> ServerContext:
    return mcp_ctx.request_context.lifespan_context  # type: ignore[return-value]


# --- MCP Tool Wrappers ---


@mcp_server.tool()
async def mdshelf_scan_workspace_tool(path: str, max_depth: int = DEFAULT_SCAN_DEPTH) -> dict[str, Any]:
    """Scan a folder and return its folders and markdown documents as a tree.

    Hidden folders are skipped. Large directories are capped at 100
    subfolders and 500 documents each.

    Args:
        path: Folder to scan.
        max_depth: Folder levels to descend (0-10, default 2).
    """
    return mdshelf_scan_workspace(path, max_depth=max_depth)


@mcp_server.tool()
async def mdshelf_document_outline_tool(path: str) -> dict[str, Any]:
    """Return the nested heading outline (table of contents) of a document.

    Args:
        path: Document path.
    """
    return mdshelf_document_outline(path)


@mcp_server.tool()
async def mdshelf_diagram_url_tool(source: str) -> dict[str, Any]:
    """Build a PlantUML server image URL for diagram source.

    @startuml/@enduml are added when missing.

    Args:
        source: PlantUML diagram text.
    """
    return mdshelf_diagram_url(source)


@mcp_server.tool()
async def mdshelf_list_projects_tool(ctx: Context) -> dict[str, Any]:
    """List saved projects and which one is active."""
    return mdshelf_list_projects(_ctx(ctx).projects)


@mcp_server.tool()
async def mdshelf_list_favorites_tool(ctx: Context, category: str | None = None) -> dict[str, Any]:
    """List bookmarked documents, pinned first.

    Args:
        category: Only favorites in this category (case-insensitive).
    """
    return mdshelf_list_favorites(_ctx(ctx).favorites, category=category)


def run_mcp_server() -> None:
    """Run the MCP server with stdio transport."""
    from mdshelf.logging_config import configure_logging

    configure_logging(verbose=False)
    mcp_server.run(transport="stdio")
