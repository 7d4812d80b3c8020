"""Tests for MCP tool core functions."""

from pathlib import Path

from mdshelf.core.diagram import diagram_url
from mdshelf.mcp.server import (
    mdshelf_diagram_url,
    mdshelf_document_outline,
    mdshelf_list_favorites,
    mdshelf_list_projects,
    mdshelf_scan_workspace,
)
from mdshelf.services.favorites import FavoriteService
from mdshelf.services.projects import ProjectService
from tests.unit.fakes import FakeStore


def test_scan_workspace_returns_tree_and_counts(workspace: Path) -> None:
    result = mdshelf_scan_workspace(str(workspace))

    assert "error" not in result
    assert result["document_count"] == 3
    assert result["tree"]["name"] == "docs"
    assert result["node_count"] > result["document_count"]


def test_scan_workspace_clamps_depth(workspace: Path) -> None:
    shallow = mdshelf_scan_workspace(str(workspace), max_depth=-3)
    assert shallow["document_count"] == 0
    assert shallow["tree"]["children"] == []


def test_scan_workspace_missing_folder(tmp_path: Path) -> None:
    result = mdshelf_scan_workspace(str(tmp_path / "missing"))
    assert "not found" in result["error"]


def test_document_outline(workspace: Path) -> None:
    result = mdshelf_document_outline(str(workspace / "guide" / "intro.md"))

    assert "error" not in result
    intro = result["outline"][0]
    assert intro["title"] == "Intro"
    assert [c["title"] for c in intro["children"]] == ["Setup", "Usage"]


def test_document_outline_missing(tmp_path: Path) -> None:
    result = mdshelf_document_outline(str(tmp_path / "nope.md"))
    assert "not found" in result["error"]


def test_diagram_url_tool() -> None:
    assert mdshelf_diagram_url("A -> B") == {"url": diagram_url("A -> B")}
    assert "error" in mdshelf_diagram_url("  ")


def test_list_projects_reports_active(workspace: Path) -> None:
    projects = ProjectService(FakeStore())
    a = projects.create("A", workspace)
    projects.create("B", workspace)
    projects.set_active(a.id)

    result = mdshelf_list_projects(projects)

    assert result["count"] == 2
    assert result["active_id"] == a.id
    first = result["projects"][0]
    assert first["file_count"] == 3
    assert first["is_active"] is True


def test_list_projects_without_active() -> None:
    result = mdshelf_list_projects(ProjectService(FakeStore()))
    assert result == {"projects": [], "count": 0, "active_id": None}


def test_list_favorites_filters_by_category(tmp_path: Path) -> None:
    favorites = FavoriteService(FakeStore())
    favorites.add("A", tmp_path / "a.md", category="work")
    favorites.add("B", tmp_path / "b.md", category="home")

    result = mdshelf_list_favorites(favorites, category="Work")

    assert result["count"] == 1
    assert result["favorites"][0]["title"] == "A"
    assert result["categories"] == ["home", "work"]
