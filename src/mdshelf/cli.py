"""CLI for mdshelf (scan, outline, render, projects, favorites, MCP server)."""

import json
import sys
from pathlib import Path
from typing import Annotated, NoReturn

import typer
from loguru import logger

from mdshelf.config import DEFAULT_FONT_SIZE, DEFAULT_SCAN_DEPTH
from mdshelf.core.diagram import diagram_url
from mdshelf.core.files import read_document
from mdshelf.core.indexer import collect_documents, scan_workspace, tree_to_dict
from mdshelf.core.outline import extract_outline, iter_outline
from mdshelf.core.render import render_document
from mdshelf.exceptions import MdshelfError
from mdshelf.logging_config import configure_logging
from mdshelf.models.document import DocumentNode
from mdshelf.services.favorites import FavoriteService
from mdshelf.services.projects import ProjectService
from mdshelf.services.recent import RecentFiles
from mdshelf.store import EntityStore

app = typer.Typer(help="mdshelf: browse markdown workspaces, outlines, and bookmarks.")
project_app = typer.Typer(help="Manage projects (named workspace folders).")
favorite_app = typer.Typer(help="Manage favorite documents.")
recent_app = typer.Typer(help="Recently opened documents.")
app.add_typer(project_app, name="project")
app.add_typer(favorite_app, name="favorite")
app.add_typer(recent_app, name="recent")

DataDirOption = Annotated[
    Path | None,
    typer.Option("--data-dir", "-d", help="Directory holding projects and favorites"),
]
JsonOption = Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")]


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    log_file: Annotated[
        Path | None,
        typer.Option("--log-file", help="Also write debug logs to this file"),
    ] = None,
) -> None:
    configure_logging(verbose=verbose, log_file=log_file)


def _fail(message: str) -> NoReturn:
    logger.error("{}", message)
    raise typer.Exit(1)


def _projects(data_dir: Path | None) -> ProjectService:
    service = ProjectService(EntityStore(data_dir))
    service.load()
    return service


def _favorites(data_dir: Path | None) -> FavoriteService:
    service = FavoriteService(EntityStore(data_dir))
    service.load()
    return service


def _recent(data_dir: Path | None) -> RecentFiles:
    recent = RecentFiles(EntityStore(data_dir))
    recent.load()
    return recent


def _echo_tree(node: DocumentNode, depth: int = 0) -> None:
    suffix = "/" if node.is_folder else ""
    typer.echo(f"{'  ' * depth}{node.name}{suffix}")
    for child in node.children:
        _echo_tree(child, depth + 1)


@app.command()
def scan(
    path: Path = typer.Argument(..., help="Folder to scan"),
    depth: int = typer.Option(DEFAULT_SCAN_DEPTH, "--depth", "-m", help="Max folder depth"),
    output_json: JsonOption = False,
) -> None:
    """Scan a folder for markdown documents."""
    try:
        tree = scan_workspace(path, depth)
    except NotADirectoryError:
        _fail(f"Folder not found: {path}")

    if output_json:
        typer.echo(json.dumps(tree_to_dict(tree), indent=2))
        return
    _echo_tree(tree)
    typer.echo(f"\n{len(collect_documents(tree))} documents")


@app.command()
def outline(
    path: Path = typer.Argument(..., help="Markdown document"),
    output_json: JsonOption = False,
) -> None:
    """Print the heading outline of a document."""
    try:
        text = read_document(path)
    except FileNotFoundError:
        _fail(f"Document not found: {path}")

    forest = extract_outline(text)
    if output_json:
        typer.echo(json.dumps([n.to_dict() for n in forest], indent=2))
        return
    for depth, node in iter_outline(forest):
        typer.echo(f"{'  ' * depth}- {node.title}")


@app.command()
def render(
    path: Path = typer.Argument(..., help="Markdown document"),
    dark: bool = typer.Option(False, "--dark", help="Use the dark theme"),
    font_size: int = typer.Option(DEFAULT_FONT_SIZE, "--font-size", "-s", help="Body font size in px"),
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write HTML here instead of stdout"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """Render a document to a themed HTML page."""
    try:
        rendered = render_document(path, dark=dark, font_size=font_size)
    except FileNotFoundError:
        _fail(f"Document not found: {path}")
    except MdshelfError as e:
        _fail(str(e))

    _recent(data_dir).add(path)
    if output is None:
        typer.echo(rendered.html)
        return
    output.write_text(rendered.html, encoding="utf-8")
    logger.info("Wrote {} ({})", output, rendered.file_info)


@app.command(name="diagram-url")
def diagram_url_cmd(
    path: Annotated[
        Path | None,
        typer.Argument(help="File with PlantUML source; reads stdin when omitted or '-'"),
    ] = None,
) -> None:
    """Print the PlantUML server URL for diagram source."""
    if path is None or str(path) == "-":
        source = sys.stdin.read()
    else:
        try:
            source = read_document(path)
        except FileNotFoundError:
            _fail(f"File not found: {path}")
    try:
        typer.echo(diagram_url(source))
    except MdshelfError as e:
        _fail(str(e))


@app.command()
def serve() -> None:
    """Start the MCP server (stdio transport)."""
    from mdshelf.mcp.server import run_mcp_server

    run_mcp_server()


# --- projects ---


@project_app.command("list")
def project_list(data_dir: DataDirOption = None, output_json: JsonOption = False) -> None:
    """List projects; the active one is marked with '*'."""
    from mdshelf.mcp.server import mdshelf_list_projects

    service = _projects(data_dir)
    if output_json:
        typer.echo(json.dumps(mdshelf_list_projects(service), indent=2))
        return
    typer.echo(f"{len(service.projects)} projects:\n")
    for p in service.projects:
        marker = "*" if p.is_active else " "
        typer.echo(f"{marker} {p.name} ({p.folder_path}) - {len(p.files)} files  [id={p.id}]")


@project_app.command("create")
def project_create(
    name: str = typer.Argument(..., help="Project name"),
    folder: Path = typer.Argument(..., help="Existing workspace folder"),
    description: str = typer.Option("", "--description", help="Free-text description"),
    activate: bool = typer.Option(False, "--activate", "-a", help="Make it the active project"),
    data_dir: DataDirOption = None,
) -> None:
    """Create a project from a folder and index its documents."""
    service = _projects(data_dir)
    try:
        project = service.create(name, folder, description)
        if activate:
            service.set_active(project.id)
    except MdshelfError as e:
        _fail(str(e))
    typer.echo(f"Created {project.name} ({len(project.files)} files)  [id={project.id}]")


@project_app.command("activate")
def project_activate(
    project_id: str = typer.Argument(..., help="Project id"),
    data_dir: DataDirOption = None,
) -> None:
    """Make a project the active one."""
    service = _projects(data_dir)
    try:
        project = service.set_active(project_id)
    except MdshelfError as e:
        _fail(str(e))
    typer.echo(f"Active project: {project.name if project else '(none)'}")


@project_app.command("deactivate")
def project_deactivate(data_dir: DataDirOption = None) -> None:
    """Clear the active project."""
    _projects(data_dir).set_active(None)
    typer.echo("No active project.")


@project_app.command("edit")
def project_edit(
    project_id: str = typer.Argument(..., help="Project id"),
    name: Annotated[str | None, typer.Option("--name", help="New name")] = None,
    description: Annotated[str | None, typer.Option("--description", help="New description")] = None,
    data_dir: DataDirOption = None,
) -> None:
    """Rename a project or change its description."""
    service = _projects(data_dir)
    try:
        project = service.edit(project_id, name=name, description=description)
    except MdshelfError as e:
        _fail(str(e))
    typer.echo(f"Updated {project.name}")


@project_app.command("remove")
def project_remove(
    project_id: str = typer.Argument(..., help="Project id"),
    data_dir: DataDirOption = None,
) -> None:
    """Delete a project (the folder itself is untouched)."""
    if _projects(data_dir).delete(project_id):
        typer.echo("Project removed.")
    else:
        typer.echo(f"Project '{project_id}' not found.")


@project_app.command("refresh")
def project_refresh(
    project_id: Annotated[str | None, typer.Argument(help="Project id (default: active)")] = None,
    data_dir: DataDirOption = None,
) -> None:
    """Rescan a project's folder."""
    service = _projects(data_dir)
    project = service.get(project_id) if project_id else service.active
    if project is None:
        _fail("No such project." if project_id else "No active project.")
    if not service.refresh_files(project):
        raise typer.Exit(1)
    typer.echo(f"{project.name}: {len(project.files)} files")


@project_app.command("show")
def project_show(
    project_id: Annotated[str | None, typer.Argument(help="Project id (default: active)")] = None,
    data_dir: DataDirOption = None,
) -> None:
    """Show a project and its cached documents."""
    service = _projects(data_dir)
    project = service.get(project_id) if project_id else service.active
    if project is None:
        _fail("No such project." if project_id else "No active project.")
    typer.echo(f"{project.name}  [id={project.id}]")
    typer.echo(f"  folder: {project.folder_path}")
    if project.description:
        typer.echo(f"  {project.description}")
    typer.echo(f"  last opened: {project.last_opened_at:%Y-%m-%d %H:%M}")
    typer.echo()
    for f in project.files:
        typer.echo(f"  {f.path}")


# --- favorites ---


@favorite_app.command("list")
def favorite_list(
    category: Annotated[str | None, typer.Option("--category", "-c", help="Filter by category")] = None,
    data_dir: DataDirOption = None,
    output_json: JsonOption = False,
) -> None:
    """List favorites, pinned first."""
    from mdshelf.mcp.server import mdshelf_list_favorites

    service = _favorites(data_dir)
    if output_json:
        typer.echo(json.dumps(mdshelf_list_favorites(service, category=category), indent=2))
        return
    items = service.by_category(category) if category else service.favorites
    for f in items:
        pin = "^" if f.is_pinned else " "
        label = f" [{f.category}]" if f.category else ""
        typer.echo(f"{pin} {f.display_text}{label} - opened {f.access_count}x  [id={f.id}]")


@favorite_app.command("add")
def favorite_add(
    path: Path = typer.Argument(..., help="Document to bookmark"),
    title: Annotated[str | None, typer.Option("--title", "-t", help="Title (default: file name)")] = None,
    description: str = typer.Option("", "--description", help="Free-text description"),
    category: str = typer.Option("", "--category", "-c", help="Grouping label"),
    data_dir: DataDirOption = None,
) -> None:
    """Bookmark a document."""
    service = _favorites(data_dir)
    try:
        favorite = service.add(title or path.stem, path, description, category)
    except MdshelfError as e:
        _fail(str(e))
    typer.echo(f"Added {favorite.display_text}  [id={favorite.id}]")


@favorite_app.command("remove")
def favorite_remove(
    favorite_id: str = typer.Argument(..., help="Favorite id"),
    data_dir: DataDirOption = None,
) -> None:
    """Remove a bookmark."""
    if _favorites(data_dir).remove(favorite_id):
        typer.echo("Favorite removed.")
    else:
        typer.echo(f"Favorite '{favorite_id}' not found.")


@favorite_app.command("open")
def favorite_open(
    favorite_id: str = typer.Argument(..., help="Favorite id"),
    data_dir: DataDirOption = None,
) -> None:
    """Open a bookmarked document: count the access and print its outline."""
    service = _favorites(data_dir)
    favorite = service.get(favorite_id)
    if favorite is None:
        _fail(f"Favorite '{favorite_id}' not found.")
    try:
        text = read_document(favorite.file_path)
    except FileNotFoundError:
        _fail(f"Document not found: {favorite.file_path}")

    service.mark_accessed(favorite.id)
    _recent(data_dir).add(favorite.file_path)
    typer.echo(favorite.file_path)
    for depth, node in iter_outline(extract_outline(text)):
        typer.echo(f"{'  ' * depth}- {node.title}")


@favorite_app.command("pin")
def favorite_pin(
    favorite_id: str = typer.Argument(..., help="Favorite id"),
    unpin: bool = typer.Option(False, "--unpin", help="Remove the pin instead"),
    data_dir: DataDirOption = None,
) -> None:
    """Pin a favorite to the top of the list."""
    favorite = _favorites(data_dir).set_pinned(favorite_id, not unpin)
    if favorite is None:
        _fail(f"Favorite '{favorite_id}' not found.")
    typer.echo(f"{'Unpinned' if unpin else 'Pinned'} {favorite.title}")


@favorite_app.command("categories")
def favorite_categories(data_dir: DataDirOption = None) -> None:
    """List favorite categories."""
    for category in _favorites(data_dir).categories():
        typer.echo(category)


# --- recent ---


@recent_app.command("list")
def recent_list(data_dir: DataDirOption = None) -> None:
    """Show recently opened documents."""
    for item in _recent(data_dir).items:
        typer.echo(f"  {item.opened_at:%Y-%m-%d %H:%M}  {item.path}")


@recent_app.command("clear")
def recent_clear(data_dir: DataDirOption = None) -> None:
    """Forget recently opened documents."""
    _recent(data_dir).clear()
    typer.echo("Recent files cleared.")
