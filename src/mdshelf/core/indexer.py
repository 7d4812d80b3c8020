"""Bounded scan of a workspace folder into a DocumentNode tree."""

import os
import stat
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from loguru import logger

from mdshelf.config import (
    DEFAULT_SCAN_DEPTH,
    DOCUMENT_EXTENSIONS,
    MAX_FILES_PER_DIRECTORY,
    MAX_FOLDERS_PER_DIRECTORY,
)
from mdshelf.exceptions import ScanCancelledError
from mdshelf.models.document import DocumentNode

_HIDDEN_ATTRIBUTES = stat.FILE_ATTRIBUTE_HIDDEN | stat.FILE_ATTRIBUTE_SYSTEM
_FileEntry = tuple[os.DirEntry[str], os.stat_result]


def is_document_file(path: str | Path) -> bool:
    """Check the extension against the document allow-list."""
    return Path(path).suffix.lower() in DOCUMENT_EXTENSIONS


def _mtime(st: os.stat_result) -> datetime:
    return datetime.fromtimestamp(st.st_mtime, tz=UTC)


def _is_hidden(entry: os.DirEntry[str], st: os.stat_result) -> bool:
    if entry.name.startswith("."):
        return True
    # st_file_attributes only exists on Windows.
    return bool(getattr(st, "st_file_attributes", 0) & _HIDDEN_ATTRIBUTES)


def _list_directory(path: str) -> tuple[list[os.DirEntry[str]], list[_FileEntry]]:
    """Split a directory into visible subfolders and document files, both capped.

    Raises OSError if the directory itself cannot be enumerated.
    """
    folders: list[os.DirEntry[str]] = []
    files: list[_FileEntry] = []

    with os.scandir(path) as it:
        for entry in it:
            try:
                st = entry.stat(follow_symlinks=False)
                is_dir = entry.is_dir()
            except OSError as e:
                logger.debug("Skipping unreadable entry {}: {}", entry.path, e)
                continue
            if _is_hidden(entry, st):
                continue

            if is_dir:
                if len(folders) < MAX_FOLDERS_PER_DIRECTORY:
                    folders.append(entry)
            elif is_document_file(entry.name) and len(files) < MAX_FILES_PER_DIRECTORY:
                files.append((entry, st))

    return folders, files


def scan_workspace(
    root: str | Path,
    max_depth: int = DEFAULT_SCAN_DEPTH,
    *,
    should_cancel: Callable[[], bool] | None = None,
) -> DocumentNode:
    """Scan root into a tree of folders and document files.

    Hidden entries are skipped, each directory contributes at most
    MAX_FOLDERS_PER_DIRECTORY subfolders and MAX_FILES_PER_DIRECTORY
    documents, and folders at max_depth are kept as empty leaves. A directory
    that cannot be read is kept with no children instead of failing the scan.

    Args:
        root: Folder to scan.
        max_depth: Number of folder levels below root to enumerate.
        should_cancel: Polled before each folder visit; return True to stop.

    Returns:
        The root folder node.

    Raises:
        NotADirectoryError: If root is not an existing directory.
        ScanCancelledError: If should_cancel returned True.
    """
    root_path = Path(root).resolve()
    if not root_path.is_dir():
        msg = f"Not a directory: {root_path}"
        raise NotADirectoryError(msg)

    tree = _visit_folder(str(root_path), root_path.name or str(root_path), 0, max_depth, should_cancel)
    logger.debug("Scanned {}: {} nodes", root_path, count_nodes(tree))
    return tree


def _visit_folder(
    path: str,
    name: str,
    depth: int,
    max_depth: int,
    should_cancel: Callable[[], bool] | None,
) -> DocumentNode:
    if should_cancel is not None and should_cancel():
        msg = f"Scan cancelled at {path}"
        raise ScanCancelledError(msg)

    try:
        modified = _mtime(os.stat(path))
    except OSError:
        modified = datetime.fromtimestamp(0, tz=UTC)

    if depth >= max_depth:
        return DocumentNode(name=name, path=path, is_folder=True, last_modified=modified)

    try:
        folders, files = _list_directory(path)
    except OSError as e:
        logger.debug("Cannot enumerate {}: {}", path, e)
        return DocumentNode(name=name, path=path, is_folder=True, last_modified=modified)

    children: list[DocumentNode] = [
        _visit_folder(entry.path, entry.name, depth + 1, max_depth, should_cancel)
        for entry in folders
    ]
    children.extend(
        DocumentNode(name=entry.name, path=entry.path, is_folder=False, last_modified=_mtime(st))
        for entry, st in files
    )
    return DocumentNode(
        name=name, path=path, is_folder=True, last_modified=modified, children=tuple(children)
    )


def collect_documents(tree: DocumentNode) -> list[DocumentNode]:
    """Flatten a tree into its document files, depth-first."""
    found: list[DocumentNode] = []
    todo = [tree]
    while todo:
        node = todo.pop()
        if not node.is_folder:
            if is_document_file(node.path):
                found.append(node)
            continue
        # Reverse so pop() visits children in their stored order.
        todo.extend(reversed(node.children))
    return found


def count_nodes(tree: DocumentNode) -> int:
    return 1 + sum(count_nodes(c) for c in tree.children)


def tree_to_dict(node: DocumentNode) -> dict[str, Any]:
    """Serialize a tree including children, for JSON output."""
    data = node.to_dict()
    if node.is_folder:
        data["children"] = [tree_to_dict(c) for c in node.children]
    return data
