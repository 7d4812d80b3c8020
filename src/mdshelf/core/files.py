"""Reading documents and describing files for display."""

from datetime import datetime
from pathlib import Path


def read_document(path: str | Path) -> str:
    """Read a document as UTF-8 text.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    p = Path(path)
    if not p.is_file():
        msg = f"File not found: {p}"
        raise FileNotFoundError(msg)
    return p.read_text(encoding="utf-8")


def format_file_size(num_bytes: int) -> str:
    if num_bytes >= 1024 * 1024:
        return f"{num_bytes / (1024.0 * 1024.0):.1f} MB"
    if num_bytes >= 1024:
        return f"{num_bytes / 1024.0:.1f} KB"
    return f"{num_bytes} B"


def describe_file(path: str | Path) -> str:
    """Return a one-line summary like ``Size: 1.2 KB | Modified: 2024/01/31 09:15``."""
    st = Path(path).stat()
    modified = datetime.fromtimestamp(st.st_mtime)
    return f"Size: {format_file_size(st.st_size)} | Modified: {modified:%Y/%m/%d %H:%M}"
