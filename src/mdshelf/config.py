"""Configuration constants for mdshelf."""

import os
from pathlib import Path

# Data directory. MDSHELF_DATA_DIR wins, then XDG_DATA_HOME, then the default below.
DATA_DIR_ENV: str = "MDSHELF_DATA_DIR"
DEFAULT_DATA_DIRECTORY: Path = Path("~/.local/share/mdshelf").expanduser()

# Durable collection names, one JSON file each.
PROJECTS_FILE: str = "projects.json"
FAVORITES_FILE: str = "favorites.json"
RECENT_FILE: str = "recent.json"

# Workspace scanning limits, applied per directory.
MAX_FOLDERS_PER_DIRECTORY: int = 100
MAX_FILES_PER_DIRECTORY: int = 500
DEFAULT_SCAN_DEPTH: int = 2

DOCUMENT_EXTENSIONS: frozenset[str] = frozenset({".md", ".markdown", ".txt"})

# PlantUML
PLANTUML_SERVER_URL: str = "http://www.plantuml.com/plantuml/png/"
PLANTUML_LANGUAGES: frozenset[str] = frozenset({"plantuml", "puml", "uml"})
PLANTUML_START_TAG: str = "@startuml"
PLANTUML_END_TAG: str = "@enduml"

# Preview
FONT_SIZES: tuple[int, ...] = (10, 12, 14, 16, 18, 20, 24)
DEFAULT_FONT_SIZE: int = 14
HIGHLIGHT_JS_CDN: str = "https://cdnjs.cloudflare.com/ajax/libs/highlight.js/11.9.0"

RECENT_FILES_LIMIT: int = 10


def resolve_data_directory() -> Path:
    """Return the per-user directory holding the durable collections.

    The directory is not created here; the store creates it on first use.
    """
    override = os.environ.get(DATA_DIR_ENV)
    if override:
        return Path(override).expanduser()
    xdg_data_home = os.environ.get("XDG_DATA_HOME")
    if xdg_data_home:
        return Path(xdg_data_home).expanduser() / "mdshelf"
    return DEFAULT_DATA_DIRECTORY
