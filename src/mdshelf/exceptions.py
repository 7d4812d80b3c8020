"""Exception hierarchy for mdshelf.

Every application error inherits from MdshelfError, so the CLI and the MCP
server can report them uniformly while callers still catch narrow types.
"""


class MdshelfError(Exception):
    """Base exception for all mdshelf errors."""


class ValidationError(MdshelfError, ValueError):
    """A mutating operation was given invalid input."""


class DuplicateFavoriteError(ValidationError):
    """A favorite for the same file path already exists."""

    def __init__(self, file_path: str) -> None:
        self.file_path = file_path
        super().__init__(f"File is already a favorite: {file_path}")


class ProjectNotFoundError(MdshelfError, LookupError):
    """No project with the given id exists."""

    def __init__(self, project_id: str) -> None:
        self.project_id = project_id
        super().__init__(f"Project not found: {project_id}")


class DiagramEncodeError(MdshelfError):
    """Diagram source could not be turned into a render-service payload."""


class ScanCancelledError(MdshelfError):
    """A workspace scan was cancelled between folder visits."""
