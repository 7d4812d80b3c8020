"""Projects: named workspace folders with one optional active project."""

from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any

from loguru import logger

from mdshelf.config import DEFAULT_SCAN_DEPTH, PROJECTS_FILE
from mdshelf.core.indexer import collect_documents, scan_workspace
from mdshelf.exceptions import ProjectNotFoundError, ValidationError
from mdshelf.models.document import DocumentNode, utc_now
from mdshelf.models.records import ProjectRecord
from mdshelf.protocols import StoreProtocol

ActiveListener = Callable[[ProjectRecord | None], None]
ChangeListener = Callable[[str], None]
Scanner = Callable[[str, int], DocumentNode]


def _parse_projects(raw: Any) -> list[ProjectRecord]:
    if not isinstance(raw, list):
        msg = f"expected a list of projects, got {type(raw).__name__}"
        raise TypeError(msg)
    return [ProjectRecord.from_dict(item) for item in raw]


class ProjectService:
    """Owns the in-memory project collection and the active-project slot.

    The collection is the source of truth for the session; every mutation
    writes a full snapshot through the store before returning. The active
    slot only changes inside _set_active_record, which keeps exactly one
    record flagged.
    """

    def __init__(
        self,
        store: StoreProtocol,
        *,
        scanner: Scanner = scan_workspace,
        max_depth: int = DEFAULT_SCAN_DEPTH,
    ) -> None:
        self._store = store
        self._scanner = scanner
        self._max_depth = max_depth
        self._projects: list[ProjectRecord] = []
        self._active: ProjectRecord | None = None
        self._active_listeners: list[ActiveListener] = []
        self._change_listeners: list[ChangeListener] = []

    @property
    def projects(self) -> list[ProjectRecord]:
        return list(self._projects)

    @property
    def active(self) -> ProjectRecord | None:
        return self._active

    def on_active_changed(self, listener: ActiveListener) -> None:
        """Register a callback invoked with the new active project (or None)."""
        self._active_listeners.append(listener)

    def on_change(self, listener: ChangeListener) -> None:
        """Register a callback invoked with the operation name after each mutation."""
        self._change_listeners.append(listener)

    def _notify_change(self, operation: str) -> None:
        for listener in self._change_listeners:
            listener(operation)

    def _notify_active(self) -> None:
        for listener in self._active_listeners:
            listener(self._active)

    def load(self) -> list[ProjectRecord]:
        """Replace the in-memory collection with the stored one.

        If the stored data flags several projects active, the first one wins
        and the others are cleared in memory; the next save persists that.
        """
        projects = self._store.load(PROJECTS_FILE, parse=_parse_projects) or []
        previous_active = self._active
        self._projects = projects
        self._active = None

        for project in self._projects:
            if not project.is_active:
                continue
            if self._active is None:
                self._active = project
            else:
                logger.warning(
                    "Project {!r} was also flagged active; keeping {!r}",
                    project.name,
                    self._active.name,
                )
                project.is_active = False

        logger.debug("Loaded {} projects", len(self._projects))
        if self._active is not previous_active:
            self._notify_active()
        return self.projects

    def save(self) -> None:
        self._store.save([p.to_dict() for p in self._projects], PROJECTS_FILE)
        logger.debug("Saved {} projects", len(self._projects))

    def get(self, project_id: str) -> ProjectRecord | None:
        return next((p for p in self._projects if p.id == project_id), None)

    def _scan_files(self, project: ProjectRecord) -> None:
        tree = self._scanner(project.folder_path, self._max_depth)
        project.files = collect_documents(tree)

    def create(self, name: str, folder_path: str | Path, description: str = "") -> ProjectRecord:
        """Create a project bound to an existing folder and scan its documents.

        Raises:
            ValidationError: If name is blank or folder_path is not a directory.
        """
        if not name or not name.strip():
            msg = "Project name must not be empty"
            raise ValidationError(msg)
        if not str(folder_path).strip() or not Path(folder_path).is_dir():
            msg = f"Folder does not exist: {folder_path}"
            raise ValidationError(msg)

        project = ProjectRecord(
            name=name.strip(),
            folder_path=str(Path(folder_path).resolve()),
            description=description,
        )
        self._scan_files(project)
        self._projects.append(project)
        self.save()

        logger.info("Created project {!r} ({} files)", project.name, len(project.files))
        self._notify_change("create")
        return project

    def _set_active_record(self, project: ProjectRecord | None) -> bool:
        if project is self._active:
            return False
        if self._active is not None:
            self._active.is_active = False
        self._active = project
        if project is not None:
            project.is_active = True
            project.last_opened_at = utc_now()
        return True

    def _restore_active(
        self,
        previous: ProjectRecord | None,
        attempted: ProjectRecord | None,
        attempted_opened: datetime | None,
    ) -> None:
        """Undo a slot change whose save failed."""
        if attempted is not None and attempted_opened is not None:
            attempted.is_active = False
            attempted.last_opened_at = attempted_opened
        if previous is not None:
            previous.is_active = True
        self._active = previous

    def set_active(self, project_id: str | None) -> ProjectRecord | None:
        """Make the given project active, or clear the slot with None.

        Raises:
            ProjectNotFoundError: If project_id does not match any project.
                The active slot is left unchanged.
        """
        project = None
        if project_id:
            project = self.get(project_id)
            if project is None:
                raise ProjectNotFoundError(project_id)

        previous = self._active
        previous_opened = project.last_opened_at if project is not None else None
        if self._set_active_record(project):
            try:
                self.save()
            except OSError:
                self._restore_active(previous, project, previous_opened)
                raise
            self._notify_active()
            self._notify_change("set_active")
        return self._active

    def update(self, project: ProjectRecord) -> bool:
        """Replace the stored record with the same id.

        Returns:
            False (and does nothing) if no project has that id.
        """
        if not project.name or not project.name.strip():
            msg = "Project name must not be empty"
            raise ValidationError(msg)
        for index, existing in enumerate(self._projects):
            if existing.id != project.id:
                continue
            self._projects[index] = project
            if self._active is existing:
                # Keep the slot pointing at the live object.
                self._active = project
                project.is_active = True
            else:
                project.is_active = False
            self.save()
            self._notify_change("update")
            return True
        return False

    def edit(
        self,
        project_id: str,
        *,
        name: str | None = None,
        description: str | None = None,
    ) -> ProjectRecord:
        """Rename a project or change its description.

        Raises:
            ProjectNotFoundError: If project_id does not match any project.
            ValidationError: If the new name is blank.
        """
        project = self.get(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        if name is not None:
            if not name.strip():
                msg = "Project name must not be empty"
                raise ValidationError(msg)
            project.name = name.strip()
        if description is not None:
            project.description = description
        self.save()
        self._notify_change("edit")
        return project

    def delete(self, project_id: str) -> bool:
        """Remove a project, clearing the active slot first if needed.

        Returns:
            False (and does nothing) if no project has that id.
        """
        project = self.get(project_id)
        if project is None:
            return False

        active_cleared = False
        if self._active is project:
            active_cleared = self._set_active_record(None)

        index = self._projects.index(project)
        del self._projects[index]
        try:
            self.save()
        except OSError:
            self._projects.insert(index, project)
            if active_cleared:
                self._restore_active(project, None, None)
            raise

        logger.info("Deleted project {!r}", project.name)
        if active_cleared:
            self._notify_active()
        self._notify_change("delete")
        return True

    def refresh_files(self, project: ProjectRecord) -> bool:
        """Rescan the project folder and replace its cached file list.

        Returns:
            False if the folder no longer exists; the cached list is kept.
        """
        if not Path(project.folder_path).is_dir():
            logger.warning("Project folder not found: {}", project.folder_path)
            return False

        self._scan_files(project)
        self.save()
        logger.info("Refreshed project {!r} ({} files)", project.name, len(project.files))
        self._notify_change("refresh_files")
        return True
