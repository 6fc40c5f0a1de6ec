"""
Project repository - Abstract data access for projects and their slides.

Implements the Repository pattern so routes, the command layer and the
generation pipeline never touch the storage format directly.

Classes:
    ProjectRepository: Abstract interface for project data access
    FileProjectRepository: One JSON document per project on disk
"""

import json
import os
from abc import ABC, abstractmethod
from pathlib import Path
from threading import RLock
from typing import Dict, List, Optional

from ....config import PROJECT_DATA_DIR
from ....core.exceptions import ProjectNotFoundError, SlideNotFoundError
from ....core.logging import get_logger
from ....core.security import validate_project_id
from ....models.deck import Project, Slide, now_iso

logger = get_logger(__name__, component="storage")


class ProjectRepository(ABC):
    """
    Abstract repository for project data access.

    Slides are stored as opaque documents with an explicit position; the
    repository guarantees positions are contiguous 0..N-1 after every write.
    """

    @abstractmethod
    def save(self, project: Project) -> Project:
        """Persist the whole project (metadata and slides)."""
        pass

    @abstractmethod
    def get(self, project_id: str) -> Optional[Project]:
        """Retrieve a project by ID, or None if it does not exist."""
        pass

    @abstractmethod
    def list_for_owner(self, owner: str) -> List[Project]:
        """List an owner's projects, most recently updated first (without slides)."""
        pass

    @abstractmethod
    def delete(self, project_id: str) -> bool:
        """Delete a project. Returns False if it was not found."""
        pass

    def require(self, project_id: str) -> Project:
        project = self.get(project_id)
        if project is None:
            raise ProjectNotFoundError(f"Project not found: {project_id}")
        return project

    def replace_slides(self, project_id: str, slides: List[Slide]) -> Project:
        """Delete all slide rows and reinsert them in the given order."""
        project = self.require(project_id)
        project.slides = list(slides)
        project.updated_at = now_iso()
        return self.save(project)

    def update_slide(self, project_id: str, slide: Slide) -> Project:
        """Replace a single slide in place, keeping its position."""
        project = self.require(project_id)
        index = project.slide_index(slide.id)
        if index < 0:
            raise SlideNotFoundError(f"Slide not found: {slide.id}")
        project.slides[index] = slide
        project.updated_at = now_iso()
        return self.save(project)


class FileProjectRepository(ProjectRepository):
    """
    File-based project repository.

    Documents are written to a temporary file and atomically renamed so a
    crash never leaves a half-written project. Write failures propagate as
    OSError so the command layer can roll back.
    """

    def __init__(self, storage_dir: Optional[Path] = None):
        self._storage_dir = Path(storage_dir) if storage_dir else PROJECT_DATA_DIR
        self._storage_dir.mkdir(parents=True, exist_ok=True)
        self._lock = RLock()

    def _project_file(self, project_id: str) -> Path:
        if not validate_project_id(project_id):
            raise ProjectNotFoundError(f"Invalid project id: {project_id}")
        return self._storage_dir / f"{project_id}.json"

    def _read(self, path: Path) -> Optional[Dict]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Failed to load project document", extra={"path": str(path), "error": str(e)})
            return None

    def save(self, project: Project) -> Project:
        with self._lock:
            path = self._project_file(project.id)
            tmp_path = path.with_suffix(".json.tmp")
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(project.to_dict(), f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, path)
            logger.debug("Project saved", extra={"project_id": project.id, "slides": len(project.slides)})
            return project

    def get(self, project_id: str) -> Optional[Project]:
        if not validate_project_id(project_id):
            return None
        with self._lock:
            data = self._read(self._project_file(project_id))
        return Project.from_dict(data) if data else None

    def list_for_owner(self, owner: str) -> List[Project]:
        projects: List[Project] = []
        with self._lock:
            for path in self._storage_dir.glob("*.json"):
                data = self._read(path)
                if data and data.get("owner") == owner:
                    data = dict(data, slides=[])
                    projects.append(Project.from_dict(data))
        projects.sort(key=lambda p: p.updated_at, reverse=True)
        return projects

    def delete(self, project_id: str) -> bool:
        if not validate_project_id(project_id):
            return False
        with self._lock:
            path = self._project_file(project_id)
            if not path.exists():
                return False
            path.unlink()
            logger.info("Project deleted", extra={"project_id": project_id})
            return True


_repository_instance: Optional[ProjectRepository] = None


def get_project_repository() -> ProjectRepository:
    """Get the shared repository instance (singleton pattern)."""
    global _repository_instance
    if _repository_instance is None:
        _repository_instance = FileProjectRepository()
    return _repository_instance


def set_project_repository(repository: Optional[ProjectRepository]) -> None:
    """Swap the shared repository (used by tests)."""
    global _repository_instance
    _repository_instance = repository
