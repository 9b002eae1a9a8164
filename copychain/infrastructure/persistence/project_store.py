"""Projects store - file-based mirror of saved copy projects (DI-friendly, no global singleton)."""

import json
import logging
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from copychain.domain.entities.generation_context import DEFAULT_GENERATION_CONTEXT
from copychain.domain.entities.steps import get_step

logger = logging.getLogger(__name__)

PROJECTS_FILE = Path("output/projects.json")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class Project(BaseModel):
    """A saved product brief and the committed copy for each step."""

    id: str
    name: str
    product_input: str = ""
    provider: str = "deepseek"
    generation_context: dict = Field(default_factory=DEFAULT_GENERATION_CONTEXT.to_wire)
    copy_results: dict[str, str] = Field(default_factory=dict)
    created_at: str = Field(default_factory=_now)
    updated_at: str = Field(default_factory=_now)


class ProjectsStore:
    """Simple file-based project store."""

    def __init__(self, projects_file: Path | None = None):
        """Initialize store; load from file if present."""
        self._file = Path(projects_file) if projects_file else PROJECTS_FILE
        self._projects: dict[str, Project] = {}
        self._lock = threading.Lock()
        self._load()

    def _load(self) -> None:
        """Load projects from disk."""
        if not self._file.exists():
            return
        try:
            data = json.loads(self._file.read_text(encoding="utf-8"))
            for p_data in data.get("projects", []):
                proj = Project(**p_data)
                self._projects[proj.id] = proj
        except (json.JSONDecodeError, KeyError, TypeError, ValidationError) as e:
            logger.warning("Corrupted projects file %s: %s", self._file, e)
        except OSError as e:
            logger.warning("Cannot read projects file %s: %s", self._file, e)

    def _save(self) -> None:
        """Persist projects to disk (caller holds the lock)."""
        self._file.parent.mkdir(parents=True, exist_ok=True)
        data = {"projects": [p.model_dump() for p in self._projects.values()]}
        tmp_file = self._file.with_suffix(".tmp")
        try:
            tmp_file.write_text(
                json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8"
            )
            tmp_file.replace(self._file)
        except OSError:
            logger.warning("Failed to save projects to %s", self._file, exc_info=True)
            tmp_file.unlink(missing_ok=True)
            raise

    def list_projects(self) -> list[Project]:
        """Return all projects, most recently updated first."""
        return sorted(self._projects.values(), key=lambda p: p.updated_at, reverse=True)

    def get_project(self, project_id: str) -> Project | None:
        """Get project by id."""
        return self._projects.get(project_id)

    def create_project(
        self,
        name: str,
        product_input: str = "",
        provider: str = "deepseek",
        generation_context: dict | None = None,
    ) -> Project:
        """Create a project with empty results."""
        if not name.strip():
            raise ValueError("Project name is required")
        project = Project(
            id=uuid.uuid4().hex,
            name=name.strip(),
            product_input=product_input,
            provider=provider,
            generation_context=generation_context or DEFAULT_GENERATION_CONTEXT.to_wire(),
        )
        with self._lock:
            self._projects[project.id] = project
            try:
                self._save()
            except OSError:
                del self._projects[project.id]
                raise
        return project

    def update_results(self, project_id: str, copy_results: dict[str, str]) -> Project | None:
        """Merge committed step outputs into the project; unknown step ids are rejected."""
        unknown = [step_id for step_id in copy_results if get_step(step_id) is None]
        if unknown:
            raise ValueError(f"Unknown step: {unknown[0]}")
        with self._lock:
            proj = self._projects.get(project_id)
            if proj is None:
                return None
            previous = (proj.copy_results, proj.updated_at)
            proj.copy_results = {**proj.copy_results, **copy_results}
            proj.updated_at = _now()
            try:
                self._save()
            except OSError:
                proj.copy_results, proj.updated_at = previous
                raise
        return proj

    def delete_project(self, project_id: str) -> bool:
        """Remove project by id."""
        with self._lock:
            if project_id not in self._projects:
                return False
            removed = self._projects.pop(project_id)
            try:
                self._save()
            except OSError:
                self._projects[project_id] = removed
                raise
        return True
