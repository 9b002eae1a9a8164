"""Projects API - saved product briefs and their copy_results."""

import logging
from typing import Any, Literal

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from copychain.api.dependencies import get_projects_store, limiter, rate_limit, require_user
from copychain.domain.entities.generation_context import GenerationContext
from copychain.infrastructure.persistence.project_store import ProjectsStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projects", tags=["projects"], dependencies=[Depends(require_user)])


class ProjectCreate(BaseModel):
    """Request to create a project."""

    name: str = Field(..., min_length=1, max_length=200)
    product_input: str = Field("", max_length=50_000)
    provider: Literal["deepseek", "openai"] = "deepseek"
    generation_context: dict[str, Any] | None = None


class ResultsUpdate(BaseModel):
    """Committed step outputs to merge into a project."""

    copy_results: dict[str, str]


@router.get("")
@limiter.limit(rate_limit)
async def list_projects(
    request: Request,
    store: ProjectsStore = Depends(get_projects_store),
) -> dict:
    """List all saved projects."""
    return {"projects": [p.model_dump() for p in store.list_projects()]}


@router.post("")
@limiter.limit(rate_limit)
async def create_project(
    request: Request,
    body: ProjectCreate,
    store: ProjectsStore = Depends(get_projects_store),
) -> dict:
    """Create a project. Its generation context is normalized like a generation request."""
    try:
        project = store.create_project(
            name=body.name,
            product_input=body.product_input,
            provider=body.provider,
            generation_context=GenerationContext.from_raw(body.generation_context).to_wire(),
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OSError:
        logger.exception("Failed to persist project %s", body.name)
        raise HTTPException(status_code=500, detail="Failed to save project")
    return {"status": "ok", "project": project.model_dump()}


@router.get("/{project_id}")
@limiter.limit(rate_limit)
async def get_project(
    request: Request,
    project_id: str,
    store: ProjectsStore = Depends(get_projects_store),
) -> dict:
    project = store.get_project(project_id)
    if project is None:
        raise HTTPException(status_code=404, detail=f"Project not found: {project_id}")
    return project.model_dump()


@router.put("/{project_id}/results")
@limiter.limit(rate_limit)
async def update_results(
    request: Request,
    project_id: str,
    body: ResultsUpdate,
    store: ProjectsStore = Depends(get_projects_store),
) -> dict:
    """Merge committed step outputs into copy_results."""
    try:
        project = store.update_results(project_id, body.copy_results)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OSError:
        logger.exception("Failed to persist results for project %s", project_id)
        raise HTTPException(status_code=500, detail="Failed to save project")
    if project is None:
        raise HTTPException(status_code=404, detail=f"Project not found: {project_id}")
    return {"status": "ok", "project": project.model_dump()}


@router.delete("/{project_id}")
@limiter.limit(rate_limit)
async def delete_project(
    request: Request,
    project_id: str,
    store: ProjectsStore = Depends(get_projects_store),
) -> dict:
    try:
        removed = store.delete_project(project_id)
    except OSError:
        logger.exception("Failed to persist deletion of project %s", project_id)
        raise HTTPException(status_code=500, detail="Failed to save project")
    if not removed:
        raise HTTPException(status_code=404, detail=f"Project not found: {project_id}")
    return {"status": "ok"}
