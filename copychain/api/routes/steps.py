"""Step catalog API."""

from fastapi import APIRouter

from copychain.application.generation.dto import StepInfo
from copychain.domain.entities.steps import STEPS

router = APIRouter(prefix="/steps", tags=["steps"])


@router.get("")
async def list_steps() -> dict:
    """Catalog in pipeline order."""
    return {
        "steps": [
            StepInfo(index=i, **step.model_dump()).model_dump()
            for i, step in enumerate(STEPS)
        ]
    }
