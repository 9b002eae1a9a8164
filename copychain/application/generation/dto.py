"""Generate-copy DTOs."""

from typing import Any, Literal

from pydantic import BaseModel, Field


class GenerateCopyRequest(BaseModel):
    """Body of POST /generate-copy as received from any client.

    generation_context stays a raw mapping here; it is coerced with
    GenerationContext.from_raw so unknown values fall back to defaults
    instead of rejecting the request.
    """

    product_input: str = Field(..., min_length=1, max_length=50_000)
    step: str = Field(..., min_length=1, max_length=100)
    previous_context: str | None = Field(None, max_length=500_000)
    provider: Literal["deepseek", "openai"] = "deepseek"
    continue_from: str | None = Field(None, max_length=200_000)
    generation_context: dict[str, Any] | None = None


class StepInfo(BaseModel):
    """Catalog entry as served by GET /steps."""

    index: int
    id: str
    label: str
    icon: str
    description: str
    agent: str
