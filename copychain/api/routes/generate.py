"""Generate-copy API route - one streamed step of the copy chain."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sse_starlette.sse import EventSourceResponse
from starlette.background import BackgroundTask

from copychain.api.dependencies import (
    get_generate_copy_use_case,
    limiter,
    rate_limit,
    require_user,
)
from copychain.application.generation.dto import GenerateCopyRequest
from copychain.application.generation.use_case import GenerateCopyUseCase
from copychain.domain.errors import CopyServiceError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["generate"])


@router.post("/generate-copy", dependencies=[Depends(require_user)])
@limiter.limit(rate_limit)
async def generate_copy(
    request: Request,
    body: GenerateCopyRequest,
    use_case: GenerateCopyUseCase = Depends(get_generate_copy_use_case),
) -> EventSourceResponse:
    """Stream one step as SSE records terminated by data: [DONE].

    Errors raised before the first byte (unknown step, missing API key,
    provider rejection) are returned as {error} JSON with their status.
    """
    try:
        upstream = await use_case.open_stream(body)
    except CopyServiceError:
        raise
    except Exception:
        logger.exception("generate-copy failed for step=%s provider=%s", body.step, body.provider)
        raise HTTPException(status_code=500, detail="Generation failed")
    # upstream is closed even when relay never starts (client gone before the first record)
    return EventSourceResponse(
        use_case.relay(upstream),
        background=BackgroundTask(upstream.aclose),
    )
