"""FastAPI dependencies - DI container."""

from fastapi import Depends, HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from copychain.api.container import get_container
from copychain.application.generation.use_case import GenerateCopyUseCase
from copychain.domain.ports.config import AppConfig
from copychain.infrastructure.auth.token_verifier import TokenVerifier
from copychain.infrastructure.persistence.project_store import ProjectsStore

limiter = Limiter(key_func=get_remote_address)


def rate_limit() -> str:
    """Per-client limit for the generation and project routes (RATE_LIMIT_PER_MINUTE)."""
    return f"{get_container().config.security.rate_limit_requests_per_minute}/minute"


def get_config() -> AppConfig:
    return get_container().config


def get_token_verifier() -> TokenVerifier:
    return get_container().token_verifier


def get_projects_store() -> ProjectsStore:
    return get_container().projects_store


def get_generate_copy_use_case() -> GenerateCopyUseCase:
    return get_container().generate_copy_use_case


async def require_user(
    request: Request,
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> None:
    """401 unless the Authorization header carries an accepted bearer token.

    Resolved before the body model is validated, so a missing token wins
    over schema errors.
    """
    if not await verifier.verify(request.headers.get("Authorization")):
        raise HTTPException(status_code=401, detail="Login required")
