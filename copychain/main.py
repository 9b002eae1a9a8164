"""Application entry point."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from copychain.api.container import get_container
from copychain.api.dependencies import limiter
from copychain.api.routes.generate import router as generate_router
from copychain.api.routes.projects import router as projects_router
from copychain.api.routes.steps import router as steps_router
from copychain.domain.errors import CopyServiceError
from copychain.infrastructure.config.provider_validator import (
    configured_providers,
    validate_providers_config,
)
from copychain.shared.logging import setup_logging

log = structlog.get_logger()


def _apply_logging_config(container):
    """Apply logging from container config (stdout + optional file)."""
    c = container.config
    setup_logging(
        level=c.log_level,
        file_path=c.log_file or "",
        rotation_max_mb=c.log_rotation_max_mb,
        rotation_backups=c.log_rotation_backups,
    )


def _validation_message(exc: RequestValidationError) -> str:
    """First schema error as a single readable line."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: load config, setup logging, report which providers can serve requests."""
    container = get_container()
    _apply_logging_config(container)
    log.info("startup_begin", default_provider=container.config.providers.default)
    validate_providers_config(container.config)
    log.info("startup_complete")
    yield
    log.info("shutdown_begin")
    try:
        await container.aclose()
    except Exception:  # noqa: BLE001
        log.debug("client_close_error", exc_info=True)
    log.info("shutdown_complete")


# Create app
app = FastAPI(
    title="copychain",
    version="0.1.0",
    description="Step-chain AI marketing copy generation",
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Every non-200 answer carries {error: string}."""
    return JSONResponse({"error": str(exc.detail)}, status_code=exc.status_code, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse({"error": _validation_message(exc)}, status_code=400)


@app.exception_handler(CopyServiceError)
async def copy_service_error_handler(request: Request, exc: CopyServiceError) -> JSONResponse:
    log.warning("copy_service_error", path=request.url.path, status=exc.status_code, error=str(exc))
    return JSONResponse({"error": str(exc)}, status_code=exc.status_code)


# CORS
container = get_container()
app.add_middleware(
    CORSMiddleware,
    allow_origins=container.config.security.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(generate_router)
app.include_router(projects_router)
app.include_router(steps_router)


@app.get("/health")
@limiter.limit("100/minute")
async def health(request: Request) -> dict:
    """Health check with configured providers."""
    config = get_container().config
    return {
        "status": "ok",
        "service": "copychain",
        "default_provider": config.providers.default,
        "providers": configured_providers(config),
    }
