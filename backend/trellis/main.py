"""FastAPI application entrypoint."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable

from fastapi import FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from .api import api_router
from .core.config import AppSettings, get_settings
from .core.db import dispose_engine, init_models
from .core.logging import bind_request_context, clear_request_context, get_logger, setup_logging
from .services.errors import EngagementNotFoundError

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifecycle hooks for startup and shutdown."""

    settings = get_settings()
    setup_logging(settings.log_level)

    if settings.auto_create_schema:
        await init_models()

    logger.info(
        "application.startup",
        environment=settings.environment,
        version=settings.version,
        auto_create_schema=settings.auto_create_schema,
    )

    try:
        yield
    finally:
        await dispose_engine()
        logger.info("application.shutdown")


async def _request_context(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
    clear_request_context()
    bind_request_context(method=request.method, path=request.url.path)
    return await call_next(request)


async def _engagement_not_found(request: Request, exc: EngagementNotFoundError) -> JSONResponse:
    logger.info("engagement.not_found", engagement_id=exc.engagement_id, path=request.url.path)
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": "Engagement not found"})


async def _store_failure(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("store.request_failed", path=request.url.path, error=str(exc), error_type=type(exc).__name__)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Unexpected error while loading data."},
    )


def create_app(settings: AppSettings | None = None) -> FastAPI:
    """Construct the FastAPI application instance."""

    settings = settings or get_settings()

    application = FastAPI(
        title=settings.project_name,
        version=settings.version,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    if settings.cors_allowed_origins:
        application.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_allowed_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    application.middleware("http")(_request_context)
    application.add_exception_handler(EngagementNotFoundError, _engagement_not_found)
    application.add_exception_handler(SQLAlchemyError, _store_failure)
    application.include_router(api_router, prefix="/v1")

    @application.get("/", tags=["meta"], summary="Service metadata")
    async def root() -> dict[str, str]:
        """Service metadata root endpoint."""

        return {"service": settings.project_name, "version": settings.version}

    return application


app = create_app()
