"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from food_analyzer.api.food import router as food_router
from food_analyzer.app_logging import configure_logging
from food_analyzer.containers import AppContainer
from food_analyzer.domain.errors import (
    AnalysisInProgressError,
    InvalidUploadError,
    UpstreamFailure,
)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        report = app.state.container.history_store.load_all()
        logger.info(
            "History ready with %d entries (%d dropped)",
            len(report.entries),
            report.dropped_count,
        )
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(food_router)

    @app.exception_handler(UpstreamFailure)
    async def upstream_failure(request: Request, exc: UpstreamFailure) -> JSONResponse:
        logger.error("Food analysis failed upstream: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"success": False, "error": "Food analysis failed, try again"},
        )

    @app.exception_handler(AnalysisInProgressError)
    async def analysis_in_progress(
        request: Request, exc: AnalysisInProgressError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"success": False, "error": str(exc)},
        )

    @app.exception_handler(InvalidUploadError)
    async def invalid_upload(request: Request, exc: InvalidUploadError) -> JSONResponse:
        too_large = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
        status_code = too_large if exc.too_large else status.HTTP_400_BAD_REQUEST
        return JSONResponse(
            status_code=status_code,
            content={"success": False, "error": exc.reason},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
