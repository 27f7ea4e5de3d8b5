"""FastAPI application entry point."""
import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from files_manager import __version__
from files_manager.config import Settings, settings as default_settings
from files_manager.container import Services, build_services
from files_manager.exceptions import FilesManagerError
from files_manager.schemas.base import ErrorResponse

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


async def files_manager_error_handler(request: Request, exc: FilesManagerError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=ErrorResponse(error=exc.message).model_dump())


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed requests get the same 400 {"error": ...} body as service-level validation."""
    field = "body"
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path", "header")]
        if loc:
            field = loc[0]
            break
    return JSONResponse(status_code=400, content=ErrorResponse(error=f"Invalid {field}").model_dump())


def create_app(settings: Optional[Settings] = None, services: Optional[Services] = None) -> FastAPI:
    """Build the application.

    When `services` is given the app uses it as-is and the lifespan does
    not connect anything; otherwise stores are connected on startup.
    """
    settings = settings or (services.settings if services else default_settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Connect stores on startup, optionally run the thumbnail worker in-process."""
        owns_services = services is None
        if owns_services:
            app.state.services = await build_services(settings)
        active: Services = app.state.services

        worker_task = None
        if settings.RUN_EMBEDDED_WORKER:
            worker_task = asyncio.create_task(
                active.queue.subscribe(
                    active.worker.handle,
                    poll_interval=settings.WORKER_POLL_INTERVAL,
                    stale_minutes=settings.WORKER_STALE_MINUTES,
                )
            )

        yield

        # Cleanup
        if worker_task is not None:
            worker_task.cancel()
            with suppress(asyncio.CancelledError):
                await worker_task
        if owns_services:
            await active.close()

    app = FastAPI(
        title="Files Manager API",
        version=__version__,
        description="File storage with per-file visibility and image thumbnails.",
        lifespan=lifespan,
    )
    if services is not None:
        app.state.services = services

    # CORS
    origins = [o.strip() for o in settings.CORS_ORIGINS.split(",")]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(FilesManagerError, files_manager_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)

    # Register routers
    from files_manager.routes.files import router as files_router
    from files_manager.routes.status import router as status_router
    app.include_router(files_router)
    app.include_router(status_router)

    return app


app = create_app()


def run() -> None:
    configure_logging(default_settings.LOG_LEVEL)
    uvicorn.run("files_manager.main:app", host="0.0.0.0", port=default_settings.API_PORT)
