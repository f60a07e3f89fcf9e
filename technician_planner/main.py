# technician_planner/main.py
"""FastAPI application for the technician planner task API."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from technician_planner.config import Settings
from technician_planner.database import create_db_and_tables, create_db_engine
from technician_planner.errors import ServerError, TaskError, ValidationError
from technician_planner.routes.tasks import router as tasks_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create database tables on startup, dispose the engine on shutdown."""
    create_db_and_tables(app.state.engine)
    yield
    app.state.engine.dispose()


async def task_error_handler(request: Request, exc: TaskError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.warning(
            "%s %s rejected (%s): %s",
            request.method, request.url.path, exc.kind, exc.message,
        )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report undecodable bodies as a ValidationError, without pydantic internals."""
    logger.warning("%s %s malformed body", request.method, request.url.path)
    error = ValidationError("Invalid request data")
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("%s %s failed unexpectedly", request.method, request.url.path)
    error = ServerError("Internal server error")
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


def create_app(settings: Settings) -> FastAPI:
    """Build the API around an explicit settings object."""
    app = FastAPI(title="Technician Planner Task API", lifespan=lifespan)
    app.state.engine = create_db_engine(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.allowed_origins),
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["Content-Type"],
    )

    app.add_exception_handler(TaskError, task_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
    app.include_router(tasks_router)

    @app.get("/health")
    def health_check():
        """Liveness probe."""
        return {"message": "Server is up and running"}

    return app
