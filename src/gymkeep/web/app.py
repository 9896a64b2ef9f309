"""FastAPI application for the gymkeep API."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError

from .. import __version__
from ..config import configure_logging
from ..db.engine import get_db_path, init_db
from ..errors import GymKeepError
from .responses import error_response
from .routers import (
    analytics,
    auth,
    equipment,
    exercises,
    gyms,
    orders,
    product_categories,
    products,
    program_exercises,
    programs,
    roles,
    trainer_matches,
    users,
    workout_logs,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler - runs on startup and shutdown."""
    configure_logging()
    # init_db is idempotent, so it also upgrades a database missing new tables
    await init_db(get_db_path())
    logger.info("gymkeep %s started", __version__)
    yield


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    return f"{location}: {first.get('msg')}" if location else first.get("msg", "Invalid request")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="gymkeep",
        description="Multi-tenant gym management API",
        version=__version__,
        lifespan=lifespan,
    )

    @app.exception_handler(GymKeepError)
    async def gymkeep_error(request: Request, exc: GymKeepError):
        # Raised from dependencies, before handle_errors wraps the endpoint
        return error_response(exc.message, exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return error_response(_validation_message(exc), 400)

    for module in (
        auth,
        gyms,
        users,
        roles,
        equipment,
        exercises,
        programs,
        program_exercises,
        workout_logs,
        product_categories,
        products,
        orders,
        trainer_matches,
        analytics,
    ):
        app.include_router(module.router)

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    return app
