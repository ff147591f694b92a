"""FSM task service — FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.adapters.persistence.database import engine
from app.config import settings
from app.infrastructure.api.errors import register_error_handlers
from app.infrastructure.api.routes_health import router as health_router
from app.infrastructure.api.routes_tasks import router as tasks_router
from app.infrastructure.api.routes_technicians import router as technicians_router

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    try:
        async with engine.begin():
            pass  # Connection pool warmed up
        logger.info("Database connection established")
    except Exception as e:
        logger.warning("Database not available on startup: %s", e)
    if not settings.identity_validation_enabled:
        logger.warning("Technician validation is disabled; any technician id is accepted")
    yield
    await engine.dispose()


def create_app() -> FastAPI:
    app = FastAPI(
        title="FSM Task Dispatch Engine",
        description="Service task creation, dispatch to technicians, and technician workflow",
        version="0.1.0",
        lifespan=lifespan,
    )

    # CORS for the dispatcher web UI
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    app.include_router(health_router, prefix="/api")
    app.include_router(tasks_router, prefix="/api")
    app.include_router(technicians_router, prefix="/api")

    return app


app = create_app()
