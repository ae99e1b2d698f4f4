"""FastAPI application bootstrap and lifecycle wiring."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from tier_allocation.controllers.allocation_controller import router as allocation_router
from tier_allocation.repository.seed_repository import SeedRepository
from tier_allocation.services.allocation_service import AllocationEngine
from tier_allocation.utils.config import Settings, get_settings
from tier_allocation.utils.logger import configure_logging, get_logger


logger = get_logger(__name__)


def build_engine(
    repository: SeedRepository,
    settings: Settings,
) -> AllocationEngine:
    """Load the session seed and build the engine that owns the allocation."""
    data = repository.load()
    return AllocationEngine(
        catalog=data.catalog,
        members=data.members,
        tools=data.tools,
        elections=data.elections if settings.seed_elections else None,
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the app with the engine seeded once per process."""
    resolved_settings = settings or get_settings()
    configure_logging(resolved_settings.log_level)
    repository = SeedRepository(resolved_settings)
    engine = build_engine(repository, resolved_settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        startup(app)
        yield

    app = FastAPI(
        title=resolved_settings.app_name,
        version=resolved_settings.app_version,
        lifespan=lifespan,
    )
    app.include_router(allocation_router)

    app.state.settings = resolved_settings
    app.state.seed_repository = repository
    app.state.allocation_engine = engine

    return app


def startup(app: FastAPI) -> None:
    engine: AllocationEngine = app.state.allocation_engine
    snapshot = engine.get_allocation()
    logger.info(
        "System startup completed | resources=%s | members=%s | unassigned=%s",
        len(snapshot.resources),
        len(snapshot.members),
        len(snapshot.unassigned),
    )


app = create_app()
