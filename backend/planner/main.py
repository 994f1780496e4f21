"""FastAPI application for the itinerary planner."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from backend.planner.api.deps import get_rate_cache
from backend.planner.api.errors import register_error_handlers
from backend.planner.api.routes.currency import router as currency_router
from backend.planner.api.routes.health import router as health_router
from backend.planner.api.routes.itineraries import router as itineraries_router
from backend.planner.api.routes.metrics import router as metrics_router
from backend.planner.config import get_settings
from backend.planner.currency.refresh_job import run_daily_rate_refresh
from backend.planner.utils.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Start and stop the daily rate refresh job when enabled."""
    settings = get_settings()
    setup_logging(settings.log_level)

    stop_event = asyncio.Event()
    job: asyncio.Task[None] | None = None
    if settings.enable_rate_refresh_job:
        job = asyncio.create_task(
            run_daily_rate_refresh(get_rate_cache(), settings.rate_refresh_hour, stop_event)
        )

    yield

    stop_event.set()
    if job is not None:
        await job


app = FastAPI(title="Itinerary Planner API", version="0.1.0", lifespan=lifespan)

register_error_handlers(app)

# Register routes
app.include_router(health_router, tags=["health"])
app.include_router(metrics_router, tags=["metrics"])
app.include_router(itineraries_router)
app.include_router(currency_router)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "Itinerary Planner API", "version": "0.1.0"}
