"""Health check endpoints."""

from typing import Any

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from backend.planner.config import Settings, get_settings
from backend.planner.db.engine import get_session_factory

router = APIRouter()


def check_db(settings: Settings) -> tuple[bool, str]:
    """Check database connectivity.

    Returns:
        (is_ok, status_message)
    """
    if not settings.database_url:
        return (True, "in_memory")

    try:
        with get_session_factory()() as session:
            session.execute(text("SELECT 1"))
        return (True, "ok")
    except Exception as e:
        return (False, f"error: {type(e).__name__}")


@router.get("/health")
async def health() -> dict[str, str]:
    """Simple liveness check; 200 whenever the app is running."""
    return {"status": "ok"}


@router.get("/healthz", response_model=None)
def healthz() -> dict[str, Any] | JSONResponse:
    """Readiness check.

    Returns:
        200 with component status if the database is reachable
        503 otherwise
    """
    db_ok, db_status = check_db(get_settings())
    body = {"status": "ok" if db_ok else "degraded", "components": {"db": db_status}}

    if not db_ok:
        return JSONResponse(content=body, status_code=503)
    return body
