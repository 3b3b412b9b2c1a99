"""Health check endpoints."""
from fastapi import APIRouter, Depends, Request, status, Response
from sqlalchemy.orm import Session
from sqlalchemy import text

from toolhub.db import get_db
from toolhub.settings import settings

router = APIRouter(tags=["health"])


@router.get("/health")
async def health():
    """
    Basic health check - process is alive.

    Returns 200 if the application is running.
    """
    return {"status": "healthy"}


@router.get("/ready")
async def ready(request: Request, response: Response, db: Session = Depends(get_db)):
    """
    Readiness check - catalog loaded and preference storage reachable.

    Returns 200 if ready to accept traffic, 503 if not ready.
    """
    services = getattr(request.app.state, "services", None)
    if services is None or len(services.catalog) == 0:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {
            "status": "not_ready",
            "catalog": "empty",
            "message": "Catalog not loaded"
        }

    if settings.PREFERENCES_BACKEND == "database":
        try:
            with db.connection() as conn:
                conn.execute(text("SELECT 1"))
        except Exception as e:
            response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
            return {
                "status": "not_ready",
                "database": "disconnected",
                "error": str(e),
                "message": "Database connection failed"
            }

    return {
        "status": "ready",
        "catalog_tools": len(services.catalog),
        "preferences_backend": settings.PREFERENCES_BACKEND,
        "preference_fallbacks": services.preference_fallbacks,
    }
