"""Health check endpoints.

The engine's only external dependency is its database, so the detailed
check and the readiness probe both come down to a round trip to it.
"""

from importlib.metadata import PackageNotFoundError, version
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.orm import Session

from pattern_engine.config import Settings
from pattern_engine.database import get_db
from pattern_engine.dependencies import get_settings
from pattern_engine.logging_config import get_logger

router = APIRouter()
logger = get_logger(__name__)

DISTRIBUTION = "paradocs-patterns"

try:
    VERSION = version(DISTRIBUTION)
except PackageNotFoundError:  # source checkout without `pip install -e .`
    VERSION = "0+unknown"


def check_database(db: Session) -> Dict[str, Any]:
    """Check database connectivity.

    Args:
        db: Database session.

    Returns:
        Dict with status and optional error message.
    """
    try:
        db.execute(text("SELECT 1"))
        return {"healthy": True, "message": "Database connected"}
    except Exception as e:
        logger.error("database_health_check_failed", error=str(e))
        return {"healthy": False, "message": f"Database error: {str(e)}"}


@router.get("/health")
def health_check(settings: Settings = Depends(get_settings)) -> Dict[str, Any]:
    """Basic health check - just app status."""
    return {"status": "healthy", "service": settings.app_name, "version": VERSION}


@router.get("/health/detailed")
def detailed_health_check(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    """Health status including database connectivity."""
    checks = {"database": check_database(db)}

    all_healthy = all(check["healthy"] for check in checks.values())
    overall_status = "healthy" if all_healthy else "degraded"

    logger.info(
        "health_check_performed",
        status=overall_status,
        database=checks["database"]["healthy"],
    )

    return {
        "status": overall_status,
        "service": settings.app_name,
        "version": VERSION,
        "checks": checks,
    }


@router.get("/health/ready")
def readiness_check(db: Session = Depends(get_db)) -> Dict[str, Any]:
    """Readiness probe: 200 if the database answers, 503 otherwise."""
    try:
        db.execute(text("SELECT 1"))
        return {"ready": True}
    except Exception:
        raise HTTPException(status_code=503, detail={"ready": False, "reason": "Database unavailable"})


@router.get("/health/live")
def liveness_check() -> Dict[str, Any]:
    return {"alive": True}
