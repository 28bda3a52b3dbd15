import logging
import time

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pingtopass.core.config import settings
from pingtopass.core.errors import error_metrics
from pingtopass.db.base_class import utcnow
from pingtopass.db.database import check_connection, get_db

logger = logging.getLogger(__name__)
router = APIRouter()

STARTED_AT = time.time()

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


def _database_ok(db: Session) -> bool:
    try:
        return check_connection(db)
    except SQLAlchemyError as e:
        logger.error("Database health check failed: %s", e)
        return False


@router.get("")
def health(db: Session = Depends(get_db)):
    """
    Service health with database connectivity and error-rate checks.

    Responds 503 when the database is unreachable or the error rate is critical.
    """
    database_ok = _database_ok(db)
    error_health = error_metrics.health_status()
    healthy = database_ok and error_health != "critical"
    body = {
        "status": "healthy" if healthy else "unhealthy",
        "timestamp": utcnow().isoformat() + "Z",
        "uptime": round(time.time() - STARTED_AT, 1),
        "environment": settings.APP_ENV,
        "version": settings.APP_VERSION,
        "checks": {
            "database": "connected" if database_ok else "disconnected",
            "errors": error_health,
        },
    }
    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=body,
        headers=NO_CACHE_HEADERS,
    )


@router.get("/database")
def database_health(response: Response, db: Session = Depends(get_db)):
    timestamp = utcnow().isoformat() + "Z"
    if _database_ok(db):
        return {"status": "healthy", "database": "connected", "timestamp": timestamp}
    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return {"status": "unhealthy", "database": "disconnected", "timestamp": timestamp}
