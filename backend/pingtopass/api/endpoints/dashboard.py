import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from pingtopass.config.dependency_injection import get_dashboard_cache
from pingtopass.core.security import require_auth
from pingtopass.crud.crud_dashboard import get_dashboard_stats
from pingtopass.db.database import get_db
from pingtopass.models.user import User
from pingtopass.schemas.dashboard import DashboardStats
from pingtopass.schemas.response import StandardResponse
from pingtopass.services.cache import DashboardCache

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/stats", response_model=StandardResponse[DashboardStats])
def dashboard_stats(
    response: Response,
    current_user: User = Depends(require_auth),
    db: Session = Depends(get_db),
    cache: DashboardCache = Depends(get_dashboard_cache),
):
    """
    Dashboard summary: level and XP, study statistics, today's goal and
    recent activity. Served from the per-user cache when it is warm.
    """
    response.headers["Cache-Control"] = "public, max-age=300, s-maxage=300"
    response.headers["CDN-Cache-Control"] = "max-age=300"

    stats = cache.get(current_user.id)
    if stats is not None:
        response.headers["X-Cache"] = "HIT"
        return StandardResponse(data=stats)

    stats = get_dashboard_stats(db, db_user=current_user)
    cache.set(current_user.id, stats)
    response.headers["X-Cache"] = "MISS"
    return StandardResponse(data=stats)
