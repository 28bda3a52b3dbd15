from typing import Any, Dict

from fastapi import APIRouter, Depends

from pingtopass.core.errors import error_metrics
from pingtopass.core.security import require_admin
from pingtopass.models.user import User
from pingtopass.schemas.response import StandardResponse

router = APIRouter()


@router.get("/metrics", response_model=StandardResponse[Dict[str, Any]])
def metrics(admin: User = Depends(require_admin)):
    """In-process error metrics since the last restart."""
    return StandardResponse(data=error_metrics.summary())
