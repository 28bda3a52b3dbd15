from fastapi import APIRouter, Depends

from pingtopass.core.security import require_auth
from pingtopass.db.base_class import utcnow
from pingtopass.models.user import User
from pingtopass.schemas.user import AuthStatus, UserResponse

router = APIRouter()


@router.get("/status", response_model=AuthStatus)
def auth_status(current_user: User = Depends(require_auth)):
    """
    Report whether the caller is authenticated.

    Unauthenticated callers get the standard 401 error body, which carries
    ``authenticated: false``.
    """
    return AuthStatus(
        authenticated=True,
        timestamp=utcnow(),
        message="Authenticated",
        user=UserResponse.model_validate(current_user),
    )
