from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from pingtopass.config.dependency_injection import get_dashboard_cache
from pingtopass.core.errors import ConflictError, NotFoundError, ValidationError
from pingtopass.core.security import require_auth
from pingtopass.crud.crud_study_session import study_session as crud_study_session
from pingtopass.db.base_class import utcnow
from pingtopass.db.database import get_db
from pingtopass.models.study_session import StudySession
from pingtopass.models.user import User
from pingtopass.schemas.question import StudyQuestion
from pingtopass.schemas.response import StandardResponse
from pingtopass.schemas.session import (
    SessionCompleteResponse, SessionCreate, SessionResponse, SessionStartResponse, SessionStatus, SessionUpdate,
)
from pingtopass.services import study_service
from pingtopass.services.cache import DashboardCache

router = APIRouter()


def _get_owned_session(db: Session, session_id: int, user: User) -> StudySession:
    db_session = crud_study_session.get_for_user(db, session_id=session_id, user_id=user.id)
    if db_session is None:
        raise NotFoundError("Study session not found")
    return db_session


@router.post("", status_code=status.HTTP_201_CREATED, response_model=StandardResponse[SessionStartResponse])
def start_session(
    session_in: SessionCreate,
    request: Request,
    current_user: User = Depends(require_auth),
    db: Session = Depends(get_db),
    cache: DashboardCache = Depends(get_dashboard_cache),
):
    """
    Start a study session and return its first batch of questions.

    Only one active session per exam is allowed.
    """
    db_session, questions = study_service.start_session(
        db, db_user=current_user, obj_in=session_in, request=request, cache=cache,
    )
    return StandardResponse(data=SessionStartResponse(
        session=SessionResponse.model_validate(db_session),
        questions=[StudyQuestion.model_validate(q) for q in questions],
    ))


@router.get("", response_model=StandardResponse[List[SessionResponse]])
def list_sessions(
    status_filter: Optional[SessionStatus] = Query(None, alias="status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(require_auth),
    db: Session = Depends(get_db),
):
    sessions = crud_study_session.get_multi_by_user(
        db,
        user_id=current_user.id,
        status=status_filter.value if status_filter else None,
        skip=skip,
        limit=limit,
    )
    return StandardResponse(data=[SessionResponse.model_validate(s) for s in sessions])


@router.get("/{session_id}", response_model=StandardResponse[SessionResponse])
def get_session(session_id: int, current_user: User = Depends(require_auth), db: Session = Depends(get_db)):
    return StandardResponse(data=SessionResponse.model_validate(_get_owned_session(db, session_id, current_user)))


@router.put("/{session_id}", response_model=StandardResponse[SessionResponse])
def update_session(
    session_id: int,
    session_in: SessionUpdate,
    current_user: User = Depends(require_auth),
    db: Session = Depends(get_db),
):
    db_session = _get_owned_session(db, session_id, current_user)
    if db_session.status == SessionStatus.COMPLETED.value:
        raise ConflictError("Study session is already completed")
    if session_in.status == SessionStatus.COMPLETED:
        raise ValidationError("Use the complete endpoint to finish a session")

    update_data = session_in.model_dump(mode="json", exclude_unset=True)
    update_data["last_activity"] = utcnow()
    db_session = crud_study_session.update(db, db_obj=db_session, obj_in=update_data)
    return StandardResponse(data=SessionResponse.model_validate(db_session))


@router.post("/{session_id}/complete", response_model=StandardResponse[SessionCompleteResponse])
def complete_session(
    session_id: int,
    request: Request,
    current_user: User = Depends(require_auth),
    db: Session = Depends(get_db),
    cache: DashboardCache = Depends(get_dashboard_cache),
):
    db_session = _get_owned_session(db, session_id, current_user)
    result = study_service.complete_session(
        db, db_user=current_user, db_session=db_session, request=request, cache=cache,
    )
    return StandardResponse(data=result)
