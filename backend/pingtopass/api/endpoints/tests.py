from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from pingtopass.config.dependency_injection import get_dashboard_cache
from pingtopass.core.errors import NotFoundError
from pingtopass.core.security import require_auth
from pingtopass.crud.crud_test_attempt import test_attempt as crud_test_attempt
from pingtopass.db.database import get_db
from pingtopass.models.test_attempt import TestAttempt
from pingtopass.models.user import User
from pingtopass.schemas.question import StudyQuestion
from pingtopass.schemas.response import StandardResponse
from pingtopass.schemas.test_attempt import (
    PracticeTestStart, PracticeTestStartResponse, PracticeTestSubmit, TestAttemptResponse,
)
from pingtopass.services import study_service
from pingtopass.services.cache import DashboardCache

router = APIRouter()


def _get_owned_attempt(db: Session, attempt_id: int, user: User) -> TestAttempt:
    db_attempt = crud_test_attempt.get_for_user(db, attempt_id=attempt_id, user_id=user.id)
    if db_attempt is None:
        raise NotFoundError("Test attempt not found")
    return db_attempt


@router.post("", status_code=status.HTTP_201_CREATED, response_model=StandardResponse[PracticeTestStartResponse])
def start_test(
    test_in: PracticeTestStart,
    current_user: User = Depends(require_auth),
    db: Session = Depends(get_db),
):
    db_attempt, questions = study_service.start_test(db, db_user=current_user, obj_in=test_in)
    return StandardResponse(data=PracticeTestStartResponse(
        attempt=TestAttemptResponse.model_validate(db_attempt),
        questions=[StudyQuestion.model_validate(q) for q in questions],
    ))


@router.get("/{attempt_id}", response_model=StandardResponse[TestAttemptResponse])
def get_test(attempt_id: int, current_user: User = Depends(require_auth), db: Session = Depends(get_db)):
    return StandardResponse(data=TestAttemptResponse.model_validate(_get_owned_attempt(db, attempt_id, current_user)))


@router.post("/{attempt_id}/submit", response_model=StandardResponse[TestAttemptResponse])
def submit_test(
    attempt_id: int,
    submission: PracticeTestSubmit,
    request: Request,
    current_user: User = Depends(require_auth),
    db: Session = Depends(get_db),
    cache: DashboardCache = Depends(get_dashboard_cache),
):
    """Grade a practice test; a completed attempt cannot be submitted again."""
    db_attempt = _get_owned_attempt(db, attempt_id, current_user)
    db_attempt = study_service.submit_test(
        db, db_user=current_user, db_attempt=db_attempt, obj_in=submission, request=request, cache=cache,
    )
    return StandardResponse(data=TestAttemptResponse.model_validate(db_attempt))
