from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from pingtopass.core.errors import NotFoundError
from pingtopass.core.security import require_auth
from pingtopass.crud.crud_exam import exam as crud_exam
from pingtopass.crud.crud_progress import progress as crud_progress
from pingtopass.db.database import get_db
from pingtopass.models.user import User
from pingtopass.schemas.progress import LeaderboardEntry, UserProgressResponse
from pingtopass.schemas.response import StandardResponse

router = APIRouter()


@router.get("/{exam_id}", response_model=StandardResponse[UserProgressResponse])
def get_progress(exam_id: int, current_user: User = Depends(require_auth), db: Session = Depends(get_db)):
    """Current user's progress on an exam; all zeros before the first session."""
    if crud_exam.get(db, exam_id) is None:
        raise NotFoundError("Exam not found")
    db_progress = crud_progress.get_by_user_exam(db, user_id=current_user.id, exam_id=exam_id)
    if db_progress is None:
        return StandardResponse(data=UserProgressResponse(
            user_id=current_user.id, exam_id=exam_id,
            total_questions_seen=0, total_correct=0, overall_accuracy=0.0,
            total_study_minutes=0, objective_mastery={}, readiness_score=0.0,
            tests_taken=0, tests_passed=0, best_score=0.0,
        ))
    return StandardResponse(data=UserProgressResponse.model_validate(db_progress))


@router.get("/{exam_id}/leaderboard", response_model=StandardResponse[List[LeaderboardEntry]])
def get_leaderboard(
    exam_id: int,
    limit: int = Query(10, ge=1, le=100),
    current_user: User = Depends(require_auth),
    db: Session = Depends(get_db),
):
    rows = crud_progress.get_exam_leaderboard(db, exam_id=exam_id, limit=limit)
    return StandardResponse(data=[
        LeaderboardEntry(
            rank=rank,
            user_id=db_user.id,
            name=db_user.name,
            picture=db_user.picture,
            readiness_score=db_progress.readiness_score,
            overall_accuracy=db_progress.overall_accuracy,
            total_questions_seen=db_progress.total_questions_seen,
        )
        for rank, (db_progress, db_user) in enumerate(rows, start=1)
    ])
