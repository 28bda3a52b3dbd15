from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.orm import Session

from pingtopass.core.errors import NotFoundError, ValidationError
from pingtopass.core.security import require_auth
from pingtopass.crud.crud_exam import exam as crud_exam
from pingtopass.crud.crud_question import question as crud_question
from pingtopass.db.database import get_db
from pingtopass.models.user import User
from pingtopass.schemas.answer import AnswerResult, AnswerSubmit
from pingtopass.schemas.question import (
    DifficultyRange, StudyMode, StudyQuestion, StudyQuestionsMetadata, StudyQuestionsResponse,
)
from pingtopass.schemas.response import StandardResponse
from pingtopass.services import study_service

router = APIRouter()


def parse_objective_ids(raw: Optional[str]) -> Optional[List[int]]:
    """Parse '1,2,3' into [1, 2, 3]; blank means no restriction."""
    if not raw or not raw.strip():
        return None
    try:
        return [int(part) for part in raw.split(",") if part.strip()]
    except ValueError:
        raise ValidationError("objective_ids must be a comma separated list of integers")


def parse_difficulty(raw: Optional[str]) -> DifficultyRange:
    """Parse '3-5' (or a single level such as '4') into a difficulty window."""
    if not raw or not raw.strip():
        return DifficultyRange()
    low, _, high = raw.partition("-")
    try:
        low_value = int(low)
        high_value = int(high) if high else low_value
    except ValueError:
        raise ValidationError("difficulty must look like '3-5'")
    if not (1 <= low_value <= high_value <= 5):
        raise ValidationError("difficulty must be within 1-5 with min not above max")
    return DifficultyRange(min=low_value, max=high_value)


@router.get("/questions", response_model=StandardResponse[StudyQuestionsResponse])
def get_study_questions(
    response: Response,
    exam_id: int,
    objective_ids: Optional[str] = None,
    difficulty: Optional[str] = None,
    mode: StudyMode = StudyMode.PRACTICE,
    limit: int = Query(20, ge=1, le=100),
    exclude_recent_hours: int = Query(24, ge=0, le=24 * 30),
    current_user: User = Depends(require_auth),
    db: Session = Depends(get_db),
):
    """
    Next batch of study questions for the current user.

    Answer correctness, explanations and references are not included.
    """
    objectives = parse_objective_ids(objective_ids)
    window = parse_difficulty(difficulty)
    if crud_exam.get_active_by_id(db, exam_id=exam_id) is None:
        raise NotFoundError("Exam not found")

    questions = crud_question.get_study_questions(
        db,
        user_id=current_user.id,
        exam_id=exam_id,
        objective_ids=objectives,
        difficulty=window,
        exclude_recent_hours=exclude_recent_hours,
        limit=limit,
        mode=mode,
    )
    response.headers["Cache-Control"] = "private, max-age=60"
    return StandardResponse(data=StudyQuestionsResponse(
        questions=[StudyQuestion.model_validate(q) for q in questions],
        metadata=StudyQuestionsMetadata(
            count=len(questions),
            mode=mode,
            filters={
                "exam_id": exam_id,
                "objective_ids": objectives or [],
                "difficulty": window.model_dump(),
                "exclude_recent_hours": exclude_recent_hours,
            },
        ),
    ))


@router.post("/answer", response_model=StandardResponse[AnswerResult])
def submit_answer(
    answer_in: AnswerSubmit,
    request: Request,
    current_user: User = Depends(require_auth),
    db: Session = Depends(get_db),
):
    result = study_service.submit_answer(db, db_user=current_user, obj_in=answer_in, request=request)
    return StandardResponse(data=result)
