from typing import List

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from pingtopass.config.dependency_injection import get_question_generator
from pingtopass.core.config import settings
from pingtopass.core.errors import NotFoundError
from pingtopass.core.rate_limit import limiter
from pingtopass.core.security import require_admin
from pingtopass.crud import crud_analytics
from pingtopass.crud.crud_exam import exam as crud_exam
from pingtopass.db.database import get_db
from pingtopass.models.user import User
from pingtopass.schemas.analytics import AICostSummary, QuestionAnalytics
from pingtopass.schemas.generation import GenerateQuestionsRequest, GenerationResult
from pingtopass.schemas.response import StandardResponse
from pingtopass.services.question_generator import QuestionGenerator

router = APIRouter()


@router.post("/questions/generate", response_model=StandardResponse[GenerationResult])
@limiter.limit(settings.GENERATION_RATE_LIMIT)
def generate_questions(
    request: Request,
    generation_in: GenerateQuestionsRequest,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    generator: QuestionGenerator = Depends(get_question_generator),
):
    """
    Generate questions for an exam objective with the configured LLM.

    New questions are stored inactive and pending review.
    """
    result = generator.generate(
        db,
        request=generation_in,
        user_id=admin.id,
        request_id=getattr(request.state, "request_id", None),
    )
    return StandardResponse(data=result)


@router.get("/analytics/questions/{exam_id}", response_model=StandardResponse[List[QuestionAnalytics]])
def question_analytics(
    exam_id: int,
    limit: int = Query(50, ge=1, le=500),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    if crud_exam.get(db, exam_id) is None:
        raise NotFoundError("Exam not found")
    return StandardResponse(data=crud_analytics.get_question_analytics(db, exam_id=exam_id, limit=limit))


@router.get("/analytics/ai-costs", response_model=StandardResponse[AICostSummary])
def ai_costs(
    days: int = Query(30, ge=1, le=365),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return StandardResponse(data=crud_analytics.get_ai_cost_summary(db, days=days))
