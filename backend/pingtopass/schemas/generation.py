from pydantic import BaseModel, Field
from typing import List, Optional

from pingtopass.schemas.question import AnswerOption, QuestionType


class GenerateQuestionsRequest(BaseModel):
    """Admin request for AI generated questions

    Attributes:
        exam_id: exam the questions belong to
        objective_id: objective the questions test
        count: number of questions to ask for
        difficulty: target difficulty, left to the model when omitted
    """
    exam_id: int
    objective_id: int
    count: int = Field(5, ge=1, le=20)
    difficulty: Optional[int] = Field(None, ge=1, le=5)


class GeneratedQuestion(BaseModel):
    """One item of the model's JSON output"""
    text: str = Field(..., min_length=10)
    type: QuestionType = QuestionType.MULTIPLE_CHOICE
    answers: List[AnswerOption] = Field(..., min_length=2, max_length=6)
    explanation: Optional[str] = None
    reference: Optional[str] = None
    difficulty: int = Field(3, ge=1, le=5)
    tags: List[str] = []
    confidence: Optional[float] = Field(None, ge=0, le=1)


class GenerationResult(BaseModel):
    requested: int
    generated: int
    rejected: int
    question_ids: List[int]
    model: str
    generation_time_ms: int
    log_id: int
