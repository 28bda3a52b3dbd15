from pydantic import BaseModel, Field
from typing import List, Optional


class AnswerSubmit(BaseModel):
    """Answer submitted from the study view

    Attributes:
        question_id: answered question
        study_session_id: session to aggregate into, optional
        test_attempt_id: practice test the answer belongs to, optional
        selected_answer: option id, or a JSON array of ids for multi-select
        time_spent_seconds: time taken, at most one hour
        confidence_level: self-reported confidence 1-5
        flagged: marked for later review
    """
    question_id: int
    study_session_id: Optional[int] = None
    test_attempt_id: Optional[int] = None
    selected_answer: str = Field(..., min_length=1)
    time_spent_seconds: int = Field(..., ge=0, le=3600)
    confidence_level: Optional[int] = Field(None, ge=1, le=5)
    flagged: bool = False


class UserAnswerCreate(BaseModel):
    """Row written by answer recording"""
    user_id: int
    question_id: int
    study_session_id: Optional[int] = None
    test_attempt_id: Optional[int] = None
    selected_answer: str
    is_correct: bool
    time_spent_seconds: int = 0
    confidence_level: Optional[int] = None
    flagged: bool = False


class SessionProgressSnapshot(BaseModel):
    total_questions: int
    correct_answers: int
    accuracy: float


class AnswerResult(BaseModel):
    """Grading result returned after an answer is recorded"""
    answer_id: int
    question_id: int
    is_correct: bool
    correct_answer_ids: List[str]
    explanation: Optional[str] = None
    reference: Optional[str] = None
    session_progress: Optional[SessionProgressSnapshot] = None
