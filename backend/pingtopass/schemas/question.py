from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import List, Optional


class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "multiple_choice"
    MULTI_SELECT = "multi_select"
    TRUE_FALSE = "true_false"


class StudyMode(str, Enum):
    PRACTICE = "practice"
    REVIEW = "review"
    SPEED_DRILL = "speed_drill"
    WEAK_AREAS = "weak_areas"
    CUSTOM = "custom"


class DifficultyRange(BaseModel):
    """Inclusive difficulty window

    Attributes:
        min: lowest difficulty, 1-5
        max: highest difficulty, 1-5, not below min
    """
    min: int = Field(1, ge=1, le=5)
    max: int = Field(5, ge=1, le=5)

    @model_validator(mode="after")
    def check_order(self) -> "DifficultyRange":
        if self.min > self.max:
            raise ValueError("difficulty min must not exceed max")
        return self


class AnswerOption(BaseModel):
    """Stored answer option, including its correctness"""
    id: str = Field(..., min_length=1)
    text: str = Field(..., min_length=1)
    is_correct: bool = False
    explanation: Optional[str] = None


class PublicAnswerOption(BaseModel):
    """Answer option as shown to a student; no correctness hints"""
    id: str
    text: str


class QuestionCreate(BaseModel):
    exam_id: int
    objective_id: int
    text: str = Field(..., min_length=1)
    type: QuestionType = QuestionType.MULTIPLE_CHOICE
    answers: List[AnswerOption] = Field(..., min_length=2)
    explanation: Optional[str] = None
    reference: Optional[str] = None
    difficulty: int = Field(3, ge=1, le=5)
    tags: List[str] = []
    ai_generated: bool = False
    ai_model: Optional[str] = None
    ai_prompt_version: Optional[str] = None
    ai_confidence_score: Optional[float] = None
    review_status: str = "pending"
    is_active: bool = True

    @model_validator(mode="after")
    def check_answers(self) -> "QuestionCreate":
        ids = [a.id for a in self.answers]
        if len(set(ids)) != len(ids):
            raise ValueError("answer ids must be unique")
        correct = sum(1 for a in self.answers if a.is_correct)
        if correct == 0:
            raise ValueError("at least one answer must be correct")
        if self.type != QuestionType.MULTI_SELECT and correct != 1:
            raise ValueError("single-answer questions need exactly one correct answer")
        return self


class StudyQuestion(BaseModel):
    """Question served for study

    Correct flags, explanation and reference are left out so the client
    cannot read the answer before submitting.
    """
    model_config = ConfigDict(from_attributes=True)

    id: int
    exam_id: int
    objective_id: int
    text: str
    type: str
    answers: List[PublicAnswerOption]
    difficulty: int
    tags: Optional[List[str]] = None


class StudyQuestionsMetadata(BaseModel):
    count: int
    mode: StudyMode
    filters: dict


class StudyQuestionsResponse(BaseModel):
    questions: List[StudyQuestion]
    metadata: StudyQuestionsMetadata
