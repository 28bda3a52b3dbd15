from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class ObjectiveResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    name: str
    description: Optional[str] = None
    weight: float
    parent_id: Optional[int] = None


class ExamResponse(BaseModel):
    """Exam summary returned by the catalogue endpoints"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    vendor_id: str
    code: str
    name: str
    description: Optional[str] = None
    passing_score: float
    question_count: int
    time_limit_minutes: int
    difficulty_level: Optional[int] = None
    is_beta: bool


class ExamDetailResponse(ExamResponse):
    objectives: List[ObjectiveResponse] = []


class ExamCreate(BaseModel):
    vendor_id: str
    code: str
    name: str
    description: Optional[str] = None
    passing_score: float = Field(0.65, gt=0, le=1)
    question_count: int = Field(65, ge=1)
    time_limit_minutes: int = Field(90, ge=1)
    difficulty_level: Optional[int] = Field(3, ge=1, le=5)
    is_beta: bool = False


class ObjectiveCreate(BaseModel):
    exam_id: int
    code: str
    name: str
    description: Optional[str] = None
    weight: float = Field(0.25, ge=0, le=1)
    parent_id: Optional[int] = None
    sort_order: int = 0
