from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Optional
from datetime import datetime

from pingtopass.schemas.question import DifficultyRange, StudyMode, StudyQuestion


class SessionStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


class SessionCreate(BaseModel):
    """Request to start a study session

    Attributes:
        exam_id: exam to study
        mode: question ordering strategy
        objective_ids: restrict questions to these objectives
        difficulty: difficulty window
        question_count: questions in the first batch
    """
    exam_id: int
    mode: StudyMode = StudyMode.PRACTICE
    objective_ids: Optional[List[int]] = None
    difficulty: Optional[DifficultyRange] = None
    question_count: int = Field(20, ge=1, le=100)


class SessionUpdate(BaseModel):
    # completed is reachable only through the complete endpoint
    status: Optional[SessionStatus] = None
    current_question_id: Optional[int] = None
    time_spent_seconds: Optional[int] = Field(None, ge=0)


class SessionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    exam_id: int
    mode: str
    objectives: Optional[List[int]] = None
    difficulty_filter: Optional[Dict[str, int]] = None
    question_count: int
    total_questions: int
    correct_answers: int
    flagged_questions: int
    time_spent_seconds: int
    avg_time_per_question: Optional[float] = None
    accuracy: Optional[float] = None
    objective_scores: Optional[Dict[str, float]] = None
    status: str
    current_question_id: Optional[int] = None
    created_at: datetime
    last_activity: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class SessionStartResponse(BaseModel):
    session: SessionResponse
    questions: List[StudyQuestion]


class SessionCompleteResponse(BaseModel):
    session: SessionResponse
    xp_awarded: int
    level: int
    leveled_up: bool
