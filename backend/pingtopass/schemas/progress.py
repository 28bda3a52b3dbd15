from pydantic import BaseModel, ConfigDict
from typing import Dict, Optional


class UserProgressResponse(BaseModel):
    """Progress of one user on one exam"""
    model_config = ConfigDict(from_attributes=True)

    user_id: int
    exam_id: int
    total_questions_seen: int
    total_correct: int
    overall_accuracy: float
    total_study_minutes: int
    last_study_date: Optional[str] = None
    objective_mastery: Optional[Dict[str, float]] = None
    readiness_score: float
    tests_taken: int
    tests_passed: int
    best_score: float
    last_test_date: Optional[str] = None


class LeaderboardEntry(BaseModel):
    rank: int
    user_id: int
    name: str
    picture: Optional[str] = None
    readiness_score: float
    overall_accuracy: float
    total_questions_seen: int


class UserProgressCreate(BaseModel):
    user_id: int
    exam_id: int
