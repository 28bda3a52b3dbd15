from pydantic import BaseModel
from typing import List, Optional


class QuestionAnalytics(BaseModel):
    question_id: int
    text: str
    objective_id: int
    difficulty: int
    total_attempts: int
    correct_attempts: int
    success_rate: float
    avg_time_seconds: float


class AICostEntry(BaseModel):
    purpose: str
    model: str
    calls: int
    successful_calls: int
    total_tokens: int
    cost_cents: float
    avg_generation_time_ms: Optional[float] = None


class AICostSummary(BaseModel):
    days: int
    total_cost_cents: float
    total_tokens: int
    entries: List[AICostEntry]
