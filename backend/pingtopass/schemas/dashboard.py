from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class DashboardUser(BaseModel):
    display_name: str
    level: int
    current_xp: int
    next_level_xp: int
    streak: int


class DashboardStatistics(BaseModel):
    available_exams: int
    active_sessions: int
    tests_completed: int
    average_score: float
    pass_rate: float


class TodayGoal(BaseModel):
    date: str
    target_questions: int
    completed_questions: int
    target_minutes: int
    completed_minutes: int
    is_completed: bool


class RecentActivity(BaseModel):
    last_test_date: Optional[datetime] = None
    last_test_score: Optional[float] = None
    last_study_date: Optional[datetime] = None


class DashboardStats(BaseModel):
    user: DashboardUser
    statistics: DashboardStatistics
    today_goal: TodayGoal
    recent_activity: RecentActivity
