from datetime import timedelta
from typing import Optional, Tuple

from pydantic import BaseModel
from sqlalchemy import case, func
from sqlalchemy.orm import Session

from pingtopass.crud.base import CRUDBase
from pingtopass.crud.crud_exam import exam as crud_exam
from pingtopass.crud.crud_user import user as crud_user
from pingtopass.db.base_class import today, utcnow
from pingtopass.models.daily_goal import DailyGoal
from pingtopass.models.study_session import StudySession
from pingtopass.models.test_attempt import TestAttempt
from pingtopass.models.user import User, UserProfile
from pingtopass.schemas.dashboard import (
    DashboardStatistics, DashboardStats, DashboardUser, RecentActivity, TodayGoal,
)

XP_PER_CORRECT_ANSWER = 10
XP_PER_LEVEL = 1000
DEFAULT_TARGET_QUESTIONS = 10
DEFAULT_TARGET_MINUTES = 30


class DailyGoalCreate(BaseModel):
    user_id: int
    date: str
    target_questions: int = DEFAULT_TARGET_QUESTIONS
    target_minutes: int = DEFAULT_TARGET_MINUTES


class CRUDDailyGoal(CRUDBase[DailyGoal, DailyGoalCreate, DailyGoalCreate]):
    def get_for_day(self, db: Session, *, user_id: int, date: str) -> Optional[DailyGoal]:
        return db.query(DailyGoal).filter(DailyGoal.user_id == user_id, DailyGoal.date == date).first()

    def record_activity(self, db: Session, *, user_id: int, questions: int, minutes: int) -> DailyGoal:
        """Add today's study activity, creating the default goal first if needed. Flushes only."""
        date = today()
        db_obj = self.get_for_day(db, user_id=user_id, date=date)
        if db_obj is None:
            db_obj = self.create(db, obj_in=DailyGoalCreate(user_id=user_id, date=date), commit=False)
        db_obj.completed_questions = (db_obj.completed_questions or 0) + questions
        db_obj.completed_minutes = (db_obj.completed_minutes or 0) + minutes
        db_obj.is_completed = (
            db_obj.completed_questions >= db_obj.target_questions
            and db_obj.completed_minutes >= db_obj.target_minutes
        )
        db.flush()
        return db_obj


def award_xp(db: Session, *, db_user: User, correct_answers: int) -> Tuple[int, UserProfile, bool]:
    """
    Award XP for correct answers and level the profile up.

    Each level needs ``level * 1000`` XP; leftover XP carries into the next
    level. The study streak grows on the first award of a new day and
    restarts after a missed day. Flushes only.

    Returns:
        Tuple[int, UserProfile, bool]: XP awarded, updated profile, whether a level was gained
    """
    profile = crud_user.get_or_create_profile(db, db_obj=db_user)
    gained = correct_answers * XP_PER_CORRECT_ANSWER
    starting_level = profile.level

    profile.total_xp = (profile.total_xp or 0) + gained
    profile.current_xp = (profile.current_xp or 0) + gained
    while profile.current_xp >= profile.level * XP_PER_LEVEL:
        profile.current_xp -= profile.level * XP_PER_LEVEL
        profile.level += 1

    now = utcnow()
    last = profile.last_activity_at.date() if profile.last_activity_at else None
    if last is None or last < now.date() - timedelta(days=1):
        profile.streak = 1
    elif last == now.date() - timedelta(days=1):
        profile.streak = (profile.streak or 0) + 1
    profile.last_activity_at = now

    db.flush()
    return gained, profile, profile.level > starting_level


def get_dashboard_stats(db: Session, *, db_user: User) -> DashboardStats:
    """Build the dashboard summary for ``db_user`` without writing anything."""
    profile = db.query(UserProfile).filter(UserProfile.user_id == db_user.id).first()
    level = profile.level if profile else 1

    active_sessions = (
        db.query(func.count(StudySession.id))
        .filter(StudySession.user_id == db_user.id, StudySession.status == "active")
        .scalar()
    )
    tests_total, tests_passed, avg_score = (
        db.query(
            func.count(TestAttempt.id),
            func.sum(case((TestAttempt.passed.is_(True), 1), else_=0)),
            func.avg(TestAttempt.score),
        )
        .filter(TestAttempt.user_id == db_user.id, TestAttempt.status == "completed")
        .one()
    )
    tests_total = tests_total or 0

    date = today()
    goal = daily_goal.get_for_day(db, user_id=db_user.id, date=date)
    if goal is None:
        today_goal = TodayGoal(
            date=date,
            target_questions=DEFAULT_TARGET_QUESTIONS, completed_questions=0,
            target_minutes=DEFAULT_TARGET_MINUTES, completed_minutes=0,
            is_completed=False,
        )
    else:
        today_goal = TodayGoal(
            date=goal.date,
            target_questions=goal.target_questions, completed_questions=goal.completed_questions,
            target_minutes=goal.target_minutes, completed_minutes=goal.completed_minutes,
            is_completed=goal.is_completed,
        )

    last_test = (
        db.query(TestAttempt)
        .filter(TestAttempt.user_id == db_user.id, TestAttempt.status == "completed")
        .order_by(TestAttempt.completed_at.desc())
        .first()
    )
    last_session = (
        db.query(StudySession)
        .filter(StudySession.user_id == db_user.id)
        .order_by(StudySession.created_at.desc())
        .first()
    )

    return DashboardStats(
        user=DashboardUser(
            display_name=profile.display_name if profile else db_user.name,
            level=level,
            current_xp=profile.current_xp if profile else 0,
            next_level_xp=level * XP_PER_LEVEL,
            streak=profile.streak if profile else 0,
        ),
        statistics=DashboardStatistics(
            available_exams=crud_exam.count_active(db),
            active_sessions=active_sessions or 0,
            tests_completed=tests_total,
            average_score=round((avg_score or 0.0) * 100, 1),
            pass_rate=round((tests_passed or 0) / tests_total * 100, 1) if tests_total else 0.0,
        ),
        today_goal=today_goal,
        recent_activity=RecentActivity(
            last_test_date=last_test.completed_at if last_test else None,
            last_test_score=last_test.score if last_test else None,
            last_study_date=(last_session.last_activity or last_session.created_at) if last_session else None,
        ),
    )


daily_goal = CRUDDailyGoal(DailyGoal)
