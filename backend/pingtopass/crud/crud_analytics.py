from datetime import timedelta
from typing import List

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from pingtopass.db.base_class import utcnow
from pingtopass.models.audit import AIGenerationLog
from pingtopass.models.question import Question
from pingtopass.schemas.analytics import AICostEntry, AICostSummary, QuestionAnalytics

MIN_ATTEMPTS_FOR_ANALYTICS = 10


def get_question_analytics(db: Session, *, exam_id: int, limit: int = 50) -> List[QuestionAnalytics]:
    """Success rate of questions with more than 10 attempts, hardest first."""
    success_rate = Question.correct_attempts * 1.0 / Question.total_attempts
    rows = (
        db.query(Question)
        .filter(Question.exam_id == exam_id, Question.total_attempts > MIN_ATTEMPTS_FOR_ANALYTICS)
        .order_by(success_rate.asc(), Question.id)
        .limit(limit)
        .all()
    )
    return [
        QuestionAnalytics(
            question_id=q.id,
            text=q.text,
            objective_id=q.objective_id,
            difficulty=q.difficulty,
            total_attempts=q.total_attempts,
            correct_attempts=q.correct_attempts,
            success_rate=q.correct_attempts / q.total_attempts,
            avg_time_seconds=q.avg_time_seconds or 0.0,
        )
        for q in rows
    ]


def get_ai_cost_summary(db: Session, *, days: int = 30) -> AICostSummary:
    """LLM usage over the last ``days`` days, grouped by purpose and model."""
    since = utcnow() - timedelta(days=days)
    rows = (
        db.query(
            AIGenerationLog.purpose,
            AIGenerationLog.model,
            func.count(AIGenerationLog.id),
            func.sum(case((AIGenerationLog.success.is_(True), 1), else_=0)),
            func.coalesce(func.sum(AIGenerationLog.total_tokens), 0),
            func.coalesce(func.sum(AIGenerationLog.cost_cents), 0.0),
            func.avg(AIGenerationLog.generation_time_ms),
        )
        .filter(AIGenerationLog.created_at >= since)
        .group_by(AIGenerationLog.purpose, AIGenerationLog.model)
        .order_by(func.sum(AIGenerationLog.cost_cents).desc())
        .all()
    )
    entries = [
        AICostEntry(
            purpose=purpose,
            model=model,
            calls=calls,
            successful_calls=successful or 0,
            total_tokens=int(tokens),
            cost_cents=round(float(cost), 4),
            avg_generation_time_ms=float(avg_ms) if avg_ms is not None else None,
        )
        for purpose, model, calls, successful, tokens, cost, avg_ms in rows
    ]
    return AICostSummary(
        days=days,
        total_cost_cents=round(sum(e.cost_cents for e in entries), 4),
        total_tokens=sum(e.total_tokens for e in entries),
        entries=entries,
    )
