import logging
import time
from datetime import timedelta
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from pingtopass.crud.base import CRUDBase
from pingtopass.db.base_class import utcnow
from pingtopass.models.question import Question
from pingtopass.models.user_answer import UserAnswer
from pingtopass.schemas.question import DifficultyRange, QuestionCreate, StudyMode

logger = logging.getLogger(__name__)

SLOW_QUERY_MS = 100


class CRUDQuestion(CRUDBase[Question, QuestionCreate, QuestionCreate]):
    def get_recent_question_ids(self, db: Session, *, user_id: int, hours: int) -> List[int]:
        """IDs of questions the user answered in the last ``hours`` hours."""
        since = utcnow() - timedelta(hours=hours)
        rows = (
            db.query(UserAnswer.question_id)
            .filter(UserAnswer.user_id == user_id, UserAnswer.answered_at >= since)
            .distinct()
            .all()
        )
        return [row[0] for row in rows]

    def get_study_questions(
        self,
        db: Session,
        *,
        user_id: int,
        exam_id: int,
        objective_ids: Optional[List[int]] = None,
        difficulty: Optional[DifficultyRange] = None,
        exclude_recent_hours: int = 24,
        limit: int = 20,
        mode: StudyMode = StudyMode.PRACTICE
    ) -> List[Question]:
        """
        Select the next batch of study questions for a user.

        Only active questions of the exam inside the difficulty window are
        considered; questions the user answered within
        ``exclude_recent_hours`` are skipped. ``weak_areas`` puts the most
        attempted questions first, ``speed_drill`` the easiest, every other
        mode shuffles. An empty result is returned as-is.

        Args:
            db: database session
            user_id: studying user
            exam_id: exam to draw from
            objective_ids: restrict to these objectives when non-empty
            difficulty: inclusive window, 1-5 when omitted
            exclude_recent_hours: look-back window for recently answered questions
            limit: maximum questions to return
            mode: ordering strategy

        Returns:
            List[Question]: at most ``limit`` questions
        """
        start = time.perf_counter()
        difficulty = difficulty or DifficultyRange()
        recent_ids = self.get_recent_question_ids(db, user_id=user_id, hours=exclude_recent_hours)

        query = db.query(Question).filter(
            Question.exam_id == exam_id,
            Question.is_active.is_(True),
            Question.difficulty.between(difficulty.min, difficulty.max),
        )
        if objective_ids:
            query = query.filter(Question.objective_id.in_(objective_ids))
        if recent_ids:
            query = query.filter(Question.id.notin_(recent_ids))

        if mode == StudyMode.WEAK_AREAS:
            query = query.order_by(Question.total_attempts.desc())
        elif mode == StudyMode.SPEED_DRILL:
            query = query.order_by(Question.difficulty.asc())
        else:
            query = query.order_by(func.random())

        questions = query.limit(limit).all()

        duration_ms = (time.perf_counter() - start) * 1000
        if duration_ms > SLOW_QUERY_MS:
            logger.warning("Slow study questions query: %.0fms for user %s", duration_ms, user_id)
        return questions

    def get_random_for_exam(self, db: Session, *, exam_id: int, count: int) -> List[Question]:
        return (
            db.query(Question)
            .filter(Question.exam_id == exam_id, Question.is_active.is_(True))
            .order_by(func.random())
            .limit(count)
            .all()
        )

    def get_by_ids(self, db: Session, *, ids: List[int]) -> List[Question]:
        """Questions for ``ids``, in the order the ids are given."""
        if not ids:
            return []
        by_id = {q.id: q for q in db.query(Question).filter(Question.id.in_(ids)).all()}
        return [by_id[i] for i in ids if i in by_id]


question = CRUDQuestion(Question)
