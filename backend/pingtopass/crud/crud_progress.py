from typing import Dict, List, Optional, Tuple
from sqlalchemy.orm import Session

from pingtopass.crud.base import CRUDBase
from pingtopass.db.base_class import today
from pingtopass.models.user import User
from pingtopass.models.user_progress import UserProgress
from pingtopass.schemas.progress import UserProgressCreate, UserProgressResponse

LEADERBOARD_MIN_QUESTIONS = 50


class CRUDProgress(CRUDBase[UserProgress, UserProgressCreate, UserProgressResponse]):
    def get_by_user_exam(self, db: Session, *, user_id: int, exam_id: int) -> Optional[UserProgress]:
        return (
            db.query(UserProgress)
            .filter(UserProgress.user_id == user_id, UserProgress.exam_id == exam_id)
            .first()
        )

    def _get_or_add(self, db: Session, user_id: int, exam_id: int) -> UserProgress:
        db_obj = self.get_by_user_exam(db, user_id=user_id, exam_id=exam_id)
        if db_obj is None:
            db_obj = UserProgress(
                user_id=user_id, exam_id=exam_id,
                total_questions_seen=0, total_correct=0, overall_accuracy=0.0,
                total_study_minutes=0, objective_mastery={}, readiness_score=0.0,
                tests_taken=0, tests_passed=0, best_score=0.0,
            )
            db.add(db_obj)
        return db_obj

    def _finish(self, db: Session, db_obj: UserProgress, commit: bool) -> UserProgress:
        if commit:
            db.commit()
            db.refresh(db_obj)
        else:
            db.flush()
        return db_obj

    def update_user_progress(
        self,
        db: Session,
        *,
        user_id: int,
        exam_id: int,
        questions_answered: int,
        correct_answers: int,
        study_minutes: int = 0,
        objective_scores: Optional[Dict[str, float]] = None,
        commit: bool = True
    ) -> UserProgress:
        """
        Accumulate a finished study session into the user's exam progress.

        Creates the (user, exam) row on first use. Counters are added,
        accuracy is recomputed over all questions seen, and the latest
        per-objective scores replace the stored ones.
        """
        db_obj = self._get_or_add(db, user_id, exam_id)
        db_obj.total_questions_seen += questions_answered
        db_obj.total_correct += correct_answers
        db_obj.total_study_minutes += study_minutes
        if db_obj.total_questions_seen:
            db_obj.overall_accuracy = db_obj.total_correct / db_obj.total_questions_seen
        if objective_scores:
            mastery = dict(db_obj.objective_mastery or {})
            mastery.update(objective_scores)
            db_obj.objective_mastery = mastery
        db_obj.last_study_date = today()
        return self._finish(db, db_obj, commit)

    def record_test_result(
        self, db: Session, *, user_id: int, exam_id: int, score: float, passed: bool, commit: bool = True
    ) -> UserProgress:
        db_obj = self._get_or_add(db, user_id, exam_id)
        db_obj.tests_taken += 1
        if passed:
            db_obj.tests_passed += 1
        db_obj.best_score = max(db_obj.best_score or 0.0, score)
        db_obj.last_test_date = today()
        return self._finish(db, db_obj, commit)

    def get_exam_leaderboard(self, db: Session, *, exam_id: int, limit: int = 10) -> List[Tuple[UserProgress, User]]:
        """Users with more than 50 questions seen on the exam, highest readiness first."""
        return (
            db.query(UserProgress, User)
            .join(User, User.id == UserProgress.user_id)
            .filter(
                UserProgress.exam_id == exam_id,
                UserProgress.total_questions_seen > LEADERBOARD_MIN_QUESTIONS,
            )
            .order_by(UserProgress.readiness_score.desc(), UserProgress.overall_accuracy.desc())
            .limit(limit)
            .all()
        )


progress = CRUDProgress(UserProgress)
