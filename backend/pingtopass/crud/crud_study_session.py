from typing import Dict, List, Optional
from sqlalchemy.orm import Session

from pingtopass.crud.base import CRUDBase, SortDirection
from pingtopass.db.base_class import utcnow
from pingtopass.models.question import Question
from pingtopass.models.study_session import StudySession
from pingtopass.models.user_answer import UserAnswer
from pingtopass.schemas.session import SessionCreate, SessionUpdate


class CRUDStudySession(CRUDBase[StudySession, SessionCreate, SessionUpdate]):
    def create_for_user(self, db: Session, *, user_id: int, obj_in: SessionCreate, commit: bool = True) -> StudySession:
        db_obj = StudySession(
            user_id=user_id,
            exam_id=obj_in.exam_id,
            mode=obj_in.mode.value,
            objectives=obj_in.objective_ids or None,
            difficulty_filter=obj_in.difficulty.model_dump() if obj_in.difficulty else None,
            question_count=obj_in.question_count,
            objective_scores={},
            status="active",
        )
        return self._save(db, db_obj, commit)

    def get_for_user(self, db: Session, *, session_id: int, user_id: int) -> Optional[StudySession]:
        """The session, or None when it does not exist or belongs to someone else."""
        db_obj = self.get(db, session_id)
        if db_obj is None or db_obj.user_id != user_id:
            return None
        return db_obj

    def get_active_for_exam(self, db: Session, *, user_id: int, exam_id: int) -> Optional[StudySession]:
        results = self.get_multi(
            db,
            filter_conditions={"user_id": user_id, "exam_id": exam_id, "status": "active"},
            limit=1,
        )
        return results[0] if results else None

    def get_multi_by_user(
        self, db: Session, *, user_id: int, status: Optional[str] = None, skip: int = 0, limit: int = 20
    ) -> List[StudySession]:
        filters = {"user_id": user_id}
        if status:
            filters["status"] = status
        return self.get_multi(
            db,
            skip=skip,
            limit=limit,
            filter_conditions=filters,
            sort_by=[("created_at", SortDirection.DESC), ("id", SortDirection.DESC)],
        )

    def update_session_progress(self, db: Session, *, session_id: int, commit: bool = True) -> Optional[StudySession]:
        """
        Recompute a session's totals from its recorded answers.

        Writes answer count, correct count, accuracy, mean answer time,
        flagged count, per-objective accuracy and last activity. A session
        without answers is left untouched.

        Args:
            db: database session
            session_id: session to aggregate
            commit: commit when True, otherwise only flush

        Returns:
            Optional[StudySession]: the updated session, or None when it has no answers
        """
        rows = (
            db.query(
                UserAnswer.is_correct,
                UserAnswer.time_spent_seconds,
                UserAnswer.flagged,
                Question.objective_id,
            )
            .join(Question, UserAnswer.question_id == Question.id)
            .filter(UserAnswer.study_session_id == session_id)
            .all()
        )
        if not rows:
            return None

        db_obj = self.get(db, session_id)
        if db_obj is None:
            return None

        total = len(rows)
        correct = sum(1 for row in rows if row.is_correct)
        groups: Dict[str, List[bool]] = {}
        for row in rows:
            groups.setdefault(str(row.objective_id), []).append(bool(row.is_correct))

        db_obj.total_questions = total
        db_obj.correct_answers = correct
        db_obj.accuracy = correct / total
        db_obj.avg_time_per_question = sum(row.time_spent_seconds or 0 for row in rows) / total
        db_obj.flagged_questions = sum(1 for row in rows if row.flagged)
        db_obj.objective_scores = {
            objective_id: sum(results) / len(results) for objective_id, results in groups.items()
        }
        db_obj.last_activity = utcnow()
        return self._save(db, db_obj, commit)


study_session = CRUDStudySession(StudySession)
