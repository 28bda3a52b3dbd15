from datetime import timedelta
from typing import List, Optional
from sqlalchemy.orm import Session

from pingtopass.crud.base import CRUDBase
from pingtopass.db.base_class import utcnow
from pingtopass.models.exam import Exam
from pingtopass.models.question import Question
from pingtopass.models.test_attempt import TestAttempt
from pingtopass.schemas.test_attempt import PracticeTestStart, PracticeTestSubmit


class CRUDTestAttempt(CRUDBase[TestAttempt, PracticeTestStart, PracticeTestSubmit]):
    def start(self, db: Session, *, user_id: int, db_exam: Exam, questions: List[Question]) -> TestAttempt:
        """Open a timed attempt over ``questions``; it expires after the exam's time limit."""
        started_at = utcnow()
        db_obj = TestAttempt(
            user_id=user_id,
            exam_id=db_exam.id,
            question_ids=[q.id for q in questions],
            time_limit_minutes=db_exam.time_limit_minutes,
            passing_score=db_exam.passing_score,
            status="in_progress",
            started_at=started_at,
            expires_at=started_at + timedelta(minutes=db_exam.time_limit_minutes),
        )
        return self._save(db, db_obj, commit=True)

    def get_for_user(self, db: Session, *, attempt_id: int, user_id: int) -> Optional[TestAttempt]:
        db_obj = self.get(db, attempt_id)
        if db_obj is None or db_obj.user_id != user_id:
            return None
        return db_obj


test_attempt = CRUDTestAttempt(TestAttempt)
