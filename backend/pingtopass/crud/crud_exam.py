from typing import List, Optional
from sqlalchemy.orm import Session, selectinload

from pingtopass.crud.base import CRUDBase
from pingtopass.models.exam import Exam
from pingtopass.models.objective import Objective
from pingtopass.schemas.exam import ExamCreate, ObjectiveCreate


class CRUDExam(CRUDBase[Exam, ExamCreate, ExamCreate]):
    def get_active(self, db: Session) -> List[Exam]:
        return (
            db.query(Exam)
            .filter(Exam.is_active.is_(True))
            .order_by(Exam.vendor_id, Exam.code)
            .all()
        )

    def get_active_by_id(self, db: Session, *, exam_id: int) -> Optional[Exam]:
        """Active exam with its objectives loaded, or None."""
        return (
            db.query(Exam)
            .options(selectinload(Exam.objectives))
            .filter(Exam.id == exam_id, Exam.is_active.is_(True))
            .first()
        )

    def count_active(self, db: Session) -> int:
        return db.query(Exam).filter(Exam.is_active.is_(True)).count()

    def record_test_result(self, db: Session, *, db_obj: Exam, score: float, passed: bool) -> Exam:
        """
        Fold one completed practice test into the exam's running statistics.

        Flushes only; the caller owns the transaction.
        """
        previous = db_obj.total_attempts or 0
        passes = round((db_obj.pass_rate or 0.0) * previous) + (1 if passed else 0)
        db_obj.avg_score = ((db_obj.avg_score or 0.0) * previous + score) / (previous + 1)
        db_obj.total_attempts = previous + 1
        db_obj.pass_rate = passes / db_obj.total_attempts
        db.flush()
        return db_obj


class CRUDObjective(CRUDBase[Objective, ObjectiveCreate, ObjectiveCreate]):
    def get_by_exam(self, db: Session, *, exam_id: int) -> List[Objective]:
        return self.get_multi(
            db,
            filter_conditions={"exam_id": exam_id, "is_active": True},
            sort_by="sort_order",
        )


exam = CRUDExam(Exam)
objective = CRUDObjective(Objective)
