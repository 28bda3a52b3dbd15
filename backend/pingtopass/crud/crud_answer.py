from typing import Dict

from sqlalchemy import case
from sqlalchemy.orm import Session

from pingtopass.core.errors import NotFoundError
from pingtopass.crud.base import CRUDBase
from pingtopass.models.question import Question
from pingtopass.models.user_answer import UserAnswer
from pingtopass.schemas.answer import UserAnswerCreate


class CRUDAnswer(CRUDBase[UserAnswer, UserAnswerCreate, UserAnswerCreate]):
    def get_by_attempt(self, db: Session, *, attempt_id: int) -> Dict[int, UserAnswer]:
        """Answers already recorded for a test attempt, keyed by question id."""
        rows = db.query(UserAnswer).filter(UserAnswer.test_attempt_id == attempt_id).all()
        return {row.question_id: row for row in rows}

    def record_answer(self, db: Session, *, obj_in: UserAnswerCreate, commit: bool = True) -> UserAnswer:
        """
        Insert an answer and fold it into the question's statistics.

        Attempts always go up by one, correct attempts only for a correct
        answer, and the average answer time becomes the running mean. Both
        writes land in the same transaction: with ``commit=True`` they are
        committed together or rolled back together, with ``commit=False``
        they are only flushed and the caller's transaction decides.

        Raises:
            NotFoundError: the question does not exist
        """
        db_question = db.get(Question, obj_in.question_id)
        if db_question is None:
            raise NotFoundError("Question not found")

        spent = obj_in.time_spent_seconds or 0
        try:
            db_obj = UserAnswer(**obj_in.model_dump())
            db.add(db_obj)
            db.flush()

            # every right-hand side sees the pre-update row
            db.query(Question).filter(Question.id == obj_in.question_id).update(
                {
                    Question.total_attempts: Question.total_attempts + 1,
                    Question.correct_attempts: Question.correct_attempts + (1 if obj_in.is_correct else 0),
                    Question.avg_time_seconds: case(
                        (Question.total_attempts == 0, float(spent)),
                        else_=(Question.avg_time_seconds * Question.total_attempts + spent)
                        / (Question.total_attempts + 1),
                    ),
                },
                synchronize_session=False,
            )
            db.expire(db_question)

            if commit:
                db.commit()
                db.refresh(db_obj)
        except Exception:
            if commit:
                db.rollback()
            raise
        return db_obj


answer = CRUDAnswer(UserAnswer)
