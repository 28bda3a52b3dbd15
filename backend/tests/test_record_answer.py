import pytest

from pingtopass.core.errors import NotFoundError
from pingtopass.crud.crud_answer import answer as crud_answer
from pingtopass.db.database import transaction
from pingtopass.models.question import Question
from pingtopass.models.user_answer import UserAnswer
from pingtopass.schemas.answer import UserAnswerCreate


def _answer(user_id, question_id, is_correct, seconds=30, **kwargs):
    return UserAnswerCreate(
        user_id=user_id,
        question_id=question_id,
        selected_answer="a" if is_correct else "b",
        is_correct=is_correct,
        time_spent_seconds=seconds,
        **kwargs,
    )


def test_correct_answer_bumps_both_counters(db, user, exam_data):
    question_id = exam_data.questions[0].id

    db_answer = crud_answer.record_answer(db, obj_in=_answer(user.id, question_id, True))

    db_question = db.get(Question, question_id)
    assert db_answer.id is not None
    assert db_question.total_attempts == 1
    assert db_question.correct_attempts == 1


def test_incorrect_answer_only_bumps_attempts(db, user, exam_data):
    question_id = exam_data.questions[0].id

    crud_answer.record_answer(db, obj_in=_answer(user.id, question_id, False))

    db_question = db.get(Question, question_id)
    assert db_question.total_attempts == 1
    assert db_question.correct_attempts == 0


def test_average_time_is_a_running_mean(db, user, exam_data):
    question_id = exam_data.questions[0].id

    crud_answer.record_answer(db, obj_in=_answer(user.id, question_id, True, seconds=10))
    assert db.get(Question, question_id).avg_time_seconds == pytest.approx(10.0)

    crud_answer.record_answer(db, obj_in=_answer(user.id, question_id, True, seconds=20))
    crud_answer.record_answer(db, obj_in=_answer(user.id, question_id, False, seconds=60))

    db_question = db.get(Question, question_id)
    assert db_question.total_attempts == 3
    assert db_question.correct_attempts == 2
    assert db_question.avg_time_seconds == pytest.approx(30.0)


def test_unknown_question_writes_nothing(db, user, exam_data):
    with pytest.raises(NotFoundError):
        crud_answer.record_answer(db, obj_in=_answer(user.id, 9999, True))

    assert db.query(UserAnswer).count() == 0


def test_failure_in_wider_transaction_rolls_back_answer_and_stats(db, user, exam_data):
    question_id = exam_data.questions[0].id

    with pytest.raises(RuntimeError):
        with transaction(db):
            crud_answer.record_answer(db, obj_in=_answer(user.id, question_id, True), commit=False)
            raise RuntimeError("boom")

    db.expire_all()
    db_question = db.get(Question, question_id)
    assert db.query(UserAnswer).count() == 0
    assert db_question.total_attempts == 0
    assert db_question.correct_attempts == 0
