"""
Study workflows that span several tables.

Each public function validates ownership and state, then performs all of
its writes inside one ``transaction()`` so a failure leaves nothing behind.
"""

import logging
import time
from typing import Dict, List, Optional, Tuple

from fastapi import Request
from sqlalchemy.orm import Session

from pingtopass.core.errors import ConflictError, NotFoundError, ValidationError
from pingtopass.crud.crud_answer import answer as crud_answer
from pingtopass.crud.crud_audit import audit_log
from pingtopass.crud.crud_dashboard import award_xp, daily_goal
from pingtopass.crud.crud_exam import exam as crud_exam
from pingtopass.crud.crud_progress import progress as crud_progress
from pingtopass.crud.crud_question import question as crud_question
from pingtopass.crud.crud_study_session import study_session as crud_study_session
from pingtopass.crud.crud_test_attempt import test_attempt as crud_test_attempt
from pingtopass.db.base_class import utcnow
from pingtopass.db.database import transaction
from pingtopass.models.question import Question
from pingtopass.models.study_session import StudySession
from pingtopass.models.test_attempt import TestAttempt
from pingtopass.models.user import User
from pingtopass.schemas.answer import AnswerResult, AnswerSubmit, SessionProgressSnapshot, UserAnswerCreate
from pingtopass.schemas.session import SessionCompleteResponse, SessionCreate, SessionResponse
from pingtopass.schemas.test_attempt import PracticeTestStart, PracticeTestSubmit
from pingtopass.services.cache import DashboardCache
from pingtopass.services.grading import grade_answer

logger = logging.getLogger(__name__)

SLOW_SUBMISSION_MS = 200


def start_session(
    db: Session, *, db_user: User, obj_in: SessionCreate, request: Optional[Request] = None,
    cache: Optional[DashboardCache] = None
) -> Tuple[StudySession, List[Question]]:
    db_exam = crud_exam.get_active_by_id(db, exam_id=obj_in.exam_id)
    if db_exam is None:
        raise NotFoundError("Exam not found")
    existing = crud_study_session.get_active_for_exam(db, user_id=db_user.id, exam_id=db_exam.id)
    if existing is not None:
        raise ConflictError(
            "An active study session already exists for this exam",
            data={"session_id": existing.id},
        )

    with transaction(db):
        db_session = crud_study_session.create_for_user(db, user_id=db_user.id, obj_in=obj_in, commit=False)
        audit_log.log(
            db, action="session.started", user_id=db_user.id, entity_type="study_session",
            entity_id=db_session.id, metadata={"exam_id": db_exam.id, "mode": obj_in.mode.value},
            request=request,
        )
    db.refresh(db_session)

    questions = crud_question.get_study_questions(
        db,
        user_id=db_user.id,
        exam_id=db_exam.id,
        objective_ids=obj_in.objective_ids,
        difficulty=obj_in.difficulty,
        limit=obj_in.question_count,
        mode=obj_in.mode,
    )
    if cache is not None:
        cache.invalidate(db_user.id)
    return db_session, questions


def submit_answer(
    db: Session, *, db_user: User, obj_in: AnswerSubmit, request: Optional[Request] = None
) -> AnswerResult:
    """
    Grade and record one answer.

    The answer row, the question statistics, the session aggregate and the
    audit entry are written in a single transaction.
    """
    start = time.perf_counter()

    db_question = crud_question.get(db, obj_in.question_id)
    if db_question is None:
        raise NotFoundError("Question not found")

    db_session = None
    if obj_in.study_session_id is not None:
        db_session = crud_study_session.get_for_user(db, session_id=obj_in.study_session_id, user_id=db_user.id)
        if db_session is None:
            raise NotFoundError("Study session not found")
        if db_session.status == "completed":
            raise ConflictError("Study session is already completed")
        if db_session.exam_id != db_question.exam_id:
            raise ValidationError("Question does not belong to this session's exam")

    if obj_in.test_attempt_id is not None:
        db_attempt = crud_test_attempt.get_for_user(db, attempt_id=obj_in.test_attempt_id, user_id=db_user.id)
        if db_attempt is None:
            raise NotFoundError("Test attempt not found")
        if db_attempt.status != "in_progress":
            raise ConflictError("Test attempt is already completed")
        if db_question.id not in db_attempt.question_ids:
            raise ValidationError("Question is not part of this test attempt")
        if db_question.id in crud_answer.get_by_attempt(db, attempt_id=db_attempt.id):
            raise ConflictError("Question has already been answered in this test attempt")

    is_correct = grade_answer(db_question, obj_in.selected_answer)
    correct_ids = db_question.correct_answer_ids
    explanation, reference = db_question.explanation, db_question.reference

    with transaction(db):
        db_answer = crud_answer.record_answer(db, obj_in=UserAnswerCreate(
            user_id=db_user.id,
            question_id=db_question.id,
            study_session_id=obj_in.study_session_id,
            test_attempt_id=obj_in.test_attempt_id,
            selected_answer=obj_in.selected_answer,
            is_correct=is_correct,
            time_spent_seconds=obj_in.time_spent_seconds,
            confidence_level=obj_in.confidence_level,
            flagged=obj_in.flagged,
        ), commit=False)
        if db_session is not None:
            crud_study_session.update_session_progress(db, session_id=db_session.id, commit=False)
        audit_log.log(
            db, action="answer.submitted", user_id=db_user.id, entity_type="user_answer",
            entity_id=db_answer.id,
            metadata={
                "question_id": db_question.id,
                "exam_id": db_question.exam_id,
                "objective_id": db_question.objective_id,
                "is_correct": is_correct,
                "time_spent": obj_in.time_spent_seconds,
            },
            request=request,
        )

    session_progress = None
    if db_session is not None:
        db.refresh(db_session)
        session_progress = SessionProgressSnapshot(
            total_questions=db_session.total_questions,
            correct_answers=db_session.correct_answers,
            accuracy=db_session.accuracy or 0.0,
        )

    duration_ms = (time.perf_counter() - start) * 1000
    if duration_ms > SLOW_SUBMISSION_MS:
        logger.warning("Slow answer submission: %.0fms for user %s", duration_ms, db_user.id)

    return AnswerResult(
        answer_id=db_answer.id,
        question_id=obj_in.question_id,
        is_correct=is_correct,
        correct_answer_ids=correct_ids,
        explanation=explanation,
        reference=reference,
        session_progress=session_progress,
    )


def complete_session(
    db: Session, *, db_user: User, db_session: StudySession, request: Optional[Request] = None,
    cache: Optional[DashboardCache] = None
) -> SessionCompleteResponse:
    """
    Close a study session and roll it into the user's progress.

    Awards 10 XP per correct answer and adds the session to today's goal.
    """
    if db_session.status == "completed":
        raise ConflictError("Study session is already completed")

    with transaction(db):
        crud_study_session.update_session_progress(db, session_id=db_session.id, commit=False)
        now = utcnow()
        if not db_session.time_spent_seconds and db_session.total_questions:
            db_session.time_spent_seconds = round(
                (db_session.avg_time_per_question or 0) * db_session.total_questions
            )
        db_session.status = "completed"
        db_session.completed_at = now
        db_session.last_activity = now
        minutes = round((db_session.time_spent_seconds or 0) / 60)

        if db_session.total_questions:
            crud_progress.update_user_progress(
                db,
                user_id=db_user.id,
                exam_id=db_session.exam_id,
                questions_answered=db_session.total_questions,
                correct_answers=db_session.correct_answers,
                study_minutes=minutes,
                objective_scores=db_session.objective_scores,
                commit=False,
            )
        xp, profile, leveled_up = award_xp(db, db_user=db_user, correct_answers=db_session.correct_answers)
        daily_goal.record_activity(db, user_id=db_user.id, questions=db_session.total_questions, minutes=minutes)
        audit_log.log(
            db, action="session.completed", user_id=db_user.id, entity_type="study_session",
            entity_id=db_session.id,
            metadata={"total_questions": db_session.total_questions, "accuracy": db_session.accuracy, "xp": xp},
            request=request,
        )
        level = profile.level
    db.refresh(db_session)

    if cache is not None:
        cache.invalidate(db_user.id)
    if leveled_up:
        logger.info("User %s reached level %s", db_user.id, level)
    return SessionCompleteResponse(
        session=SessionResponse.model_validate(db_session),
        xp_awarded=xp,
        level=level,
        leveled_up=leveled_up,
    )


def start_test(db: Session, *, db_user: User, obj_in: PracticeTestStart) -> Tuple[TestAttempt, List[Question]]:
    db_exam = crud_exam.get_active_by_id(db, exam_id=obj_in.exam_id)
    if db_exam is None:
        raise NotFoundError("Exam not found")
    questions = crud_question.get_random_for_exam(
        db, exam_id=db_exam.id, count=obj_in.question_count or db_exam.question_count,
    )
    if not questions:
        raise NotFoundError("No active questions available for this exam")
    db_attempt = crud_test_attempt.start(db, user_id=db_user.id, db_exam=db_exam, questions=questions)
    logger.info("User %s started test %s with %d questions", db_user.id, db_attempt.id, len(questions))
    return db_attempt, questions


def submit_test(
    db: Session, *, db_user: User, db_attempt: TestAttempt, obj_in: PracticeTestSubmit,
    request: Optional[Request] = None, cache: Optional[DashboardCache] = None
) -> TestAttempt:
    """
    Grade a practice test.

    Submitted answers are recorded against the attempt. Questions already
    answered through the study endpoint keep their stored answer and are
    not recorded again; questions with no answer count as skipped. Late
    submissions are still graded.
    """
    if db_attempt.status != "in_progress":
        raise ConflictError("Test attempt has already been submitted")

    questions = crud_question.get_by_ids(db, ids=db_attempt.question_ids)
    submitted = {a.question_id: a for a in obj_in.answers}
    unknown = set(submitted) - {q.id for q in questions}
    if unknown:
        raise ValidationError("Answers reference questions outside this test", data=sorted(unknown))
    recorded = crud_answer.get_by_attempt(db, attempt_id=db_attempt.id)

    now = utcnow()
    if db_attempt.expires_at and now > db_attempt.expires_at:
        logger.info("Test %s submitted %ss after expiry", db_attempt.id, int((now - db_attempt.expires_at).total_seconds()))

    with transaction(db):
        correct = 0
        answered = 0
        breakdown: Dict[str, Dict[str, float]] = {}
        for db_question in questions:
            bucket = breakdown.setdefault(str(db_question.objective_id), {"correct": 0, "total": 0})
            bucket["total"] += 1
            if db_question.id in recorded:
                is_correct = recorded[db_question.id].is_correct
            elif db_question.id in submitted:
                entry = submitted[db_question.id]
                is_correct = grade_answer(db_question, entry.selected_answer)
                crud_answer.record_answer(db, obj_in=UserAnswerCreate(
                    user_id=db_user.id,
                    question_id=db_question.id,
                    test_attempt_id=db_attempt.id,
                    selected_answer=entry.selected_answer,
                    is_correct=is_correct,
                    time_spent_seconds=entry.time_spent_seconds,
                    flagged=entry.flagged,
                ), commit=False)
            else:
                continue
            answered += 1
            if is_correct:
                correct += 1
                bucket["correct"] += 1

        total = len(questions)
        score = correct / total if total else 0.0
        passed = score >= (db_attempt.passing_score or 0.0)
        for bucket in breakdown.values():
            bucket["percentage"] = round(bucket["correct"] / bucket["total"] * 100, 1)

        db_attempt.score = score
        db_attempt.passed = passed
        db_attempt.correct_count = correct
        db_attempt.incorrect_count = answered - correct
        db_attempt.skipped_count = total - answered
        db_attempt.objective_breakdown = breakdown
        db_attempt.total_time_seconds = (
            obj_in.total_time_seconds
            if obj_in.total_time_seconds is not None
            else int((now - db_attempt.started_at).total_seconds())
        )
        db_attempt.status = "completed"
        db_attempt.completed_at = now

        crud_progress.record_test_result(
            db, user_id=db_user.id, exam_id=db_attempt.exam_id, score=score, passed=passed, commit=False,
        )
        if answered:
            crud_progress.update_user_progress(
                db, user_id=db_user.id, exam_id=db_attempt.exam_id,
                questions_answered=answered, correct_answers=correct,
                study_minutes=round(db_attempt.total_time_seconds / 60), commit=False,
            )
        db_exam = crud_exam.get(db, db_attempt.exam_id)
        crud_exam.record_test_result(db, db_obj=db_exam, score=score, passed=passed)
        audit_log.log(
            db, action="test.completed", user_id=db_user.id, entity_type="test_attempt",
            entity_id=db_attempt.id, metadata={"score": score, "passed": passed}, request=request,
        )
    db.refresh(db_attempt)

    if cache is not None:
        cache.invalidate(db_user.id)
    return db_attempt
