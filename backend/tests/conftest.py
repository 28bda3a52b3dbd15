# backend/tests/conftest.py
import os

# Configure the app for tests before any project module reads settings
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["REDIS_URL"] = ""
os.environ["OPENROUTER_API_KEY"] = ""
os.environ["LOG_LEVEL"] = "WARNING"

from typing import Dict, Generator, List

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import pingtopass.models  # noqa: F401
from pingtopass.config.dependency_injection import get_dashboard_cache
from pingtopass.core.errors import error_metrics
from pingtopass.core.security import create_access_token
from pingtopass.db.base_class import Base
from pingtopass.db.database import create_db_engine, get_db
from pingtopass.main import app
from pingtopass.models.exam import Exam
from pingtopass.models.objective import Objective
from pingtopass.models.question import Question
from pingtopass.models.user import User, UserProfile
from pingtopass.services.cache import DashboardCache

API = "/api"


@pytest.fixture
def engine():
    """Fresh in-memory database per test; StaticPool keeps one shared connection."""
    test_engine = create_db_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory) -> Generator[Session, None, None]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def dashboard_cache() -> DashboardCache:
    return DashboardCache(client=None)


@pytest.fixture
def client(session_factory, dashboard_cache) -> Generator[TestClient, None, None]:
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_dashboard_cache] = lambda: dashboard_cache
    error_metrics.reset()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def make_user(db: Session, email: str, name: str, role: str = "user") -> User:
    db_user = User(email=email, name=name, provider="google", role=role)
    db.add(db_user)
    db.flush()
    db.add(UserProfile(user_id=db_user.id, display_name=name))
    db.commit()
    db.refresh(db_user)
    return db_user


@pytest.fixture
def user(db) -> User:
    return make_user(db, "student@example.com", "Test Student")


@pytest.fixture
def other_user(db) -> User:
    return make_user(db, "other@example.com", "Other Student")


@pytest.fixture
def admin_user(db) -> User:
    return make_user(db, "admin@example.com", "Admin", role="admin")


def auth_header(db_user: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(db_user)}"}


@pytest.fixture
def auth_headers(user) -> Dict[str, str]:
    return auth_header(user)


@pytest.fixture
def admin_headers(admin_user) -> Dict[str, str]:
    return auth_header(admin_user)


def make_question(exam_id: int, objective_id: int, difficulty: int, text: str, **kwargs) -> Question:
    return Question(
        exam_id=exam_id,
        objective_id=objective_id,
        text=text,
        type=kwargs.pop("type", "multiple_choice"),
        answers=kwargs.pop("answers", [
            {"id": "a", "text": "Right", "is_correct": True, "explanation": "Because"},
            {"id": "b", "text": "Wrong", "is_correct": False},
            {"id": "c", "text": "Also wrong", "is_correct": False},
        ]),
        explanation=kwargs.pop("explanation", "Explanation"),
        reference=kwargs.pop("reference", "Reference"),
        difficulty=difficulty,
        tags=[],
        review_status="approved",
        **kwargs,
    )


class ExamFixture:
    def __init__(self, exam: Exam, objectives: List[Objective], questions: List[Question]):
        self.exam = exam
        self.objectives = objectives
        self.questions = questions


@pytest.fixture
def exam_data(db) -> ExamFixture:
    """
    Exam 1 with two objectives and 20 active questions.

    Questions 0-9 have difficulty 1-2, questions 10-19 difficulty 3-5;
    objectives alternate between the two.
    """
    db_exam = Exam(
        vendor_id="comptia", code="N10-009", name="Network+",
        passing_score=0.7, question_count=10, time_limit_minutes=30,
    )
    db.add(db_exam)
    db.flush()
    objectives = [
        Objective(exam_id=db_exam.id, code="1.0", name="Concepts", weight=0.5, sort_order=0),
        Objective(exam_id=db_exam.id, code="2.0", name="Security", weight=0.5, sort_order=1),
    ]
    db.add_all(objectives)
    db.flush()

    low = [1, 2] * 5
    high = [3, 4, 5, 3, 4, 5, 3, 4, 5, 3]
    questions = [
        make_question(db_exam.id, objectives[i % 2].id, difficulty, f"Question {i}")
        for i, difficulty in enumerate(low + high)
    ]
    db.add_all(questions)
    db.commit()
    for q in questions:
        db.refresh(q)
    db.refresh(db_exam)
    return ExamFixture(db_exam, objectives, questions)
