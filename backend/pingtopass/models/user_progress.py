from sqlalchemy import Column, Integer, String, Float, DateTime, JSON, ForeignKey, Index, UniqueConstraint
from pingtopass.db.base_class import Base, utcnow


class UserProgress(Base):
    """Per-user, per-exam progress rollup

    Attributes:
        total_questions_seen: answers counted towards this exam
        total_correct: correct answers counted towards this exam
        overall_accuracy: total_correct / total_questions_seen
        total_study_minutes: accumulated session time
        last_study_date: YYYY-MM-DD of the latest session
        objective_mastery: {"<objective_id>": accuracy} from the latest session
        readiness_score: pass-likelihood estimate, maintained externally
        tests_taken / tests_passed / best_score: practice test summary
    """
    __tablename__ = "user_progress"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    exam_id = Column(Integer, ForeignKey("exams.id", ondelete="CASCADE"), nullable=False)

    total_questions_seen = Column(Integer, default=0, nullable=False)
    total_correct = Column(Integer, default=0, nullable=False)
    overall_accuracy = Column(Float, default=0.0, nullable=False)

    total_study_minutes = Column(Integer, default=0, nullable=False)
    last_study_date = Column(String, nullable=True)

    objective_mastery = Column(JSON, default=dict)

    readiness_score = Column(Float, default=0.0, nullable=False)
    predicted_exam_score = Column(Float, nullable=True)

    tests_taken = Column(Integer, default=0, nullable=False)
    tests_passed = Column(Integer, default=0, nullable=False)
    best_score = Column(Float, default=0.0, nullable=False)
    last_test_date = Column(String, nullable=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint("user_id", "exam_id", name="idx_user_progress_user_exam"),
        Index("idx_user_progress_readiness", "exam_id", "readiness_score"),
    )
