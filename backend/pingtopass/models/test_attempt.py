from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, JSON, ForeignKey, Index
from pingtopass.db.base_class import Base, utcnow


class TestAttempt(Base):
    """Timed practice test

    Attributes:
        question_ids: question IDs in test order
        time_limit_minutes: allowed duration
        passing_score: pass threshold copied from the exam (0-1)
        score: fraction correct (0-1)
        objective_breakdown: {"<objective_id>": {"correct", "total", "percentage"}}
        status: 'in_progress', 'completed' or 'abandoned'
        expires_at: started_at + time limit
    """
    __tablename__ = "test_attempts"
    __test__ = False  # not a pytest class

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    exam_id = Column(Integer, ForeignKey("exams.id", ondelete="CASCADE"), nullable=False)

    question_ids = Column(JSON, nullable=False)
    time_limit_minutes = Column(Integer, nullable=True)
    passing_score = Column(Float, nullable=True)

    score = Column(Float, nullable=True)
    passed = Column(Boolean, nullable=True)
    correct_count = Column(Integer, nullable=True)
    incorrect_count = Column(Integer, nullable=True)
    skipped_count = Column(Integer, nullable=True)
    objective_breakdown = Column(JSON, nullable=True)
    total_time_seconds = Column(Integer, nullable=True)

    status = Column(String, default="in_progress", nullable=False)

    started_at = Column(DateTime, default=utcnow)
    completed_at = Column(DateTime, nullable=True)
    expires_at = Column(DateTime, nullable=True)

    __table_args__ = (
        Index("idx_test_attempts_user_exam", "user_id", "exam_id", "status"),
        Index("idx_test_attempts_completed", "completed_at"),
    )
