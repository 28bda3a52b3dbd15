from sqlalchemy import Column, Integer, String, Float, DateTime, JSON, ForeignKey, Index
from pingtopass.db.base_class import Base, utcnow


class StudySession(Base):
    """Study session

    A bounded interaction of one user against one exam.

    Attributes:
        user_id: owning user
        exam_id: exam being studied
        mode: 'practice', 'review', 'speed_drill', 'weak_areas' or 'custom'
        objectives: objective IDs the session is restricted to
        difficulty_filter: {"min": 1, "max": 5}
        question_count: questions per batch
        total_questions: answers recorded in the session
        correct_answers: correct answers recorded in the session
        accuracy: correct_answers / total_questions
        objective_scores: {"<objective_id>": accuracy}
        status: 'active', 'paused', 'completed' or 'abandoned'
    """
    __tablename__ = "study_sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    exam_id = Column(Integer, ForeignKey("exams.id", ondelete="CASCADE"), nullable=False)

    mode = Column(String, default="practice", nullable=False)
    objectives = Column(JSON, nullable=True)
    difficulty_filter = Column(JSON, nullable=True)
    question_count = Column(Integer, default=20, nullable=False)

    total_questions = Column(Integer, default=0, nullable=False)
    correct_answers = Column(Integer, default=0, nullable=False)
    skipped_questions = Column(Integer, default=0, nullable=False)
    flagged_questions = Column(Integer, default=0, nullable=False)

    time_spent_seconds = Column(Integer, default=0, nullable=False)
    avg_time_per_question = Column(Float, nullable=True)

    accuracy = Column(Float, nullable=True)
    objective_scores = Column(JSON, default=dict)

    status = Column(String, default="active", nullable=False)
    current_question_id = Column(Integer, nullable=True)

    created_at = Column(DateTime, default=utcnow)
    last_activity = Column(DateTime, default=utcnow)
    completed_at = Column(DateTime, nullable=True)

    __table_args__ = (
        Index("idx_sessions_user_exam", "user_id", "exam_id", "status"),
        Index("idx_sessions_user_status", "user_id", "status", "created_at"),
    )
