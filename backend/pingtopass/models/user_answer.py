from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Index
from pingtopass.db.base_class import Base, utcnow


class UserAnswer(Base):
    """One recorded response to a question

    Attributes:
        user_id: answering user
        question_id: answered question
        study_session_id: session the answer belongs to, if any
        test_attempt_id: practice test the answer belongs to, if any
        selected_answer: 'a', or a JSON array such as '["a", "c"]' for multi-select
        is_correct: graded result
        time_spent_seconds: time taken to answer
        confidence_level: self-reported confidence 1-5
        flagged: marked for review
        answered_at: time of recording
    """
    __tablename__ = "user_answers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    question_id = Column(Integer, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False)
    study_session_id = Column(Integer, ForeignKey("study_sessions.id", ondelete="CASCADE"), nullable=True)
    test_attempt_id = Column(Integer, ForeignKey("test_attempts.id", ondelete="CASCADE"), nullable=True)

    selected_answer = Column(String, nullable=False)
    is_correct = Column(Boolean, nullable=False)

    time_spent_seconds = Column(Integer, nullable=True)
    confidence_level = Column(Integer, nullable=True)
    flagged = Column(Boolean, default=False, nullable=False)
    changed_answer = Column(Boolean, default=False, nullable=False)

    answered_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        Index("idx_user_answers_user_question", "user_id", "question_id", "answered_at"),
        Index("idx_user_answers_session", "study_session_id"),
        Index("idx_user_answers_test", "test_attempt_id"),
        Index("idx_user_answers_recent", "user_id", "answered_at"),
    )
