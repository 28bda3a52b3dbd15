from sqlalchemy import Column, Integer, String, Text, Float, Boolean, DateTime, JSON, ForeignKey, Index
from sqlalchemy.orm import relationship
from pingtopass.db.base_class import Base, utcnow


class Question(Base):
    """Exam question

    Answer options are stored as JSON:
    ``[{"id": "a", "text": "...", "is_correct": true, "explanation": "..."}]``.

    Attributes:
        exam_id: owning exam
        objective_id: objective the question tests
        type: 'multiple_choice', 'multi_select' or 'true_false'
        difficulty: 1 (easy) to 5 (hard)
        ai_generated: created by the question generator
        review_status: 'pending', 'approved', 'rejected' or 'needs_revision'
        total_attempts: recorded answers
        correct_attempts: recorded correct answers
        avg_time_seconds: running mean of answer time
        is_active: eligible for study selection
    """
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    exam_id = Column(Integer, ForeignKey("exams.id", ondelete="CASCADE"), nullable=False)
    objective_id = Column(Integer, ForeignKey("objectives.id", ondelete="CASCADE"), nullable=False)

    text = Column(Text, nullable=False)
    type = Column(String, default="multiple_choice", nullable=False)
    answers = Column(JSON, nullable=False)

    explanation = Column(Text, nullable=True)
    reference = Column(String, nullable=True)
    external_link = Column(String, nullable=True)

    difficulty = Column(Integer, default=3, nullable=False)
    tags = Column(JSON, default=list)

    ai_generated = Column(Boolean, default=False, nullable=False)
    ai_model = Column(String, nullable=True)
    ai_prompt_version = Column(String, nullable=True)
    ai_confidence_score = Column(Float, nullable=True)

    review_status = Column(String, default="pending", nullable=False)
    reviewed_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    reviewed_at = Column(DateTime, nullable=True)

    total_attempts = Column(Integer, default=0, nullable=False)
    correct_attempts = Column(Integer, default=0, nullable=False)
    avg_time_seconds = Column(Float, default=0.0, nullable=False)
    discrimination_index = Column(Float, nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)
    is_beta = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    objective = relationship("Objective")

    __table_args__ = (
        Index("idx_questions_exam_objective", "exam_id", "objective_id", "is_active"),
        Index("idx_questions_difficulty", "exam_id", "difficulty", "is_active"),
        Index("idx_questions_review", "review_status", "ai_generated"),
    )

    @property
    def correct_answer_ids(self) -> list:
        return [a["id"] for a in (self.answers or []) if a.get("is_correct")]
