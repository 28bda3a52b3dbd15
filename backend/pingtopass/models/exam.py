from sqlalchemy import Column, Integer, String, Text, Float, Boolean, DateTime, JSON, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from pingtopass.db.base_class import Base, utcnow


class Exam(Base):
    """Certification exam

    Attributes:
        vendor_id: certification vendor, e.g. 'comptia'
        code: vendor exam code, e.g. 'N10-008'; unique per vendor
        passing_score: fraction required to pass (0-1)
        question_count: questions in a full practice test
        time_limit_minutes: duration of a full practice test
        total_attempts: completed practice tests
        pass_rate: fraction of completed tests that passed
        avg_score: mean score of completed tests
    """
    __tablename__ = "exams"

    id = Column(Integer, primary_key=True, autoincrement=True)
    vendor_id = Column(String, nullable=False)
    code = Column(String, nullable=False)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)

    passing_score = Column(Float, default=0.65, nullable=False)
    question_count = Column(Integer, default=65, nullable=False)
    time_limit_minutes = Column(Integer, default=90, nullable=False)

    version = Column(String, nullable=True)
    difficulty_level = Column(Integer, default=3)
    prerequisites = Column(JSON, nullable=True)
    price_cents = Column(Integer, default=0)

    is_active = Column(Boolean, default=True, nullable=False)
    is_beta = Column(Boolean, default=False, nullable=False)

    total_attempts = Column(Integer, default=0, nullable=False)
    pass_rate = Column(Float, default=0.0, nullable=False)
    avg_score = Column(Float, default=0.0, nullable=False)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    objectives = relationship(
        "Objective", back_populates="exam", order_by="Objective.sort_order",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        UniqueConstraint("vendor_id", "code", name="idx_exams_vendor_code"),
        Index("idx_exams_active", "is_active", "is_beta"),
    )
