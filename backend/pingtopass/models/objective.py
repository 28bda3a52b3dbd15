from sqlalchemy import Column, Integer, String, Text, Float, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from pingtopass.db.base_class import Base, utcnow


class Objective(Base):
    """Weighted sub-topic of an exam

    Attributes:
        exam_id: owning exam
        code: objective code, e.g. '1.0', '1.1'
        weight: share of the exam (0-1)
        parent_id: parent objective for nested objectives
    """
    __tablename__ = "objectives"

    id = Column(Integer, primary_key=True, autoincrement=True)
    exam_id = Column(Integer, ForeignKey("exams.id", ondelete="CASCADE"), nullable=False)
    code = Column(String, nullable=False)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    weight = Column(Float, default=0.25, nullable=False)
    parent_id = Column(Integer, ForeignKey("objectives.id", ondelete="CASCADE"), nullable=True)
    sort_order = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow)

    exam = relationship("Exam", back_populates="objectives")

    __table_args__ = (
        Index("idx_objectives_exam", "exam_id", "is_active"),
    )
