from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, JSON, ForeignKey, Index
from pingtopass.db.base_class import Base, utcnow


class AuditLog(Base):
    """Audit trail entry

    Attributes:
        action: dotted action name, e.g. 'answer.submitted'
        entity_type / entity_id: the record acted on
        event_metadata: extra context (stored in the ``metadata`` column)
    """
    __tablename__ = "audit_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    ip_address = Column(String, nullable=True)
    user_agent = Column(String, nullable=True)
    action = Column(String, nullable=False)
    entity_type = Column(String, nullable=True)
    entity_id = Column(String, nullable=True)
    event_metadata = Column("metadata", JSON, nullable=True)
    request_id = Column(String, nullable=True)
    success = Column(Boolean, default=True, nullable=False)
    error_message = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow)

    __table_args__ = (
        Index("idx_audit_log_user", "user_id", "created_at"),
        Index("idx_audit_log_action", "action", "created_at"),
    )


class AIGenerationLog(Base):
    """One LLM call, kept for cost tracking"""
    __tablename__ = "ai_generation_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    purpose = Column(String, nullable=False)
    model = Column(String, nullable=False)
    prompt_tokens = Column(Integer, nullable=True)
    completion_tokens = Column(Integer, nullable=True)
    total_tokens = Column(Integer, nullable=True)
    cost_cents = Column(Float, nullable=True)
    exam_id = Column(Integer, ForeignKey("exams.id", ondelete="SET NULL"), nullable=True)
    objective_id = Column(Integer, ForeignKey("objectives.id", ondelete="SET NULL"), nullable=True)
    question_ids = Column(JSON, nullable=True)
    success = Column(Boolean, default=True, nullable=False)
    error_message = Column(String, nullable=True)
    generation_time_ms = Column(Integer, nullable=True)
    request_id = Column(String, nullable=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=utcnow)

    __table_args__ = (
        Index("idx_ai_log_purpose", "purpose", "created_at"),
    )
