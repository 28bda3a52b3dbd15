from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, UniqueConstraint
from pingtopass.db.base_class import Base


class DailyGoal(Base):
    """Per-day study goal

    Attributes:
        user_id: owning user
        date: calendar day, YYYY-MM-DD
        target_questions: questions to answer today
        completed_questions: questions answered so far
        target_minutes: minutes to study today
        completed_minutes: minutes studied so far
        is_completed: both targets reached
    """
    __tablename__ = "daily_goals"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(String, nullable=False)
    target_questions = Column(Integer, default=10, nullable=False)
    completed_questions = Column(Integer, default=0, nullable=False)
    target_minutes = Column(Integer, default=30, nullable=False)
    completed_minutes = Column(Integer, default=0, nullable=False)
    is_completed = Column(Boolean, default=False, nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "date", name="idx_goals_user_date"),
    )
