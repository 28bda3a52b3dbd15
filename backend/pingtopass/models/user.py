from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, ForeignKey, Index
from sqlalchemy.orm import relationship
from pingtopass.db.base_class import Base, utcnow


class User(Base):
    """User model

    Identity, role and subscription tier. Created on first login.

    Attributes:
        id: auto-increment ID
        email: unique login email
        name: display name
        provider: identity provider, 'google' or 'email'
        provider_id: subject ID at the provider
        role: 'user', 'admin' or 'moderator'
        subscription_status: 'free', 'premium' or 'enterprise'
        last_login: time of the most recent login
        login_count: number of logins
        is_active: disabled accounts cannot authenticate
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=False)
    picture = Column(String, nullable=True)

    provider = Column(String, default="google")
    provider_id = Column(String, nullable=True)
    password_hash = Column(String, nullable=True)

    role = Column(String, default="user", nullable=False)

    subscription_status = Column(String, default="free", nullable=False)
    subscription_expires_at = Column(DateTime, nullable=True)
    stripe_customer_id = Column(String, nullable=True, index=True)
    stripe_subscription_id = Column(String, nullable=True)

    bio = Column(Text, nullable=True)
    timezone = Column(String, default="UTC")
    preferred_language = Column(String, default="en")

    last_login = Column(DateTime, nullable=True)
    login_count = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    email_verified = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    profile = relationship("UserProfile", back_populates="user", uselist=False, cascade="all, delete-orphan")

    __table_args__ = (
        Index("idx_users_provider", "provider", "provider_id"),
        Index("idx_users_active", "is_active", "subscription_status"),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class UserProfile(Base):
    """Gamification profile shown on the dashboard

    Attributes:
        user_id: owning user, one profile per user
        display_name: name shown on the dashboard
        level: current level, starts at 1
        current_xp: XP collected towards the next level
        total_xp: lifetime XP
        streak: consecutive study days
        last_activity_at: last time XP was awarded
    """
    __tablename__ = "user_profiles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    display_name = Column(String, nullable=False)
    level = Column(Integer, default=1, nullable=False)
    current_xp = Column(Integer, default=0, nullable=False)
    total_xp = Column(Integer, default=0, nullable=False)
    streak = Column(Integer, default=0, nullable=False)
    last_activity_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="profile")
