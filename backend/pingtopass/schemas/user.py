from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime


class UserBase(BaseModel):
    """Fields shared by user models"""
    email: str
    name: str
    picture: Optional[str] = None


class UserCreate(UserBase):
    """Input for creating a user on first login"""
    provider: str = "google"
    provider_id: Optional[str] = None
    role: str = "user"


class UserUpdate(BaseModel):
    name: Optional[str] = None
    picture: Optional[str] = None
    subscription_status: Optional[str] = None
    timezone: Optional[str] = None


class UserResponse(UserBase):
    """User returned by the API"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    role: str
    subscription_status: str
    last_login: Optional[datetime] = None


class AuthStatus(BaseModel):
    authenticated: bool
    timestamp: datetime
    message: str
    user: Optional[UserResponse] = None
