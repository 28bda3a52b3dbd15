from typing import Optional
from sqlalchemy.orm import Session

from pingtopass.crud.base import CRUDBase
from pingtopass.db.base_class import utcnow
from pingtopass.models.user import User, UserProfile
from pingtopass.schemas.user import UserCreate, UserUpdate


class CRUDUser(CRUDBase[User, UserCreate, UserUpdate]):
    def get_by_email(self, db: Session, *, email: str) -> Optional[User]:
        return db.query(User).filter(User.email == email).first()

    def upsert_login(self, db: Session, *, obj_in: UserCreate) -> User:
        """
        Record a login, creating the user and their profile on first login.

        Args:
            db: database session
            obj_in: identity returned by the login provider

        Returns:
            User: the logged-in user
        """
        now = utcnow()
        db_obj = self.get_by_email(db, email=obj_in.email)
        if db_obj is None:
            db_obj = User(**obj_in.model_dump(), last_login=now, login_count=1)
            db.add(db_obj)
            db.flush()
            db.add(UserProfile(user_id=db_obj.id, display_name=obj_in.name))
        else:
            db_obj.last_login = now
            db_obj.login_count += 1
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def get_or_create_profile(self, db: Session, *, db_obj: User) -> UserProfile:
        """Return the user's profile, adding one (flushed, not committed) if missing."""
        profile = db.query(UserProfile).filter(UserProfile.user_id == db_obj.id).first()
        if profile is None:
            profile = UserProfile(user_id=db_obj.id, display_name=db_obj.name)
            db.add(profile)
            db.flush()
        return profile


user = CRUDUser(User)
