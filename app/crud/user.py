# crud/user.py
from typing import Any, Dict, Optional
from uuid import UUID
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from passlib.context import CryptContext

from app.core.exceptions import DatabaseConflictError
from app.models.user import User, default_preferences
from app.schemas.user import RegisterRequest, UserUpdate

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# preferences.goals keys -> User columns
GOAL_COLUMNS = {
    "daily_steps": "goal_daily_steps",
    "sleep_hours": "goal_sleep_hours",
    "study_hours": "goal_study_hours",
    "water_intake": "goal_water_intake",
}


class CRUDUser:
    """CRUD operations for User model."""

    # =====================================================================
    # HELPER METHODS
    # =====================================================================

    @staticmethod
    def hash_password(password: str) -> str:
        """Hash a password."""
        return pwd_context.hash(password)

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """Verify a password against its hash."""
        return pwd_context.verify(plain_password, hashed_password)

    # =====================================================================
    # READ OPERATIONS
    # =====================================================================

    def get(self, db: Session, *, id: UUID) -> Optional[User]:
        return db.query(User).filter(User.id == id).first()

    def get_by_email(self, db: Session, *, email: str) -> Optional[User]:
        return db.query(User).filter(User.email == email.lower()).first()

    # =====================================================================
    # CREATE / UPDATE
    # =====================================================================

    def create(self, db: Session, *, obj_in: RegisterRequest, created_at: datetime) -> User:
        db_obj = User(
            name=obj_in.name,
            email=obj_in.email,
            password_hash=self.hash_password(obj_in.password),
            university=obj_in.university,
            major=obj_in.major,
            date_of_birth=obj_in.date_of_birth,
            gender=obj_in.gender,
            preferences=default_preferences(),
            created_at=created_at,
            updated_at=created_at,
        )
        try:
            with db.begin_nested():
                db.add(db_obj)
                db.flush()
        except IntegrityError as exc:
            raise DatabaseConflictError(f"User with email {obj_in.email} already exists") from exc
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def update(
        self, db: Session, *, db_obj: User, obj_in: UserUpdate, updated_at: datetime
    ) -> User:
        """Apply provided profile fields; preferences merge section by section."""
        update_data = obj_in.model_dump(exclude_unset=True, exclude={"preferences"})
        for field, value in update_data.items():
            if value is not None:
                setattr(db_obj, field, value)

        if obj_in.preferences is not None:
            prefs = obj_in.preferences
            stored: Dict[str, Any] = {**default_preferences(), **(db_obj.preferences or {})}
            if prefs.notifications is not None:
                stored["notifications"] = {**stored["notifications"], **prefs.notifications.model_dump()}
            if prefs.privacy is not None:
                stored["privacy"] = {**stored["privacy"], **prefs.privacy.model_dump()}
            db_obj.preferences = stored

            if prefs.goals is not None:
                for key, value in prefs.goals.model_dump(exclude_none=True).items():
                    setattr(db_obj, GOAL_COLUMNS[key], value)

        db_obj.updated_at = updated_at
        db.commit()
        db.refresh(db_obj)
        return db_obj


crud_user = CRUDUser()
