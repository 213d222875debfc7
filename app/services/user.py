# services/user.py
import logging

from sqlalchemy.orm import Session

from app.core.clock import Clock
from app.core.exceptions import ConflictError, DatabaseConflictError, UnauthorizedError
from app.crud.user import crud_user
from app.models.user import User
from app.schemas.user import (
    RegisterRequest,
    LoginRequest,
    UserUpdate,
    UserOut,
    RewardOut,
    preferences_from_user,
)
from app.services.rewards import reward_service

logger = logging.getLogger(__name__)


class UserService:
    """Service layer for registration, login and profile management."""

    def __init__(self):
        self.crud = crud_user

    # =====================================================================
    # REGISTRATION & LOGIN
    # =====================================================================

    def register(self, db: Session, *, obj_in: RegisterRequest, clock: Clock) -> User:
        """
        Create a new account.

        Raises:
            ConflictError: If the email is already registered
        """
        if self.crud.get_by_email(db, email=obj_in.email):
            raise ConflictError("Email already registered")

        try:
            user = self.crud.create(db, obj_in=obj_in, created_at=clock.now())
        except DatabaseConflictError:
            # lost a race with a concurrent registration
            raise ConflictError("Email already registered")
        logger.info(f"Registered user {user.id}")
        return user

    def authenticate(self, db: Session, *, obj_in: LoginRequest) -> User:
        """
        Check credentials.

        Raises:
            UnauthorizedError: Unknown email or wrong password (same message for both)
        """
        user = self.crud.get_by_email(db, email=obj_in.email)
        if user is None or not self.crud.verify_password(obj_in.password, user.password_hash):
            raise UnauthorizedError("Invalid email or password")
        return user

    # =====================================================================
    # PROFILE
    # =====================================================================

    def update_profile(
        self, db: Session, *, user: User, obj_in: UserUpdate, clock: Clock
    ) -> User:
        return self.crud.update(db, db_obj=user, obj_in=obj_in, updated_at=clock.now())

    def to_out(self, db: Session, *, user: User, clock: Clock) -> UserOut:
        """Profile with preferences, current streak and earned rewards."""
        return UserOut(
            id=user.id,
            name=user.name,
            email=user.email,
            avatar=user.avatar,
            university=user.university,
            major=user.major,
            date_of_birth=user.date_of_birth,
            gender=user.gender,
            preferences=preferences_from_user(user),
            current_streak=reward_service.current_streak(db, user_id=user.id, today=clock.today()),
            rewards=[RewardOut.model_validate(r) for r in user.rewards],
            created_at=user.created_at,
        )


user_service = UserService()
