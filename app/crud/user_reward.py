# crud/user_reward.py
from typing import List, Set
from uuid import UUID
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import DatabaseConflictError
from app.models.user_reward import UserReward, RewardCategory


class CRUDUserReward:
    """CRUD operations for UserReward model."""

    def earned_codes(self, db: Session, *, user_id: UUID) -> Set[str]:
        rows = db.query(UserReward.code).filter(UserReward.user_id == user_id).all()
        return {row[0] for row in rows}

    def recent(self, db: Session, *, user_id: UUID, limit: int = 5) -> List[UserReward]:
        """Last ``limit`` rewards in the order they were earned."""
        rows = (
            db.query(UserReward)
            .filter(UserReward.user_id == user_id)
            .order_by(UserReward.earned_at.desc())
            .limit(limit)
            .all()
        )
        return list(reversed(rows))

    def award(
        self,
        db: Session,
        *,
        user_id: UUID,
        code: str,
        name: str,
        description: str,
        icon: str,
        category: RewardCategory,
        earned_at: datetime,
    ) -> UserReward:
        db_obj = UserReward(
            user_id=user_id,
            code=code,
            name=name,
            description=description,
            icon=icon,
            category=category,
            earned_at=earned_at,
        )
        try:
            with db.begin_nested():
                db.add(db_obj)
                db.flush()
        except IntegrityError as exc:
            raise DatabaseConflictError(f"Reward {code} already earned") from exc
        db.commit()
        db.refresh(db_obj)
        return db_obj


crud_user_reward = CRUDUserReward()
