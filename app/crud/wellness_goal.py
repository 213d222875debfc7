# crud/wellness_goal.py
from typing import List, Optional
from uuid import UUID
from datetime import datetime

from sqlalchemy.orm import Session

from app.models.wellness_goal import WellnessGoal, GoalType, GoalPeriod


class CRUDWellnessGoal:
    """CRUD operations for WellnessGoal model."""

    def create(
        self,
        db: Session,
        *,
        user_id: UUID,
        type: GoalType,
        target: float,
        period: GoalPeriod,
        start_date: datetime,
        end_date: datetime,
    ) -> WellnessGoal:
        """Create a goal, superseding any active goal of the same type."""
        (
            db.query(WellnessGoal)
            .filter(WellnessGoal.user_id == user_id)
            .filter(WellnessGoal.type == type)
            .filter(WellnessGoal.is_active.is_(True))
            .update({WellnessGoal.is_active: False}, synchronize_session="fetch")
        )

        db_obj = WellnessGoal(
            user_id=user_id,
            type=type,
            target=target,
            current=0,
            period=period,
            start_date=start_date,
            end_date=end_date,
            is_active=True,
            created_at=start_date,
        )
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def list_by_user(
        self, db: Session, *, user_id: UUID, is_active: Optional[bool] = None
    ) -> List[WellnessGoal]:
        """Goals for a user, newest first."""
        query = db.query(WellnessGoal).filter(WellnessGoal.user_id == user_id)
        if is_active is not None:
            query = query.filter(WellnessGoal.is_active.is_(is_active))
        return query.order_by(WellnessGoal.created_at.desc()).all()


crud_wellness_goal = CRUDWellnessGoal()
