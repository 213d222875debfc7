# services/goals.py
import logging
from typing import List, Optional
from uuid import UUID
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from app.core.clock import ensure_utc
from app.crud.wellness_goal import crud_wellness_goal
from app.models.wellness_goal import WellnessGoal
from app.schemas.wellness import WellnessGoalCreate

logger = logging.getLogger(__name__)

DEFAULT_GOAL_DURATION = timedelta(days=30)


class GoalService:
    """Goal targets. Progress is not recomputed here."""

    def __init__(self):
        self.crud = crud_wellness_goal

    def create_goal(
        self, db: Session, *, user_id: UUID, obj_in: WellnessGoalCreate, now: datetime
    ) -> WellnessGoal:
        end_date = ensure_utc(obj_in.end_date) if obj_in.end_date else now + DEFAULT_GOAL_DURATION
        goal = self.crud.create(
            db,
            user_id=user_id,
            type=obj_in.type,
            target=obj_in.target,
            period=obj_in.period,
            start_date=now,
            end_date=end_date,
        )
        logger.info(f"Created {goal.type.value} goal {goal.id} for user {user_id}")
        return goal

    def list_goals(
        self, db: Session, *, user_id: UUID, is_active: Optional[bool] = None
    ) -> List[WellnessGoal]:
        return self.crud.list_by_user(db, user_id=user_id, is_active=is_active)


goal_service = GoalService()
