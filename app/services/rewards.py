# services/rewards.py
import logging
from typing import List
from uuid import UUID
from datetime import date, datetime, timedelta

from sqlalchemy.orm import Session

from app.core.exceptions import DatabaseConflictError
from app.crud.user_reward import crud_user_reward
from app.crud.wellness_entry import crud_wellness_entry
from app.models.user_reward import UserReward, RewardCategory

logger = logging.getLogger(__name__)


FIRST_ENTRY_REWARD = {
    "code": "first_entry",
    "name": "First Step",
    "description": "Logged your first wellness entry",
    "icon": "🌱",
    "category": RewardCategory.milestone,
}

# streak length in days -> reward
STREAK_REWARDS = {
    3: {"code": "streak_3", "name": "Getting Started", "description": "Logged wellness data 3 days in a row", "icon": "🔥"},
    7: {"code": "streak_7", "name": "One Week Strong", "description": "Logged wellness data 7 days in a row", "icon": "⭐"},
    14: {"code": "streak_14", "name": "Habit Builder", "description": "Logged wellness data 14 days in a row", "icon": "💪"},
    30: {"code": "streak_30", "name": "Wellness Champion", "description": "Logged wellness data 30 days in a row", "icon": "🏆"},
}


class RewardService:
    """Streak computation and reward grants."""

    def current_streak(self, db: Session, *, user_id: UUID, today: date) -> int:
        """Consecutive days with an entry ending today; 0 without an entry today."""
        streak = 0
        expected = today
        for day in crud_wellness_entry.list_dates(db, user_id=user_id, until=today):
            if day != expected:
                break
            streak += 1
            expected -= timedelta(days=1)
        return streak

    def evaluate(
        self, db: Session, *, user_id: UUID, today: date, now: datetime
    ) -> List[UserReward]:
        """Grant every reward the user now qualifies for and has not earned yet."""
        earned = crud_user_reward.earned_codes(db, user_id=user_id)
        due = []

        if FIRST_ENTRY_REWARD["code"] not in earned:
            due.append(FIRST_ENTRY_REWARD)

        streak = self.current_streak(db, user_id=user_id, today=today)
        for days, reward in sorted(STREAK_REWARDS.items()):
            if streak >= days and reward["code"] not in earned:
                due.append({**reward, "category": RewardCategory.streak})

        granted = []
        for reward in due:
            try:
                granted.append(
                    crud_user_reward.award(db, user_id=user_id, earned_at=now, **reward)
                )
            except DatabaseConflictError:
                # granted by a concurrent request
                continue
            logger.info(f"User {user_id} earned reward {reward['code']}")
        return granted

    def recent(self, db: Session, *, user_id: UUID, limit: int = 5) -> List[UserReward]:
        return crud_user_reward.recent(db, user_id=user_id, limit=limit)


reward_service = RewardService()
