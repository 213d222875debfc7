# services/wellness.py
import logging
from typing import List, Optional, Tuple
from uuid import UUID
from datetime import date, timedelta

from sqlalchemy.orm import Session

from app.core.clock import Clock
from app.core.exceptions import ValidationError
from app.crud.wellness_entry import crud_wellness_entry
from app.models.user import User
from app.models.wellness_entry import WellnessEntry
from app.schemas.user import RewardOut
from app.schemas.wellness import (
    WellnessEntryCreate,
    WellnessEntryPatch,
    WellnessEntryRead,
    WellnessGoalRead,
    WellnessAlertRead,
    DateRange,
    DashboardRead,
)
from app.services.goals import goal_service
from app.services.rewards import reward_service
from app.services.wellness_alerts import wellness_alert_service
from app.services.wellness_stats import wellness_stats_service

logger = logging.getLogger(__name__)


DASHBOARD_PERIODS = {"1d": 1, "7d": 7, "30d": 30, "90d": 90}
DEFAULT_PERIOD = "7d"
HISTORY_LIMIT = 50


class WellnessService:
    """
    Entry writes and the dashboard read model.
    """

    def __init__(self):
        self.crud = crud_wellness_entry

    # ====================================================
    # ENTRY WRITES
    # ====================================================

    def record_entry(
        self,
        db: Session,
        *,
        user_id: UUID,
        day: date,
        patch: WellnessEntryPatch,
        clock: Clock,
    ) -> Tuple[WellnessEntry, bool]:
        """Upsert one day's data, then raise alerts and grant rewards for it."""
        entry, created = self.crud.upsert_entry(db, user_id=user_id, day=day, patch=patch)
        logger.info(
            f"{'Created' if created else 'Updated'} wellness entry {entry.id} "
            f"for user {user_id} on {day} (source={entry.source.value})"
        )

        now = clock.now()
        wellness_alert_service.generate_alerts(db, user_id=user_id, entry=entry, now=now)
        reward_service.evaluate(db, user_id=user_id, today=clock.today(), now=now)
        return entry, created

    def add_entry(
        self, db: Session, *, user_id: UUID, obj_in: WellnessEntryCreate, clock: Clock
    ) -> Tuple[WellnessEntry, bool]:
        if obj_in.date is None:
            raise ValidationError("Date is required")
        return self.record_entry(
            db, user_id=user_id, day=obj_in.date, patch=obj_in.to_patch(), clock=clock
        )

    # ====================================================
    # READS
    # ====================================================

    def get_history(
        self,
        db: Session,
        *,
        user_id: UUID,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = HISTORY_LIMIT,
    ) -> List[WellnessEntry]:
        if start_date and end_date and start_date > end_date:
            raise ValidationError("startDate must not be after endDate")
        return self.crud.query_range(
            db, user_id=user_id, start=start_date, end=end_date, limit=limit
        )

    def get_dashboard(
        self, db: Session, *, user: User, period: Optional[str], clock: Clock
    ) -> DashboardRead:
        """Compose entries, stats, goals, alerts, streak and rewards for a window.

        Unknown periods fall back to 7 days. The window is
        [today - N days, today], both ends inclusive.
        """
        if period not in DASHBOARD_PERIODS:
            period = DEFAULT_PERIOD
        today = clock.today()
        start = today - timedelta(days=DASHBOARD_PERIODS[period])

        entries = self.crud.query_range(db, user_id=user.id, start=start, end=today)
        goals = goal_service.list_goals(db, user_id=user.id, is_active=True)
        alerts = wellness_alert_service.list_unread(db, user_id=user.id, limit=5)
        stats = wellness_stats_service.calculate_wellness_stats(entries, user.goal_targets)

        return DashboardRead(
            period=period,
            date_range=DateRange(start_date=start, end_date=today),
            wellness_entries=[WellnessEntryRead.model_validate(e) for e in entries],
            stats=stats,
            goals=[WellnessGoalRead.model_validate(g) for g in goals],
            alerts=[WellnessAlertRead.model_validate(a) for a in alerts],
            current_streak=reward_service.current_streak(db, user_id=user.id, today=today),
            recent_rewards=[
                RewardOut.model_validate(r) for r in reward_service.recent(db, user_id=user.id)
            ],
        )


wellness_service = WellnessService()
