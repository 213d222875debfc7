# services/wellness_alerts.py
import logging
from typing import Any, Dict, List, Optional
from uuid import UUID
from datetime import datetime

from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.crud.wellness_alert import crud_wellness_alert
from app.models.wellness_alert import WellnessAlert, AlertType, AlertSeverity
from app.models.wellness_entry import WellnessEntry

logger = logging.getLogger(__name__)


def _fmt(value: Any) -> str:
    """Render 3.0 as "3" and 5.5 as "5.5"."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class WellnessAlertService:
    """Threshold alerts raised from a freshly written entry."""

    def __init__(self):
        self.crud = crud_wellness_alert

    # =====================================================================
    # RULES
    # =====================================================================

    def build_alerts(self, entry: WellnessEntry, triggered_at: datetime) -> List[Dict[str, Any]]:
        """Evaluate every rule against the entry. Absent metrics never trigger."""
        day = entry.date.isoformat()
        alerts: List[Dict[str, Any]] = []

        def add(alert_type, message, severity, key, value):
            alerts.append({
                "type": alert_type,
                "message": message,
                "severity": severity,
                "is_read": False,
                "triggered_at": triggered_at,
                "data": {key: value, "date": day},
            })

        steps = entry.steps
        if steps is not None and steps < 5000:
            add(
                AlertType.low_steps,
                f"You only took {steps} steps today. Try to reach at least 5,000 steps for better health!",
                AlertSeverity.high if steps < 2000 else AlertSeverity.medium,
                "steps", steps,
            )

        sleep = entry.sleep_hours
        if sleep is not None and sleep < 6:
            add(
                AlertType.poor_sleep,
                f"You only slept {_fmt(sleep)} hours last night. Aim for 7-9 hours for optimal rest!",
                AlertSeverity.high if sleep < 4 else AlertSeverity.medium,
                "sleepHours", sleep,
            )

        stress = entry.stress_level
        if stress is not None and stress > 7:
            add(
                AlertType.high_stress,
                f"Your stress level is {stress}/10. Consider taking a break or trying relaxation techniques.",
                AlertSeverity.high if stress > 8 else AlertSeverity.medium,
                "stressLevel", stress,
            )

        water = entry.water_intake
        if water is not None and water < 1.5:
            add(
                AlertType.low_water,
                f"You only drank {_fmt(water)}L of water today. Stay hydrated with at least 2L daily!",
                AlertSeverity.high if water < 1 else AlertSeverity.medium,
                "waterIntake", water,
            )

        study = entry.study_hours
        if study is not None and study < 2:
            add(
                AlertType.missed_study,
                f"You studied for only {_fmt(study)} hours today. Consider setting aside more time for your studies.",
                AlertSeverity.high if study < 1 else AlertSeverity.low,
                "studyHours", study,
            )

        return alerts

    # =====================================================================
    # OPERATIONS
    # =====================================================================

    def generate_alerts(
        self, db: Session, *, user_id: UUID, entry: WellnessEntry, now: datetime
    ) -> List[WellnessAlert]:
        """Persist one alert per triggered rule. Re-submissions alert again."""
        alerts = self.crud.create_many(db, user_id=user_id, alerts=self.build_alerts(entry, now))
        if alerts:
            logger.info(f"Generated {len(alerts)} alert(s) for user {user_id} on {entry.date}")
        return alerts

    def mark_read(self, db: Session, *, user_id: UUID, alert_id: UUID) -> WellnessAlert:
        alert = self.crud.get_owned(db, user_id=user_id, alert_id=alert_id)
        if alert is None:
            raise NotFoundError("Alert not found")
        return self.crud.mark_read(db, db_obj=alert)

    def list_unread(self, db: Session, *, user_id: UUID, limit: int = 5) -> List[WellnessAlert]:
        return self.crud.list_by_user(db, user_id=user_id, is_read=False, limit=limit)

    def list_alerts(
        self, db: Session, *, user_id: UUID, is_read: Optional[bool] = None
    ) -> List[WellnessAlert]:
        return self.crud.list_by_user(db, user_id=user_id, is_read=is_read)


wellness_alert_service = WellnessAlertService()
