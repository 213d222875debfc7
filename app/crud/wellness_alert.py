# crud/wellness_alert.py
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.models.wellness_alert import WellnessAlert


class CRUDWellnessAlert:
    """CRUD operations for WellnessAlert model."""

    # ====================================================
    # CREATE
    # ====================================================

    def create_many(
        self, db: Session, *, user_id: UUID, alerts: List[Dict[str, Any]]
    ) -> List[WellnessAlert]:
        """Insert several alerts in one transaction."""
        if not alerts:
            return []

        db_objs = [WellnessAlert(user_id=user_id, **alert) for alert in alerts]
        db.add_all(db_objs)
        db.commit()
        for db_obj in db_objs:
            db.refresh(db_obj)
        return db_objs

    # ====================================================
    # READ
    # ====================================================

    def get_owned(
        self, db: Session, *, user_id: UUID, alert_id: UUID
    ) -> Optional[WellnessAlert]:
        return (
            db.query(WellnessAlert)
            .filter(WellnessAlert.id == alert_id)
            .filter(WellnessAlert.user_id == user_id)
            .first()
        )

    def list_by_user(
        self,
        db: Session,
        *,
        user_id: UUID,
        is_read: Optional[bool] = None,
        limit: Optional[int] = None,
    ) -> List[WellnessAlert]:
        """Alerts newest first, optionally filtered by read state."""
        query = db.query(WellnessAlert).filter(WellnessAlert.user_id == user_id)
        if is_read is not None:
            query = query.filter(WellnessAlert.is_read.is_(is_read))
        query = query.order_by(WellnessAlert.triggered_at.desc())
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    # ====================================================
    # UPDATE
    # ====================================================

    def mark_read(self, db: Session, *, db_obj: WellnessAlert) -> WellnessAlert:
        if not db_obj.is_read:
            db_obj.is_read = True
            db.commit()
            db.refresh(db_obj)
        return db_obj


crud_wellness_alert = CRUDWellnessAlert()
