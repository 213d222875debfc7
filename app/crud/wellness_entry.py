# crud/wellness_entry.py
import logging
from typing import List, Optional, Tuple
from uuid import UUID
from datetime import date

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import DatabaseConflictError
from app.models.wellness_entry import (
    WellnessEntry,
    Mood,
    EntrySource,
    DEFAULT_DIET,
    DEFAULT_ACTIVITY,
)
from app.schemas.wellness import WellnessEntryPatch

logger = logging.getLogger(__name__)


class CRUDWellnessEntry:
    """Persistence for daily wellness entries, one row per (user, day)."""

    # ====================================================
    # READ
    # ====================================================

    def get_by_user_and_date(
        self, db: Session, *, user_id: UUID, day: date, for_update: bool = False
    ) -> Optional[WellnessEntry]:
        """Get the entry for a specific user and day."""
        query = (
            db.query(WellnessEntry)
            .filter(WellnessEntry.user_id == user_id)
            .filter(WellnessEntry.date == day)
        )
        if for_update:
            query = query.with_for_update()
        return query.first()

    def query_range(
        self,
        db: Session,
        *,
        user_id: UUID,
        start: Optional[date] = None,
        end: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> List[WellnessEntry]:
        """Entries in the inclusive range [start, end], newest day first.

        Either bound may be omitted.
        """
        query = db.query(WellnessEntry).filter(WellnessEntry.user_id == user_id)
        if start is not None:
            query = query.filter(WellnessEntry.date >= start)
        if end is not None:
            query = query.filter(WellnessEntry.date <= end)
        query = query.order_by(WellnessEntry.date.desc())
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def list_dates(self, db: Session, *, user_id: UUID, until: date) -> List[date]:
        """Days with an entry on or before ``until``, newest first."""
        rows = (
            db.query(WellnessEntry.date)
            .filter(WellnessEntry.user_id == user_id)
            .filter(WellnessEntry.date <= until)
            .order_by(WellnessEntry.date.desc())
            .all()
        )
        return [row[0] for row in rows]

    def count_by_user(self, db: Session, *, user_id: UUID) -> int:
        return db.query(WellnessEntry).filter(WellnessEntry.user_id == user_id).count()

    # ====================================================
    # UPSERT
    # ====================================================

    def upsert_entry(
        self, db: Session, *, user_id: UUID, day: date, patch: WellnessEntryPatch
    ) -> Tuple[WellnessEntry, bool]:
        """Merge ``patch`` into the user's entry for ``day``, creating it if needed.

        Returns ``(entry, created)``. Two writers racing on the same key both
        succeed: the loser's insert hits the unique constraint and is replayed
        as an update of the winner's row.
        """
        entry = self.get_by_user_and_date(db, user_id=user_id, day=day, for_update=True)
        created = False

        if entry is None:
            try:
                entry = self._insert(db, user_id=user_id, day=day, patch=patch)
                created = True
            except DatabaseConflictError:
                logger.info(f"Concurrent insert for user {user_id} on {day}, retrying as update")
                entry = self.get_by_user_and_date(db, user_id=user_id, day=day, for_update=True)
                if entry is None:
                    raise
                self._apply(entry, patch)
        else:
            self._apply(entry, patch)

        db.commit()
        db.refresh(entry)
        return entry, created

    def _insert(
        self, db: Session, *, user_id: UUID, day: date, patch: WellnessEntryPatch
    ) -> WellnessEntry:
        entry = WellnessEntry(
            user_id=user_id,
            date=day,
            steps=0,
            mood=Mood.okay,
            diet=dict(DEFAULT_DIET),
            activity=dict(DEFAULT_ACTIVITY),
            source=EntrySource.manual,
        )
        self._apply(entry, patch)
        try:
            with db.begin_nested():
                db.add(entry)
                db.flush()
        except IntegrityError as exc:
            raise DatabaseConflictError(
                f"Wellness entry already exists for user {user_id} on {day}"
            ) from exc
        return entry

    @staticmethod
    def _apply(entry: WellnessEntry, patch: WellnessEntryPatch) -> None:
        """Overlay the provided fields; diet and activity merge key by key."""
        for field, value in patch.scalar_changes().items():
            setattr(entry, field, value)

        diet_changes = patch.diet_changes()
        if diet_changes:
            entry.diet = {**DEFAULT_DIET, **(entry.diet or {}), **diet_changes}

        activity_changes = patch.activity_changes()
        if activity_changes:
            entry.activity = {**DEFAULT_ACTIVITY, **(entry.activity or {}), **activity_changes}


# Instantiate a reusable object
crud_wellness_entry = CRUDWellnessEntry()
