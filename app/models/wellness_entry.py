# models/wellness_entry.py

import uuid
import enum
from datetime import datetime, timezone
from sqlalchemy import (
    Column, String, Date, DateTime, Float, Integer, JSON, ForeignKey, Uuid,
    UniqueConstraint, Enum as SqlEnum
)
from sqlalchemy.orm import relationship
from app.core.config import Base


class Mood(str, enum.Enum):
    excellent = "excellent"
    good = "good"
    okay = "okay"
    poor = "poor"
    terrible = "terrible"


class EntrySource(str, enum.Enum):
    manual = "manual"
    smartwatch = "smartwatch"
    ai_suggested = "ai-suggested"


# Defaults applied when the first data point of a day creates the entry
DEFAULT_DIET = {"meals": 3, "water_intake": 2.0, "junk_food": False}
DEFAULT_ACTIVITY = {"exercise": False, "exercise_type": None, "exercise_duration_minutes": None}


class WellnessEntry(Base):
    __tablename__ = "wellness_entry"
    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_wellness_entry_user_date"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)

    steps = Column(Integer, nullable=False, default=0)
    heart_rate = Column(Integer, nullable=True)
    sleep_hours = Column(Float, nullable=True)
    study_hours = Column(Float, nullable=True)
    stress_level = Column(Integer, nullable=True)
    mood = Column(SqlEnum(Mood), nullable=False, default=Mood.okay)

    diet = Column(JSON, nullable=False, default=lambda: dict(DEFAULT_DIET))          # {"meals", "water_intake", "junk_food"}
    activity = Column(JSON, nullable=False, default=lambda: dict(DEFAULT_ACTIVITY))  # {"exercise", "exercise_type", "exercise_duration_minutes"}

    notes = Column(String(500), nullable=True)
    source = Column(SqlEnum(EntrySource), nullable=False, default=EntrySource.manual)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
                        onupdate=lambda: datetime.now(timezone.utc))

    user = relationship("User", back_populates="wellness_entries")

    @property
    def water_intake(self):
        return (self.diet or {}).get("water_intake")

    @property
    def exercised(self) -> bool:
        return bool((self.activity or {}).get("exercise"))
