# models/wellness_goal.py

import uuid
import enum
from datetime import datetime, timezone
from sqlalchemy import (
    Column, Boolean, DateTime, Float, ForeignKey, Uuid, Enum as SqlEnum
)
from sqlalchemy.orm import relationship
from app.core.config import Base


class GoalType(str, enum.Enum):
    steps = "steps"
    sleep = "sleep"
    study = "study"
    water = "water"
    exercise = "exercise"
    stress = "stress"


class GoalPeriod(str, enum.Enum):
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"


class WellnessGoal(Base):
    __tablename__ = "wellness_goal"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    type = Column(SqlEnum(GoalType), nullable=False)
    target = Column(Float, nullable=False)
    current = Column(Float, nullable=False, default=0)
    period = Column(SqlEnum(GoalPeriod), nullable=False, default=GoalPeriod.daily)

    start_date = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    end_date = Column(DateTime(timezone=True), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True, index=True)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
                        onupdate=lambda: datetime.now(timezone.utc))

    user = relationship("User", back_populates="goals")
