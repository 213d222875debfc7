# models/user.py

import uuid
import enum
from datetime import datetime, timezone
from sqlalchemy import (
    Column, String, Date, DateTime, Float, Integer, JSON, Uuid, Enum as SqlEnum
)
from sqlalchemy.orm import relationship
from app.core.config import Base


class Gender(str, enum.Enum):
    male = "male"
    female = "female"
    other = "other"


def default_preferences() -> dict:
    return {
        "notifications": {"email": True, "push": True, "reminders": True},
        "privacy": {"share_data": False, "anonymous_mode": False},
    }


class User(Base):
    __tablename__ = "users"

    # ---- Base fields ----
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    name = Column(String(50), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    avatar = Column(String(500), nullable=True)

    # ---- Student profile ----
    date_of_birth = Column(Date, nullable=True)
    gender = Column(SqlEnum(Gender), nullable=True)
    university = Column(String(255), nullable=True)
    major = Column(String(255), nullable=True)

    # ---- Wellness goal preferences (read by the stats aggregator) ----
    goal_daily_steps = Column(Integer, nullable=False, default=10000)
    goal_sleep_hours = Column(Float, nullable=False, default=8)
    goal_study_hours = Column(Float, nullable=False, default=6)
    goal_water_intake = Column(Float, nullable=False, default=2.5)

    # ---- Notification / privacy preferences ----
    preferences = Column(JSON, nullable=False, default=default_preferences)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
                        onupdate=lambda: datetime.now(timezone.utc))

    # ---- Relationships ----
    wellness_entries = relationship("WellnessEntry", back_populates="user", cascade="all, delete-orphan")
    goals = relationship("WellnessGoal", back_populates="user", cascade="all, delete-orphan")
    alerts = relationship("WellnessAlert", back_populates="user", cascade="all, delete-orphan")
    smartwatch_connections = relationship("SmartwatchConnection", back_populates="user", cascade="all, delete-orphan")
    rewards = relationship("UserReward", back_populates="user", cascade="all, delete-orphan",
                           order_by="UserReward.earned_at")

    @property
    def goal_targets(self) -> dict:
        return {
            "daily_steps": self.goal_daily_steps,
            "sleep_hours": self.goal_sleep_hours,
            "study_hours": self.goal_study_hours,
            "water_intake": self.goal_water_intake,
        }
