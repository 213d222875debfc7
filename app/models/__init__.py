# app/models/__init__.py

from app.core.config import Base

# Import all models here so metadata.create_all and app-wide imports work
from .user import User, Gender
from .user_reward import UserReward, RewardCategory
from .wellness_entry import WellnessEntry, Mood, EntrySource
from .wellness_goal import WellnessGoal, GoalType, GoalPeriod
from .wellness_alert import WellnessAlert, AlertType, AlertSeverity
from .smartwatch_connection import SmartwatchConnection, Provider, ConnectionStatus

__all__ = [
    "Base",
    "User",
    "Gender",
    "UserReward",
    "RewardCategory",
    "WellnessEntry",
    "Mood",
    "EntrySource",
    "WellnessGoal",
    "GoalType",
    "GoalPeriod",
    "WellnessAlert",
    "AlertType",
    "AlertSeverity",
    "SmartwatchConnection",
    "Provider",
    "ConnectionStatus",
]
