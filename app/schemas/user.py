# schemas/user.py
from pydantic import EmailStr, Field, field_validator
from typing import Any, Dict, List, Optional
from datetime import date, datetime
from uuid import UUID

from app.models.user import Gender
from app.models.user_reward import RewardCategory
from app.schemas.common import CamelModel


# =====================================================================
# 1. PREFERENCES
# =====================================================================

class GoalTargets(CamelModel):
    """Per-user daily targets used for goal-progress percentages."""
    daily_steps: int = Field(10000, gt=0)
    sleep_hours: float = Field(8, gt=0, le=24)
    study_hours: float = Field(6, gt=0, le=24)
    water_intake: float = Field(2.5, gt=0, le=10)


class GoalTargetsUpdate(CamelModel):
    daily_steps: Optional[int] = Field(None, gt=0)
    sleep_hours: Optional[float] = Field(None, gt=0, le=24)
    study_hours: Optional[float] = Field(None, gt=0, le=24)
    water_intake: Optional[float] = Field(None, gt=0, le=10)


class NotificationPreferences(CamelModel):
    email: bool = True
    push: bool = True
    reminders: bool = True


class PrivacyPreferences(CamelModel):
    share_data: bool = False
    anonymous_mode: bool = False


class UserPreferences(CamelModel):
    notifications: NotificationPreferences = Field(default_factory=NotificationPreferences)
    privacy: PrivacyPreferences = Field(default_factory=PrivacyPreferences)
    goals: GoalTargets = Field(default_factory=GoalTargets)


class UserPreferencesUpdate(CamelModel):
    notifications: Optional[NotificationPreferences] = None
    privacy: Optional[PrivacyPreferences] = None
    goals: Optional[GoalTargetsUpdate] = None


# =====================================================================
# 2. REQUEST SCHEMAS
# =====================================================================

class RegisterRequest(CamelModel):
    """Public registration payload."""
    name: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    university: Optional[str] = Field(None, max_length=255)
    major: Optional[str] = Field(None, max_length=255)
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None

    @field_validator("name", "university", "major")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v else v

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class LoginRequest(CamelModel):
    email: EmailStr
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class UserUpdate(CamelModel):
    """All optional; only provided fields are updated."""
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    avatar: Optional[str] = Field(None, max_length=500)
    university: Optional[str] = Field(None, max_length=255)
    major: Optional[str] = Field(None, max_length=255)
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    preferences: Optional[UserPreferencesUpdate] = None


# =====================================================================
# 3. RESPONSE SCHEMAS
# =====================================================================

class RewardOut(CamelModel):
    code: str
    name: str
    description: str
    icon: str
    category: RewardCategory
    earned_at: datetime


class UserOut(CamelModel):
    id: UUID
    name: str
    email: str
    avatar: Optional[str] = None
    university: Optional[str] = None
    major: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    preferences: UserPreferences
    current_streak: int = 0
    rewards: List[RewardOut] = Field(default_factory=list)
    created_at: Optional[datetime] = None


class TokenResponse(CamelModel):
    token: str
    token_type: str = "bearer"
    user: UserOut


def preferences_from_user(user: Any) -> Dict[str, Any]:
    """Assemble the preferences document from the user's columns."""
    stored = user.preferences or {}
    return {
        "notifications": stored.get("notifications") or {},
        "privacy": stored.get("privacy") or {},
        "goals": user.goal_targets,
    }
