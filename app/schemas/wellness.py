from typing import Any, Dict, List, Optional
from uuid import UUID
from datetime import datetime, date
from datetime import date as date_type

from pydantic import Field, TypeAdapter, field_validator, model_validator

from app.models.wellness_entry import Mood, EntrySource
from app.models.wellness_goal import GoalType, GoalPeriod
from app.models.wellness_alert import AlertType, AlertSeverity
from app.schemas.common import CamelModel
from app.schemas.user import RewardOut


_datetime_adapter = TypeAdapter(datetime)


def _reject_explicit_null(model: CamelModel, fields: tuple) -> None:
    for name in fields:
        if name in model.model_fields_set and getattr(model, name) is None:
            raise ValueError(f"{name} cannot be cleared")


def to_day(value: Any) -> Any:
    """Truncate a datetime (object or ISO string) to its calendar day."""
    if value is None or isinstance(value, date) and not isinstance(value, datetime):
        return value
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and len(value) > 10:
        return _datetime_adapter.validate_python(value).date()
    return value


# ----------------------
# Entry patch structures
# ----------------------
# A field missing from ``model_fields_set`` is "not provided" and left untouched.
# An optional field explicitly set to None is "cleared".


class DietPatch(CamelModel):
    meals: Optional[int] = Field(None, ge=0, le=10)
    water_intake: Optional[float] = Field(None, ge=0, le=10, description="Liters")
    junk_food: Optional[bool] = None

    @model_validator(mode="after")
    def no_cleared_fields(self):
        _reject_explicit_null(self, ("meals", "water_intake", "junk_food"))
        return self


class ActivityPatch(CamelModel):
    exercise: Optional[bool] = None
    exercise_type: Optional[str] = Field(None, max_length=100)
    exercise_duration_minutes: Optional[int] = Field(None, ge=0)

    @model_validator(mode="after")
    def no_cleared_fields(self):
        _reject_explicit_null(self, ("exercise",))
        return self


class WellnessEntryPatch(CamelModel):
    """Partial update of one day's entry."""

    steps: Optional[int] = Field(None, ge=0)
    heart_rate: Optional[int] = Field(None, ge=30, le=220)
    sleep_hours: Optional[float] = Field(None, ge=0, le=24)
    study_hours: Optional[float] = Field(None, ge=0, le=24)
    stress_level: Optional[int] = Field(None, ge=1, le=10)
    mood: Optional[Mood] = None
    diet: Optional[DietPatch] = None
    activity: Optional[ActivityPatch] = None
    notes: Optional[str] = Field(None, max_length=500)
    source: Optional[EntrySource] = None

    @model_validator(mode="after")
    def no_cleared_fields(self):
        _reject_explicit_null(self, ("steps", "mood", "source", "diet", "activity"))
        return self

    def scalar_changes(self) -> Dict[str, Any]:
        """Provided top-level fields, excluding the diet/activity sub-documents."""
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if name not in ("diet", "activity")
        }

    def diet_changes(self) -> Dict[str, Any]:
        if self.diet is None:
            return {}
        return self.diet.model_dump(exclude_unset=True)

    def activity_changes(self) -> Dict[str, Any]:
        if self.activity is None:
            return {}
        return self.activity.model_dump(exclude_unset=True)


class WellnessEntryCreate(WellnessEntryPatch):
    """Body of ``POST /wellness/add``: the patch plus the day it applies to."""

    date: Optional[date_type] = None

    @field_validator("date", mode="before")
    @classmethod
    def truncate_to_day(cls, v: Any) -> Any:
        return to_day(v)

    def to_patch(self) -> WellnessEntryPatch:
        return WellnessEntryPatch.model_validate(
            self.model_dump(exclude_unset=True, exclude={"date"})
        )


# ----------------------
# Entry read schemas
# ----------------------


class Diet(CamelModel):
    meals: int = 3
    water_intake: float = 2.0
    junk_food: bool = False


class Activity(CamelModel):
    exercise: bool = False
    exercise_type: Optional[str] = None
    exercise_duration_minutes: Optional[int] = None


class WellnessEntryRead(CamelModel):
    id: UUID
    user_id: UUID
    date: date_type
    steps: int
    heart_rate: Optional[int] = None
    sleep_hours: Optional[float] = None
    study_hours: Optional[float] = None
    stress_level: Optional[int] = None
    mood: Mood
    diet: Diet
    activity: Activity
    notes: Optional[str] = None
    source: EntrySource
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ----------------------
# Stats
# ----------------------


class WellnessStats(CamelModel):
    average_steps: int = 0
    average_sleep: float = 0
    average_study: float = 0
    average_stress: float = 0
    average_water: float = 0
    exercise_days: int = 0
    mood_distribution: Dict[str, int] = Field(default_factory=dict)
    goal_progress: Dict[str, int] = Field(default_factory=dict)


# ----------------------
# Goals
# ----------------------


class WellnessGoalCreate(CamelModel):
    type: GoalType
    target: float = Field(..., gt=0)
    period: GoalPeriod
    end_date: Optional[datetime] = None


class WellnessGoalRead(CamelModel):
    id: UUID
    type: GoalType
    target: float
    current: float
    period: GoalPeriod
    start_date: datetime
    end_date: datetime
    is_active: bool
    created_at: Optional[datetime] = None


# ----------------------
# Alerts
# ----------------------


class WellnessAlertRead(CamelModel):
    id: UUID
    type: AlertType
    message: str
    severity: AlertSeverity
    is_read: bool
    triggered_at: datetime
    data: Optional[Dict[str, Any]] = None


# ----------------------
# Dashboard
# ----------------------


class DateRange(CamelModel):
    start_date: date
    end_date: date


class DashboardRead(CamelModel):
    period: str
    date_range: DateRange
    wellness_entries: List[WellnessEntryRead]
    stats: WellnessStats
    goals: List[WellnessGoalRead]
    alerts: List[WellnessAlertRead]
    current_streak: int
    recent_rewards: List[RewardOut] = Field(default_factory=list)
