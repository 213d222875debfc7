# app/schemas/__init__.py

from .common import CamelModel, ApiResponse
from .user import (
    GoalTargets,
    UserPreferences,
    RegisterRequest,
    LoginRequest,
    UserUpdate,
    RewardOut,
    UserOut,
    TokenResponse,
)
from .wellness import (
    DietPatch,
    ActivityPatch,
    WellnessEntryPatch,
    WellnessEntryCreate,
    WellnessEntryRead,
    WellnessStats,
    WellnessGoalCreate,
    WellnessGoalRead,
    WellnessAlertRead,
    DateRange,
    DashboardRead,
)
from .smartwatch import (
    ConnectRequest,
    ProviderRequest,
    ConnectionRead,
    DailySummary,
    SyncResult,
)
from .ai import (
    ChatRequest,
    ChatResponse,
    DataSummary,
    InsightsResponse,
    RecommendationsResponse,
)


__all__ = [
    # Common
    "CamelModel", "ApiResponse",

    # Users
    "GoalTargets", "UserPreferences", "RegisterRequest", "LoginRequest",
    "UserUpdate", "RewardOut", "UserOut", "TokenResponse",

    # Wellness
    "DietPatch", "ActivityPatch", "WellnessEntryPatch", "WellnessEntryCreate",
    "WellnessEntryRead", "WellnessStats", "WellnessGoalCreate", "WellnessGoalRead",
    "WellnessAlertRead", "DateRange", "DashboardRead",

    # Smartwatch
    "ConnectRequest", "ProviderRequest", "ConnectionRead", "DailySummary", "SyncResult",

    # AI
    "ChatRequest", "ChatResponse", "DataSummary", "InsightsResponse", "RecommendationsResponse",
]
