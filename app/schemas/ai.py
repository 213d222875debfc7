# schemas/ai.py
from typing import List, Optional
from datetime import datetime

from pydantic import Field, field_validator

from app.schemas.common import CamelModel


class ChatRequest(CamelModel):
    message: str = Field(..., min_length=1, max_length=2000)
    context: Optional[str] = Field(None, max_length=100)

    @field_validator("message")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Message is required")
        return v.strip()


class ChatResponse(CamelModel):
    message: str
    timestamp: datetime
    context: str


class DataSummary(CamelModel):
    total_entries: int
    average_steps: int
    average_sleep: float
    average_stress: float


class InsightsResponse(CamelModel):
    period: str
    insights: List[str]
    recommendations: List[str]
    data_summary: Optional[DataSummary] = None


class RecommendationsResponse(CamelModel):
    category: str
    recommendations: List[str]
