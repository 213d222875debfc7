# models/wellness_alert.py

import uuid
import enum
from datetime import datetime, timezone
from sqlalchemy import (
    Column, Boolean, DateTime, JSON, ForeignKey, Text, Uuid, Enum as SqlEnum
)
from sqlalchemy.orm import relationship
from app.core.config import Base


class AlertType(str, enum.Enum):
    low_steps = "low_steps"
    poor_sleep = "poor_sleep"
    high_stress = "high_stress"
    missed_study = "missed_study"
    low_water = "low_water"


class AlertSeverity(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"


class WellnessAlert(Base):
    __tablename__ = "wellness_alert"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    type = Column(SqlEnum(AlertType), nullable=False)
    message = Column(Text, nullable=False)
    severity = Column(SqlEnum(AlertSeverity), nullable=False, default=AlertSeverity.medium)
    is_read = Column(Boolean, nullable=False, default=False, index=True)
    triggered_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    data = Column(JSON, nullable=True)  # triggering value(s) + entry date

    user = relationship("User", back_populates="alerts")
