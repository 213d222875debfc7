# models/user_reward.py

import uuid
import enum
from datetime import datetime, timezone
from sqlalchemy import (
    Column, String, DateTime, ForeignKey, Uuid, UniqueConstraint, Enum as SqlEnum
)
from sqlalchemy.orm import relationship
from app.core.config import Base


class RewardCategory(str, enum.Enum):
    streak = "streak"
    achievement = "achievement"
    milestone = "milestone"


class UserReward(Base):
    __tablename__ = "user_reward"
    __table_args__ = (
        UniqueConstraint("user_id", "code", name="uq_user_reward_user_code"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    code = Column(String(50), nullable=False)
    name = Column(String(100), nullable=False)
    description = Column(String(255), nullable=False)
    icon = Column(String(20), nullable=False)
    category = Column(SqlEnum(RewardCategory), nullable=False)
    earned_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    user = relationship("User", back_populates="rewards")
