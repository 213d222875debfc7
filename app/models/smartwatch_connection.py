# models/smartwatch_connection.py

import uuid
import enum
from datetime import datetime, timezone
from sqlalchemy import (
    Column, Boolean, DateTime, ForeignKey, Text, Uuid, UniqueConstraint, Enum as SqlEnum
)
from sqlalchemy.orm import relationship
from app.core.config import Base


class Provider(str, enum.Enum):
    fitbit = "fitbit"
    google_fit = "google-fit"
    apple_health = "apple-health"


class ConnectionStatus(str, enum.Enum):
    connecting = "connecting"
    connected = "connected"
    syncing = "syncing"


class SmartwatchConnection(Base):
    __tablename__ = "smartwatch_connection"
    __table_args__ = (
        UniqueConstraint("user_id", "provider", name="uq_smartwatch_connection_user_provider"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    provider = Column(SqlEnum(Provider), nullable=False)

    access_token = Column(Text, nullable=False)
    refresh_token = Column(Text, nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    last_sync = Column(DateTime(timezone=True), nullable=True)

    is_active = Column(Boolean, nullable=False, default=True)
    status = Column(SqlEnum(ConnectionStatus), nullable=False, default=ConnectionStatus.connecting)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    user = relationship("User", back_populates="smartwatch_connections")
