# schemas/smartwatch.py
from typing import Optional
from datetime import date, datetime
from datetime import date as date_type

from pydantic import Field

from app.models.smartwatch_connection import Provider, ConnectionStatus
from app.schemas.common import CamelModel


# =====================================================================
# REQUESTS
# =====================================================================

class ConnectRequest(CamelModel):
    """Credentials for ``POST /watch/connect/{provider}``.

    Fitbit sends the OAuth authorization ``code``; Google Fit and Apple Health
    send a token the client already obtained.
    """
    code: Optional[str] = Field(None, min_length=1)
    access_token: Optional[str] = Field(None, min_length=1)
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = Field(None, gt=0, description="Seconds until the access token expires")


class ProviderRequest(CamelModel):
    provider: Provider


# =====================================================================
# RESPONSES
# =====================================================================

class ConnectionRead(CamelModel):
    provider: Provider
    is_active: bool
    status: ConnectionStatus
    last_sync: Optional[datetime] = None
    expires_at: Optional[datetime] = None


class DailySummary(CamelModel):
    """One day of provider data, normalized."""
    steps: int = Field(0, ge=0)
    sleep_hours: Optional[float] = Field(None, ge=0, le=24)
    heart_rate: Optional[int] = Field(None, ge=30, le=220)


class SyncResult(CamelModel):
    steps: int
    sleep_hours: Optional[float] = None
    heart_rate: Optional[int] = None
    date: date_type
