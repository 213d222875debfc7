# app/integrations/smartwatch.py
"""Smartwatch provider clients.

Each provider turns client-supplied credentials into a token grant and reads
one calendar day of activity data. All network and payload problems surface
as ``UpstreamProviderError`` so callers never see raw httpx exceptions.
"""
import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Dict, Generator, Optional

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from app.core.config import settings
from app.core.exceptions import UpstreamProviderError, ValidationError
from app.models.smartwatch_connection import Provider
from app.schemas.smartwatch import ConnectRequest, DailySummary

logger = logging.getLogger(__name__)


class TokenGrant(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None


# =====================================================================
# BASE
# =====================================================================

class SmartwatchProvider:
    provider: Provider
    supports_sync = True

    def __init__(self, client: httpx.Client):
        self.client = client

    def require_credentials(self, request: ConnectRequest) -> None:
        if not request.access_token:
            raise ValidationError("Access token is required")

    def exchange_credentials(self, request: ConnectRequest) -> TokenGrant:
        """Token-passthrough providers: the client already holds an access token."""
        return TokenGrant(
            access_token=request.access_token,
            refresh_token=request.refresh_token,
            expires_in=request.expires_in,
        )

    def fetch_daily_summary(self, access_token: str, day: date) -> DailySummary:
        raise ValidationError("Unsupported provider")

    # ---- helpers ----

    def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        try:
            response = self.client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning(f"{self.provider.value} request to {url} failed: {exc}")
            raise UpstreamProviderError(
                f"Could not reach {self.provider.value}", provider=self.provider.value
            ) from exc

        if response.status_code >= 400:
            logger.warning(
                f"{self.provider.value} returned {response.status_code} for {url}: {response.text[:200]}"
            )
            raise UpstreamProviderError(
                f"{self.provider.value} request failed with status {response.status_code}",
                provider=self.provider.value,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise self._malformed("response is not JSON") from exc
        if not isinstance(payload, dict):
            raise self._malformed("unexpected response shape")
        return payload

    def _malformed(self, reason: str) -> UpstreamProviderError:
        logger.warning(f"Malformed {self.provider.value} payload: {reason}")
        return UpstreamProviderError(
            f"Malformed response from {self.provider.value}", provider=self.provider.value
        )

    def _summary(self, **values) -> DailySummary:
        try:
            return DailySummary(**values)
        except PydanticValidationError as exc:
            raise self._malformed(str(exc)) from exc


# =====================================================================
# FITBIT
# =====================================================================

class FitbitProvider(SmartwatchProvider):
    provider = Provider.fitbit

    def require_credentials(self, request: ConnectRequest) -> None:
        if not request.code:
            raise ValidationError("Authorization code is required")

    def exchange_credentials(self, request: ConnectRequest) -> TokenGrant:
        """OAuth authorization-code exchange."""
        payload = self._request(
            "POST",
            f"{settings.FITBIT_API_URL}/oauth2/token",
            data={
                "grant_type": "authorization_code",
                "client_id": settings.FITBIT_CLIENT_ID,
                "code": request.code,
                "redirect_uri": settings.FITBIT_REDIRECT_URI,
            },
            auth=(settings.FITBIT_CLIENT_ID, settings.FITBIT_CLIENT_SECRET),
        )
        try:
            return TokenGrant(
                access_token=payload["access_token"],
                refresh_token=payload.get("refresh_token"),
                expires_in=payload.get("expires_in"),
            )
        except (KeyError, PydanticValidationError) as exc:
            raise self._malformed("token response without access_token") from exc

    def fetch_daily_summary(self, access_token: str, day: date) -> DailySummary:
        headers = {"Authorization": f"Bearer {access_token}"}
        day_str = day.isoformat()
        base = settings.FITBIT_API_URL

        steps_data = self._request("GET", f"{base}/1/user/-/activities/steps/date/{day_str}/1d.json", headers=headers)
        sleep_data = self._request("GET", f"{base}/1.2/user/-/sleep/date/{day_str}.json", headers=headers)
        heart_data = self._request("GET", f"{base}/1/user/-/activities/heart/date/{day_str}/1d.json", headers=headers)

        try:
            steps_series = steps_data["activities-steps"]
            steps = int(steps_series[0]["value"]) if steps_series else 0

            minutes_asleep = sleep_data["summary"].get("totalMinutesAsleep") or 0
            sleep_hours = round(float(minutes_asleep) / 60, 2)

            heart_series = heart_data["activities-heart"]
            heart_rate = heart_series[0].get("value", {}).get("restingHeartRate") if heart_series else None
        except (KeyError, IndexError, TypeError, ValueError, AttributeError) as exc:
            raise self._malformed(f"{type(exc).__name__}: {exc}") from exc

        return self._summary(steps=steps, sleep_hours=sleep_hours, heart_rate=heart_rate)


# =====================================================================
# GOOGLE FIT
# =====================================================================

class GoogleFitProvider(SmartwatchProvider):
    provider = Provider.google_fit

    STEPS_DATA_TYPE = "com.google.step_count.delta"
    SLEEP_DATA_TYPE = "com.google.sleep.segment"
    DAY_MILLIS = 24 * 60 * 60 * 1000

    def _aggregate(self, access_token: str, data_type: str, day: date) -> Dict[str, Any]:
        start = datetime.combine(day, time.min, tzinfo=timezone.utc)
        end = start + timedelta(days=1)
        return self._request(
            "POST",
            f"{settings.GOOGLE_FIT_API_URL}/users/me/dataset:aggregate",
            headers={"Authorization": f"Bearer {access_token}"},
            json={
                "aggregateBy": [{"dataTypeName": data_type}],
                "bucketByTime": {"durationMillis": self.DAY_MILLIS},
                "startTimeMillis": int(start.timestamp() * 1000),
                "endTimeMillis": int(end.timestamp() * 1000),
            },
        )

    @staticmethod
    def _points(payload: Dict[str, Any]) -> list:
        points = []
        for bucket in payload.get("bucket") or []:
            for dataset in bucket.get("dataset") or []:
                points.extend(dataset.get("point") or [])
        return points

    def fetch_daily_summary(self, access_token: str, day: date) -> DailySummary:
        steps_payload = self._aggregate(access_token, self.STEPS_DATA_TYPE, day)
        sleep_payload = self._aggregate(access_token, self.SLEEP_DATA_TYPE, day)

        try:
            steps = sum(
                int(value.get("intVal") or 0)
                for point in self._points(steps_payload)
                for value in point.get("value") or []
            )
            sleep_nanos = sum(
                int(point["endTimeNanos"]) - int(point["startTimeNanos"])
                for point in self._points(sleep_payload)
            )
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise self._malformed(f"{type(exc).__name__}: {exc}") from exc

        sleep_hours = round(sleep_nanos / (1_000_000_000 * 3600), 2)
        return self._summary(steps=steps, sleep_hours=sleep_hours, heart_rate=None)


# =====================================================================
# APPLE HEALTH
# =====================================================================

class AppleHealthProvider(SmartwatchProvider):
    """HealthKit data never leaves the device; only the connection is recorded."""
    provider = Provider.apple_health
    supports_sync = False


PROVIDERS = {
    Provider.fitbit: FitbitProvider,
    Provider.google_fit: GoogleFitProvider,
    Provider.apple_health: AppleHealthProvider,
}


def get_provider(provider: Provider, client: httpx.Client) -> SmartwatchProvider:
    return PROVIDERS[provider](client)


# =====================================================================
# DEPENDENCY
# =====================================================================

def get_provider_http_client() -> Generator[httpx.Client, None, None]:
    """HTTP client for provider calls, bounded by the provider timeout."""
    with httpx.Client(timeout=settings.PROVIDER_TIMEOUT_SECONDS) as client:
        yield client
