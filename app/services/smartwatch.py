# services/smartwatch.py
import logging
from typing import List
from uuid import UUID
from datetime import timedelta

import httpx
from sqlalchemy.orm import Session

from app.core.clock import Clock, ensure_utc
from app.core.exceptions import (
    BusinessError,
    ConflictError,
    DatabaseConflictError,
    NotFoundError,
    UpstreamProviderError,
    ValidationError,
)
from app.crud.smartwatch_connection import crud_smartwatch_connection
from app.integrations.smartwatch import get_provider
from app.models.smartwatch_connection import SmartwatchConnection, Provider, ConnectionStatus
from app.models.wellness_entry import EntrySource
from app.schemas.smartwatch import ConnectRequest, SyncResult
from app.schemas.wellness import WellnessEntryPatch
from app.services.wellness import wellness_service

logger = logging.getLogger(__name__)


class SmartwatchService:
    """
    Provider connections and the daily sync into the entry store.

    Connection lifecycle per (user, provider):
    disconnected -> connecting -> connected -> syncing -> connected,
    and connected -> disconnected on an explicit disconnect.
    """

    def __init__(self):
        self.crud = crud_smartwatch_connection

    # =====================================================================
    # CONNECT / DISCONNECT
    # =====================================================================

    def connect(
        self,
        db: Session,
        *,
        user_id: UUID,
        provider: Provider,
        request: ConnectRequest,
        client: httpx.Client,
        clock: Clock,
    ) -> SmartwatchConnection:
        """Replace any existing connection for the provider with a fresh one.

        A failed credential exchange leaves the user disconnected from it.
        """
        integration = get_provider(provider, client)
        integration.require_credentials(request)

        now = clock.now()
        try:
            connection = self.crud.replace(db, user_id=user_id, provider=provider, created_at=now)
        except DatabaseConflictError:
            raise ConflictError(f"{provider.value} connection already in progress")
        try:
            grant = integration.exchange_credentials(request)
        except BusinessError:
            self.crud.delete(db, db_obj=connection)
            logger.warning(f"Connecting {provider.value} failed for user {user_id}")
            raise

        expires_at = now + timedelta(seconds=grant.expires_in) if grant.expires_in else None
        connection = self.crud.mark_connected(
            db,
            db_obj=connection,
            access_token=grant.access_token,
            refresh_token=grant.refresh_token,
            expires_at=expires_at,
            connected_at=now,
        )
        logger.info(f"User {user_id} connected {provider.value}")
        return connection

    def disconnect(self, db: Session, *, user_id: UUID, provider: Provider) -> None:
        connection = self.crud.get(db, user_id=user_id, provider=provider)
        if connection is None:
            raise NotFoundError(f"{provider.value} not connected")
        self.crud.delete(db, db_obj=connection)
        logger.info(f"User {user_id} disconnected {provider.value}")

    def list_connections(self, db: Session, *, user_id: UUID) -> List[SmartwatchConnection]:
        return self.crud.list_by_user(db, user_id=user_id)

    # =====================================================================
    # SYNC
    # =====================================================================

    def sync(
        self,
        db: Session,
        *,
        user_id: UUID,
        provider: Provider,
        client: httpx.Client,
        clock: Clock,
    ) -> SyncResult:
        """Pull yesterday's summary from the provider and upsert it.

        The provider is read before anything is written, so a failed fetch
        leaves both the entry and ``last_sync`` untouched. Syncing the same day
        twice overwrites the first result.
        """
        connection = self.crud.get(db, user_id=user_id, provider=provider)
        if connection is None or not connection.is_active or connection.status == ConnectionStatus.connecting:
            raise NotFoundError(f"{provider.value} not connected")

        now = clock.now()
        expires_at = ensure_utc(connection.expires_at)
        if expires_at is not None and expires_at <= now:
            raise UpstreamProviderError(
                f"{provider.value} access token expired, please reconnect", provider=provider.value
            )

        integration = get_provider(provider, client)
        if not integration.supports_sync:
            raise ValidationError("Unsupported provider")

        day = clock.today() - timedelta(days=1)
        self.crud.set_status(db, db_obj=connection, status=ConnectionStatus.syncing)
        try:
            summary = integration.fetch_daily_summary(connection.access_token, day)

            values = {
                "steps": summary.steps,
                "sleep_hours": summary.sleep_hours,
                "source": EntrySource.smartwatch,
            }
            if summary.heart_rate is not None:
                values["heart_rate"] = summary.heart_rate

            wellness_service.record_entry(
                db, user_id=user_id, day=day, patch=WellnessEntryPatch(**values), clock=clock
            )
        except Exception:
            # back to connected; last_sync stays at the previous successful sync
            db.rollback()
            self.crud.set_status(db, db_obj=connection, status=ConnectionStatus.connected)
            logger.warning(f"Sync of {provider.value} failed for user {user_id} on {day}")
            raise

        self.crud.set_status(db, db_obj=connection, status=ConnectionStatus.connected, last_sync=now)
        logger.info(f"Synced {provider.value} for user {user_id} on {day}: {summary.steps} steps")

        return SyncResult(
            steps=summary.steps,
            sleep_hours=summary.sleep_hours,
            heart_rate=summary.heart_rate,
            date=day,
        )


smartwatch_service = SmartwatchService()
