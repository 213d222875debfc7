# crud/smartwatch_connection.py
from typing import List, Optional
from uuid import UUID
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import DatabaseConflictError
from app.models.smartwatch_connection import SmartwatchConnection, Provider, ConnectionStatus


class CRUDSmartwatchConnection:
    """CRUD operations for SmartwatchConnection model."""

    def get(
        self, db: Session, *, user_id: UUID, provider: Provider
    ) -> Optional[SmartwatchConnection]:
        return (
            db.query(SmartwatchConnection)
            .filter(SmartwatchConnection.user_id == user_id)
            .filter(SmartwatchConnection.provider == provider)
            .first()
        )

    def list_by_user(self, db: Session, *, user_id: UUID) -> List[SmartwatchConnection]:
        return (
            db.query(SmartwatchConnection)
            .filter(SmartwatchConnection.user_id == user_id)
            .order_by(SmartwatchConnection.created_at.asc())
            .all()
        )

    def replace(
        self, db: Session, *, user_id: UUID, provider: Provider, created_at: datetime
    ) -> SmartwatchConnection:
        """Drop any existing connection for the provider and insert a fresh one in ``connecting``."""
        (
            db.query(SmartwatchConnection)
            .filter(SmartwatchConnection.user_id == user_id)
            .filter(SmartwatchConnection.provider == provider)
            .delete(synchronize_session="fetch")
        )
        db_obj = SmartwatchConnection(
            user_id=user_id,
            provider=provider,
            access_token="",
            is_active=False,
            status=ConnectionStatus.connecting,
            created_at=created_at,
        )
        try:
            with db.begin_nested():
                db.add(db_obj)
                db.flush()
        except IntegrityError as exc:
            db.rollback()
            raise DatabaseConflictError(f"{provider.value} connection already exists for user {user_id}") from exc
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def mark_connected(
        self,
        db: Session,
        *,
        db_obj: SmartwatchConnection,
        access_token: str,
        refresh_token: Optional[str],
        expires_at: Optional[datetime],
        connected_at: datetime,
    ) -> SmartwatchConnection:
        db_obj.access_token = access_token
        db_obj.refresh_token = refresh_token
        db_obj.expires_at = expires_at
        db_obj.last_sync = connected_at
        db_obj.is_active = True
        db_obj.status = ConnectionStatus.connected
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def set_status(
        self,
        db: Session,
        *,
        db_obj: SmartwatchConnection,
        status: ConnectionStatus,
        last_sync: Optional[datetime] = None,
    ) -> SmartwatchConnection:
        db_obj.status = status
        if last_sync is not None:
            db_obj.last_sync = last_sync
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def delete(self, db: Session, *, db_obj: SmartwatchConnection) -> None:
        db.delete(db_obj)
        db.commit()


crud_smartwatch_connection = CRUDSmartwatchConnection()
