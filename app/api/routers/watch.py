# app/api/routers/watch.py
import httpx
from fastapi import APIRouter, Body, Depends, Path
from sqlalchemy.orm import Session

from app.core.clock import Clock, get_clock
from app.core.config import get_db
from app.core.security import get_current_user
from app.integrations.smartwatch import get_provider_http_client
from app.models.smartwatch_connection import Provider
from app.models.user import User
from app.schemas.common import ApiResponse
from app.schemas.smartwatch import ConnectRequest, ConnectionRead, ProviderRequest
from app.services.smartwatch import smartwatch_service

router = APIRouter(prefix="/watch", tags=["Smartwatch"])


@router.post("/connect/{provider}", response_model=ApiResponse, summary="Connect a smartwatch provider")
def connect(
    provider: Provider = Path(..., description="fitbit, google-fit or apple-health"),
    obj_in: ConnectRequest = Body(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    client: httpx.Client = Depends(get_provider_http_client),
    clock: Clock = Depends(get_clock),
):
    """
    - **fitbit**: `{"code": "<oauth authorization code>"}`
    - **google-fit** / **apple-health**: `{"accessToken", "refreshToken"?, "expiresIn"?}`
    """
    connection = smartwatch_service.connect(
        db, user_id=current_user.id, provider=provider, request=obj_in, client=client, clock=clock
    )
    return ApiResponse(
        message=f"{provider.value} connected successfully",
        data={"connection": ConnectionRead.model_validate(connection)},
    )


@router.post("/sync", response_model=ApiResponse, summary="Sync yesterday's data from a provider")
def sync(
    obj_in: ProviderRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    client: httpx.Client = Depends(get_provider_http_client),
    clock: Clock = Depends(get_clock),
):
    result = smartwatch_service.sync(
        db, user_id=current_user.id, provider=obj_in.provider, client=client, clock=clock
    )
    return ApiResponse(message=f"{obj_in.provider.value} data synced successfully", data=result)


@router.get("/status", response_model=ApiResponse, summary="List smartwatch connections")
def connection_status(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    connections = smartwatch_service.list_connections(db, user_id=current_user.id)
    return ApiResponse(data={"connections": [ConnectionRead.model_validate(c) for c in connections]})


@router.post("/disconnect", response_model=ApiResponse, summary="Disconnect a provider")
def disconnect(
    obj_in: ProviderRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    smartwatch_service.disconnect(db, user_id=current_user.id, provider=obj_in.provider)
    return ApiResponse(message=f"{obj_in.provider.value} disconnected successfully")
