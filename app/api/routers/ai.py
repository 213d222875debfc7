# app/api/routers/ai.py
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.clock import Clock, get_clock
from app.core.config import get_db
from app.core.security import get_current_user
from app.integrations.ai_chat import get_ai_http_client
from app.models.user import User
from app.schemas.ai import ChatRequest
from app.schemas.common import ApiResponse
from app.services.ai_advisor import ai_advisor_service

router = APIRouter(prefix="/ai", tags=["AI Advisor"])


@router.post("/chat", response_model=ApiResponse, summary="Chat with the wellness assistant")
def chat(
    obj_in: ChatRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    client: httpx.Client = Depends(get_ai_http_client),
    clock: Clock = Depends(get_clock),
):
    reply = ai_advisor_service.chat(db, user=current_user, request=obj_in, client=client, clock=clock)
    return ApiResponse(data=reply)


@router.get("/insights", response_model=ApiResponse, summary="Rule-based insights for 7d or 30d")
def insights(
    period: Optional[str] = Query("7d"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    return ApiResponse(data=ai_advisor_service.insights(db, user=current_user, period=period, clock=clock))


@router.get("/recommendations", response_model=ApiResponse, summary="Wellness tips")
def recommendations(
    category: Optional[str] = Query(None, description="sleep, exercise, study or stress"),
    current_user: User = Depends(get_current_user),
):
    return ApiResponse(data=ai_advisor_service.recommendations(category=category))
