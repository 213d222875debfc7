# app/api/routers/wellness.py
from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from app.core.clock import Clock, get_clock
from app.core.config import get_db
from app.core.security import get_current_user
from app.models.user import User
from app.schemas.common import ApiResponse
from app.schemas.wellness import (
    WellnessEntryCreate,
    WellnessEntryRead,
    WellnessGoalCreate,
    WellnessGoalRead,
    WellnessAlertRead,
)
from app.services.goals import goal_service
from app.services.wellness import wellness_service, HISTORY_LIMIT
from app.services.wellness_alerts import wellness_alert_service

router = APIRouter(prefix="/wellness", tags=["Wellness"])


# =====================================================================
# ENTRIES
# =====================================================================

@router.post("/add", response_model=ApiResponse, summary="Add or update the entry for a day")
def add_wellness_data(
    obj_in: WellnessEntryCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """
    Upsert the entry for ``date``. Only provided fields change; ``diet`` and
    ``activity`` merge field by field. Triggers alerts and rewards.
    """
    entry, created = wellness_service.add_entry(
        db, user_id=current_user.id, obj_in=obj_in, clock=clock
    )
    return ApiResponse(
        message="Wellness data added successfully" if created else "Wellness data updated successfully",
        data={"wellnessEntry": WellnessEntryRead.model_validate(entry)},
    )


@router.get("/dashboard", response_model=ApiResponse, summary="Dashboard for a period")
def get_dashboard(
    period: Optional[str] = Query("7d", description="1d, 7d, 30d or 90d"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    dashboard = wellness_service.get_dashboard(db, user=current_user, period=period, clock=clock)
    return ApiResponse(data=dashboard)


@router.get("/history", response_model=ApiResponse, summary="Entries, newest first")
def get_history(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    limit: int = Query(HISTORY_LIMIT, ge=1, le=500),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    entries = wellness_service.get_history(
        db, user_id=current_user.id, start_date=start_date, end_date=end_date, limit=limit
    )
    return ApiResponse(data={"wellnessEntries": [WellnessEntryRead.model_validate(e) for e in entries]})


# =====================================================================
# GOALS
# =====================================================================

@router.post(
    "/goals",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a wellness goal",
)
def create_goal(
    obj_in: WellnessGoalCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    goal = goal_service.create_goal(db, user_id=current_user.id, obj_in=obj_in, now=clock.now())
    return ApiResponse(
        message="Wellness goal created successfully",
        data={"goal": WellnessGoalRead.model_validate(goal)},
    )


@router.get("/goals", response_model=ApiResponse, summary="List wellness goals")
def list_goals(
    is_active: Optional[bool] = Query(None, alias="isActive"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    goals = goal_service.list_goals(db, user_id=current_user.id, is_active=is_active)
    return ApiResponse(data={"goals": [WellnessGoalRead.model_validate(g) for g in goals]})


# =====================================================================
# ALERTS
# =====================================================================

@router.get("/alerts", response_model=ApiResponse, summary="List alerts, newest first")
def list_alerts(
    is_read: Optional[bool] = Query(None, alias="isRead"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    alerts = wellness_alert_service.list_alerts(db, user_id=current_user.id, is_read=is_read)
    return ApiResponse(data={"alerts": [WellnessAlertRead.model_validate(a) for a in alerts]})


@router.put("/alerts/{alert_id}/read", response_model=ApiResponse, summary="Mark an alert as read")
def mark_alert_read(
    alert_id: UUID = Path(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    alert = wellness_alert_service.mark_read(db, user_id=current_user.id, alert_id=alert_id)
    return ApiResponse(
        message="Alert marked as read",
        data={"alert": WellnessAlertRead.model_validate(alert)},
    )
