# app/api/routers/auth.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.clock import Clock, get_clock
from app.core.config import get_db
from app.core.security import create_access_token, get_current_user
from app.models.user import User
from app.schemas.common import ApiResponse
from app.schemas.user import LoginRequest, RegisterRequest, TokenResponse, UserUpdate
from app.services.user import user_service

router = APIRouter(prefix="/auth", tags=["Authentication"])


# =====================================================================
# PUBLIC ENDPOINTS - No authentication required
# =====================================================================

@router.post(
    "/register",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register new user account",
)
def register(
    obj_in: RegisterRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """
    Register a new student account and return an access token.

    - **name**, **email**, **password** (min 6 characters) are required
    """
    user = user_service.register(db, obj_in=obj_in, clock=clock)
    token = TokenResponse(
        token=create_access_token(data={"sub": str(user.id)}),
        user=user_service.to_out(db, user=user, clock=clock),
    )
    return ApiResponse(message="User registered successfully", data=token)


@router.post("/login", response_model=ApiResponse, summary="Login to get access token")
def login(
    obj_in: LoginRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    user = user_service.authenticate(db, obj_in=obj_in)
    token = TokenResponse(
        token=create_access_token(data={"sub": str(user.id)}),
        user=user_service.to_out(db, user=user, clock=clock),
    )
    return ApiResponse(message="Login successful", data=token)


# =====================================================================
# AUTHENTICATED ENDPOINTS
# =====================================================================

@router.get("/me", response_model=ApiResponse, summary="Get current user profile")
def get_me(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    return ApiResponse(data={"user": user_service.to_out(db, user=current_user, clock=clock)})


@router.put("/me", response_model=ApiResponse, summary="Update current user profile")
def update_me(
    obj_in: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Only provided fields change; preference sections merge into the stored ones."""
    user = user_service.update_profile(db, user=current_user, obj_in=obj_in, clock=clock)
    return ApiResponse(
        message="Profile updated successfully",
        data={"user": user_service.to_out(db, user=user, clock=clock)},
    )
