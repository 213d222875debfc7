# app/core/security.py
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from jose import JWTError, jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.core.config import settings, get_db
from app.crud.user import crud_user
from app.models.user import User


# =====================================================================
# JWT TOKEN CONFIGURATION
# =====================================================================

# missing credentials are rejected in get_current_user with a 401
security = HTTPBearer(auto_error=False)


def _credentials_exception(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


# =====================================================================
# TOKEN CREATION
# =====================================================================

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create JWT access token.

    Args:
        data: Claims to encode (typically {"sub": user_id})
        expires_delta: Lifetime override; defaults to ACCESS_TOKEN_EXPIRE_MINUTES

    Returns:
        Encoded JWT access token
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


# =====================================================================
# TOKEN VERIFICATION
# =====================================================================

def verify_access_token(token: str) -> str:
    """
    Verify an access token and return the user id it was issued for.

    Raises:
        HTTPException: 401 if the token is invalid, expired or of another type
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise _credentials_exception()

    user_id: Optional[str] = payload.get("sub")
    if user_id is None:
        raise _credentials_exception()
    if payload.get("type") != "access":
        raise _credentials_exception("Invalid token type. Expected access")
    return user_id


# =====================================================================
# USER AUTHENTICATION DEPENDENCY
# =====================================================================

def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """
    Resolve the authenticated user from the bearer token.

    Raises:
        HTTPException: 401 if the token is missing, invalid or the user is gone
    """
    if credentials is None:
        raise _credentials_exception("Not authenticated")

    user_id = verify_access_token(credentials.credentials)
    try:
        user = crud_user.get(db, id=UUID(user_id))
    except ValueError:
        raise _credentials_exception()

    if user is None:
        raise _credentials_exception("User not found")
    return user
