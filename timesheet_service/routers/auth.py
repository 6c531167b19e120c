"""Auth router - sign-in endpoints and access dependencies."""
import logging

import httpx
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from pydantic import BaseModel

from timesheet_service.database import get_database
from timesheet_service.models.user import User, UserRole, UserStatus
from timesheet_service.services.auth_service import AuthService
from timesheet_service.utils.auth import verify_access_token, verify_google_id_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])
security = HTTPBearer(auto_error=False)


class GoogleSignInRequest(BaseModel):
    """Google sign-in request model."""

    id_token: str


class TokenResponse(BaseModel):
    """Token response model."""

    access_token: str
    token_type: str = "bearer"


@router.post("/google", response_model=TokenResponse)
async def google_sign_in(sign_in: GoogleSignInRequest, db=Depends(get_database)):
    """
    Sign in with a Google ID token and return an access token.

    - First sign-in creates the account (pending unless configured as admin)
    - Inactive accounts are refused (403)
    """
    try:
        identity = await verify_google_id_token(sign_in.id_token)
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid ID token: {e}",
        )
    except httpx.HTTPError as e:
        logger.warning("Could not fetch Google signing keys: %s", e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Identity provider unavailable",
        )

    service = AuthService(db)

    try:
        token = await service.sign_in(identity)
        return TokenResponse(access_token=token)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=str(e),
        )


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str:
    """
    Dependency to get current user ID from JWT token.

    Raises:
        HTTPException: If token is missing or invalid (401)
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    try:
        return verify_access_token(credentials.credentials)
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
        )


async def get_current_user(
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
) -> User:
    """
    Dependency to load the authenticated user, whatever their status.

    Raises:
        HTTPException: If the user no longer exists (401)
    """
    service = AuthService(db)

    try:
        return await service.get_user_by_id(user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
        )


async def get_active_user(user: User = Depends(get_current_user)) -> User:
    """
    Dependency that only lets active accounts through.

    Raises:
        HTTPException: If the account is pending or inactive (403)
    """
    if user.status == UserStatus.PENDING:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account pending approval",
        )
    if user.status == UserStatus.INACTIVE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account inactive",
        )
    return user


async def require_admin(user: User = Depends(get_active_user)) -> User:
    """
    Dependency that only lets active administrators through.

    Raises:
        HTTPException: If the user is not an admin (403)
    """
    if user.role != UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user


@router.get("/me", response_model=User)
async def get_me(user: User = Depends(get_current_user)):
    """
    Get current authenticated user.

    Pending and inactive users can still read their own account so the
    client can explain why access is blocked.
    """
    return user
