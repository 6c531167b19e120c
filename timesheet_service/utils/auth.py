"""Authentication and authorization utilities."""
from datetime import datetime, timedelta
from typing import Optional

import httpx
from jose import JWTError, jwt

from timesheet_service.config import settings
from timesheet_service.models.user import Identity

GOOGLE_ISSUERS = ("accounts.google.com", "https://accounts.google.com")


def create_access_token(
    user_id: str, expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a JWT access token for a user.

    Args:
        user_id: User ID to encode in token
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string

    Example:
        >>> token = create_access_token(user_id="user123")
        >>> isinstance(token, str)
        True
    """
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.jwt_expiration_minutes)

    to_encode = {
        "sub": user_id,
        "exp": expire,
    }

    encoded_jwt = jwt.encode(
        to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm
    )

    return encoded_jwt


def verify_access_token(token: str) -> str:
    """
    Verify and decode a JWT access token.

    Args:
        token: JWT token string to verify

    Returns:
        User ID from token

    Raises:
        JWTError: If token is invalid or expired

    Example:
        >>> token = create_access_token(user_id="user123")
        >>> user_id = verify_access_token(token)
        >>> user_id
        'user123'
    """
    payload = jwt.decode(
        token, settings.jwt_secret, algorithms=[settings.jwt_algorithm]
    )
    user_id: str = payload.get("sub")

    if user_id is None:
        raise JWTError("Token payload missing 'sub' claim")

    return user_id


async def fetch_google_certs() -> dict:
    """
    Download Google's current ID token signing keys.

    Raises:
        httpx.HTTPError: If the keys cannot be fetched
    """
    async with httpx.AsyncClient(timeout=10.0) as client:
        response = await client.get(settings.google_certs_url)
        response.raise_for_status()
        return response.json()


def decode_google_id_token(id_token: str, certs: dict) -> Identity:
    """
    Verify a Google ID token against a JWK set and extract the identity.

    Args:
        id_token: ID token issued to this application's client ID
        certs: Google's JWK set

    Returns:
        Verified identity

    Raises:
        JWTError: If the signature, audience, issuer or email is not valid
    """
    claims = jwt.decode(
        id_token,
        certs,
        algorithms=["RS256"],
        audience=settings.google_client_id,
        options={"verify_at_hash": False},
    )

    if claims.get("iss") not in GOOGLE_ISSUERS:
        raise JWTError("Token was not issued by Google")
    if not claims.get("email") or not claims.get("email_verified", False):
        raise JWTError("Token has no verified email")

    email = claims["email"]
    return Identity(
        subject=claims["sub"],
        email=email,
        name=claims.get("name") or email.split("@")[0],
    )


async def verify_google_id_token(id_token: str) -> Identity:
    """Fetch Google's keys and verify an ID token with them."""
    certs = await fetch_google_certs()
    return decode_google_id_token(id_token, certs)
