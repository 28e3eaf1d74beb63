"""
Authentication dependency for StockLedger
Validates bearer JWTs and yields the caller identity whose id selects the
storage namespace
"""
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from pydantic import BaseModel

from .config import settings


# Security scheme for bearer tokens
security = HTTPBearer(auto_error=False)

# Claims that may carry the user id, in order of preference
USER_ID_CLAIMS = ("uid", "user_id", "sub", "id")


class TokenUser(BaseModel):
    """User data extracted from JWT token"""
    id: str
    email: Optional[str] = None
    name: Optional[str] = None


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"}
    )


def decode_token(token: str) -> dict:
    """
    Decode and validate a signed JWT.

    Expected payload:
    {
        "uid": "user_id",          (or "user_id", "sub", "id")
        "email": "owner@example.com",
        "name": "Owner",
        "iat": 1234567890,
        "exp": 1234567890
    }
    """
    secret = settings.AUTH_SECRET
    if not secret:
        raise ValueError("AUTH_SECRET is not configured")

    try:
        return jwt.decode(
            token,
            secret,
            algorithms=[settings.JWT_ALGORITHM],
            options={"verify_aud": False}
        )
    except JWTError as e:
        if "expired" in str(e).lower():
            raise _unauthorized("Token has expired")
        raise _unauthorized(f"Invalid token: {str(e)}")


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> TokenUser:
    """
    Dependency that extracts and validates the current user from JWT.

    Usage:
        @router.get("/protected")
        async def protected_route(user: TokenUser = Depends(get_current_user)):
            return {"message": f"Hello {user.id}"}
    """
    if not credentials:
        raise _unauthorized("Unauthorized")

    payload = decode_token(credentials.credentials)

    user_id = next((payload[claim] for claim in USER_ID_CLAIMS if payload.get(claim)), None)
    if not user_id:
        raise _unauthorized("Invalid token payload: missing user id")

    return TokenUser(
        id=str(user_id),
        email=payload.get("email"),
        name=payload.get("name"),
    )
