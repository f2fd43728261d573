from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import ValidationError

from libs.auth.models import AuthUser
from libs.common.config import get_settings

security = HTTPBearer(auto_error=False)


def decode_token(token: str) -> AuthUser:
    """Decode a Supabase HS256 access token into an AuthUser."""
    settings = get_settings()
    payload = jwt.decode(
        token,
        settings.SUPABASE_JWT_SECRET,
        algorithms=["HS256"],
        # Supabase tokens vary in aud between projects
        options={"verify_aud": False},
    )
    return AuthUser(**payload)


async def get_current_user(
    request: Request,
    token: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> AuthUser:
    """
    Validate Supabase JWT and return the authenticated user.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if token is None:
        raise credentials_exception

    try:
        user = decode_token(token.credentials)
    except (JWTError, ValidationError):
        raise credentials_exception

    # Rate limiter keys on the authenticated user when present
    request.state.user = user
    return user


def is_admin_or_service(user: AuthUser) -> bool:
    return user.role in ("service_role", "admin")


async def require_admin(
    current_user: Annotated[AuthUser, Depends(get_current_user)]
) -> AuthUser:
    """
    Ensure the caller holds the Supabase service role (or an admin claim).
    """
    if not is_admin_or_service(current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return current_user
