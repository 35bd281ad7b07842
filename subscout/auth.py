"""Supabase Auth integration.

Access tokens issued by Supabase are HS256 JWTs signed with the project's
JWT secret. The rest of the application only ever sees the resolved user id.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from subscout.config import AuthCredentials, get_config

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


@dataclass
class AuthenticatedUser:
    """Identity resolved from an access token."""
    id: str
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    profile_image_url: str | None = None


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_access_token(token: str, credentials: AuthCredentials) -> AuthenticatedUser:
    """Verify a Supabase access token and extract the user.

    Raises:
        JWTError: If the token is invalid, expired, or has no subject.
    """
    payload = jwt.decode(
        token,
        credentials.jwt_secret,
        algorithms=[credentials.algorithm],
        audience=credentials.audience,
    )

    user_id = payload.get("sub")
    if not user_id:
        raise JWTError("Token has no subject")

    metadata = payload.get("user_metadata") or {}
    full_name = metadata.get("full_name") or metadata.get("name") or ""
    first_name, _, last_name = full_name.partition(" ")

    return AuthenticatedUser(
        id=user_id,
        email=payload.get("email"),
        first_name=metadata.get("first_name") or first_name or None,
        last_name=metadata.get("last_name") or last_name or None,
        profile_image_url=metadata.get("avatar_url") or metadata.get("picture"),
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> AuthenticatedUser:
    """Validate the bearer token and return the current user."""
    if credentials is None:
        raise _unauthorized()

    auth = get_config().auth
    if not auth.is_valid():
        logger.error("SUPABASE_JWT_SECRET is not configured; rejecting request")
        raise _unauthorized()

    try:
        return decode_access_token(credentials.credentials, auth)
    except JWTError as e:
        logger.info(f"Rejected access token: {e}")
        raise _unauthorized()
