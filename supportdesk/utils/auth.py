"""
Authentication utilities

Agents sign in with Supabase Auth in the browser and send the session JWT
as a bearer token; the backend resolves it to a user with auth.get_user.
"""
import asyncio
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, HTTPException, status

from supportdesk.dependencies import get_supabase
from supportdesk.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class AuthenticatedUser:
    """Signed-in agent"""
    id: str
    email: Optional[str] = None


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_current_user(
    authorization: Optional[str] = Header(None, description="Bearer <Supabase access token>"),
    client=Depends(get_supabase)
) -> AuthenticatedUser:
    """
    Resolve the bearer token to a Supabase user

    Raises:
        HTTPException 401: If the token is missing or rejected
    """
    token = extract_bearer_token(authorization)
    if not token:
        logger.warning("Missing bearer token in request")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not authenticated",
            headers={"WWW-Authenticate": "Bearer"}
        )

    try:
        response = await asyncio.to_thread(client.auth.get_user, token)
    except Exception as e:
        logger.warning(f"Token verification failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not authenticated",
            headers={"WWW-Authenticate": "Bearer"}
        )

    user = getattr(response, "user", None)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not authenticated",
            headers={"WWW-Authenticate": "Bearer"}
        )

    logger.debug(f"Authenticated user {user.id}")
    return AuthenticatedUser(id=str(user.id), email=getattr(user, "email", None))
