"""
Jam Session Backend — Bearer Token Authentication
===================================================

What:  FastAPI dependency that verifies the JWT in the Authorization header
       and exposes its claims to route handlers.
How:   HTTPBearer extracts the token, python-jose checks signature and expiry.
       Tokens are issued by the identity provider, not by this service.

Claims used:
    email  required; identifies the caller (jam ownership, /me endpoints)
    sub    optional; identity-provider subject
"""

import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import BaseModel

from jamsession.config import settings
from jamsession.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

_bearer = HTTPBearer(auto_error=False)


class TokenUser(BaseModel):
    """The authenticated caller, as described by the token claims."""
    email: str
    sub: Optional[str] = None


def decode_token(token: str) -> TokenUser:
    """
    Verify a token and return its caller.

    Raises:
        AuthenticationError: bad signature, expired, or no string `email` claim
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.info("Rejected bearer token: %s", e)
        raise AuthenticationError("Invalid or expired bearer token") from e

    email = payload.get("email")
    if not email:
        raise AuthenticationError("Bearer token has no email claim")
    if not isinstance(email, str):
        raise AuthenticationError("Bearer token email claim must be a string")
    sub = payload.get("sub")
    return TokenUser(email=email, sub=str(sub) if sub is not None else None)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> TokenUser:
    """Dependency: the caller of the current request, or 401."""
    if credentials is None:
        raise AuthenticationError()
    return decode_token(credentials.credentials)
