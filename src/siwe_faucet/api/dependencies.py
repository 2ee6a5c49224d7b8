"""Shared API dependencies for session authentication."""

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from siwe_faucet.services.errors import AuthError
from siwe_faucet.services.session import SessionGuard, get_session_guard

logger = logging.getLogger(__name__)

# HTTP Bearer scheme for session tokens; missing headers are handled below.
bearer_scheme = HTTPBearer(auto_error=False)

MISSING_CREDENTIALS_DETAIL = "Missing or malformed Authorization header"
INVALID_CREDENTIALS_DETAIL = "Invalid or expired token"


def get_session_guard_dep() -> SessionGuard:
    return get_session_guard()


SessionGuardDep = Annotated[SessionGuard, Depends(get_session_guard_dep)]


def get_current_identity(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    guard: SessionGuardDep,
) -> str:
    """Return the address bound to the request's bearer token.

    Raises:
        HTTPException: 401 when no bearer token is present, 403 when the token
            is forged, tampered with or expired.
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=MISSING_CREDENTIALS_DETAIL,
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return guard.authorize(credentials.credentials)
    except AuthError as err:
        logger.info("Rejected session token (%s)", err.code)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=INVALID_CREDENTIALS_DETAIL,
        ) from err


# Type alias for the authenticated address dependency
CurrentIdentityDep = Annotated[str, Depends(get_current_identity)]
