"""Session tokens issued after a successful sign-in.

Sessions are self-contained HS256 JWTs; the server keeps no session state.
Expiry is checked against an injectable clock rather than the wall clock so
the lifetime can be exercised deterministically.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from jose import jwt
from jose.exceptions import JOSEError
from jose.utils import base64url_decode, base64url_encode

from siwe_faucet.core.settings import settings
from siwe_faucet.services.errors import CredentialExpired, InvalidCredential


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SessionIssuer:
    """Mint signed, time-bounded session tokens for verified addresses."""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        ttl: timedelta = timedelta(hours=1),
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._ttl = ttl
        self._clock = clock

    def issue(self, identity: str) -> str:
        """Create a JWT for `identity` valid for the configured lifetime."""
        issued_at = self._clock()
        expires_at = issued_at + self._ttl
        claims: dict[str, object] = {
            "sub": identity,
            "address": identity,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        token: str = jwt.encode(claims, self._secret_key, algorithm=self._algorithm)
        return token


class SessionGuard:
    """Validate session tokens and extract the authenticated address."""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._clock = clock

    def authorize(self, token: str) -> str:
        """Return the address bound to `token`.

        Raises:
            InvalidCredential: The token is malformed, forged or tampered with.
            CredentialExpired: The token is past its expiry.
        """
        if not _has_canonical_signature(token):
            raise InvalidCredential()
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"verify_exp": False},
            )
        except JOSEError as err:
            raise InvalidCredential() from err

        subject = payload.get("sub")
        expires_at = payload.get("exp")
        if not isinstance(subject, str) or not subject:
            raise InvalidCredential("Session token has no subject")
        if not isinstance(expires_at, int | float):
            raise InvalidCredential("Session token has no expiry")

        if self._clock().timestamp() > expires_at:
            raise CredentialExpired()
        return subject


def _has_canonical_signature(token: str) -> bool:
    """Return False when the signature segment is not canonical base64url.

    The decoder ignores the unused low bits of the final character, so several
    spellings of one signature would otherwise all verify.
    """
    segments = token.split(".")
    if len(segments) != 3:
        return False
    signature = segments[2]
    try:
        raw = base64url_decode(signature.encode("ascii"))
    except ValueError:
        return False
    return base64url_encode(raw).decode("ascii") == signature


def get_session_issuer() -> SessionIssuer:
    """Return an issuer configured from application settings."""
    return SessionIssuer(
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
        ttl=timedelta(seconds=settings.access_token_ttl_seconds),
    )


def get_session_guard() -> SessionGuard:
    """Return a guard configured from application settings."""
    return SessionGuard(settings.secret_key, algorithm=settings.jwt_algorithm)
