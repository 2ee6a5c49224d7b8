"""Error types shared by the faucet services.

Every failure the core can produce is one of the classes below. Each carries
a stable ``code`` that the HTTP layer maps to a status code.
"""

from __future__ import annotations


class FaucetError(RuntimeError):
    """Base exception for all faucet service failures."""

    code = "FAUCET_ERROR"
    default_message = "Faucet service error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(FaucetError):
    """Raised when client input is missing or malformed."""

    code = "VALIDATION_ERROR"
    default_message = "Invalid request"


class AuthError(FaucetError):
    """Base class for authentication and session failures."""

    code = "AUTHENTICATION_ERROR"
    default_message = "Authentication failed"


class NonceMismatch(AuthError):
    """Raised when the challenge nonce is unknown or does not match."""

    code = "NONCE_MISMATCH"
    default_message = "Nonce invalid or not found"


class InvalidSignature(AuthError):
    """Raised when the signature does not belong to the claimed address."""

    code = "INVALID_SIGNATURE"
    default_message = "Invalid signature"


class ChallengeExpired(AuthError):
    """Raised when the challenge is outside its validity window."""

    code = "CHALLENGE_EXPIRED"
    default_message = "Challenge expired"


class InvalidCredential(AuthError):
    """Raised when a session token is malformed, forged or tampered with."""

    code = "INVALID_CREDENTIAL"
    default_message = "Invalid session token"


class CredentialExpired(AuthError):
    """Raised when a session token is past its expiry."""

    code = "CREDENTIAL_EXPIRED"
    default_message = "Session token expired"


class AlreadyClaimed(FaucetError):
    """Raised when an address has already claimed from the faucet."""

    code = "ALREADY_CLAIMED"
    default_message = "Address has already claimed tokens"


class ExternalServiceError(FaucetError):
    """Raised when the chain RPC or another upstream dependency fails."""

    code = "EXTERNAL_SERVICE_ERROR"
    default_message = "External service error"
