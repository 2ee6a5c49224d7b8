"""Verification of signed Sign-In-With-Ethereum challenges."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from siwe_faucet.core.security import verify_signature
from siwe_faucet.services.errors import ChallengeExpired, InvalidSignature, NonceMismatch
from siwe_faucet.services.nonce_store import NonceStore
from siwe_faucet.services.siwe import SiweMessage

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SignatureVerifier:
    """Check a signed challenge against the nonce on record and its signer.

    The nonce is consumed before the signature is checked, so every challenge
    can be presented at most once whether or not the signature is valid.
    """

    def __init__(
        self,
        nonce_store: NonceStore,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._nonce_store = nonce_store
        self._clock = clock

    def verify(self, message_text: str, signature: str) -> str:
        """Return the verified checksum address for a signed challenge.

        Raises:
            InvalidSignature: The message is malformed or was not signed by its address.
            NonceMismatch: No matching nonce is on record for the address.
            ChallengeExpired: The message is outside its validity window.
        """
        try:
            message = SiweMessage.parse(message_text)
        except ValueError as err:
            raise InvalidSignature(f"Malformed sign-in message: {err}") from err

        if not self._nonce_store.consume(message.address, message.nonce):
            raise NonceMismatch()

        if not verify_signature(message.address, message_text, signature):
            raise InvalidSignature(f"Signature was not produced by {message.address}")

        now = self._clock()
        expires_at = message.expires_at
        if expires_at is not None and now >= expires_at:
            raise ChallengeExpired(f"Challenge expired at {message.expiration_time}")
        valid_from = message.valid_from
        if valid_from is not None and now < valid_from:
            raise ChallengeExpired(f"Challenge not valid before {message.not_before}")

        logger.debug("Verified sign-in for %s", message.address)
        return message.address

