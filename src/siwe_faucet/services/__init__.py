# src/siwe_faucet/services/__init__.py
"""Authentication and faucet services."""

from .claim import ClaimGate
from .nonce_store import InMemoryNonceStore, NonceStore, RedisNonceStore
from .session import SessionGuard, SessionIssuer
from .signature import SignatureVerifier
from .siwe import SiweMessage

__all__ = [
    "ClaimGate",
    "InMemoryNonceStore",
    "NonceStore",
    "RedisNonceStore",
    "SessionGuard",
    "SessionIssuer",
    "SignatureVerifier",
    "SiweMessage",
]
