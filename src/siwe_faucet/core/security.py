"""Signature utilities built on Ethereum personal_sign (EIP-191) primitives."""
from __future__ import annotations

import secrets

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_utils import is_hex_address, to_checksum_address

NONCE_BYTES = 16


def generate_nonce() -> str:
    """Return a fresh alphanumeric nonce suitable for an EIP-4361 message."""
    return secrets.token_hex(NONCE_BYTES)


def normalize_address(address: str) -> str:
    """Return the EIP-55 checksum form of a hex address.

    Raises:
        ValueError: If `address` is not a 20-byte hex address.
    """
    cleaned = address.strip() if isinstance(address, str) else ""
    if not is_hex_address(cleaned):
        raise ValueError(f"Invalid Ethereum address: {address!r}")
    return to_checksum_address(cleaned)


def recover_address(message: str, signature: str) -> str | None:
    """Recover the signer of a personal_sign message.

    Args:
        message: Exact text that was signed on the client.
        signature: Hex-encoded 65-byte signature.

    Returns:
        The checksum address of the signer, or None if the signature is malformed.
    """
    try:
        signable = encode_defunct(text=message)
        return to_checksum_address(Account.recover_message(signable, signature=signature))
    except Exception:
        return None


def verify_signature(address: str, message: str, signature: str) -> bool:
    """Return True if `signature` over `message` was produced by `address`."""
    try:
        expected = normalize_address(address)
    except ValueError:
        return False
    recovered = recover_address(message, signature)
    return recovered is not None and recovered == expected
