"""Tests for session token issuance and validation."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from jose import jwt

from siwe_faucet.services.errors import CredentialExpired, InvalidCredential
from siwe_faucet.services.session import SessionGuard, SessionIssuer

SECRET = "unit-test-secret"
ADDRESS = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"
NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=UTC)
BASE64URL_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"


def _issue(now: datetime = NOW) -> str:
    return SessionIssuer(SECRET, clock=lambda: now).issue(ADDRESS)


def _guard(now: datetime = NOW) -> SessionGuard:
    return SessionGuard(SECRET, clock=lambda: now)


def _flip(token: str, index: int) -> str:
    replacement = "A" if token[index] != "A" else "B"
    return token[:index] + replacement + token[index + 1:]


def test_issued_token_is_accepted_immediately() -> None:
    assert _guard().authorize(_issue()) == ADDRESS


def test_token_claims() -> None:
    claims = jwt.get_unverified_claims(_issue())

    assert claims["sub"] == ADDRESS
    assert claims["address"] == ADDRESS
    assert claims["exp"] - claims["iat"] == 3600


def test_token_valid_until_ttl() -> None:
    token = _issue()
    assert _guard(NOW + timedelta(minutes=59)).authorize(token) == ADDRESS
    assert _guard(NOW + timedelta(hours=1)).authorize(token) == ADDRESS


def test_token_expires_after_ttl() -> None:
    with pytest.raises(CredentialExpired):
        _guard(NOW + timedelta(hours=1, seconds=1)).authorize(_issue())


def test_custom_ttl() -> None:
    token = SessionIssuer(SECRET, ttl=timedelta(minutes=5), clock=lambda: NOW).issue(ADDRESS)
    with pytest.raises(CredentialExpired):
        _guard(NOW + timedelta(minutes=6)).authorize(token)


@pytest.mark.parametrize("segment", [0, 1, 2])
def test_tampered_token_is_rejected(segment: int) -> None:
    token = _issue()
    parts = token.split(".")
    start = sum(len(part) + 1 for part in parts[:segment])
    index = start + len(parts[segment]) // 2

    with pytest.raises(InvalidCredential):
        _guard().authorize(_flip(token, index))


def test_any_change_to_last_signature_character_is_rejected() -> None:
    token = _issue()
    guard = _guard()
    accepted = []
    for replacement in BASE64URL_ALPHABET:
        if replacement == token[-1]:
            continue
        try:
            guard.authorize(token[:-1] + replacement)
        except InvalidCredential:
            continue
        accepted.append(replacement)

    assert accepted == []


def test_signature_with_extra_character_is_rejected() -> None:
    with pytest.raises(InvalidCredential):
        _guard().authorize(_issue() + "A")


def test_token_with_wrong_secret_is_rejected() -> None:
    token = SessionIssuer("another-secret", clock=lambda: NOW).issue(ADDRESS)
    with pytest.raises(InvalidCredential):
        _guard().authorize(token)


def test_token_with_other_algorithm_is_rejected() -> None:
    token = jwt.encode(
        {"sub": ADDRESS, "exp": int((NOW + timedelta(hours=1)).timestamp())},
        SECRET,
        algorithm="HS512",
    )
    with pytest.raises(InvalidCredential):
        _guard().authorize(token)


def test_token_without_subject_is_rejected() -> None:
    token = jwt.encode({"exp": int((NOW + timedelta(hours=1)).timestamp())}, SECRET, algorithm="HS256")
    with pytest.raises(InvalidCredential):
        _guard().authorize(token)


def test_token_without_expiry_is_rejected() -> None:
    token = jwt.encode({"sub": ADDRESS}, SECRET, algorithm="HS256")
    with pytest.raises(InvalidCredential):
        _guard().authorize(token)


@pytest.mark.parametrize("token", ["", "not.a.jwt", "garbage"])
def test_garbage_is_rejected(token: str) -> None:
    with pytest.raises(InvalidCredential):
        _guard().authorize(token)
