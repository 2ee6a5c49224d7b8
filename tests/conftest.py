# tests/conftest.py
from __future__ import annotations

import os
import secrets
from collections.abc import Callable, Iterator
from typing import Any

import pytest
from eth_account import Account
from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount
from eth_utils import to_hex
from fastapi import FastAPI
from fastapi.testclient import TestClient

os.environ.setdefault("JWT_SECRET", "test-secret-key-for-session-tokens")
os.environ.setdefault("NONCE_STORE_BACKEND", "memory")

from siwe_faucet.api.endpoints import auth as auth_endpoints
from siwe_faucet.api.endpoints import faucet as faucet_endpoints
from siwe_faucet.main import app as fastapi_app
from siwe_faucet.services.chain import FaucetStatus
from siwe_faucet.services.errors import ExternalServiceError
from siwe_faucet.services.nonce_store import InMemoryNonceStore
from siwe_faucet.services.session import get_session_issuer

FAUCET_AMOUNT = 100 * 10**18


class FakeFaucetChain:
    """In-memory stand-in for the faucet contract."""

    def __init__(self) -> None:
        self.claimed: set[str] = set()
        self.balances: dict[str, int] = {}
        self.claim_calls: list[str] = []
        self.fail_with: str | None = None

    def _check(self) -> None:
        if self.fail_with is not None:
            raise ExternalServiceError(self.fail_with)

    def has_claimed(self, identity: str) -> bool:
        self._check()
        return identity in self.claimed

    def get_status(self, identity: str) -> FaucetStatus:
        self._check()
        balance = self.balances.get(identity, 0)
        return FaucetStatus(
            has_claimed=identity in self.claimed,
            balance=str(balance // 10**18),
            users=sorted(self.claimed),
            faucet_amount=str(FAUCET_AMOUNT),
            decimals=18,
        )

    def claim_tokens(self, identity: str) -> str:
        self._check()
        self.claim_calls.append(identity)
        self.claimed.add(identity)
        self.balances[identity] = self.balances.get(identity, 0) + FAUCET_AMOUNT
        return "0x" + secrets.token_hex(32)


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
def nonce_store() -> InMemoryNonceStore:
    return InMemoryNonceStore(ttl_seconds=600)


@pytest.fixture()
def fake_chain() -> FakeFaucetChain:
    return FakeFaucetChain()


@pytest.fixture(autouse=True)
def override_dependencies(
    app: FastAPI,
    nonce_store: InMemoryNonceStore,
    fake_chain: FakeFaucetChain,
) -> Iterator[None]:
    """Give every test its own nonce store and chain."""
    overrides: dict[Callable[..., Any], Callable[[], Any]] = {
        auth_endpoints.get_nonce_store_dep: lambda: nonce_store,
        faucet_endpoints.get_faucet_chain_dep: lambda: fake_chain,
    }
    app.dependency_overrides.update(overrides)
    try:
        yield
    finally:
        for dependency in overrides:
            app.dependency_overrides.pop(dependency, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def wallet() -> LocalAccount:
    """Return a freshly generated Ethereum account."""
    return Account.create()


@pytest.fixture()
def other_wallet() -> LocalAccount:
    return Account.create()


def sign_text(account: LocalAccount, text: str) -> str:
    """Sign `text` with personal_sign and return the 0x-prefixed signature."""
    signed = Account.sign_message(encode_defunct(text=text), private_key=account.key)
    return to_hex(signed.signature)


@pytest.fixture()
def auth_headers(wallet: LocalAccount) -> dict[str, str]:
    """Return authorization headers for the primary wallet."""
    token = get_session_issuer().issue(wallet.address)
    return {"Authorization": f"Bearer {token}"}
