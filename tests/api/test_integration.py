# tests/api/test_integration.py
"""End-to-end flows through sign-in and the faucet."""

from __future__ import annotations

from fastapi import status

from siwe_faucet.services.siwe import SiweMessage
from tests.conftest import sign_text


def _sign_in(client, account) -> dict[str, str]:
    message = client.post("/auth/message", json={"identity": account.address}).json()["message"]
    response = client.post(
        "/auth/signin",
        json={"message": message, "signature": sign_text(account, message)},
    )
    assert response.status_code == status.HTTP_200_OK
    return {"Authorization": f"Bearer {response.json()['token']}"}


def test_full_claim_flow(client, wallet, fake_chain) -> None:
    message_response = client.post("/auth/message", json={"identity": wallet.address})
    assert message_response.status_code == status.HTTP_200_OK
    message = message_response.json()["message"]
    nonce = SiweMessage.parse(message).nonce
    assert f"Nonce: {nonce}" in message

    signin = client.post(
        "/auth/signin",
        json={"message": message, "signature": sign_text(wallet, message)},
    )
    assert signin.status_code == status.HTTP_200_OK
    headers = {"Authorization": f"Bearer {signin.json()['token']}"}

    before = client.get("/faucet/status", headers=headers)
    assert before.status_code == status.HTTP_200_OK
    assert before.json()["hasClaimed"] is False

    claim = client.post("/faucet/claim", headers=headers)
    assert claim.status_code == status.HTTP_200_OK
    assert claim.json()["txHash"].startswith("0x")

    after = client.get("/faucet/status", headers=headers)
    assert after.json()["hasClaimed"] is True
    assert after.json()["users"] == [wallet.address]

    repeat = client.post("/faucet/claim", headers=headers)
    assert repeat.status_code == status.HTTP_409_CONFLICT
    assert repeat.json()["alreadyClaimed"] is True
    assert fake_chain.claim_calls == [wallet.address]


def test_bad_signature_grants_no_access(client, wallet, other_wallet, fake_chain) -> None:
    message = client.post("/auth/message", json={"identity": wallet.address}).json()["message"]

    signin = client.post(
        "/auth/signin",
        json={"message": message, "signature": sign_text(other_wallet, message)},
    )

    assert signin.status_code == status.HTTP_401_UNAUTHORIZED
    assert "token" not in signin.json()
    assert client.get("/faucet/status").status_code == status.HTTP_401_UNAUTHORIZED
    assert client.post("/faucet/claim").status_code == status.HTTP_401_UNAUTHORIZED
    assert fake_chain.claim_calls == []


def test_sessions_are_independent_per_address(client, wallet, other_wallet, fake_chain) -> None:
    first = _sign_in(client, wallet)
    second = _sign_in(client, other_wallet)

    assert client.post("/faucet/claim", headers=first).status_code == status.HTTP_200_OK
    assert client.get("/faucet/status", headers=second).json()["hasClaimed"] is False
    assert client.post("/faucet/claim", headers=second).status_code == status.HTTP_200_OK
    assert fake_chain.claim_calls == [wallet.address, other_wallet.address]


def test_system_endpoints(client) -> None:
    assert client.get("/health").json() == {"status": "ok"}
    config = client.get("/system/config").json()
    assert config["chain"]["chain_id"] == 11155111
    assert "secret" not in str(config).lower()
