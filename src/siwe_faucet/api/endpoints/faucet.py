# src/siwe_faucet/api/endpoints/faucet.py
"""Session-gated faucet endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from siwe_faucet.api.dependencies import CurrentIdentityDep
from siwe_faucet.schemas.faucet import ClaimResponse, StatusResponse
from siwe_faucet.services.chain import FaucetChain, get_faucet_chain
from siwe_faucet.services.claim import ClaimGate

router = APIRouter(prefix="/faucet", tags=["faucet"])

CLAIM_SUBMITTED_MESSAGE = "Claim transaction submitted."


def get_faucet_chain_dep() -> FaucetChain:
    return get_faucet_chain()


FaucetChainDep = Annotated[FaucetChain, Depends(get_faucet_chain_dep)]


def get_claim_gate_dep(chain: FaucetChainDep) -> ClaimGate:
    return ClaimGate(chain)


ClaimGateDep = Annotated[ClaimGate, Depends(get_claim_gate_dep)]


@router.post("/claim", summary="Claim faucet tokens", response_model=ClaimResponse)
def claim_tokens(identity: CurrentIdentityDep, gate: ClaimGateDep) -> ClaimResponse:
    """Submit a claim for the authenticated address.

    A repeat claim is answered with 409 and ``alreadyClaimed: true``; chain
    failures are answered with 500 and the upstream error text.
    """
    tx_hash = gate.claim(identity)
    return ClaimResponse(message=CLAIM_SUBMITTED_MESSAGE, tx_hash=tx_hash)


@router.get("/status", summary="Faucet status for the caller", response_model=StatusResponse)
def faucet_status(identity: CurrentIdentityDep, gate: ClaimGateDep) -> StatusResponse:
    """Return claim state, balance and faucet parameters for the caller."""
    snapshot = gate.status(identity)
    return StatusResponse(
        has_claimed=snapshot.has_claimed,
        balance=snapshot.balance,
        users=snapshot.users,
        faucet_amount=snapshot.faucet_amount,
        decimals=snapshot.decimals,
    )
