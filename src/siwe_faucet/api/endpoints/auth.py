# src/siwe_faucet/api/endpoints/auth.py
"""Sign-In-With-Ethereum endpoints."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status

from siwe_faucet.core.security import normalize_address
from siwe_faucet.core.settings import settings
from siwe_faucet.schemas.auth import (
    MessageRequest,
    MessageResponse,
    SigninRequest,
    SigninResponse,
)
from siwe_faucet.services.errors import AuthError, ValidationError
from siwe_faucet.services.nonce_store import NonceStore, get_nonce_store
from siwe_faucet.services.session import SessionIssuer, get_session_issuer
from siwe_faucet.services.signature import SignatureVerifier
from siwe_faucet.services.siwe import build_challenge

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])

# Every verification failure gets the same answer.
SIGNIN_FAILED_DETAIL = "Signature invalid or message altered"


def get_nonce_store_dep() -> NonceStore:
    return get_nonce_store()


def get_session_issuer_dep() -> SessionIssuer:
    return get_session_issuer()


NonceStoreDep = Annotated[NonceStore, Depends(get_nonce_store_dep)]
SessionIssuerDep = Annotated[SessionIssuer, Depends(get_session_issuer_dep)]


def get_signature_verifier_dep(nonce_store: NonceStoreDep) -> SignatureVerifier:
    return SignatureVerifier(nonce_store)


SignatureVerifierDep = Annotated[SignatureVerifier, Depends(get_signature_verifier_dep)]


@router.post(
    "/message",
    summary="Issue a Sign-In-With-Ethereum challenge",
    response_model=MessageResponse,
)
def request_message(
    payload: MessageRequest,
    request: Request,
    nonce_store: NonceStoreDep,
) -> MessageResponse:
    """Issue a fresh nonce for the address and return the message to sign.

    Requesting a new message invalidates any earlier unsigned one.
    """
    try:
        identity = normalize_address(payload.identity)
    except ValueError as err:
        raise ValidationError(str(err)) from err

    nonce = nonce_store.issue(identity)
    domain = request.headers.get("host") or settings.siwe_domain
    message = build_challenge(identity, domain, settings.chain_id, nonce)
    return MessageResponse(message=message)


@router.post(
    "/signin",
    summary="Exchange a signed challenge for a session token",
    response_model=SigninResponse,
)
def signin(
    payload: SigninRequest,
    verifier: SignatureVerifierDep,
    issuer: SessionIssuerDep,
) -> SigninResponse:
    """Verify the signed challenge and return a one-hour session token."""
    try:
        identity = verifier.verify(payload.message, payload.signature)
    except AuthError as err:
        logger.info("Sign-in rejected (%s): %s", err.code, err.message)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=SIGNIN_FAILED_DETAIL,
        ) from err

    token = issuer.issue(identity)
    logger.info("Issued session token for %s", identity)
    return SigninResponse(token=token, identity=identity, address=identity)
