"""System and transparency endpoints for the faucet API."""

from __future__ import annotations

from fastapi import APIRouter

from siwe_faucet.core.settings import settings

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/config")
async def get_public_config() -> dict[str, object]:
    """Return a sanitized snapshot of public runtime configuration.

    Excludes secrets and connection strings; suitable for client bootstrapping.
    """
    return {
        "app": {
            "name": settings.app_name,
            "version": settings.app_version,
        },
        "auth": {
            "jwt_algorithm": settings.jwt_algorithm,
            "access_token_expire_minutes": settings.access_token_expire_minutes,
            "challenge_ttl_seconds": settings.challenge_ttl_seconds,
            "nonce_store_backend": settings.nonce_store_backend,
        },
        "chain": {
            "chain_id": settings.chain_id,
            "contract_address": settings.contract_address,
            "configured": settings.chain_configured,
        },
    }
