"""HTTP API for the faucet service."""

from .endpoints import auth_router, faucet_router, system_router

__all__ = [
    "auth_router",
    "faucet_router",
    "system_router",
]
