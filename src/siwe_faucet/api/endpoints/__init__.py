# src/siwe_faucet/api/endpoints/__init__.py
"""API endpoint modules."""

from .auth import router as auth_router
from .faucet import router as faucet_router
from .system import router as system_router

__all__ = [
    "auth_router",
    "faucet_router",
    "system_router",
]
