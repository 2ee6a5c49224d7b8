"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .auth import MessageRequest, MessageResponse, SigninRequest, SigninResponse
from .common import ErrorResponse
from .faucet import ClaimResponse, StatusResponse

__all__ = [
    "MessageRequest", "MessageResponse",
    "SigninRequest", "SigninResponse",
    "ErrorResponse",
    "ClaimResponse", "StatusResponse",
]
