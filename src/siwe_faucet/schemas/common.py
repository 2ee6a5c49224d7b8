"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Envelope returned for every failed request."""

    success: bool = Field(False, description="Always false for errors")
    message: str = Field(..., description="Human-readable failure reason")
