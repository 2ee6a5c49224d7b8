"""Faucet Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field


class ClaimResponse(BaseModel):
    """Result of a submitted claim transaction."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    tx_hash: str = Field(..., alias="txHash")


class StatusResponse(BaseModel):
    """Faucet status for the authenticated address."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    has_claimed: bool = Field(..., alias="hasClaimed")
    balance: str = Field(..., description="Token balance formatted with the token decimals")
    users: list[str]
    faucet_amount: str = Field(..., alias="faucetAmount")
    decimals: int
