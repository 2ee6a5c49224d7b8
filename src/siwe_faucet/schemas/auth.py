"""Sign-in related Pydantic schemas."""

from pydantic import AliasChoices, BaseModel, Field


class MessageRequest(BaseModel):
    """Request for a sign-in challenge."""

    identity: str = Field(
        ...,
        validation_alias=AliasChoices("identity", "address"),
        description="Wallet address requesting a challenge",
    )


class MessageResponse(BaseModel):
    """Challenge text the wallet must sign."""

    success: bool = True
    message: str = Field(..., description="EIP-4361 sign-in message")


class SigninRequest(BaseModel):
    """Signed challenge submitted by the wallet."""

    message: str = Field(..., min_length=1, description="Exact challenge text that was signed")
    signature: str = Field(..., min_length=1, description="Hex-encoded personal_sign signature")


class SigninResponse(BaseModel):
    """Session token returned after a successful sign-in."""

    success: bool = True
    token: str = Field(..., description="JWT session token")
    identity: str = Field(..., description="Verified checksum address")
    address: str = Field(..., description="Same as identity, for older clients")
