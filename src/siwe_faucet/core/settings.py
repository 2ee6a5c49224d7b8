"""Application settings and configuration.

This module defines all configuration options for the SIWE faucet service.
Settings are loaded from environment variables with sensible defaults.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

SEPOLIA_CHAIN_ID = 11155111


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or a `.env` file.
    """

    # Application metadata
    app_name: str = Field(default="SIWE Faucet", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=3000, alias="PORT")

    # Session tokens
    secret_key: str = Field(alias="JWT_SECRET")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(default=60, alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    # Nonce storage for sign-in challenges
    nonce_store_backend: Literal["memory", "redis"] = Field(
        default="memory",
        alias="NONCE_STORE_BACKEND",
    )
    redis_url: str = Field(default="redis://localhost:6379", alias="REDIS_URL")
    nonce_ttl_seconds: int = Field(default=600, alias="NONCE_TTL_SECONDS")

    # Sign-In-With-Ethereum message fields
    challenge_ttl_seconds: int = Field(default=600, alias="CHALLENGE_TTL_SECONDS")
    siwe_domain: str = Field(default="localhost:3000", alias="SIWE_DOMAIN")
    siwe_uri: str = Field(default="http://localhost:3000", alias="SIWE_URI")
    siwe_statement: str = Field(
        default="Sign in to the Faucet Dapp.",
        alias="SIWE_STATEMENT",
    )

    # EVM chain access
    chain_id: int = Field(default=SEPOLIA_CHAIN_ID, alias="CHAIN_ID")
    rpc_url: str = Field(
        default="https://ethereum-sepolia-rpc.publicnode.com",
        alias="RPC_URL",
    )
    rpc_timeout_seconds: float = Field(default=10.0, alias="RPC_TIMEOUT_SECONDS")
    contract_address: str | None = Field(default=None, alias="CONTRACT_ADDRESS")
    faucet_private_key: str | None = Field(default=None, alias="PRIVATE_KEY")

    # CORS configuration for the web frontend
    cors_origins: list[str] = Field(
        default=["http://localhost:5173"],
        alias="CORS_ORIGINS",
    )
    cors_allow_methods: list[str] = Field(default=["GET", "POST"], alias="CORS_ALLOW_METHODS")
    cors_allow_headers: list[str] = Field(
        default=["Content-Type", "Authorization"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def access_token_ttl_seconds(self) -> int:
        """Return the session token lifetime in seconds."""
        return self.access_token_expire_minutes * 60

    @property
    def chain_configured(self) -> bool:
        """Return True when both the contract address and faucet key are set."""
        return bool(self.contract_address and self.faucet_private_key)


settings = Settings()  # type: ignore[call-arg]
