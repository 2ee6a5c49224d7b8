"""Sign-In-With-Ethereum authenticated token faucet API."""

__version__ = "0.1.0"
