"""EVM chain access for the faucet token contract.

Reads are batched into a single JSON-RPC round trip; the claim is simulated,
signed with the faucet key and broadcast. Every upstream failure, including
RPC timeouts, surfaces as `ExternalServiceError`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Protocol, TypeVar

from eth_account import Account
from web3 import Web3
from web3.exceptions import BadFunctionCallOutput, ContractLogicError

from siwe_faucet.core.settings import settings
from siwe_faucet.services.errors import ExternalServiceError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_DECIMALS = 18

# Reads that failed inside the contract rather than in transport.
_REJECTED_READS = (ContractLogicError, BadFunctionCallOutput)

FAUCET_TOKEN_ABI: list[dict[str, Any]] = [
    {
        "type": "function",
        "stateMutability": "nonpayable",
        "name": "claimTokens",
        "inputs": [],
        "outputs": [],
    },
    {
        "type": "function",
        "stateMutability": "view",
        "name": "hasAddressClaimed",
        "inputs": [{"type": "address", "name": "account"}],
        "outputs": [{"type": "bool", "name": ""}],
    },
    {
        "type": "function",
        "stateMutability": "view",
        "name": "balanceOf",
        "inputs": [{"type": "address", "name": "account"}],
        "outputs": [{"type": "uint256", "name": ""}],
    },
    {
        "type": "function",
        "stateMutability": "view",
        "name": "getFaucetUsers",
        "inputs": [],
        "outputs": [{"type": "address[]", "name": ""}],
    },
    {
        "type": "function",
        "stateMutability": "view",
        "name": "getFaucetAmount",
        "inputs": [],
        "outputs": [{"type": "uint256", "name": ""}],
    },
    {
        "type": "function",
        "stateMutability": "view",
        "name": "decimals",
        "inputs": [],
        "outputs": [{"type": "uint8", "name": ""}],
    },
]


@dataclass(frozen=True)
class FaucetStatus:
    """Snapshot of the faucet contract as seen by one address."""

    has_claimed: bool = False
    balance: str = "0"
    users: list[str] = field(default_factory=list)
    faucet_amount: str = "0"
    decimals: int = DEFAULT_DECIMALS


class FaucetChain(Protocol):
    """Chain operations the faucet endpoints depend on."""

    def has_claimed(self, identity: str) -> bool: ...

    def get_status(self, identity: str) -> FaucetStatus: ...

    def claim_tokens(self, identity: str) -> str: ...


def format_units(value: int, decimals: int) -> str:
    """Render an integer token amount as a decimal string.

    Trailing zeros of the fraction are dropped, so ``10**18`` with 18 decimals
    renders as ``"1"`` and ``15 * 10**17`` as ``"1.5"``.
    """
    negative = value < 0
    digits = str(abs(value)).rjust(decimals, "0")
    split = len(digits) - decimals
    integer, fraction = digits[:split], digits[split:].rstrip("0")
    rendered = integer or "0"
    if fraction:
        rendered = f"{rendered}.{fraction}"
    return f"-{rendered}" if negative else rendered


class Web3FaucetChain:
    """Faucet contract client backed by web3.py over HTTP JSON-RPC."""

    def __init__(
        self,
        rpc_url: str,
        contract_address: str,
        private_key: str,
        chain_id: int,
        timeout_seconds: float = 10.0,
    ) -> None:
        self._w3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": timeout_seconds}))
        self._account = Account.from_key(private_key)
        self._contract = self._w3.eth.contract(
            address=Web3.to_checksum_address(contract_address),
            abi=FAUCET_TOKEN_ABI,
        )
        self._chain_id = chain_id

    def has_claimed(self, identity: str) -> bool:
        return bool(
            _rpc(
                "hasAddressClaimed",
                lambda: self._contract.functions.hasAddressClaimed(identity).call(),
            )
        )

    def get_status(self, identity: str) -> FaucetStatus:
        """Read the faucet status for `identity`.

        The five reads go out as one JSON-RPC batch. If the batch fails they are
        repeated one by one, and a read the contract rejects falls back to its
        default instead of failing the whole status.
        """
        functions = self._contract.functions
        reads = [
            (functions.hasAddressClaimed(identity), False),
            (functions.balanceOf(identity), 0),
            (functions.getFaucetUsers(), []),
            (functions.getFaucetAmount(), 0),
            (functions.decimals(), DEFAULT_DECIMALS),
        ]

        def _read_batch() -> list[Any]:
            with self._w3.batch_requests() as batch:
                for call, _ in reads:
                    batch.add(call)
                return list(batch.execute())

        try:
            values = _read_batch()
        except Exception as err:
            logger.warning("Status batch for %s failed, reading one by one: %s", identity, err)
            values = _rpc("status reads", lambda: [_call_or_default(c, d) for c, d in reads])

        has_claimed, balance, users, faucet_amount, decimals = values
        decimals = int(decimals)
        return FaucetStatus(
            has_claimed=bool(has_claimed),
            balance=format_units(int(balance), decimals),
            users=[str(user) for user in users],
            faucet_amount=str(faucet_amount),
            decimals=decimals,
        )

    def claim_tokens(self, identity: str) -> str:
        """Submit `claimTokens()` from the faucet account and return the tx hash."""
        sender = self._account.address
        claim = self._contract.functions.claimTokens()

        def _submit() -> str:
            # Simulate first so reverts surface before any gas is spent.
            claim.call({"from": sender})
            tx = claim.build_transaction(
                {
                    "from": sender,
                    "nonce": self._w3.eth.get_transaction_count(sender),
                    "chainId": self._chain_id,
                }
            )
            signed = self._account.sign_transaction(tx)
            return Web3.to_hex(self._w3.eth.send_raw_transaction(signed.raw_transaction))

        tx_hash = _rpc("claimTokens", _submit)
        logger.info("Submitted claim for %s in transaction %s", identity, tx_hash)
        return tx_hash


def _call_or_default(call: Any, default: Any) -> Any:
    try:
        return call.call()
    except _REJECTED_READS as err:
        logger.warning("Contract rejected %s, using default: %s", call.fn_name, err)
        return default


def _rpc(what: str, call: Callable[[], T]) -> T:
    try:
        return call()
    except Exception as err:
        logger.error("Chain call %s failed: %s", what, err, exc_info=True)
        raise ExternalServiceError(str(err) or f"Chain call {what} failed") from err


@lru_cache(maxsize=1)
def get_faucet_chain() -> FaucetChain:
    """Return the chain client configured from application settings."""
    if not settings.contract_address or not settings.faucet_private_key:
        raise ExternalServiceError("Faucet chain client is not configured")
    try:
        return Web3FaucetChain(
            settings.rpc_url,
            settings.contract_address,
            settings.faucet_private_key,
            chain_id=settings.chain_id,
            timeout_seconds=settings.rpc_timeout_seconds,
        )
    except ValueError as err:
        raise ExternalServiceError(f"Invalid faucet chain configuration: {err}") from err
