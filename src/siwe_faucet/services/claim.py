"""Single-claim-per-address business rule for the faucet."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeVar

from siwe_faucet.services.chain import FaucetChain, FaucetStatus
from siwe_faucet.services.errors import AlreadyClaimed, ExternalServiceError, FaucetError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ClaimGate:
    """Reject repeat claims before delegating to the chain.

    The check and the claim are separate chain calls, so two concurrent
    claims for one address can both pass the check. The contract itself is
    the authority on whether a claim succeeds.
    """

    def __init__(self, chain: FaucetChain) -> None:
        self._chain = chain

    def claim(self, identity: str) -> str:
        """Claim tokens for `identity` and return the transaction hash.

        Raises:
            AlreadyClaimed: The address has already claimed.
            ExternalServiceError: The chain could not be queried or the claim failed.
        """
        if self._call(self._chain.has_claimed, identity):
            logger.info("Rejected repeat claim for %s", identity)
            raise AlreadyClaimed()
        return self._call(self._chain.claim_tokens, identity)

    def status(self, identity: str) -> FaucetStatus:
        """Return the faucet status for `identity`."""
        return self._call(self._chain.get_status, identity)

    @staticmethod
    def _call(operation: Callable[[str], T], identity: str) -> T:
        try:
            return operation(identity)
        except FaucetError:
            raise
        except Exception as err:
            raise ExternalServiceError(str(err) or "Chain request failed") from err
