"""
Stable-swap adapter (Wombat-style pool).

``quotePotentialSwap`` returns the output already net of the pool's haircut.
"""

from web3 import Web3

from ..abi import STABLE_POOL_ABI
from ..exceptions import QuoteFailed
from ..types import Leg, Protocol
from .base import QuoteAdapter, error_reason, normalize_amount_out

MAX_INT256 = 2**255 - 1


class StableSwapQuoter(QuoteAdapter):
    """Quotes a token-to-token swap on a stable-swap pool."""

    protocol = Protocol.STABLE

    def __init__(self, web3: Web3, pool_addr: str, label: str = "Wombat", **kwargs):
        super().__init__(web3, **kwargs)
        self.label = label
        self.pool = self._contract(pool_addr, STABLE_POOL_ABI)

    async def quote(self, amount_in: int, leg: Leg) -> int:
        if leg.protocol is not Protocol.STABLE:
            raise ValueError(
                f"Stable-swap adapter cannot quote a {leg.protocol.value} leg"
            )
        if amount_in > MAX_INT256:
            raise QuoteFailed(
                f"{self.label} quote failed: amount {amount_in} exceeds int256",
                protocol=self.protocol.value,
            )

        try:
            result = await self._call(
                self.pool.functions.quotePotentialSwap(
                    leg.token_in.address, leg.token_out.address, int(amount_in)
                )
            )
        except Exception as e:
            raise QuoteFailed(
                f"{self.label} quote failed: {error_reason(e)}",
                protocol=self.protocol.value,
            ) from e

        # (potentialOutcome, haircut) - haircut is already deducted
        return normalize_amount_out(result, self.protocol)
