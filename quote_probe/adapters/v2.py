"""
Uniswap V2 style adapter: quotes through the constant-product router.

The router resolves multi-hop paths itself, so a 4-token triangle is one call.
"""

from web3 import Web3

from ..abi import V2_ROUTER_ABI
from ..exceptions import QuoteFailed
from ..types import Leg, Protocol
from .base import QuoteAdapter, error_reason, normalize_amount_out


class V2RouterQuoter(QuoteAdapter):
    """Quotes ``getAmountsOut`` on a V2 router."""

    protocol = Protocol.V2

    def __init__(self, web3: Web3, router_addr: str, **kwargs):
        super().__init__(web3, **kwargs)
        self.router = self._contract(router_addr, V2_ROUTER_ABI)

    async def quote(self, amount_in: int, leg: Leg) -> int:
        if leg.protocol is not Protocol.V2:
            raise ValueError(f"V2 adapter cannot quote a {leg.protocol.value} leg")

        path = [token.address for token in leg.path]
        try:
            amounts = await self._call(
                self.router.functions.getAmountsOut(int(amount_in), path)
            )
        except Exception as e:
            raise QuoteFailed(
                f"V2 quote failed: {error_reason(e)}", protocol=self.protocol.value
            ) from e

        if not isinstance(amounts, (list, tuple)) or len(amounts) != len(path):
            raise QuoteFailed(
                f"V2 quote failed: expected {len(path)} amounts, got {amounts!r}",
                protocol=self.protocol.value,
            )
        return normalize_amount_out(amounts[-1], self.protocol)
