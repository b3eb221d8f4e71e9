"""
Uniswap V3 style adapter: quotes through the concentrated-liquidity quoter.

Quoter deployments differ in which entry points they expose, so a quote first
tries the flat ``quoteExactInputSingle`` form and falls back to
``quoteExactInput`` with an encoded single-hop path.
"""

from typing import List

from web3 import Web3

from ..abi import V3_QUOTER_PATH_ABI, V3_QUOTER_SINGLE_ABI
from ..exceptions import QuoteFailed
from ..types import Leg, Protocol
from ..utils import get_logger
from .base import QuoteAdapter, error_reason, normalize_amount_out

logger = get_logger(__name__)

MAX_UINT24 = 2**24 - 1


def encode_v3_path(tokens: List[str], fees: List[int]) -> bytes:
    """
    Encode a V3 swap path.

    V3 paths are packed as: token0 (20 bytes) | fee0 (3 bytes) | token1 (20 bytes) | ...

    Args:
        tokens: Token addresses (hex strings)
        fees: Fee tiers, one per hop

    Returns:
        Encoded path bytes

    Raises:
        ValueError: If the token/fee counts don't line up or a value is out of range
    """
    if len(tokens) < 2 or len(fees) != len(tokens) - 1:
        raise ValueError(
            f"Path needs n tokens and n-1 fees, got {len(tokens)} tokens and {len(fees)} fees"
        )

    encoded = b""
    for i, fee in enumerate(fees):
        if not 0 <= int(fee) <= MAX_UINT24:
            raise ValueError(f"Fee tier out of uint24 range: {fee}")
        encoded += bytes.fromhex(Web3.to_checksum_address(tokens[i])[2:])
        encoded += int(fee).to_bytes(3, "big")
    encoded += bytes.fromhex(Web3.to_checksum_address(tokens[-1])[2:])
    return encoded


class V3Quoter(QuoteAdapter):
    """Quotes single-pool swaps on a V3 quoter with encoded-path fallback."""

    protocol = Protocol.V3

    def __init__(self, web3: Web3, quoter_addr: str, **kwargs):
        super().__init__(web3, **kwargs)
        self.single_quoter = self._contract(quoter_addr, V3_QUOTER_SINGLE_ABI)
        self.path_quoter = self._contract(quoter_addr, V3_QUOTER_PATH_ABI)

    async def quote(self, amount_in: int, leg: Leg) -> int:
        if leg.protocol is not Protocol.V3:
            raise ValueError(f"V3 adapter cannot quote a {leg.protocol.value} leg")

        token_in, token_out = leg.token_in.address, leg.token_out.address

        try:
            out = await self._call(
                self.single_quoter.functions.quoteExactInputSingle(
                    token_in, token_out, int(leg.fee), int(amount_in), 0
                )
            )
            return normalize_amount_out(out, self.protocol)
        except Exception as primary_error:
            primary_reason = error_reason(primary_error)
            logger.debug(
                f"quoteExactInputSingle failed ({primary_reason}), trying encoded path"
            )

        try:
            path = encode_v3_path([token_in, token_out], [int(leg.fee)])
            out = await self._call(
                self.path_quoter.functions.quoteExactInput(path, int(amount_in))
            )
            return normalize_amount_out(out, self.protocol)
        except Exception as fallback_error:
            raise QuoteFailed(
                f"V3 quote failed: {error_reason(fallback_error)} "
                f"(fallback after: {primary_reason})",
                protocol=self.protocol.value,
                details={"primary": primary_reason},
            ) from fallback_error
