"""
Base quote adapter.

Every adapter turns one leg into one read-only contract call against pending
state and returns a single non-negative int, or raises QuoteFailed. Callers
above this layer never see the raw return shape of a contract call.
"""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Mapping
from functools import partial
from typing import Any, List

from web3 import Web3

from ..exceptions import QuoteFailed
from ..types import Leg, Protocol
from ..utils import get_logger

logger = get_logger(__name__)

RATE_LIMIT_MARKERS = ("429", "too many requests", "-32005", "limit exceeded")


def is_rate_limit_error(exc: BaseException) -> bool:
    """Check if an RPC error looks like provider throttling."""
    msg = str(exc).lower()
    return any(marker in msg for marker in RATE_LIMIT_MARKERS)


def error_reason(exc: BaseException) -> str:
    """
    Best human-readable reason for a failed call.

    Prefers the revert message web3 attaches to ContractLogicError.
    """
    for attr in ("message", "reason"):
        value = getattr(exc, attr, None)
        if isinstance(value, str) and value:
            return value
    return str(exc) or exc.__class__.__name__


def normalize_amount_out(result: Any, protocol: Protocol) -> int:
    """
    Collapse a quote call's return value to one unsigned int.

    Accepts a bare int, a tuple/list whose first element is the amount, or a
    mapping/record carrying ``amountOut``.

    Raises:
        QuoteFailed: If no non-negative integer amount can be extracted
    """
    value = result
    if isinstance(value, Mapping):
        value = value.get("amountOut")
    elif isinstance(value, (list, tuple)):
        value = value[0] if value else None
    elif not isinstance(value, int) and hasattr(value, "amountOut"):
        value = value.amountOut

    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise QuoteFailed(
            f"{protocol.value.upper()} quote returned malformed data: {result!r}",
            protocol=protocol.value,
        )
    return int(value)


class QuoteAdapter(ABC):
    """
    Abstract read-only quote capability for one exchange protocol.

    Attributes:
        protocol: Protocol this adapter quotes
        block_identifier: Block tag every call is made against
        max_retries: Attempts per call when the provider rate-limits
    """

    protocol: Protocol

    def __init__(
        self,
        web3: Web3,
        block_identifier: str = "pending",
        max_retries: int = 3,
        backoff_sec: float = 1.0,
    ):
        self.web3 = web3
        self.block_identifier = block_identifier
        self.max_retries = max(1, int(max_retries))
        self.backoff_sec = backoff_sec

    def _contract(self, address: str, abi: List[dict]):
        return self.web3.eth.contract(
            address=Web3.to_checksum_address(address), abi=abi
        )

    async def _call(self, contract_fn) -> Any:
        """
        Run a contract call in the thread pool without blocking the event loop.

        Retries with exponential backoff on rate-limit errors only; any other
        error is raised immediately.
        """
        loop = asyncio.get_event_loop()
        call = partial(contract_fn.call, block_identifier=self.block_identifier)

        for attempt in range(self.max_retries):
            try:
                return await loop.run_in_executor(None, call)
            except Exception as e:
                if is_rate_limit_error(e) and attempt < self.max_retries - 1:
                    wait_time = self.backoff_sec * (2**attempt)
                    logger.debug(
                        f"{self.protocol.value} call rate-limited, retrying in {wait_time:.1f}s"
                    )
                    await asyncio.sleep(wait_time)
                    continue
                raise

    @abstractmethod
    async def quote(self, amount_in: int, leg: Leg) -> int:
        """
        Quote ``amount_in`` of the leg's first token through the leg.

        Returns:
            Output amount of the leg's last token in smallest units

        Raises:
            QuoteFailed: If the call reverts or returns malformed data
        """
