"""
Quote adapters for the supported AMM types.
"""

from .base import QuoteAdapter, normalize_amount_out
from .stableswap import StableSwapQuoter
from .v2 import V2RouterQuoter
from .v3 import V3Quoter, encode_v3_path

__all__ = [
    "QuoteAdapter",
    "StableSwapQuoter",
    "V2RouterQuoter",
    "V3Quoter",
    "encode_v3_path",
    "normalize_amount_out",
]
