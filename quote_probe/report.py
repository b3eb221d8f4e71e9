"""
Ranking and console report for one polling cycle.
"""

from typing import List

from tabulate import tabulate

from .types import ScoredResult, Token
from .utils import format_units, now_iso

DEFAULT_TOP_N = 10
DISPLAY_DECIMALS = 8

NO_RESULTS_MESSAGE = "No successful quotes in this cycle."


def rank_results(batch: List[ScoredResult], top_n: int = DEFAULT_TOP_N) -> List[ScoredResult]:
    """Stable sort by raw profit, best first, capped at ``top_n``."""
    return sorted(batch, key=lambda r: r.raw_profit, reverse=True)[: max(0, top_n)]


def render_table(ranked: List[ScoredResult], base: Token) -> str:
    sym = base.symbol
    rows = [
        [
            r.route_type.value,
            r.size,
            format_units(r.raw_profit, base.decimals, DISPLAY_DECIMALS),
            r.bps,
            format_units(r.gas_cost, base.decimals, DISPLAY_DECIMALS),
            format_units(r.flash_fee, base.decimals, DISPLAY_DECIMALS),
            format_units(r.net_profit, base.decimals, DISPLAY_DECIMALS),
            r.legs,
        ]
        for r in ranked
    ]
    return tabulate(
        rows,
        headers=[
            "Route",
            f"Size ({sym})",
            f"PnL ({sym})",
            "bps",
            f"Gas ({sym})",
            f"Flash fee ({sym})",
            f"Net PnL ({sym})",
            "Legs",
        ],
        tablefmt="grid",
        disable_numparse=True,
    )


def report_cycle(
    batch: List[ScoredResult], base: Token, top_n: int = DEFAULT_TOP_N
) -> List[ScoredResult]:
    """
    Print the top results of a cycle.

    Returns:
        The ranked (and truncated) results that were printed
    """
    ranked = rank_results(batch, top_n)
    if not ranked:
        print(f"[{now_iso()}] {NO_RESULTS_MESSAGE}")
        return ranked

    print(f"\n[{now_iso()}] Top {len(ranked)} (by raw PnL):")
    print(render_table(ranked, base))
    return ranked
