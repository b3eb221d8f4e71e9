"""
Single source of truth for route profitability.

All figures are exact ints in the base asset's smallest unit. Nothing here
filters unprofitable routes; ranking decides what is shown.
"""

from .costs import BPS_DENOMINATOR
from .types import CostEstimate, RouteOutcome, ScoredResult


def _div_trunc(numerator: int, denominator: int) -> int:
    """Integer division truncating toward zero (Python's // floors)."""
    q = abs(numerator) // abs(denominator)
    return q if (numerator >= 0) == (denominator > 0) else -q


def safe_bps(profit: int, amount_in: int) -> int:
    """Profit in basis points of input; 0 when input is 0."""
    if amount_in == 0:
        return 0
    return _div_trunc(profit * BPS_DENOMINATOR, amount_in)


def score_outcome(
    outcome: RouteOutcome, costs: CostEstimate, size: str = ""
) -> ScoredResult:
    """
    Attach raw profit, bps and net profit to a successful outcome.

    Raises:
        ValueError: If the outcome is a failure
    """
    if not outcome.ok:
        raise ValueError(f"Cannot score failed route {outcome.route_type.value}")

    raw_profit = outcome.amount_out - outcome.amount_in
    return ScoredResult(
        outcome=outcome,
        size=size,
        raw_profit=raw_profit,
        bps=safe_bps(raw_profit, outcome.amount_in),
        gas_cost=costs.gas_cost,
        flash_fee=costs.flash_fee,
        net_profit=raw_profit - costs.gas_cost - costs.flash_fee,
    )
