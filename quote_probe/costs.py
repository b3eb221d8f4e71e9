"""
Cost model: gas and flash-loan fee for one route attempt.

Both costs are ints in the base asset's smallest unit. Gas is netted against
profit directly, which only holds while the base asset is the chain's gas
token (WBNB/BNB on BSC); config refuses to load otherwise.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from web3 import Web3

from .types import CostEstimate, RouteType

BPS_DENOMINATOR = 10_000


@dataclass(frozen=True)
class GasEstimates:
    """Static gas units per swap type."""

    v2_swap: int
    v3_swap: int
    stable_swap: int


def gas_units(route_type: Optional[RouteType], estimates: GasEstimates) -> int:
    """
    Static gas estimate for a route.

    Unknown route types are costed as two V2 swaps.
    """
    if route_type is not None and route_type.is_cross_version:
        return estimates.v2_swap + estimates.v3_swap
    if route_type is RouteType.TRI_V2:
        return estimates.v2_swap * 3
    if route_type is not None and route_type.is_stable_hop:
        return estimates.v2_swap * 2 + estimates.stable_swap
    return estimates.v2_swap * 2


def gas_cost(gas_price_wei: int, units: int) -> int:
    return int(gas_price_wei) * int(units)


def flash_fee(amount_in: int, fee_bps: int) -> int:
    """Flash-loan fee, truncated toward zero."""
    fee = abs(int(amount_in)) * int(fee_bps) // BPS_DENOMINATOR
    return fee if amount_in >= 0 else -fee


def estimate_costs(
    route_type: Optional[RouteType],
    amount_in: int,
    gas_price_wei: int,
    estimates: GasEstimates,
    flashloan_fee_bps: int,
) -> CostEstimate:
    units = gas_units(route_type, estimates)
    return CostEstimate(
        gas_units=units,
        gas_price=int(gas_price_wei),
        gas_cost=gas_cost(gas_price_wei, units),
        flash_fee=flash_fee(amount_in, flashloan_fee_bps),
    )


def resolve_gas_price(fetched_wei: Optional[int], default_gwei: str) -> int:
    """
    Pick the gas price snapshot used for the whole run.

    Args:
        fetched_wei: Gas price reported by the node, if any
        default_gwei: Fallback as a decimal gwei string (e.g., "3")
    """
    if fetched_wei:
        return int(fetched_wei)
    return int(Web3.to_wei(Decimal(str(default_gwei)), "gwei"))
