"""
Route definitions and evaluators.

Each evaluator composes quote calls in sequence, feeding one leg's output into
the next leg's input. A QuoteFailed at any leg aborts only that route for that
size and is returned as a failed RouteOutcome; later legs are never called.

Legs of one route are quoted one after another against "pending" state, so
they are not guaranteed to see the same block. That race is left as is.
"""

from typing import Awaitable, Callable, Dict, List, Mapping

from .adapters.base import QuoteAdapter
from .exceptions import QuoteFailed
from .types import Leg, Protocol, RouteDefinition, RouteOutcome, RouteType, Token
from .utils import get_logger

logger = get_logger(__name__)

Adapters = Mapping[Protocol, QuoteAdapter]


def fee_key(token_in: Token, token_out: Token) -> str:
    """Key into the V3 fee tier map, e.g. "USDT/WBNB" for USDT -> WBNB."""
    return f"{token_in.symbol}/{token_out.symbol}"


def build_routes(
    base: Token,
    stable: Token,
    alt_stable: Token,
    legacy_stable: Token,
    fee_tiers: Mapping[str, int],
    stable_label: str = "Wombat",
) -> List[RouteDefinition]:
    """
    Build the five probed routes in evaluation order.

    Args:
        base: Asset every route starts and ends in (e.g., WBNB)
        stable: Primary stable asset (e.g., USDT)
        alt_stable: Second stable asset on the stable-swap pool (e.g., USDC)
        legacy_stable: Stable asset used by the single-DEX triangle (e.g., BUSD)
        fee_tiers: V3 fee tier per "IN/OUT" symbol pair
        stable_label: Display label for stable-swap hops

    Raises:
        KeyError: If a V3 fee tier for base/stable in either direction is missing
    """
    labels = ((Protocol.STABLE, stable_label),)

    def v2(*path: Token) -> Leg:
        return Leg(Protocol.V2, tuple(path))

    def v3(token_in: Token, token_out: Token) -> Leg:
        return Leg(
            Protocol.V3,
            (token_in, token_out),
            fee=int(fee_tiers[fee_key(token_in, token_out)]),
        )

    def stable_hop(token_in: Token, token_out: Token) -> Leg:
        return Leg(Protocol.STABLE, (token_in, token_out))

    return [
        RouteDefinition(
            RouteType.CROSS_V2_V3, (v2(base, stable), v3(stable, base)), labels
        ),
        RouteDefinition(
            RouteType.CROSS_V3_V2, (v3(base, stable), v2(stable, base)), labels
        ),
        RouteDefinition(
            RouteType.TRI_V2, (v2(base, stable, legacy_stable, base),), labels
        ),
        RouteDefinition(
            RouteType.TRI_STABLE_A,
            (v2(base, stable), stable_hop(stable, alt_stable), v2(alt_stable, base)),
            labels,
        ),
        RouteDefinition(
            RouteType.TRI_STABLE_B,
            (v2(base, alt_stable), stable_hop(alt_stable, stable), v2(stable, base)),
            labels,
        ),
    ]


async def _compose_legs(
    route: RouteDefinition, amount_in: int, adapters: Adapters
) -> RouteOutcome:
    amount = amount_in
    for i, leg in enumerate(route.legs, start=1):
        adapter = adapters[leg.protocol]
        try:
            amount = await adapter.quote(amount, leg)
        except QuoteFailed as e:
            logger.debug(f"{route.route_type.value} leg {i} failed: {e}")
            return RouteOutcome.failed(route.route_type, amount_in, str(e))

    return RouteOutcome(
        route_type=route.route_type,
        legs=route.description,
        amount_in=amount_in,
        amount_out=amount,
    )


async def evaluate_cross_version(
    route: RouteDefinition, amount_in: int, adapters: Adapters
) -> RouteOutcome:
    """Base -> stable on one exchange version, back to base on the other."""
    if not route.route_type.is_cross_version or len(route.legs) != 2:
        raise ValueError(f"Not a cross-version route: {route.route_type.value}")
    return await _compose_legs(route, amount_in, adapters)


async def evaluate_triangle(
    route: RouteDefinition, amount_in: int, adapters: Adapters
) -> RouteOutcome:
    """
    Single-DEX triangle.

    Quoted as one router call with the full 4-token path so the router's own
    multi-hop resolution applies. The description still shows three hops.
    """
    if route.route_type is not RouteType.TRI_V2 or len(route.legs) != 1:
        raise ValueError(f"Not a single-call triangle: {route.route_type.value}")
    if len(route.legs[0].path) != 4:
        raise ValueError("Single-DEX triangle must be a 4-token path")
    return await _compose_legs(route, amount_in, adapters)


async def evaluate_stable_hop(
    route: RouteDefinition, amount_in: int, adapters: Adapters
) -> RouteOutcome:
    """Triangle with a stable-swap pool as the middle hop."""
    if not route.route_type.is_stable_hop or len(route.legs) != 3:
        raise ValueError(f"Not a stable-hop route: {route.route_type.value}")
    if route.legs[1].protocol is not Protocol.STABLE:
        raise ValueError("Stable-hop route must use the stable-swap pool for leg 2")
    return await _compose_legs(route, amount_in, adapters)


EVALUATORS: Dict[
    RouteType,
    Callable[[RouteDefinition, int, Adapters], Awaitable[RouteOutcome]],
] = {
    RouteType.CROSS_V2_V3: evaluate_cross_version,
    RouteType.CROSS_V3_V2: evaluate_cross_version,
    RouteType.TRI_V2: evaluate_triangle,
    RouteType.TRI_STABLE_A: evaluate_stable_hop,
    RouteType.TRI_STABLE_B: evaluate_stable_hop,
}


async def evaluate_route(
    route: RouteDefinition, amount_in: int, adapters: Adapters
) -> RouteOutcome:
    """Evaluate a route with the evaluator for its topology."""
    return await EVALUATORS[route.route_type](route, amount_in, adapters)
