"""
Core data types for route probing.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class Protocol(Enum):
    """Exchange protocol a leg is quoted on."""

    V2 = "v2"  # constant-product router
    V3 = "v3"  # concentrated-liquidity quoter
    STABLE = "stable"  # stable-swap pool


class RouteType(Enum):
    """Route topologies, in the order they are evaluated each cycle."""

    CROSS_V2_V3 = "V2->V3"
    CROSS_V3_V2 = "V3->V2"
    TRI_V2 = "TRI_V2"
    TRI_STABLE_A = "TRI_STABLE_A"
    TRI_STABLE_B = "TRI_STABLE_B"

    @property
    def is_cross_version(self) -> bool:
        return self in (RouteType.CROSS_V2_V3, RouteType.CROSS_V3_V2)

    @property
    def is_stable_hop(self) -> bool:
        return self in (RouteType.TRI_STABLE_A, RouteType.TRI_STABLE_B)


@dataclass(frozen=True)
class Token:
    """
    An ERC20 token as loaded from config.

    Attributes:
        symbol: Display symbol (e.g., "WBNB")
        address: Checksummed contract address
        decimals: Fixed-point exponent for display conversion
    """

    symbol: str
    address: str
    decimals: int


@dataclass(frozen=True)
class Leg:
    """
    One quote call within a route.

    Attributes:
        protocol: Which adapter quotes this leg
        path: Tokens traversed; 2 for V3/stable legs, 2-4 for V2 legs
        fee: Fee tier for V3 legs (e.g., 100, 500, 2500)
    """

    protocol: Protocol
    path: Tuple[Token, ...]
    fee: Optional[int] = None

    def __post_init__(self):
        if len(self.path) < 2:
            raise ValueError("A leg needs at least two tokens")
        if self.protocol is not Protocol.V2 and len(self.path) != 2:
            raise ValueError(f"{self.protocol.value} legs take exactly two tokens")
        if len(self.path) > 4:
            raise ValueError("V2 paths are limited to four tokens")
        if self.protocol is Protocol.V3 and self.fee is None:
            raise ValueError("V3 legs require a fee tier")

    @property
    def token_in(self) -> Token:
        return self.path[0]

    @property
    def token_out(self) -> Token:
        return self.path[-1]


@dataclass(frozen=True)
class RouteDefinition:
    """
    A static route: a closed loop of legs starting and ending at the base asset.

    Attributes:
        route_type: Topology label
        legs: Legs in execution order
        labels: Display label per protocol (e.g., {Protocol.STABLE: "Wombat"})
    """

    route_type: RouteType
    legs: Tuple[Leg, ...]
    labels: Tuple[Tuple[Protocol, str], ...] = ()

    def __post_init__(self):
        if not self.legs:
            raise ValueError("A route needs at least one leg")
        for prev, nxt in zip(self.legs, self.legs[1:]):
            if prev.token_out != nxt.token_in:
                raise ValueError(
                    f"{self.route_type.value}: leg ends at {prev.token_out.symbol} "
                    f"but next leg starts at {nxt.token_in.symbol}"
                )
        if self.legs[0].token_in != self.legs[-1].token_out:
            raise ValueError(f"{self.route_type.value}: route is not a closed loop")

    @property
    def base_token(self) -> Token:
        return self.legs[0].token_in

    def label_for(self, protocol: Protocol) -> str:
        return dict(self.labels).get(protocol, protocol.value.upper())

    @property
    def description(self) -> str:
        """
        Human-readable hop list, e.g. "TRI_V2:WBNB->USDT (V2)->BUSD (V2)->WBNB (V2)".

        Multi-token V2 legs are rendered as one hop per token transition.
        """
        parts = [self.base_token.symbol]
        for leg in self.legs:
            label = self.label_for(leg.protocol)
            for token in leg.path[1:]:
                parts.append(f"{token.symbol} ({label})")
        return f"{self.route_type.value}:" + "->".join(parts)


@dataclass
class RouteOutcome:
    """
    Result of evaluating one route at one size.

    Amounts are in the base asset's smallest unit.
    """

    route_type: RouteType
    legs: str
    amount_in: int
    amount_out: int = 0
    ok: bool = True
    error: Optional[str] = None

    @classmethod
    def failed(
        cls, route_type: RouteType, amount_in: int, error: str
    ) -> "RouteOutcome":
        return cls(
            route_type=route_type,
            legs="",
            amount_in=amount_in,
            amount_out=0,
            ok=False,
            error=error,
        )


@dataclass(frozen=True)
class CostEstimate:
    """Gas and flash-loan cost for one route attempt, in base smallest units."""

    gas_units: int
    gas_price: int
    gas_cost: int
    flash_fee: int


@dataclass
class ScoredResult:
    """
    A successful outcome with profit figures attached.

    Attributes:
        outcome: The route outcome that was scored
        size: Configured trade size label (decimal string, base units)
        raw_profit: amount_out - amount_in (signed)
        bps: raw_profit as parts per 10,000 of amount_in
        gas_cost: Gas cost in base smallest units
        flash_fee: Flash-loan fee in base smallest units
        net_profit: raw_profit - gas_cost - flash_fee
    """

    outcome: RouteOutcome
    size: str
    raw_profit: int
    bps: int
    gas_cost: int
    flash_fee: int
    net_profit: int

    @property
    def route_type(self) -> RouteType:
        return self.outcome.route_type

    @property
    def legs(self) -> str:
        return self.outcome.legs


@dataclass
class CycleStats:
    """Counts for one polling cycle."""

    attempts: int = 0
    successes: int = 0
    failures: int = 0
    failed_routes: list = field(default_factory=list)
