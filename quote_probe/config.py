"""
Configuration loading and validation for the quote probe.

The file is YAML (JSON works too). Validation is done with pydantic; any
failure surfaces as ConfigInvalid so the CLI can exit cleanly at startup.
"""

import os
from typing import Any, Dict, List, Tuple, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from web3 import Web3

from .costs import GasEstimates
from .exceptions import ConfigInvalid
from .routes import build_routes
from .types import RouteDefinition, Token
from .utils import parse_units

DEFAULT_SIZES = ["0.01", "0.02", "0.05", "0.1"]
DEFAULT_POLL_INTERVAL_MS = 5000
DEFAULT_GAS_PRICE_GWEI = "3"
RPC_ENV_VAR = "RPC_HTTP"


def _checksum(value: Union[str, int]) -> str:
    # Unquoted 0x... addresses come out of YAML as ints
    if isinstance(value, int) and not isinstance(value, bool):
        value = f"0x{value:040x}"
    if not isinstance(value, str) or not Web3.is_address(value):
        raise ValueError(f"Invalid address: {value!r}")
    return Web3.to_checksum_address(value)


class TokenModel(BaseModel):
    """Token address and decimals."""

    address: str
    decimals: int = Field(ge=0, le=77)

    @field_validator("address", mode="before")
    @classmethod
    def validate_address(cls, v):
        return _checksum(v)


class AddressesModel(BaseModel):
    """Contract addresses for the three quote sources."""

    v2_router: str
    v3_quoter: str
    stable_pool: str

    @field_validator("v2_router", "v3_quoter", "stable_pool", mode="before")
    @classmethod
    def validate_address(cls, v):
        return _checksum(v)


class RolesModel(BaseModel):
    """Which configured token symbol plays which part in the routes."""

    base: str = "WBNB"
    stable: str = "USDT"
    alt_stable: str = "USDC"
    legacy_stable: str = "BUSD"


class GasEstimatesModel(BaseModel):
    """Static gas units per swap type."""

    v2_swap: int = Field(gt=0)
    v3_swap: int = Field(gt=0)
    stable_swap: int = Field(gt=0)


class ProbeConfig(BaseModel):
    """
    Parsed and validated probe configuration.

    Attributes:
        rpc_url: HTTP(S) RPC endpoint
        addresses: V2 router, V3 quoter and stable-swap pool addresses
        tokens: {symbol -> address, decimals}
        roles: Token symbol per route role
        v3_fee_tiers: Fee tier per "IN/OUT" pair for V3 legs
        gas_estimates: Gas units per swap type
        flashloan_fee_bps: Flash-loan fee charged on the input amount
        sizes: Trade sizes as decimal strings in base-asset units
        poll_interval_ms: Delay between cycles
        default_gas_price_gwei: Used when the node reports no gas price
        base_is_gas_token: Must be true; gas is netted in base-asset units
        block_identifier: Block tag quotes are made against
        stable_pool_label: Display name of the stable-swap pool
        top_n: Rows shown in the console report
        output_csv: Path of the append-only results file
        once: If True, run a single cycle and exit
    """

    rpc_url: str
    addresses: AddressesModel
    tokens: Dict[str, TokenModel]
    roles: RolesModel = Field(default_factory=RolesModel)
    v3_fee_tiers: Dict[str, int]
    gas_estimates: GasEstimatesModel
    flashloan_fee_bps: int = Field(ge=0, le=10000)
    sizes: List[str] = Field(default_factory=lambda: list(DEFAULT_SIZES))
    poll_interval_ms: int = Field(default=DEFAULT_POLL_INTERVAL_MS, ge=0)
    default_gas_price_gwei: str = DEFAULT_GAS_PRICE_GWEI
    base_is_gas_token: bool = True
    block_identifier: str = "pending"
    stable_pool_label: str = "Wombat"
    top_n: int = Field(default=10, ge=1)
    output_csv: str = "probe_ops.csv"
    once: bool = False

    @field_validator("rpc_url")
    @classmethod
    def validate_rpc_url(cls, v):
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Invalid RPC URL format: {v}")
        return v

    @field_validator("sizes", mode="before")
    @classmethod
    def default_sizes(cls, v):
        if not v:
            return list(DEFAULT_SIZES)
        return [str(s) for s in v]

    @field_validator("default_gas_price_gwei", mode="before")
    @classmethod
    def gas_price_as_str(cls, v):
        return str(v)

    @field_validator("v3_fee_tiers")
    @classmethod
    def validate_fee_tiers(cls, v):
        for pair, fee in v.items():
            if not 0 <= fee < 2**24:
                raise ValueError(f"Fee tier for {pair} out of uint24 range: {fee}")
        return v

    @model_validator(mode="after")
    def validate_routes(self):
        if not self.base_is_gas_token:
            raise ValueError(
                "base_is_gas_token is false: gas cost cannot be netted against "
                "profit in a different unit"
            )

        roles = self.roles.model_dump()
        missing = [sym for sym in roles.values() if sym not in self.tokens]
        if missing:
            raise ValueError(f"Role tokens not found in tokens config: {missing}")
        if len(set(roles.values())) != len(roles):
            raise ValueError(f"Route roles must use four distinct tokens: {roles}")

        base, stable = self.roles.base, self.roles.stable
        for pair in (f"{stable}/{base}", f"{base}/{stable}"):
            if pair not in self.v3_fee_tiers:
                raise ValueError(f"Missing V3 fee tier for {pair}")

        decimals = self.tokens[base].decimals
        for size in self.sizes:
            amount = parse_units(size, decimals)
            if amount <= 0:
                raise ValueError(f"Trade size must be positive: {size}")

        try:
            Web3.to_wei(self.default_gas_price_gwei, "gwei")
        except Exception as e:
            raise ValueError(
                f"Invalid default_gas_price_gwei: {self.default_gas_price_gwei}"
            ) from e
        return self

    def token(self, symbol: str) -> Token:
        info = self.tokens[symbol]
        return Token(symbol=symbol, address=info.address, decimals=info.decimals)

    @property
    def base_token(self) -> Token:
        return self.token(self.roles.base)

    @property
    def poll_sec(self) -> float:
        return self.poll_interval_ms / 1000.0

    @property
    def gas(self) -> GasEstimates:
        return GasEstimates(**self.gas_estimates.model_dump())

    def size_amounts(self) -> List[Tuple[str, int]]:
        """Configured sizes paired with their amount in base smallest units."""
        decimals = self.base_token.decimals
        return [(size, parse_units(size, decimals)) for size in self.sizes]

    def route_definitions(self) -> List[RouteDefinition]:
        return build_routes(
            base=self.token(self.roles.base),
            stable=self.token(self.roles.stable),
            alt_stable=self.token(self.roles.alt_stable),
            legacy_stable=self.token(self.roles.legacy_stable),
            fee_tiers=self.v3_fee_tiers,
            stable_label=self.stable_pool_label,
        )

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "ProbeConfig":
        """
        Validate a config dictionary.

        Raises:
            ConfigInvalid: If required fields are missing or invalid
        """
        try:
            return cls(**config_dict)
        except ValidationError as e:
            raise ConfigInvalid(
                f"Invalid config: {e}", details={"errors": e.errors()}
            ) from e


def load_config(config_path: str) -> ProbeConfig:
    """
    Load and validate config from a YAML or JSON file.

    ``$RPC_HTTP`` overrides ``rpc_url`` when set.

    Args:
        config_path: Path to config file

    Returns:
        Validated ProbeConfig instance

    Raises:
        ConfigInvalid: If config invalid or file not found
    """
    if not os.path.exists(config_path):
        raise ConfigInvalid(f"Config file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            config_dict = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigInvalid(f"Failed to parse YAML: {e}") from e

    if not isinstance(config_dict, dict):
        raise ConfigInvalid("Config file must contain a YAML dictionary")

    env_rpc = os.getenv(RPC_ENV_VAR)
    if env_rpc:
        config_dict["rpc_url"] = env_rpc

    return ProbeConfig.from_dict(config_dict)


