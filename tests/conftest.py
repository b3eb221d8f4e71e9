"""
Shared fixtures for probe tests: tokens, routes and scripted quote adapters.
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from quote_probe.adapters.base import QuoteAdapter  # noqa: E402
from quote_probe.exceptions import QuoteFailed  # noqa: E402
from quote_probe.routes import build_routes  # noqa: E402
from quote_probe.types import Protocol, Token  # noqa: E402

WBNB = Token("WBNB", "0x" + "bb" * 20, 18)
USDT = Token("USDT", "0x" + "55" * 20, 18)
USDC = Token("USDC", "0x" + "8a" * 20, 18)
BUSD = Token("BUSD", "0x" + "e9" * 20, 18)

FEE_TIERS = {"USDT/WBNB": 100, "WBNB/USDT": 500}


class ScriptedAdapter(QuoteAdapter):
    """
    Quote adapter answering from a script keyed by (symbol_in, symbol_out).

    A script value may be an int (fixed output), a callable taking the input
    amount, or an exception instance to raise.
    """

    def __init__(self, protocol: Protocol, script=None, default=None):
        super().__init__(web3=None)
        self.protocol = protocol
        self.script = dict(script or {})
        self.default = default
        self.calls = []

    async def quote(self, amount_in, leg):
        key = (leg.token_in.symbol, leg.token_out.symbol)
        self.calls.append((amount_in, tuple(t.symbol for t in leg.path), leg.fee))
        answer = self.script.get(key, self.default)
        if answer is None:
            raise QuoteFailed(
                f"{self.protocol.value} quote failed: no liquidity for {key}",
                protocol=self.protocol.value,
            )
        if isinstance(answer, Exception):
            raise answer
        if callable(answer):
            return answer(amount_in)
        return answer


def make_adapters(v2=None, v3=None, stable=None, default=None):
    return {
        Protocol.V2: ScriptedAdapter(Protocol.V2, v2, default),
        Protocol.V3: ScriptedAdapter(Protocol.V3, v3, default),
        Protocol.STABLE: ScriptedAdapter(Protocol.STABLE, stable, default),
    }


@pytest.fixture
def routes():
    return build_routes(WBNB, USDT, USDC, BUSD, FEE_TIERS)


@pytest.fixture
def config_dict(tmp_path):
    return {
        "rpc_url": "https://bsc-dataseed.binance.org",
        "addresses": {
            "v2_router": "0x10ED43C718714eb63d5aA57B78B54704E256024E",
            "v3_quoter": "0xB048Bbc1Ee6b733FFfCFb9e9CeF7375518e25997",
            "stable_pool": "0x312Bc7eAAF93f1C60Dc5AfC115FcCDE161055fb0",
        },
        "tokens": {
            "WBNB": {"address": WBNB.address, "decimals": 18},
            "USDT": {"address": USDT.address, "decimals": 18},
            "USDC": {"address": USDC.address, "decimals": 18},
            "BUSD": {"address": BUSD.address, "decimals": 18},
        },
        "v3_fee_tiers": dict(FEE_TIERS),
        "gas_estimates": {"v2_swap": 100000, "v3_swap": 150000, "stable_swap": 120000},
        "flashloan_fee_bps": 9,
        "sizes": ["0.01", "0.1"],
        "poll_interval_ms": 0,
        "output_csv": str(tmp_path / "probe_ops.csv"),
    }
