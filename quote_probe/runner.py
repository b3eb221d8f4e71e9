"""
Main probe runner.

Evaluates every route at every configured size once per cycle, persists one
CSV row per attempt, and prints the top results. Cycles run back to back with
a fixed sleep in between and never overlap.
"""

import asyncio
from typing import Dict, List, Optional

from web3 import Web3

from .adapters import QuoteAdapter, StableSwapQuoter, V2RouterQuoter, V3Quoter
from .config import ProbeConfig
from .costs import estimate_costs, resolve_gas_price
from .exceptions import TransportUnavailable
from .opportunity_math import score_outcome
from .report import report_cycle
from .routes import evaluate_route
from .sink import CsvRowSink, failure_row, success_row
from .types import CycleStats, Protocol, RouteDefinition, ScoredResult
from .utils import format_units, get_logger

logger = get_logger(__name__)

RPC_TIMEOUT_SEC = 20

CHAIN_NAMES = {
    1: "Ethereum Mainnet",
    56: "BSC",
    97: "BSC Testnet",
    137: "Polygon",
    8453: "Base",
    42161: "Arbitrum",
}


class ProbeRunner:
    """
    Read-only route probe.

    Quotes each route leg by leg, scores successes against the gas and
    flash-loan cost model, and ranks the batch every cycle.
    """

    def __init__(
        self,
        config: ProbeConfig,
        sink: Optional[CsvRowSink] = None,
        adapters: Optional[Dict[Protocol, QuoteAdapter]] = None,
        gas_price_wei: Optional[int] = None,
    ):
        """
        Initialize runner with config.

        Args:
            config: Validated ProbeConfig instance
            sink: Row sink (default: CSV at config.output_csv)
            adapters: Quote adapters by protocol; built by connect() if omitted
            gas_price_wei: Gas price snapshot; fetched by connect() if omitted
        """
        self.config = config
        self.sink = sink or CsvRowSink(config.output_csv)
        self.adapters: Dict[Protocol, QuoteAdapter] = dict(adapters or {})
        self.gas_price_wei = gas_price_wei
        self.web3: Optional[Web3] = None

        self.base = config.base_token
        self.routes: List[RouteDefinition] = config.route_definitions()
        self.sizes = config.size_amounts()

        self.cycle_count = 0
        self.last_stats: Optional[CycleStats] = None

    def connect(self) -> None:
        """
        Connect to RPC, snapshot the gas price and build the quote adapters.

        The gas price is read once here and never refreshed.

        Raises:
            TransportUnavailable: If the endpoint can't be queried
        """
        rpc_url = self.config.rpc_url
        logger.info(f"Connecting to RPC: {rpc_url}")

        try:
            self.web3 = Web3(
                Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": RPC_TIMEOUT_SEC})
            )
            # Query the chain directly; is_connected() is unreliable
            chain_id = self.web3.eth.chain_id
            block = self.web3.eth.block_number
            fetched_gas_price = self.web3.eth.gas_price
        except Exception as e:
            raise TransportUnavailable(
                f"RPC endpoint unreachable: {e}", endpoint=rpc_url
            ) from e

        chain_name = CHAIN_NAMES.get(chain_id, f"Chain {chain_id}")
        logger.info(f"Connected to {chain_name} (block #{block:,})")

        self.gas_price_wei = resolve_gas_price(
            fetched_gas_price, self.config.default_gas_price_gwei
        )
        self.adapters = self.build_adapters(self.web3)

    def build_adapters(self, web3: Web3) -> Dict[Protocol, QuoteAdapter]:
        addresses = self.config.addresses
        opts = {"block_identifier": self.config.block_identifier}
        return {
            Protocol.V2: V2RouterQuoter(web3, addresses.v2_router, **opts),
            Protocol.V3: V3Quoter(web3, addresses.v3_quoter, **opts),
            Protocol.STABLE: StableSwapQuoter(
                web3, addresses.stable_pool, label=self.config.stable_pool_label, **opts
            ),
        }

    def print_banner(self) -> None:
        gwei = format_units(self.gas_price_wei or 0, 9, 9)
        logger.info("Probe starting…")
        logger.info(f"RPC: {self.config.rpc_url} | GasPrice: {gwei} gwei")
        logger.info(
            f"Sizes: {', '.join(size for size, _ in self.sizes)} {self.base.symbol} "
            f"| Poll: {self.config.poll_interval_ms} ms"
        )
        logger.info(f"Writing rows to {self.sink.path}")

    async def run_cycle(self) -> List[ScoredResult]:
        """
        Evaluate every route at every size once.

        Routes are evaluated one at a time; each attempt is written to the
        sink before the next route starts.

        Returns:
            Batch of scored successful outcomes
        """
        if self.gas_price_wei is None:
            raise RuntimeError("No gas price snapshot. Call connect() before run_cycle().")

        batch: List[ScoredResult] = []
        stats = CycleStats()

        for size, amount_in in self.sizes:
            for route in self.routes:
                outcome = await evaluate_route(route, amount_in, self.adapters)
                stats.attempts += 1

                if not outcome.ok:
                    stats.failures += 1
                    stats.failed_routes.append(f"{route.route_type.value}@{size}")
                    self.sink.append(failure_row(outcome, size))
                    continue

                costs = estimate_costs(
                    outcome.route_type,
                    outcome.amount_in,
                    self.gas_price_wei,
                    self.config.gas,
                    self.config.flashloan_fee_bps,
                )
                result = score_outcome(outcome, costs, size)
                self.sink.append(success_row(result))
                batch.append(result)
                stats.successes += 1

        self.cycle_count += 1
        self.last_stats = stats
        logger.info(
            f"Cycle {self.cycle_count}: {stats.attempts} attempts, "
            f"{stats.successes} ok, {stats.failures} failed"
        )
        if stats.failed_routes:
            logger.debug(f"Failed routes: {', '.join(stats.failed_routes)}")
        return batch

    async def _sleep(self, stop_event: Optional[asyncio.Event]) -> None:
        if stop_event is None:
            await asyncio.sleep(self.config.poll_sec)
            return
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=self.config.poll_sec)
        except asyncio.TimeoutError:
            pass

    async def run(
        self,
        stop_event: Optional[asyncio.Event] = None,
        max_cycles: Optional[int] = None,
    ) -> None:
        """
        Main loop: cycle, report, sleep.

        Stops between cycles when ``stop_event`` is set, when ``max_cycles``
        cycles have run, or after one cycle if config.once is set. A cycle in
        progress is never interrupted.

        Args:
            stop_event: Cancellation signal checked between cycles
            max_cycles: Optional cap on the number of cycles
        """
        if not self.adapters:
            raise RuntimeError("No quote adapters. Call connect() before run().")
        if self.config.once:
            max_cycles = 1

        self.sink.ensure_header()
        self.print_banner()

        cycles = 0
        while True:
            cycles += 1
            try:
                batch = await self.run_cycle()
                report_cycle(batch, self.base, self.config.top_n)
            except TransportUnavailable:
                raise
            except Exception as e:
                logger.error(f"Cycle {cycles} failed: {e}", exc_info=True)
                if max_cycles is not None:
                    raise

            if max_cycles is not None and cycles >= max_cycles:
                break
            if stop_event is not None and stop_event.is_set():
                break

            await self._sleep(stop_event)

            if stop_event is not None and stop_event.is_set():
                break
