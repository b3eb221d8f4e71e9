#!/usr/bin/env python3
"""
Read-only DEX route probe CLI.

Quotes cross-version, triangle and stable-hop routes every poll interval,
appends one CSV row per route attempt and prints the top 10 by raw PnL.

Usage:
    python3 run_probe.py
    python3 run_probe.py --config configs/probe_bsc.yaml
    python3 run_probe.py --config configs/probe_bsc.yaml --once
"""

import argparse
import asyncio
import logging
import signal
import sys

from dotenv import load_dotenv

import logging_config
from quote_probe.config import load_config
from quote_probe.exceptions import ConfigInvalid, TransportUnavailable
from quote_probe.runner import ProbeRunner
from quote_probe.utils import get_logger, now_iso

logger = get_logger("quote_probe.cli")


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Read-only DEX arbitrage route probe",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run with default config
  python3 run_probe.py

  # Single cycle (for testing/CI)
  python3 run_probe.py --config configs/probe_bsc.yaml --once

  # Override the RPC endpoint
  RPC_HTTP=https://bsc-dataseed1.binance.org python3 run_probe.py
        """,
    )
    parser.add_argument(
        "--config",
        default="configs/probe_bsc.yaml",
        help="Path to config YAML/JSON file (default: configs/probe_bsc.yaml)",
    )
    parser.add_argument(
        "--output",
        default=None,
        help="CSV file for results (overrides output_csv in config)",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single cycle and exit (overrides config setting)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    return parser.parse_args(argv)


async def _run(runner: ProbeRunner) -> None:
    stop_event = asyncio.Event()
    loop = asyncio.get_event_loop()
    try:
        loop.add_signal_handler(signal.SIGTERM, stop_event.set)
    except (NotImplementedError, AttributeError):
        # Windows event loops don't support signal handlers
        pass
    await runner.run(stop_event=stop_event)


def main(argv=None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    args = parse_args(argv)
    load_dotenv()
    if args.log_level == "DEBUG":
        logging_config.setup_debug()
    else:
        logging_config.setup(getattr(logging, args.log_level))

    try:
        config = load_config(args.config)
    except ConfigInvalid as e:
        logger.error(f"FATAL {now_iso()} Config error: {e}")
        return 1

    if args.once:
        config.once = True
    if args.output:
        config.output_csv = args.output

    try:
        runner = ProbeRunner(config)
        runner.connect()
        asyncio.run(_run(runner))
    except KeyboardInterrupt:
        logger.info("Stopped by user")
        return 0
    except TransportUnavailable as e:
        logger.error(f"FATAL {now_iso()} {e}")
        return 1
    except Exception as e:
        logger.error(f"FATAL {now_iso()} {e}", exc_info=True)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
