"""
Logging configuration for cleaner CLI output.

Usage:
    import logging_config
    logging_config.setup()
"""

import logging
import sys

from quote_probe.utils import PACKAGE_LOGGER


def setup(level=logging.INFO):
    """
    Configure logging for readable probe output.

    - Routes third-party records (web3, urllib3) through one stdout handler
    - Uses short HH:MM:SS timestamps
    - Keeps the probe's own loggers at the requested level
    """
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s | %(levelname)-7s | %(message)s", datefmt="%H:%M:%S"
        )
    )
    root.addHandler(console)

    # Suppress noisy loggers
    logging.getLogger("web3").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    logging.getLogger("__main__").setLevel(level)
    logging.getLogger(PACKAGE_LOGGER).setLevel(level)


def setup_debug():
    """Verbose logging, including per-leg quote failures and web3 requests."""
    setup(level=logging.DEBUG)
    logging.getLogger("web3").setLevel(logging.INFO)
