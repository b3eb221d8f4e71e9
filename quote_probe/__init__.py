"""
quote-probe: read-only DEX route probe.

Quotes cross-version, single-DEX triangle and stable-hop triangle routes on
every poll, scores them against gas and flash-loan costs, and appends one
CSV row per route attempt.
"""

from .config import ProbeConfig, load_config
from .exceptions import ConfigInvalid, ProbeError, QuoteFailed, TransportUnavailable
from .runner import ProbeRunner

__version__ = "0.1.0"

__all__ = [
    "ConfigInvalid",
    "ProbeConfig",
    "ProbeError",
    "ProbeRunner",
    "QuoteFailed",
    "TransportUnavailable",
    "load_config",
]
