"""
Exception hierarchy for the quote probe.

Only QuoteFailed is recovered (per route, per size). ConfigInvalid and
TransportUnavailable are fatal at startup.
"""

from typing import Any, Dict, Optional


class ProbeError(Exception):
    """Base exception for all probe errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class QuoteFailed(ProbeError):
    """Raised when a read-only quote call reverts or returns malformed data."""

    def __init__(
        self,
        message: str,
        protocol: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.protocol = protocol


class ConfigInvalid(ProbeError):
    """Raised when config is invalid or missing required fields."""

    pass


class TransportUnavailable(ProbeError):
    """Raised when the RPC endpoint cannot be reached."""

    def __init__(
        self,
        message: str,
        endpoint: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.endpoint = endpoint
