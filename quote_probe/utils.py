"""
Common helpers: logging, timestamps and fixed-point unit conversion.

Unit conversion works on plain ints (smallest on-chain unit). Decimal is only
used to parse configured decimal strings, never for profit math.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

PACKAGE_LOGGER = "quote_probe"


# Timestamp utilities
def now_iso() -> str:
    """Current UTC time as ISO 8601 with millisecond precision and a Z suffix."""
    return (
        datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace(
            "+00:00", "Z"
        )
    )


# Logging utilities
def get_logger(
    name: str,
    level: Optional[Union[str, int]] = None,
    minimal: bool = False,
) -> logging.Logger:
    """
    Get a logger with the probe's structured formatting.

    Module loggers (``quote_probe.*``) propagate to the package logger, which
    owns the single stream handler. That keeps one line per record whether or
    not the CLI has configured the root logger.

    Args:
        name: Logger name (typically __name__)
        level: Optional logging level to set on this logger
        minimal: If True, use simplified format (time + message only)

    Returns:
        Configured logger
    """
    package = logging.getLogger(PACKAGE_LOGGER)
    if not package.handlers:
        handler = logging.StreamHandler()
        if minimal:
            format_str = "%(asctime)s | %(message)s"
        else:
            format_str = (
                "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | " "%(message)s"
            )
        handler.setFormatter(logging.Formatter(format_str, datefmt="%H:%M:%S"))
        package.addHandler(handler)
        package.propagate = False
        if package.level == logging.NOTSET:
            package.setLevel(logging.INFO)

    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)
    return logger


# Fixed-point unit conversion
def parse_units(value: Union[str, int, Decimal], decimals: int) -> int:
    """
    Convert a human decimal amount to the smallest on-chain unit.

    Args:
        value: Decimal string such as "0.05"
        decimals: Token decimals

    Returns:
        Integer amount in smallest units

    Raises:
        ValueError: If value is not a number, is negative, or has more
            fractional digits than the token supports
    """
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation as e:
        raise ValueError(f"Invalid decimal amount: {value!r}") from e

    if not amount.is_finite() or amount < 0:
        raise ValueError(f"Amount must be a finite non-negative number: {value!r}")

    scaled = amount.scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise ValueError(f"Amount {value!r} has more than {decimals} decimals")
    return int(scaled)


def format_units(value: int, decimals: int, max_dp: int = 8) -> str:
    """
    Render a signed smallest-unit amount as a decimal string.

    The fractional part is truncated (never rounded) to ``max_dp`` digits.
    Whole numbers keep one fractional zero ("1.0").

    Examples:
        >>> format_units(1_500_000_000_000_000_000, 18)
        '1.5'
        >>> format_units(123456789012, 18)
        '0.00000012'
        >>> format_units(-10**18, 18)
        '-1.0'
    """
    if value is None:
        return "0"

    sign = "-" if value < 0 else ""
    whole, frac = divmod(abs(int(value)), 10**decimals)

    if decimals == 0:
        frac_str = "0"
    else:
        frac_str = str(frac).rjust(decimals, "0").rstrip("0") or "0"

    if max_dp == 0:
        return f"{sign}{whole}"
    return f"{sign}{whole}.{frac_str[:max_dp]}"
