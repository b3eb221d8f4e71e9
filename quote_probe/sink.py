"""
Append-only CSV sink: one row per route attempt per cycle.

Free-text fields are sanitized before writing so an RPC error message can
never add columns or rows.
"""

import csv
from pathlib import Path
from typing import Dict, List, Union

from .types import RouteOutcome, ScoredResult
from .utils import now_iso

CSV_HEADERS = [
    "timestamp",
    "routeType",
    "size",
    "legs",
    "in",
    "out",
    "pnl",
    "bps",
    "gasCost",
    "flashFee",
    "netPnl",
    "note",
]

MAX_NOTE_CHARS = 160


def escape_field(text: str) -> str:
    """Replace the field separator and line breaks in free text."""
    return (text or "").replace(",", ";").replace("\r", " ").replace("\n", " ")


def sanitize_note(text: str, max_chars: int = MAX_NOTE_CHARS) -> str:
    """Escape separators in a free-text message and cap its length."""
    return escape_field(text)[:max_chars]


def success_row(result: ScoredResult, timestamp: str = None) -> Dict[str, str]:
    outcome = result.outcome
    return {
        "timestamp": timestamp or now_iso(),
        "routeType": outcome.route_type.value,
        "size": result.size,
        "legs": escape_field(outcome.legs),
        "in": str(outcome.amount_in),
        "out": str(outcome.amount_out),
        "pnl": str(result.raw_profit),
        "bps": str(result.bps),
        "gasCost": str(result.gas_cost),
        "flashFee": str(result.flash_fee),
        "netPnl": str(result.net_profit),
        "note": "",
    }


def failure_row(
    outcome: RouteOutcome, size: str, timestamp: str = None
) -> Dict[str, str]:
    route = outcome.route_type.value
    return {
        "timestamp": timestamp or now_iso(),
        "routeType": route,
        "size": size,
        "legs": "",
        "in": "0",
        "out": "0",
        "pnl": "0",
        "bps": "0",
        "gasCost": "0",
        "flashFee": "0",
        "netPnl": "0",
        "note": f"ERR {route}: {sanitize_note(outcome.error or 'unknown error')}",
    }


class CsvRowSink:
    """
    Append-only CSV file.

    The header is written once, when the file is missing or empty at
    startup. Every append opens, writes and closes the file so rows survive
    an abrupt exit.
    """

    def __init__(self, path: Union[str, Path], headers: List[str] = None):
        self.path = Path(path)
        self.headers = headers or CSV_HEADERS
        self.rows_written = 0

    def ensure_header(self) -> bool:
        """Write the header row if the file is missing or empty."""
        if self.path.exists() and self.path.stat().st_size > 0:
            return False
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "a", newline="", encoding="utf-8") as f:
            csv.writer(f).writerow(self.headers)
        return True

    def append(self, row: Dict[str, str]) -> None:
        with open(self.path, "a", newline="", encoding="utf-8") as f:
            csv.writer(f).writerow([row.get(h, "") for h in self.headers])
        self.rows_written += 1
