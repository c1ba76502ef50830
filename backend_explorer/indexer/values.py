"""
Coercion of raw indexer cell values into chain identifiers and quantities.

Indexer cells arrive as str, int, or null. Quantities may be decimal or
0x-prefixed hex text. Addresses are returned lowercase.
Request input that fails validation raises ValidationError; upstream cells
that fail raise DataIntegrityError.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any

from backend_explorer.core.exceptions import DataIntegrityError, ValidationError

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")
_HEX_RE = re.compile(r"^0x[0-9a-fA-F]*$")


def normalize_address(value: Any, field: str = "address") -> str:
    """Validate request input as a 20-byte hex address; return it lowercase."""
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    value = value.strip()
    if not _ADDRESS_RE.match(value):
        raise ValidationError(f"Invalid {field}: {value!r}")
    return value.lower()


def to_int(value: Any) -> int:
    """Parse an indexer quantity cell. Null and empty text are 0."""
    if value is None:
        return 0
    if isinstance(value, bool):
        raise ValueError("boolean is not a quantity")
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if text == "":
        return 0
    if text.lower().startswith("0x"):
        return int(text, 16)
    return int(text)


def to_quantity_hex(value: Any, fallback: int = 0) -> str:
    """JSON-RPC quantity encoding: minimal hex, 0x0 for zero."""
    if value is None:
        return hex(fallback)
    return hex(to_int(value))


def to_hex_data(value: Any) -> str:
    """Hex data cell (input, hash); empty or missing becomes "0x"."""
    if not isinstance(value, str) or len(value) == 0:
        return "0x"
    if not _HEX_RE.match(value):
        raise DataIntegrityError(f"Malformed hex data from indexer: {value[:18]!r}")
    return value.lower()


def to_address_value(value: Any) -> str | None:
    """Address cell; empty or missing becomes None (e.g. contract creation has no recipient)."""
    if not isinstance(value, str) or len(value) == 0:
        return None
    if not _ADDRESS_RE.match(value):
        raise DataIntegrityError(f"Malformed address from indexer: {value!r}")
    return value.lower()


def parse_pg_timestamp(timestamptz: str) -> int:
    """
    Parse Postgres timestamp text ("2025-11-11 9:30:45.123456") as UTC; return unix seconds.

    Fractional seconds are dropped. Raises ValueError("Invalid timestamp format ...").
    """
    parts = timestamptz.strip().split(" ", 1)
    if len(parts) != 2 or not parts[1]:
        raise ValueError("Invalid timestamp format (missing time)")
    pg_date, pg_time = parts
    clock = pg_time.split(".", 1)[0]
    pieces = clock.split(":")
    if len(pieces) != 3:
        raise ValueError("Invalid timestamp format (invalid time)")
    h, m, s = pieces
    try:
        parsed = datetime.strptime(
            f"{pg_date}T{h.zfill(2)}:{m}:{s}", "%Y-%m-%dT%H:%M:%S"
        ).replace(tzinfo=timezone.utc)
    except ValueError as e:
        raise ValueError("Invalid timestamp format (could not parse)") from e
    return int(parsed.timestamp())


def to_unix_seconds(value: Any) -> int | None:
    """Block timestamp cell: unix seconds (int/decimal text) or Postgres timestamp text."""
    if value is None or value == "":
        return None
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    text = str(value).strip()
    if text.isdigit():
        return int(text)
    return parse_pg_timestamp(text)
