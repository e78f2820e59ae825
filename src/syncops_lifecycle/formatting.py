"""Display formatters used in simulation output and the CLI."""

from __future__ import annotations

import re

_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB", "PB")
_CURRENCY_RE = re.compile(r"^\s*(-)?\s*\$?\s*(-)?([\d,]*\.?\d*)\s*$")


def format_storage_file_size(size_bytes: float) -> str:
    """Format a byte count with binary units, e.g. ``1.5 GB``."""

    if size_bytes <= 0:
        return "0 B"

    unit = 0
    value = float(size_bytes)
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1

    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {_SIZE_UNITS[unit]}"


def format_storage_currency(amount: float) -> str:
    """Format a USD amount, e.g. ``$1,234.56`` or ``-$3.10``.

    Amounts below one dollar keep four decimals so per-GB tier prices stay
    readable; other amounts are rounded to cents.
    """

    decimals = 4 if 0 < abs(amount) < 1 else 2
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.{decimals}f}"


def parse_storage_currency(text: str) -> float:
    """Parse a string produced by format_storage_currency back into a float.

    The round trip is exact only for amounts the format can show: cents, or
    four decimals below one dollar. ``1234.5678`` formats as ``$1,234.57`` and
    parses back as ``1234.57``.

    Raises:
        ValueError: If the text is not a currency amount.
    """

    match = _CURRENCY_RE.match(text)
    if not match or not match.group(3) or match.group(3) in {".", ","}:
        raise ValueError(f"Not a currency amount: {text!r}")
    value = float(match.group(3).replace(",", ""))
    if match.group(1) or match.group(2):
        value = -value
    return value
