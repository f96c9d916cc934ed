"""
Formatting helpers for presenting unbounded counters.
"""
from decimal import Decimal

_SUFFIXES = [
    (10 ** 12, "T"),
    (10 ** 9, "B"),
    (10 ** 6, "M"),
    (10 ** 3, "K"),
]

# Beyond this, suffixes stop being readable
SCIENTIFIC_THRESHOLD = 10 ** 15


def format_count(value: int) -> str:
    """
    Format a kill count for display.

    Examples:
        950 -> "950"
        1234 -> "1.23K"
        5_600_000 -> "5.60M"
        10**20 -> "1.00E+20"
    """
    value = int(value)
    if value >= SCIENTIFIC_THRESHOLD:
        return f"{Decimal(value):.2E}"

    for threshold, suffix in _SUFFIXES:
        if value >= threshold:
            return f"{Decimal(value) / threshold:.2f}{suffix}"

    return f"{value:,}"


def format_rate_per_minute(rate_per_second: float) -> str:
    """Format a per-second rate as kills per minute, e.g. "1.000/min"."""
    return f"{rate_per_second * 60:.3f}/min"


def format_seconds(seconds) -> str:
    """Format time to the next kill, e.g. "12.5s"."""
    if seconds is None:
        return "--"
    return f"{seconds:.1f}s"
