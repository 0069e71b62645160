"""
Network measurement statistics and human-readable formatting.

Pure functions -- no I/O, no side effects.  ``None`` means "undefined for
this input" and is never replaced by a sentinel number.
"""
from __future__ import annotations

import math
import statistics
from typing import Optional, Sequence

from .constants import PRETTY_DIGITS, SPEED_PERCENTILE
from .errors import EmptyInputError, PercentileRangeError


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------

def calculate_median(samples: Sequence[float]) -> Optional[float]:
    """Middle value; mean of the two middle values for even counts."""
    if not samples:
        return None
    ordered = sorted(samples)
    n = len(ordered)
    mid = n // 2
    if n % 2:
        return float(ordered[mid])
    return (ordered[mid - 1] + ordered[mid]) / 2


def calculate_percentile(
    samples: Sequence[float],
    percentile: float = SPEED_PERCENTILE,
) -> float:
    """Linear-interpolation percentile, *percentile* in ``[0, 1]``.

    Unlike the other helpers this one is not ``None``-tolerant: callers
    must guard against an empty selection themselves.
    """
    if not samples:
        raise EmptyInputError("cannot take a percentile of an empty sequence")
    if not 0 <= percentile <= 1:
        raise PercentileRangeError(
            f"percentile must be between 0 and 1, got {percentile}"
        )

    ordered = sorted(samples)
    pos = percentile * (len(ordered) - 1)
    lower = math.floor(pos)
    upper = math.ceil(pos)
    if lower == upper:
        return float(ordered[lower])
    return ordered[lower] + (pos - lower) * (ordered[upper] - ordered[lower])


def calculate_jitter(samples: Sequence[float]) -> Optional[float]:
    """Mean absolute difference between consecutive samples.

    Samples are taken in execution order, not sorted: jitter describes how
    much temporally adjacent probes disagree.
    """
    if len(samples) < 2:
        return None
    diffs = [abs(a - b) for a, b in zip(samples, samples[1:])]
    return statistics.mean(diffs)


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

BPS_UNITS = ("bps", "kbps", "Mbps", "Gbps")
MS_UNITS = ("ms", "s")


def format_pretty(
    value: Optional[float],
    units: Sequence[str],
    digits: int = PRETTY_DIGITS,
) -> str:
    """Scale *value* by powers of 1000 and append the matching unit.

    ``None`` renders like zero.  The magnitude is clamped to the ladder, so
    values above the last unit stay in that unit and values below one stay
    in the first.
    """
    target = value or 0.0
    mag = 0
    while mag < len(units) - 1 and abs(target) >= 1000 ** (mag + 1):
        mag += 1
    scaled = target / 1000 ** mag
    return f"{scaled:,.{digits}f} {units[mag]}"


def format_bps(value: Optional[float], digits: int = PRETTY_DIGITS) -> str:
    """Human-readable bitrate string."""
    return format_pretty(value, BPS_UNITS, digits)


def format_ms(value: Optional[float], digits: int = PRETTY_DIGITS) -> str:
    """Human-readable duration string from milliseconds."""
    return format_pretty(value, MS_UNITS, digits)
