"""Small numeric helpers shared by the scoring stages."""

from __future__ import annotations

import math


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up."""
    return int(math.floor(value + 0.5))


def to_percent(value: float) -> int:
    return round_half_up(clamp(value))
