"""Simulation horizon helpers."""

from __future__ import annotations

from collections.abc import Iterable
from math import gcd


def _lcm(a: int, b: int) -> int:
    return a * b // gcd(a, b)


def hyper_period(periods: Iterable[int]) -> int:
    """Least common multiple of all task periods."""

    result = 1
    seen = False
    for period in periods:
        if period <= 0:
            raise ValueError(f"period must be > 0, got {period}")
        result = _lcm(result, period)
        seen = True
    if not seen:
        raise ValueError("hyper period of an empty taskset is undefined")
    return result
