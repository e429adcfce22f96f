"""Ordering registry and factory."""

from __future__ import annotations

from collections.abc import Callable

from .base import PriorityOrdering
from .edf import EDFOrdering
from .rm import RMOrdering


OrderingFactory = Callable[..., PriorityOrdering]


_REGISTRY: dict[str, OrderingFactory] = {
    "edf": lambda params=None: EDFOrdering(params=params),
    "earliest_deadline_first": lambda params=None: EDFOrdering(params=params),
    "rm": lambda params=None: RMOrdering(params=params),
    "rms": lambda params=None: RMOrdering(params=params),
    "rate_monotonic": lambda params=None: RMOrdering(params=params),
}


def register_ordering(name: str, factory: OrderingFactory) -> None:
    _REGISTRY[name.lower()] = factory


def available_orderings() -> list[str]:
    return sorted(_REGISTRY)


def create_ordering(name: str, params: dict | None = None) -> PriorityOrdering:
    key = name.lower().strip()
    if key not in _REGISTRY:
        raise ValueError(f"unknown scheduler {name}")
    factory = _REGISTRY[key]
    try:
        return factory(params or {})
    except TypeError:
        return factory()
