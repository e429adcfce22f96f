"""Schedulers package exports."""

from .base import PriorityOrdering
from .edf import EDFOrdering
from .registry import available_orderings, create_ordering, register_ordering
from .rm import RMOrdering

__all__ = [
    "EDFOrdering",
    "PriorityOrdering",
    "RMOrdering",
    "available_orderings",
    "create_ordering",
    "register_ordering",
]
