"""Simulation core exports."""

from .engine import TickEngine
from .interfaces import ISimEngine
from .ready import ReadyQueue
from .timing import hyper_period

__all__ = ["ISimEngine", "ReadyQueue", "TickEngine", "hyper_period"]
