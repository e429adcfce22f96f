"""Simulation engine interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable

from uniproc_sim.events import SimEvent
from uniproc_sim.model import ModelSpec


class ISimEngine(ABC):
    """Simulation engine contract."""

    @abstractmethod
    def build(self, spec: ModelSpec) -> None:
        """Build internal runtime state from model spec."""

    @abstractmethod
    def run(self, until: int | None = None) -> None:
        """Run simulation until horizon."""

    @abstractmethod
    def step(self) -> None:
        """Run exactly one tick."""

    @abstractmethod
    def reset(self) -> None:
        """Reset engine state."""

    @abstractmethod
    def subscribe(self, handler: Callable[[SimEvent], None]) -> None:
        """Subscribe event handler."""
