"""Rate-monotonic ordering."""

from __future__ import annotations

from uniproc_sim.model import TaskState

from .base import PriorityOrdering


class RMOrdering(PriorityOrdering):
    """Fixed priority derived from task period."""

    name = "rm"

    def priority_key(self, task: TaskState) -> int:
        return task.period
