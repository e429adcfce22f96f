"""Earliest deadline first ordering."""

from __future__ import annotations

from uniproc_sim.model import TaskState

from .base import PriorityOrdering


class EDFOrdering(PriorityOrdering):
    """Dynamic priority from the live job's absolute deadline."""

    name = "edf"

    def priority_key(self, task: TaskState) -> int:
        return task.deadline
