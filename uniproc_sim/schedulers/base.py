"""Priority ordering interfaces and base classes."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from uniproc_sim.model import TaskState


class PriorityOrdering(ABC):
    """Compare ready tasks by a policy-specific key.

    Tasks are addressed by their index into the engine-owned task list.
    Lower key = higher priority; equal keys fall back to the lower task id,
    then the lower index, so the order is total and reproducible.
    """

    name = "base"

    def __init__(self, params: dict | None = None) -> None:
        self._params = dict(params or {})
        self._tasks: Sequence[TaskState] = ()

    def bind(self, tasks: Sequence[TaskState]) -> None:
        """Attach the task arena that indices refer to."""

        self._tasks = tasks

    @abstractmethod
    def priority_key(self, task: TaskState) -> int:
        """Return the policy key for one task. Lower value = higher priority."""

    def sort_key(self, index: int) -> tuple:
        task = self._tasks[index]
        return (self.priority_key(task), task.id, index)

    def higher_priority(self, lhs: int, rhs: int) -> bool:
        """Total order used by the ready queue."""

        return self.sort_key(lhs) < self.sort_key(rhs)

    def should_preempt(self, challenger: int, incumbent: int) -> bool:
        """Only a strictly smaller policy key displaces the running task."""

        return self.priority_key(self._tasks[challenger]) < self.priority_key(self._tasks[incumbent])
