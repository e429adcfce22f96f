"""Model package exports."""

from .runtime import TaskState
from .spec import ModelSpec, SchedulerSpec, SimSpec, TaskSpec

__all__ = [
    "ModelSpec",
    "SchedulerSpec",
    "SimSpec",
    "TaskSpec",
    "TaskState",
]
