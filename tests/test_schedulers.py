from __future__ import annotations

import pytest

from uniproc_sim.model import TaskSpec, TaskState
from uniproc_sim.schedulers import (
    EDFOrdering,
    PriorityOrdering,
    RMOrdering,
    available_orderings,
    create_ordering,
    register_ordering,
)


def _bound(ordering: PriorityOrdering, *specs: TaskSpec) -> list[TaskState]:
    tasks = [TaskState.from_spec(spec) for spec in specs]
    ordering.bind(tasks)
    return tasks


def test_rm_prefers_shorter_period() -> None:
    ordering = RMOrdering()
    _bound(ordering, TaskSpec(id=1, period=5, wcet=3), TaskSpec(id=2, period=8, wcet=3))
    assert ordering.higher_priority(0, 1)
    assert ordering.should_preempt(0, 1)
    assert not ordering.should_preempt(1, 0)


def test_edf_prefers_earlier_deadline() -> None:
    ordering = EDFOrdering()
    tasks = _bound(ordering, TaskSpec(id=1, period=5, wcet=3), TaskSpec(id=2, period=8, wcet=3))
    tasks[1].release(0)
    tasks[0].next_release_time = 5
    tasks[0].release(5)
    assert tasks[0].deadline == 10
    assert tasks[1].deadline == 8
    assert ordering.higher_priority(1, 0)
    assert not ordering.should_preempt(0, 1)


def test_equal_keys_order_by_id_but_never_preempt() -> None:
    ordering = RMOrdering()
    _bound(ordering, TaskSpec(id=7, period=4, wcet=1), TaskSpec(id=3, period=4, wcet=1))
    assert ordering.higher_priority(1, 0)
    assert not ordering.should_preempt(1, 0)
    assert not ordering.should_preempt(0, 1)


def test_registry_aliases() -> None:
    assert isinstance(create_ordering("RMS"), RMOrdering)
    assert isinstance(create_ordering("rate_monotonic"), RMOrdering)
    assert isinstance(create_ordering(" EDF "), EDFOrdering)
    assert "earliest_deadline_first" in available_orderings()
    with pytest.raises(ValueError):
        create_ordering("round_robin")


def test_register_custom_ordering() -> None:
    class LongestWcetFirst(PriorityOrdering):
        name = "lwf"

        def priority_key(self, task: TaskState) -> int:
            return -task.wcet

    register_ordering("LWF", LongestWcetFirst)
    ordering = create_ordering("lwf")
    _bound(ordering, TaskSpec(id=1, period=9, wcet=1), TaskSpec(id=2, period=9, wcet=4))
    assert ordering.higher_priority(1, 0)
