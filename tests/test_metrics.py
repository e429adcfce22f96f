from __future__ import annotations

import pytest

from uniproc_sim.events import EventBus, EventType
from uniproc_sim.metrics import CoreMetrics


def _feed(metrics: CoreMetrics, *records: tuple) -> None:
    bus = EventBus()
    bus.subscribe(metrics.consume)
    for event_type, time, task_id, job_id, payload in records:
        bus.publish(event_type=event_type, time=time, task_id=task_id, job_id=job_id, payload=payload)


def test_response_time_and_lateness() -> None:
    metrics = CoreMetrics()
    _feed(
        metrics,
        (EventType.ARRIVAL, 0, 1, "1@0", {"absolute_deadline": 2}),
        (EventType.RUNNING, 0, 1, "1@0", {"remaining": 1}),
        (EventType.IDLE, 1, None, None, None),
        (EventType.RUNNING, 2, 1, "1@0", {"remaining": 0}),
        (EventType.COMPLETION, 2, 1, "1@0", {"met_deadline": False, "lateness": 1}),
    )
    report = metrics.report()
    assert report["jobs_released"] == 1
    assert report["jobs_completed"] == 1
    assert report["avg_response_time"] == pytest.approx(3.0)
    assert report["avg_lateness"] == pytest.approx(1.0)
    assert report["deadline_miss_count"] == 1
    assert report["busy_ticks"] == 2
    assert report["idle_ticks"] == 1
    assert report["cpu_utilization"] == pytest.approx(2 / 3)
    assert report["per_task"]["1"]["max_response_time"] == 3


def test_miss_and_abort_count_distinct_jobs() -> None:
    metrics = CoreMetrics()
    _feed(
        metrics,
        (EventType.ARRIVAL, 0, 2, "2@0", {"absolute_deadline": 4}),
        (EventType.DEADLINE_MISS, 4, 2, "2@0", {}),
        (EventType.DEADLINE_MISS, 5, 2, "2@0", {}),
        (EventType.JOB_ABORT, 5, 2, "2@0", {}),
        (EventType.PREEMPTION, 5, 1, "1@1", {}),
    )
    report = metrics.report()
    assert report["deadline_miss_count"] == 1
    assert report["deadline_miss_ratio"] == pytest.approx(1.0)
    assert report["jobs_aborted"] == 1
    assert report["preempt_count"] == 1
    assert report["max_time"] == 5
    assert report["event_count"] == 5


def test_reset_clears_counters() -> None:
    metrics = CoreMetrics()
    _feed(metrics, (EventType.IDLE, 0, None, None, None))
    metrics.reset()
    report = metrics.report()
    assert report["event_count"] == 0
    assert report["cpu_utilization"] == 0.0
