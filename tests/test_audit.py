from __future__ import annotations

from uniproc_sim.analysis import build_audit_report
from uniproc_sim.core import TickEngine
from uniproc_sim.model import ModelSpec


def _event(seq: int, event_type: str, time: int, task_id: int | None = None, job_id: str | None = None, **payload):
    return {
        "event_id": f"e{seq}",
        "seq": seq,
        "time": time,
        "type": event_type,
        "task_id": task_id,
        "job_id": job_id,
        "payload": payload,
    }


def test_audit_passes_for_engine_trace() -> None:
    engine = TickEngine()
    engine.build(ModelSpec.from_triples([(1, 5, 3), (2, 8, 3)], scheduler="rm"))
    engine.run()
    events = [event.model_dump(mode="json") for event in engine.events]

    report = build_audit_report(events, wcet_by_task={1: 3, 2: 3})
    assert report["status"] == "pass"
    assert report["issue_count"] == 0
    assert set(report["checks"]) == {
        "single_running_per_tick",
        "preemption_precedes_running",
        "completion_follows_running",
        "remaining_non_negative",
        "completion_conserves_wcet",
    }


def test_audit_detects_two_tasks_in_one_tick() -> None:
    events = [
        _event(0, "Running", 0, 1, "1@0", remaining=0),
        _event(1, "Running", 0, 2, "2@0", remaining=0),
    ]
    report = build_audit_report(events)
    assert report["status"] == "fail"
    assert any(issue["rule"] == "single_running_per_tick" for issue in report["issues"])


def test_audit_detects_detached_preemption() -> None:
    events = [
        _event(0, "Preemption", 5, 1, "1@1"),
        _event(1, "Running", 5, 2, "2@0", remaining=1),
    ]
    report = build_audit_report(events)
    assert report["checks"]["preemption_precedes_running"]["passed"] is False


def test_audit_detects_wcet_mismatch_and_orphan_completion() -> None:
    events = [
        _event(0, "Running", 0, 1, "1@0", remaining=0),
        _event(1, "Completion", 0, 1, "1@0"),
        _event(2, "Completion", 1, 2, "2@0"),
        _event(3, "Running", 2, 3, "3@0", remaining=-1),
    ]
    report = build_audit_report(events, wcet_by_task={"1": 2, "2": 1})
    failed = {issue["rule"] for issue in report["issues"]}
    assert failed == {
        "completion_follows_running",
        "completion_conserves_wcet",
        "remaining_non_negative",
    }
