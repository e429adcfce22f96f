"""Post-simulation audit checks for trace correctness."""

from __future__ import annotations

from collections import defaultdict
from typing import Any


def _issue(rule: str, message: str, **extra: Any) -> dict[str, Any]:
    return {"rule": rule, "severity": "error", "message": message, **extra}


def _check_single_running(events: list[dict[str, Any]]) -> list[dict[str, Any]]:
    occupants: defaultdict[Any, list[Any]] = defaultdict(list)
    for event in events:
        event_type = event.get("type")
        if event_type == "Running":
            occupants[event.get("time")].append(event.get("task_id"))
        elif event_type == "Idle":
            occupants[event.get("time")].append(None)
    samples = [
        {"time": time, "occupants": tasks}
        for time, tasks in sorted(occupants.items(), key=lambda item: item[0])
        if len(tasks) > 1
    ]
    if not samples:
        return []
    return [
        _issue(
            "single_running_per_tick",
            "more than one Running/Idle record in the same tick",
            samples=samples[:20],
        )
    ]


def _check_preemption_order(events: list[dict[str, Any]]) -> list[dict[str, Any]]:
    samples: list[dict[str, Any]] = []
    for position, event in enumerate(events):
        if event.get("type") != "Preemption":
            continue
        following = events[position + 1] if position + 1 < len(events) else None
        if (
            following is None
            or following.get("type") != "Running"
            or following.get("time") != event.get("time")
            or following.get("task_id") != event.get("task_id")
        ):
            samples.append({"event_id": event.get("event_id"), "time": event.get("time")})
    if not samples:
        return []
    return [
        _issue(
            "preemption_precedes_running",
            "Preemption must be immediately followed by Running of the same task",
            samples=samples[:20],
        )
    ]


def _check_completion_order(events: list[dict[str, Any]]) -> list[dict[str, Any]]:
    ran_at: set[tuple[Any, Any]] = set()
    samples: list[dict[str, Any]] = []
    for event in events:
        event_type = event.get("type")
        key = (event.get("time"), event.get("job_id"))
        if event_type == "Running":
            ran_at.add(key)
        elif event_type == "Completion" and key not in ran_at:
            samples.append({"event_id": event.get("event_id"), "job_id": event.get("job_id")})
    if not samples:
        return []
    return [
        _issue(
            "completion_follows_running",
            "Completion without a Running record for the same job in that tick",
            samples=samples[:20],
        )
    ]


def _check_remaining(events: list[dict[str, Any]]) -> list[dict[str, Any]]:
    samples = []
    for event in events:
        if event.get("type") != "Running":
            continue
        payload = event.get("payload", {})
        remaining = payload.get("remaining") if isinstance(payload, dict) else None
        if isinstance(remaining, int) and remaining < 0:
            samples.append({"event_id": event.get("event_id"), "remaining": remaining})
    if not samples:
        return []
    return [_issue("remaining_non_negative", "remaining execution went negative", samples=samples[:20])]


def _check_conservation(
    events: list[dict[str, Any]],
    wcet_by_task: dict[Any, int],
) -> list[dict[str, Any]]:
    served: defaultdict[str, int] = defaultdict(int)
    completed: dict[str, Any] = {}
    for event in events:
        job_id = event.get("job_id")
        if not isinstance(job_id, str):
            continue
        if event.get("type") == "Running":
            served[job_id] += 1
        elif event.get("type") == "Completion":
            completed[job_id] = event.get("task_id")

    samples = []
    for job_id, task_id in sorted(completed.items()):
        expected = wcet_by_task.get(task_id)
        if expected is None:
            expected = wcet_by_task.get(str(task_id))
        if expected is not None and served[job_id] != expected:
            samples.append({"job_id": job_id, "served": served[job_id], "wcet": expected})
    if not samples:
        return []
    return [
        _issue(
            "completion_conserves_wcet",
            "completed job received a service amount different from its wcet",
            samples=samples[:20],
        )
    ]


def build_audit_report(
    events: list[dict[str, Any]],
    *,
    wcet_by_task: dict[Any, int] | None = None,
) -> dict[str, Any]:
    """Check a serialized event trace against the engine's ordering rules."""

    ordered = sorted(events, key=lambda event: event.get("seq", 0))
    issues: list[dict[str, Any]] = []
    checks: dict[str, Any] = {}

    rules = [
        ("single_running_per_tick", _check_single_running),
        ("preemption_precedes_running", _check_preemption_order),
        ("completion_follows_running", _check_completion_order),
        ("remaining_non_negative", _check_remaining),
    ]
    for rule, check in rules:
        found = check(ordered)
        issues.extend(found)
        checks[rule] = {"passed": not found}

    if wcet_by_task is not None:
        found = _check_conservation(ordered, wcet_by_task)
        issues.extend(found)
        checks["completion_conserves_wcet"] = {"passed": not found}

    return {
        "status": "pass" if not issues else "fail",
        "issue_count": len(issues),
        "issues": issues,
        "checks": checks,
    }
