"""Metric comparison helpers for two simulation runs."""

from __future__ import annotations

from typing import Any


DEFAULT_SCALAR_KEYS: tuple[str, ...] = (
    "jobs_released",
    "jobs_completed",
    "jobs_aborted",
    "deadline_miss_count",
    "deadline_miss_ratio",
    "avg_response_time",
    "max_response_time",
    "avg_lateness",
    "preempt_count",
    "idle_ticks",
    "cpu_utilization",
    "event_count",
)


def _to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _diff_row(left_value: float, right_value: float) -> dict[str, float]:
    delta = right_value - left_value
    delta_ratio = (delta / left_value * 100.0) if abs(left_value) > 1e-12 else 0.0
    return {"left": left_value, "right": right_value, "delta": delta, "delta_ratio_pct": delta_ratio}


def _build_scalar_rows(
    left: dict[str, Any],
    right: dict[str, Any],
    *,
    keys: tuple[str, ...],
) -> list[dict[str, Any]]:
    return [
        {"metric": key, **_diff_row(_to_float(left.get(key)), _to_float(right.get(key)))}
        for key in keys
    ]


def _build_task_rows(left: dict[str, Any], right: dict[str, Any]) -> list[dict[str, Any]]:
    left_tasks = left.get("per_task")
    right_tasks = right.get("per_task")
    left_map = left_tasks if isinstance(left_tasks, dict) else {}
    right_map = right_tasks if isinstance(right_tasks, dict) else {}
    rows: list[dict[str, Any]] = []
    for task_id in sorted(set(left_map) | set(right_map), key=str):
        left_stats = left_map.get(task_id) or {}
        right_stats = right_map.get(task_id) or {}
        rows.append(
            {
                "task_id": str(task_id),
                **_diff_row(
                    _to_float(left_stats.get("max_response_time")),
                    _to_float(right_stats.get("max_response_time")),
                ),
            }
        )
    return rows


def build_compare_report(
    left_metrics: dict[str, Any],
    right_metrics: dict[str, Any],
    *,
    left_label: str = "left",
    right_label: str = "right",
    scalar_keys: tuple[str, ...] = DEFAULT_SCALAR_KEYS,
) -> dict[str, Any]:
    """Build a deterministic metric diff report for two runs."""

    return {
        "left_label": left_label,
        "right_label": right_label,
        "scalar_metrics": _build_scalar_rows(left_metrics, right_metrics, keys=scalar_keys),
        "task_max_response_time": _build_task_rows(left_metrics, right_metrics),
    }


def compare_report_to_rows(report: dict[str, Any]) -> list[dict[str, Any]]:
    """Flatten compare report to CSV-friendly rows."""

    rows: list[dict[str, Any]] = []
    for item in report.get("scalar_metrics", []):
        if not isinstance(item, dict):
            continue
        rows.append({"category": "scalar", **item})
    for item in report.get("task_max_response_time", []):
        if not isinstance(item, dict):
            continue
        rows.append({"category": "task_max_response_time", "metric": item.get("task_id", ""), **item})
    return rows
