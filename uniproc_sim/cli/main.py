"""CLI entrypoint for simulation and validation."""

from __future__ import annotations

import argparse
import csv
import json
from pathlib import Path
from typing import Any

from uniproc_sim.analysis import build_audit_report, build_compare_report, compare_report_to_rows
from uniproc_sim.core import TickEngine
from uniproc_sim.io import ConfigError, ConfigLoader
from uniproc_sim.model import ModelSpec

from .narration import ConsoleNarrator


def _write_jsonl(path: str, rows: list[dict[str, Any]]) -> None:
    output = Path(path)
    output.parent.mkdir(parents=True, exist_ok=True)
    with output.open("w", encoding="utf-8") as f:
        for row in rows:
            f.write(json.dumps(row, ensure_ascii=False) + "\n")


def _write_json(path: str, payload: dict[str, Any]) -> None:
    output = Path(path)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")


def _write_events_csv(path: str, rows: list[dict[str, Any]]) -> None:
    output = Path(path)
    output.parent.mkdir(parents=True, exist_ok=True)
    fieldnames = ["event_id", "seq", "time", "type", "task_id", "job_id", "payload"]
    with output.open("w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        for row in rows:
            writer.writerow(
                {
                    "event_id": row.get("event_id"),
                    "seq": row.get("seq"),
                    "time": row.get("time"),
                    "type": row.get("type"),
                    "task_id": row.get("task_id"),
                    "job_id": row.get("job_id"),
                    "payload": json.dumps(row.get("payload", {}), ensure_ascii=False),
                }
            )


def _write_rows_csv(path: str, rows: list[dict[str, Any]]) -> None:
    output = Path(path)
    output.parent.mkdir(parents=True, exist_ok=True)
    fieldnames: list[str] = []
    for row in rows:
        for key in row:
            if key not in fieldnames:
                fieldnames.append(key)
    with output.open("w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        writer.writerows(rows)


def _with_overrides(
    spec: ModelSpec,
    *,
    scheduler: str | None = None,
    miss_report: str | None = None,
) -> ModelSpec:
    params = dict(spec.scheduler.params)
    if miss_report is not None:
        params["miss_report"] = miss_report
    name = scheduler if scheduler is not None else spec.scheduler.name
    return spec.model_copy(update={"scheduler": spec.scheduler.model_copy(update={"name": name, "params": params})})


def _simulate(spec: ModelSpec, *, until: int | None = None, narrator: ConsoleNarrator | None = None) -> TickEngine:
    engine = TickEngine()
    if narrator is not None:
        engine.subscribe(narrator)
    engine.build(spec)
    if narrator is not None:
        narrator.banner(engine.scheduler_name)
    engine.run(until=until)
    return engine


def cmd_validate(args: argparse.Namespace) -> int:
    loader = ConfigLoader()
    try:
        spec = loader.load(args.config)
    except ConfigError as exc:
        print(f"[ERROR] {args.config}: {exc}")
        return 1
    try:
        # Scheduler and parameter resolution must pass during validate.
        TickEngine().build(spec)
    except ValueError as exc:
        print(f"[ERROR] {args.config}: {exc}")
        return 1
    print("[OK] config validation passed")
    return 0


def cmd_run(args: argparse.Namespace) -> int:
    loader = ConfigLoader()
    try:
        spec = loader.load(args.config)
    except ConfigError as exc:
        print(f"[ERROR] {exc}")
        return 1

    if args.until is not None and args.until <= 0:
        print("[ERROR] --until must be > 0")
        return 1

    spec = _with_overrides(spec, scheduler=args.scheduler, miss_report=args.miss_report)
    narrator = None if args.quiet else ConsoleNarrator(show_arrivals=args.show_arrivals)
    try:
        engine = _simulate(spec, until=args.until, narrator=narrator)
    except ValueError as exc:
        print(f"[ERROR] {exc}")
        return 1

    events = [event.model_dump(mode="json") for event in engine.events]
    metrics = engine.metric_report()

    events_out = args.events_out or "artifacts/events.jsonl"
    metrics_out = args.metrics_out or "artifacts/metrics.json"
    _write_jsonl(events_out, events)
    _write_json(metrics_out, metrics)
    if args.events_csv_out:
        _write_events_csv(args.events_csv_out, events)
    if args.audit_out:
        audit_report = build_audit_report(
            events,
            wcet_by_task={task.id: task.wcet for task in spec.tasks},
        )
        _write_json(args.audit_out, audit_report)
        if audit_report["status"] != "pass":
            print(f"[ERROR] simulation audit failed, report={args.audit_out}")
            return 2

    print(
        f"[OK] simulation completed, scheduler={engine.scheduler_name}, events={len(events)}, "
        f"ticks={engine.now}, deadline_misses={metrics['deadline_miss_count']}, metrics={metrics_out}"
    )
    return 0


def cmd_compare(args: argparse.Namespace) -> int:
    loader = ConfigLoader()
    try:
        spec = loader.load(args.config)
    except ConfigError as exc:
        print(f"[ERROR] {exc}")
        return 1

    try:
        left = _simulate(_with_overrides(spec, scheduler=args.left), until=args.until)
        right = _simulate(_with_overrides(spec, scheduler=args.right), until=args.until)
    except ValueError as exc:
        print(f"[ERROR] {exc}")
        return 1

    report = build_compare_report(
        left.metric_report(),
        right.metric_report(),
        left_label=args.left,
        right_label=args.right,
    )
    if args.out_json:
        _write_json(args.out_json, report)
    if args.out_csv:
        _write_rows_csv(args.out_csv, compare_report_to_rows(report))

    for row in report["scalar_metrics"]:
        print(f"{row['metric']:>22}: {args.left}={row['left']:g} {args.right}={row['right']:g}")
    print(
        "[OK] policy compare completed, "
        f"left={args.left}, right={args.right}, "
        f"json={args.out_json or '-'}, csv={args.out_csv or '-'}"
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="uniproc-sim", description="RMS/EDF uniprocessor scheduling simulator")
    subparsers = parser.add_subparsers(dest="command", required=True)

    validate_parser = subparsers.add_parser("validate", help="validate config file")
    validate_parser.add_argument("-c", "--config", required=True, help="path to config YAML/JSON")
    validate_parser.set_defaults(func=cmd_validate)

    run_parser = subparsers.add_parser("run", help="run simulation")
    run_parser.add_argument("-c", "--config", required=True, help="path to config YAML/JSON")
    run_parser.add_argument("--scheduler", default=None, help="override scheduler name (rm/edf)")
    run_parser.add_argument("--until", type=int, default=None, help="override simulation horizon in ticks")
    run_parser.add_argument(
        "--miss-report",
        choices=sorted(TickEngine.VALID_MISS_REPORTS),
        default=None,
        help="report a deadline miss once per job or on every overdue tick",
    )
    run_parser.add_argument("--events-out", default=None, help="path to write JSONL events")
    run_parser.add_argument("--events-csv-out", default=None, help="path to write CSV events")
    run_parser.add_argument("--metrics-out", default=None, help="path to write metric JSON")
    run_parser.add_argument("--audit-out", default=None, help="path to write audit report JSON")
    run_parser.add_argument("--show-arrivals", action="store_true", help="narrate job releases too")
    run_parser.add_argument("-q", "--quiet", action="store_true", help="do not narrate events")
    run_parser.set_defaults(func=cmd_run)

    compare_parser = subparsers.add_parser("compare", help="run one taskset under two policies")
    compare_parser.add_argument("-c", "--config", required=True, help="path to config YAML/JSON")
    compare_parser.add_argument("--left", default="rm", help="left scheduler name")
    compare_parser.add_argument("--right", default="edf", help="right scheduler name")
    compare_parser.add_argument("--until", type=int, default=None, help="override simulation horizon in ticks")
    compare_parser.add_argument("--out-json", default=None, help="compare report JSON path")
    compare_parser.add_argument("--out-csv", default=None, help="compare rows CSV path")
    compare_parser.set_defaults(func=cmd_compare)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
