"""Human-readable console rendering of the event stream."""

from __future__ import annotations

from typing import Callable

from uniproc_sim.events import EventType, SimEvent


POLICY_LABELS = {"rm": "RMS", "edf": "EDF"}


class ConsoleNarrator:
    """Event subscriber that prints one line per scheduling event."""

    def __init__(self, write: Callable[[str], None] = print, *, show_arrivals: bool = False) -> None:
        self._write = write
        self._show_arrivals = show_arrivals

    def banner(self, scheduler_name: str | None) -> None:
        label = POLICY_LABELS.get(str(scheduler_name), str(scheduler_name).upper())
        self._write(f"=== Running Preemptive {label} Simulation ===")

    def __call__(self, event: SimEvent) -> None:
        line = self.render(event)
        if line is not None:
            self._write(line)

    def render(self, event: SimEvent) -> str | None:
        if event.type == EventType.ARRIVAL:
            if not self._show_arrivals:
                return None
            suffix = " (queued)" if event.payload.get("queued") else ""
            deadline = event.payload.get("absolute_deadline")
            return f"  [>] Task {event.task_id} released at Time {event.time}, deadline {deadline}{suffix}"
        if event.type == EventType.PREEMPTION:
            return f"  [!] Preemption at Time {event.time}: Switching to Task {event.task_id}"
        if event.type == EventType.RUNNING:
            return f"Time {event.time}: Task {event.task_id} is running."
        if event.type == EventType.DEADLINE_MISS:
            return f"  !! Deadline Missed by Task {event.task_id}"
        if event.type == EventType.COMPLETION:
            return f"  [+] Task {event.task_id} Completed."
        if event.type == EventType.JOB_ABORT:
            return f"  [x] Task {event.task_id} job {event.job_id} aborted."
        if event.type == EventType.IDLE:
            return f"Time {event.time}: Idle"
        return None
