"""Default metrics implementation."""

from __future__ import annotations

from collections import defaultdict

from uniproc_sim.events import EventType, SimEvent

from .base import IMetric


class CoreMetrics(IMetric):
    """Aggregate key simulation metrics from event stream."""

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self._job_task: dict[str, int] = {}
        self._job_release: dict[str, int] = {}
        self._job_deadline: dict[str, int] = {}
        self._job_finish: dict[str, int] = {}
        self._deadline_miss_jobs: set[str] = set()
        self._aborted_jobs: set[str] = set()
        self._preempt_count = 0
        self._busy_ticks = 0
        self._idle_ticks = 0
        self._event_count = 0
        self._max_time = 0

    def consume(self, event: SimEvent) -> None:
        self._event_count += 1
        self._max_time = max(self._max_time, event.time)
        job_id = event.job_id

        if event.type == EventType.ARRIVAL:
            if job_id and event.task_id is not None:
                self._job_task[job_id] = event.task_id
                self._job_release[job_id] = event.time
                deadline = event.payload.get("absolute_deadline")
                if isinstance(deadline, int):
                    self._job_deadline[job_id] = deadline

        elif event.type == EventType.RUNNING:
            self._busy_ticks += 1

        elif event.type == EventType.IDLE:
            self._idle_ticks += 1

        elif event.type == EventType.PREEMPTION:
            self._preempt_count += 1

        elif event.type == EventType.DEADLINE_MISS:
            if job_id:
                self._deadline_miss_jobs.add(job_id)

        elif event.type == EventType.JOB_ABORT:
            if job_id:
                self._aborted_jobs.add(job_id)

        elif event.type == EventType.COMPLETION and job_id:
            # A job served during tick t finishes at instant t + 1.
            self._job_finish[job_id] = event.time + 1
            if event.payload.get("met_deadline") is False:
                self._deadline_miss_jobs.add(job_id)

    def report(self) -> dict:
        response_times: list[int] = []
        lateness_values: list[int] = []
        per_task: dict[str, list[int]] = defaultdict(list)

        for job_id, finish in self._job_finish.items():
            release = self._job_release.get(job_id)
            if release is not None:
                response_times.append(finish - release)
                per_task[str(self._job_task[job_id])].append(finish - release)
            deadline = self._job_deadline.get(job_id)
            if deadline is not None:
                lateness_values.append(max(0, finish - deadline))

        total_jobs = max(1, len(self._job_release))
        total_ticks = self._busy_ticks + self._idle_ticks
        avg_response = sum(response_times) / len(response_times) if response_times else 0.0
        avg_lateness = sum(lateness_values) / len(lateness_values) if lateness_values else 0.0

        return {
            "jobs_released": len(self._job_release),
            "jobs_completed": len(self._job_finish),
            "jobs_aborted": len(self._aborted_jobs),
            "deadline_miss_count": len(self._deadline_miss_jobs),
            "deadline_miss_ratio": len(self._deadline_miss_jobs) / total_jobs,
            "avg_response_time": avg_response,
            "max_response_time": max(response_times, default=0),
            "avg_lateness": avg_lateness,
            "preempt_count": self._preempt_count,
            "busy_ticks": self._busy_ticks,
            "idle_ticks": self._idle_ticks,
            "cpu_utilization": self._busy_ticks / total_ticks if total_ticks else 0.0,
            "per_task": {
                task_id: {
                    "jobs_completed": len(values),
                    "avg_response_time": sum(values) / len(values),
                    "max_response_time": max(values),
                }
                for task_id, values in sorted(per_task.items())
            },
            "event_count": self._event_count,
            "max_time": self._max_time,
        }
