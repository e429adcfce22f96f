"""SimPy-backed tick engine for preemptive uniprocessor scheduling."""

from __future__ import annotations

from typing import Callable, Generator, Optional

import simpy

from uniproc_sim.events import EVENT_ID_MODES, EventBus, EventType, SimEvent
from uniproc_sim.metrics import CoreMetrics, IMetric
from uniproc_sim.model import ModelSpec, TaskState
from uniproc_sim.schedulers import PriorityOrdering, create_ordering

from .interfaces import ISimEngine
from .ready import ReadyQueue
from .timing import hyper_period


class TickEngine(ISimEngine):
    """Discrete-time engine advancing a SimPy clock one tick at a time.

    Each tick runs, in order: arrivals, the preemption check, dispatch,
    one unit of execution, the deadline check, completion, and finally the
    deadline check for jobs still waiting in the ready queue.
    """

    DEFAULT_EVENT_ID_MODE = "deterministic"
    DEFAULT_MISS_REPORT = "once"
    VALID_MISS_REPORTS = {"once", "every_tick"}

    def __init__(
        self,
        scheduler: PriorityOrdering | None = None,
        metrics: list[IMetric] | None = None,
    ) -> None:
        self._external_ordering = scheduler
        self._metrics = metrics or [CoreMetrics()]
        self._subscribers: list[Callable[[SimEvent], None]] = []
        self._event_id_mode = self.DEFAULT_EVENT_ID_MODE
        self._event_id_seed: int | None = None
        self._miss_report = self.DEFAULT_MISS_REPORT

        self._env = simpy.Environment()
        self._event_bus = self._create_event_bus()
        self._events: list[SimEvent] = []
        self._setup_event_pipeline()

        self._spec: ModelSpec | None = None
        self._ordering: PriorityOrdering | None = None
        self._tasks: list[TaskState] = []
        self._ready: ReadyQueue | None = None
        self._running: Optional[int] = None
        self._horizon = 0

    def subscribe(self, handler: Callable[[SimEvent], None]) -> None:
        if handler in self._subscribers:
            return
        self._subscribers.append(handler)
        self._event_bus.subscribe(handler)

    def build(self, spec: ModelSpec) -> None:
        params = spec.scheduler.params
        self._event_id_mode = self._resolve_event_id_mode(params)
        self._event_id_seed = spec.sim.seed
        miss_report = self._resolve_miss_report(params)
        self.reset()
        self._miss_report = miss_report
        self._spec = spec

        self._ordering = self._external_ordering or create_ordering(spec.scheduler.name, params)
        self._tasks = [TaskState.from_spec(task) for task in spec.tasks]
        self._ordering.bind(self._tasks)
        self._ready = ReadyQueue(self._ordering)
        self._running = None
        self._horizon = spec.sim.duration or hyper_period(task.period for task in spec.tasks)
        self._env.process(self._tick_loop())

    def run(self, until: int | None = None) -> None:
        if self._spec is None:
            raise RuntimeError("build() must be called before run()")
        horizon = until if until is not None else self._horizon
        if horizon > self._env.now:
            self._env.run(until=horizon)

    def step(self) -> None:
        if self._spec is None:
            raise RuntimeError("build() must be called before step()")
        self._env.run(until=self._env.now + 1)

    def reset(self) -> None:
        self._env = simpy.Environment()
        for metric in self._metrics:
            metric.reset()
        self._event_bus = self._create_event_bus()
        self._events = []
        self._setup_event_pipeline()
        self._miss_report = self.DEFAULT_MISS_REPORT

        self._spec = None
        self._ordering = None
        self._tasks = []
        self._ready = None
        self._running = None
        self._horizon = 0

    def _create_event_bus(self) -> EventBus:
        return EventBus(event_id_mode=self._event_id_mode, event_id_seed=self._event_id_seed)

    def _setup_event_pipeline(self) -> None:
        self._event_bus.subscribe(self._events.append)
        for metric in self._metrics:
            self._event_bus.subscribe(metric.consume)
        for handler in self._subscribers:
            self._event_bus.subscribe(handler)

    def _resolve_event_id_mode(self, params: dict) -> str:
        mode = str(params.get("event_id_mode", self.DEFAULT_EVENT_ID_MODE)).strip().lower()
        if mode not in EVENT_ID_MODES:
            allowed = ", ".join(sorted(EVENT_ID_MODES))
            raise ValueError(f"invalid event_id_mode '{mode}', expected one of: {allowed}")
        return mode

    def _resolve_miss_report(self, params: dict) -> str:
        mode = str(params.get("miss_report", self.DEFAULT_MISS_REPORT)).strip().lower()
        if mode not in self.VALID_MISS_REPORTS:
            allowed = ", ".join(sorted(self.VALID_MISS_REPORTS))
            raise ValueError(f"invalid miss_report '{mode}', expected one of: {allowed}")
        return mode

    @property
    def events(self) -> list[SimEvent]:
        return list(self._events)

    @property
    def now(self) -> int:
        return int(self._env.now)

    @property
    def horizon(self) -> int:
        return self._horizon

    @property
    def scheduler_name(self) -> str | None:
        return self._ordering.name if self._ordering is not None else None

    @property
    def tasks(self) -> list[TaskState]:
        return [task.snapshot() for task in self._tasks]

    @property
    def running_task_id(self) -> int | None:
        if self._running is None:
            return None
        return self._tasks[self._running].id

    @property
    def ready_task_ids(self) -> list[int]:
        if self._ready is None:
            return []
        return [self._tasks[index].id for index in self._ready.ordered()]

    def metric_report(self) -> dict:
        merged: dict = {}
        for metric in self._metrics:
            merged.update(metric.report())
        merged["scheduler"] = self.scheduler_name
        merged["horizon"] = self._horizon
        merged["miss_report"] = self._miss_report
        return merged

    def _tick_loop(self) -> Generator[simpy.Event, None, None]:
        while True:
            self._tick(int(self._env.now))
            yield self._env.timeout(1)

    def _tick(self, now: int) -> None:
        assert self._ready is not None and self._ordering is not None
        self._process_arrivals(now)

        preempted: Optional[int] = None
        if self._running is not None and self._ready:
            challenger = self._ready.peek()
            if self._ordering.should_preempt(challenger, self._running):
                preempted = self._running
                self._ready.pop()
                self._ready.push(preempted)
                self._running = challenger

        if self._running is None and self._ready:
            self._running = self._ready.pop()

        if self._running is None:
            self._publish(EventType.IDLE, now)
        else:
            self._execute(now, preempted)

        self._check_waiting_jobs(now)

    def _process_arrivals(self, now: int) -> None:
        assert self._ready is not None
        for index, task in enumerate(self._tasks):
            if task.next_release_time != now:
                continue
            seq, activated = task.release(now)
            if activated:
                self._ready.push(index)
            self._publish(
                EventType.ARRIVAL,
                now,
                task=task,
                job_id=f"{task.id}@{seq}",
                payload={
                    "absolute_deadline": now + task.period,
                    "queued": not activated,
                    "backlog": len(task.backlog),
                },
            )

    def _execute(self, now: int, preempted: Optional[int]) -> None:
        assert self._running is not None
        index = self._running
        task = self._tasks[index]
        if preempted is not None:
            victim = self._tasks[preempted]
            self._publish(
                EventType.PREEMPTION,
                now,
                task=task,
                payload={"preempted_task_id": victim.id, "preempted_job_id": victim.job_id},
            )

        task.remaining -= 1
        self._publish(
            EventType.RUNNING,
            now,
            task=task,
            payload={"remaining": task.remaining, "absolute_deadline": task.deadline},
        )

        if task.is_overdue(now):
            self._report_miss(index, now, running=True)
            if task.abort_on_miss:
                self._running = None
                self._abort_job(index, now)
                return

        if task.remaining == 0:
            finish = now + 1
            self._publish(
                EventType.COMPLETION,
                now,
                task=task,
                payload={
                    "response_time": finish - (task.release_time or 0),
                    "met_deadline": finish <= task.deadline,
                    "lateness": max(0, finish - task.deadline),
                },
            )
            self._running = None
            self._retire_job(index)

    def _check_waiting_jobs(self, now: int) -> None:
        assert self._ready is not None
        for index, task in enumerate(self._tasks):
            if index == self._running or index not in self._ready:
                continue
            if not task.is_overdue(now):
                continue
            self._report_miss(index, now, running=False)
            if task.abort_on_miss:
                self._ready.remove(index)
                self._abort_job(index, now)

    def _report_miss(self, index: int, now: int, *, running: bool) -> None:
        task = self._tasks[index]
        if self._miss_report == "once" and task.miss_reported:
            return
        task.miss_reported = True
        self._publish(
            EventType.DEADLINE_MISS,
            now,
            task=task,
            payload={
                "absolute_deadline": task.deadline,
                "remaining": task.remaining,
                "overdue_by": now - task.deadline,
                "running": running,
                "abort_on_miss": task.abort_on_miss,
            },
        )

    def _abort_job(self, index: int, now: int) -> None:
        task = self._tasks[index]
        self._publish(
            EventType.JOB_ABORT,
            now,
            task=task,
            payload={"remaining": task.remaining, "reason": "abort_on_miss"},
        )
        self._retire_job(index)

    def _retire_job(self, index: int) -> None:
        assert self._ready is not None
        if self._tasks[index].finish_job():
            self._ready.push(index)

    def _publish(
        self,
        event_type: EventType,
        now: int,
        *,
        task: TaskState | None = None,
        job_id: str | None = None,
        payload: dict | None = None,
    ) -> SimEvent:
        return self._event_bus.publish(
            event_type=event_type,
            time=now,
            task_id=task.id if task is not None else None,
            job_id=job_id if job_id is not None else (task.job_id if task is not None else None),
            payload=payload,
        )
