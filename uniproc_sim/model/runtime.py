"""Runtime types shared across the simulation engine and plugins."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Optional

from .spec import TaskSpec


@dataclass(slots=True)
class TaskState:
    """Live scheduling state of one periodic task.

    The entity persists for the whole run; only the per-job fields
    (``remaining``, ``deadline``, ``release_time``, ``job_seq``) are refreshed
    when a job is activated. Releases that arrive while a job is still live
    wait in ``backlog`` as release times.
    """

    id: int
    period: int
    wcet: int
    offset: int = 0
    abort_on_miss: bool = False

    remaining: int = 0
    deadline: int = 0
    next_release_time: int = 0
    release_time: Optional[int] = None
    job_seq: int = -1
    releases: int = 0
    live: bool = False
    miss_reported: bool = False
    backlog: deque[tuple[int, int]] = field(default_factory=deque)

    @classmethod
    def from_spec(cls, spec: TaskSpec) -> "TaskState":
        state = cls(
            id=spec.id,
            period=spec.period,
            wcet=spec.wcet,
            offset=spec.offset,
            abort_on_miss=spec.abort_on_miss,
        )
        state.reset()
        return state

    @property
    def job_id(self) -> Optional[str]:
        if self.job_seq < 0:
            return None
        return f"{self.id}@{self.job_seq}"

    def reset(self) -> None:
        self.remaining = 0
        self.deadline = 0
        self.next_release_time = self.offset
        self.release_time = None
        self.job_seq = -1
        self.releases = 0
        self.live = False
        self.miss_reported = False
        self.backlog = deque()

    def release(self, now: int) -> tuple[int, bool]:
        """Register the release due at ``now``.

        Returns the job sequence number and whether the job became live
        immediately (``False`` means it was queued behind the current job).
        """

        seq = self.releases
        self.releases += 1
        self.next_release_time += self.period
        if self.live:
            self.backlog.append((seq, now))
            return seq, False
        self._activate(seq, now)
        return seq, True

    def finish_job(self) -> bool:
        """Retire the live job and activate the next backlog job, if any."""

        self.live = False
        self.remaining = 0
        if not self.backlog:
            return False
        seq, released_at = self.backlog.popleft()
        self._activate(seq, released_at)
        return True

    def is_overdue(self, now: int) -> bool:
        return self.live and self.remaining > 0 and now >= self.deadline

    def _activate(self, seq: int, released_at: int) -> None:
        self.job_seq = seq
        self.release_time = released_at
        self.remaining = self.wcet
        self.deadline = released_at + self.period
        self.live = True
        self.miss_reported = False

    def snapshot(self) -> "TaskState":
        copy = TaskState(
            id=self.id,
            period=self.period,
            wcet=self.wcet,
            offset=self.offset,
            abort_on_miss=self.abort_on_miss,
        )
        copy.remaining = self.remaining
        copy.deadline = self.deadline
        copy.next_release_time = self.next_release_time
        copy.release_time = self.release_time
        copy.job_seq = self.job_seq
        copy.releases = self.releases
        copy.live = self.live
        copy.miss_reported = self.miss_reported
        copy.backlog = deque(self.backlog)
        return copy
