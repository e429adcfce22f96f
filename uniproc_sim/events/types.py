"""Simulation event definitions."""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class EventType(str, Enum):
    ARRIVAL = "Arrival"
    PREEMPTION = "Preemption"
    RUNNING = "Running"
    DEADLINE_MISS = "DeadlineMiss"
    COMPLETION = "Completion"
    IDLE = "Idle"
    JOB_ABORT = "JobAbort"


class SimEvent(BaseModel):
    """Normalized event envelope for tracing and metrics."""

    model_config = ConfigDict(extra="forbid")

    event_id: str
    seq: int = Field(ge=0)
    time: int = Field(ge=0)
    type: EventType
    task_id: Optional[int] = None
    job_id: Optional[str] = None
    payload: dict[str, Any] = Field(default_factory=dict)

    def to_json(self) -> str:
        return json.dumps(self.model_dump(mode="json"), ensure_ascii=False)
