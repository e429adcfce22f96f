"""Configuration domain models and semantic validation."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class TaskSpec(BaseModel):
    """One periodic task: released every ``period`` ticks, needing ``wcet`` ticks."""

    model_config = ConfigDict(extra="forbid")

    id: int
    period: int = Field(gt=0)
    wcet: int = Field(gt=0)
    offset: int = Field(default=0, ge=0)
    abort_on_miss: bool = False

    @model_validator(mode="after")
    def validate_demand(self) -> "TaskSpec":
        if self.wcet > self.period:
            raise ValueError(
                f"task {self.id} wcet {self.wcet} exceeds period {self.period}"
            )
        return self


class SchedulerSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    params: dict = Field(default_factory=dict)


class SimSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    duration: Optional[int] = Field(default=None, gt=0)
    seed: int = 42


class ModelSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    version: str = "0.2"
    tasks: list[TaskSpec] = Field(min_length=1)
    scheduler: SchedulerSpec
    sim: SimSpec = Field(default_factory=SimSpec)

    @model_validator(mode="after")
    def validate_semantics(self) -> "ModelSpec":
        task_ids = [task.id for task in self.tasks]
        if len(task_ids) != len(set(task_ids)):
            raise ValueError("duplicate tasks.id")
        return self

    @classmethod
    def from_triples(
        cls,
        triples: Iterable[tuple[int, int, int]],
        *,
        scheduler: str = "rm",
        params: dict | None = None,
        duration: int | None = None,
    ) -> "ModelSpec":
        """Build a model from ordered ``(id, period, wcet)`` triples."""

        return cls.model_validate(
            {
                "tasks": [
                    {"id": task_id, "period": period, "wcet": wcet}
                    for task_id, period, wcet in triples
                ],
                "scheduler": {"name": scheduler, "params": dict(params or {})},
                "sim": {"duration": duration},
            }
        )
