from __future__ import annotations

import pytest

from uniproc_sim.core import ISimEngine, TickEngine
from uniproc_sim.events import EventType
from uniproc_sim.metrics import CoreMetrics
from uniproc_sim.model import ModelSpec
from uniproc_sim.schedulers import EDFOrdering


def _spec(scheduler: str = "rm", **params) -> ModelSpec:
    return ModelSpec.from_triples([(1, 5, 3), (2, 8, 3)], scheduler=scheduler, params=params)


def test_tickengine_implements_interface_contract() -> None:
    engine = TickEngine()
    assert isinstance(engine, ISimEngine)
    assert {"build", "run", "step", "reset", "subscribe"} <= ISimEngine.__abstractmethods__


def test_run_and_step_require_build() -> None:
    engine = TickEngine()
    with pytest.raises(RuntimeError):
        engine.run()
    with pytest.raises(RuntimeError):
        engine.step()


def test_horizon_defaults_to_hyper_period() -> None:
    engine = TickEngine()
    engine.build(_spec())
    assert engine.horizon == 40
    engine.run()
    assert engine.now == 40


def test_sim_duration_overrides_horizon() -> None:
    engine = TickEngine()
    engine.build(ModelSpec.from_triples([(1, 5, 3)], duration=7))
    engine.run()
    assert engine.horizon == 7
    assert max(event.time for event in engine.events) == 6


def test_step_advances_exactly_one_tick() -> None:
    engine = TickEngine()
    engine.build(_spec())
    engine.step()
    assert engine.now == 1
    assert {event.time for event in engine.events} == {0}
    assert engine.running_task_id == 1
    assert engine.ready_task_ids == [2]


def test_stepping_matches_full_run() -> None:
    stepped = TickEngine()
    stepped.build(_spec())
    for _ in range(stepped.horizon):
        stepped.step()

    full = TickEngine()
    full.build(_spec())
    full.run()

    assert [e.model_dump() for e in stepped.events] == [e.model_dump() for e in full.events]


def test_state_invariants_hold_every_tick() -> None:
    engine = TickEngine()
    engine.build(ModelSpec.from_triples([(1, 3, 3), (2, 4, 3)], scheduler="edf"))
    for _ in range(engine.horizon):
        engine.step()
        tick = engine.now - 1
        running = [e for e in engine.events if e.time == tick and e.type == EventType.RUNNING]
        assert len(running) <= 1
        assert all(task.remaining >= 0 for task in engine.tasks)
        if engine.running_task_id is not None:
            assert engine.running_task_id not in engine.ready_task_ids


def test_rebuild_resets_task_state_and_repeats_trace() -> None:
    engine = TickEngine()
    spec = _spec("edf")
    engine.build(spec)
    engine.run()
    first = [e.model_dump() for e in engine.events]

    engine.build(spec)
    assert all(task.remaining == 0 and task.releases == 0 for task in engine.tasks)
    engine.run()
    assert [e.model_dump() for e in engine.events] == first


def test_tasks_property_returns_copies() -> None:
    engine = TickEngine()
    engine.build(_spec())
    engine.step()
    snapshot = engine.tasks
    snapshot[0].remaining = 99
    assert engine.tasks[0].remaining == 2


def test_subscribers_survive_rebuild() -> None:
    received = []
    engine = TickEngine()
    engine.subscribe(received.append)
    engine.subscribe(received.append)
    engine.build(_spec())
    engine.run(until=3)
    assert len(received) == len(engine.events)


def test_external_ordering_overrides_spec_scheduler() -> None:
    engine = TickEngine(scheduler=EDFOrdering())
    engine.build(_spec("rm"))
    engine.run()
    assert engine.scheduler_name == "edf"
    assert not any(e.type == EventType.PREEMPTION and e.time == 5 for e in engine.events)


def test_custom_metrics_receive_events() -> None:
    metrics = CoreMetrics()
    engine = TickEngine(metrics=[metrics])
    engine.build(_spec())
    engine.run()
    assert metrics.report()["event_count"] == len(engine.events)


def test_invalid_params_are_rejected_at_build() -> None:
    with pytest.raises(ValueError):
        TickEngine().build(_spec(miss_report="sometimes"))
    with pytest.raises(ValueError):
        TickEngine().build(_spec(event_id_mode="random"))
    with pytest.raises(ValueError):
        TickEngine().build(_spec("fifo"))


def test_seeded_random_event_ids_are_stable() -> None:
    def _ids() -> list[str]:
        engine = TickEngine()
        engine.build(_spec(event_id_mode="seeded_random"))
        engine.run(until=5)
        return [event.event_id for event in engine.events]

    first = _ids()
    assert first == _ids()
    assert not first[0].startswith("evt-")


def test_metric_report_includes_run_context() -> None:
    engine = TickEngine()
    engine.build(_spec(miss_report="every_tick"))
    engine.run()
    report = engine.metric_report()
    assert report["scheduler"] == "rm"
    assert report["horizon"] == 40
    assert report["miss_report"] == "every_tick"
    assert report["busy_ticks"] + report["idle_ticks"] == 40
