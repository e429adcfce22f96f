from __future__ import annotations

from uniproc_sim.cli.narration import ConsoleNarrator
from uniproc_sim.core import TickEngine
from uniproc_sim.model import ModelSpec


def _narrate(scheduler: str, **kwargs) -> list[str]:
    lines: list[str] = []
    narrator = ConsoleNarrator(lines.append, **kwargs)
    engine = TickEngine()
    engine.subscribe(narrator)
    engine.build(ModelSpec.from_triples([(1, 5, 3), (2, 8, 3)], scheduler=scheduler))
    narrator.banner(engine.scheduler_name)
    engine.run(until=9)
    return lines


def test_rms_narration_shows_preemption_before_running_line() -> None:
    lines = _narrate("rm")
    assert lines[0] == "=== Running Preemptive RMS Simulation ==="
    position = lines.index("  [!] Preemption at Time 5: Switching to Task 1")
    assert lines[position + 1] == "Time 5: Task 1 is running."
    assert "  [+] Task 1 Completed." in lines


def test_edf_narration_has_no_preemption() -> None:
    lines = _narrate("edf")
    assert lines[0] == "=== Running Preemptive EDF Simulation ==="
    assert "Time 5: Task 2 is running." in lines
    assert not any("Preemption" in line for line in lines)


def test_arrivals_are_hidden_unless_requested() -> None:
    assert not any("released" in line for line in _narrate("rm"))
    lines = _narrate("rm", show_arrivals=True)
    assert "  [>] Task 2 released at Time 8, deadline 16 (queued)" in lines


def test_idle_and_miss_lines() -> None:
    lines: list[str] = []
    narrator = ConsoleNarrator(lines.append)
    engine = TickEngine()
    engine.subscribe(narrator)
    engine.build(ModelSpec.from_triples([(1, 3, 3), (2, 4, 3)], scheduler="edf"))
    engine.run()
    assert "  !! Deadline Missed by Task 2" in lines

    lines.clear()
    engine.build(ModelSpec.from_triples([(1, 4, 1)]))
    engine.run()
    assert "Time 1: Idle" in lines
