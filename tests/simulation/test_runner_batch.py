"""
test_runner_batch.py

Tests for the headless batch runner.

These tests verify:
- Runs stop when the race finishes
- Identical inputs give identical snapshots
- Replay logs reproduce a run through ScriptedDriver
"""

from __future__ import annotations

from pathlib import Path

import pytest

from cart_racer.agents.forward_driver import ForwardDriver, ScriptedDriver
from cart_racer.core.track import TrackFactory
from cart_racer.environment.stage import Stage, StageConfig
from cart_racer.simulation.runner_batch import (
    TICK_MS,
    BatchRunner,
    BatchRunnerConfig,
    TickClock,
)
from cart_racer.utils.replay import ReplayLogger, keys_from_replay


def make_stage(track: str = "default", **config) -> tuple[Stage, TickClock]:
    clock = TickClock()
    stage = Stage.create(config=StageConfig(**config), track=TrackFactory.create(track), clock=clock)
    return stage, clock


def test_tick_clock() -> None:
    clock = TickClock(tick_ms=10.0)
    assert clock() == 0.0
    clock.advance()
    clock.advance()
    assert clock() == 20.0


def test_tick_clock_rejects_non_positive_step() -> None:
    with pytest.raises(ValueError):
        TickClock(tick_ms=0.0)


def test_forward_driver_crashes_on_default_track() -> None:
    stage, clock = make_stage()
    result = BatchRunner(stage, ForwardDriver(), BatchRunnerConfig(max_ticks=20_000), clock=clock).run()

    assert result.final_state == "game_over"
    assert result.finished
    assert result.ticks < 20_000
    assert result.snapshot["cart"]["state"] == "knocked"


def test_forward_driver_clears_empty_track() -> None:
    stage, clock = make_stage("empty", goal_distance=500.0, required_laps=2, rival_starts=())
    result = BatchRunner(stage, ForwardDriver(), BatchRunnerConfig(max_ticks=20_000), clock=clock).run()

    assert result.final_state == "game_clear"
    assert result.snapshot["lap_count"] == 2
    assert result.snapshot["score"] == pytest.approx((result.ticks - 1) * TICK_MS, abs=1.0)


def test_max_ticks_is_respected() -> None:
    stage, clock = make_stage()
    result = BatchRunner(stage, ForwardDriver(), BatchRunnerConfig(max_ticks=50), clock=clock).run()

    assert result.ticks == 50
    assert result.final_state == "playing"
    assert not result.finished


def test_runs_are_deterministic() -> None:
    first_stage, first_clock = make_stage()
    second_stage, second_clock = make_stage()
    config = BatchRunnerConfig(max_ticks=20_000)

    first = BatchRunner(first_stage, ForwardDriver(), config, clock=first_clock).run()
    second = BatchRunner(second_stage, ForwardDriver(), config, clock=second_clock).run()

    assert first.ticks == second.ticks
    assert first.snapshot == second.snapshot


def test_replay_reproduces_run(tmp_path: Path) -> None:
    path = tmp_path / "run.jsonl"
    stage, clock = make_stage()
    with ReplayLogger(path) as replay:
        recorded = BatchRunner(
            stage, ForwardDriver(), BatchRunnerConfig(max_ticks=600), replay=replay, clock=clock
        ).run()

    records = list(ReplayLogger.replay(path))
    assert len(records) == recorded.ticks
    assert records[-1]["snapshot"] == recorded.snapshot

    script = keys_from_replay(path)
    replay_stage, replay_clock = make_stage()
    replayed = BatchRunner(
        replay_stage, ScriptedDriver(script), BatchRunnerConfig(max_ticks=len(script)), clock=replay_clock
    ).run()

    assert replayed.snapshot == recorded.snapshot
