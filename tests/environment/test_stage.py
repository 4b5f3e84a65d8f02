"""
test_stage.py

Behavioural tests for the race state machine.

These tests verify:
- Ready -> Playing on Space, with the start time stamped
- Lap rollover after ceil(goal / velocity) ticks
- Race clear, score and best-time bookkeeping across restarts
- Game over on wall and rival contact
- Input handling: acceleration clamp, brake, steering
"""

from __future__ import annotations

import json
import math
from collections import Counter
from typing import List

import numpy as np
import pytest

from cart_racer.core.cart import CART_HEIGHT, Direction
from cart_racer.core.geometry import Point, Segment, Velocity
from cart_racer.core.piece import Wall
from cart_racer.core.rival import RIVAL_VELOCITY
from cart_racer.core.track import TrackFactory, TrackLayout
from cart_racer.environment.audio import BACKGROUND, BRAKE, NullAudio
from cart_racer.environment.keys import (
    ARROW_DOWN,
    ARROW_LEFT,
    ARROW_RIGHT,
    ARROW_UP,
    SPACE,
    KeySnapshot,
)
from cart_racer.environment.stage import Stage, StageConfig


TICK_MS = 10.0


def fast_config(**overrides) -> StageConfig:
    params = dict(
        goal_distance=100.0,
        required_laps=2,
        velocity_step=5.0,
        velocity_limit=5.0,
        rival_starts=(),
    )
    params.update(overrides)
    return StageConfig(**params)


def make_stage(clock, config: StageConfig | None = None, track: TrackLayout | None = None) -> Stage:
    return Stage.create(
        config=config or fast_config(),
        track=track or TrackFactory.create("empty"),
        audio=NullAudio(),
        clock=clock,
    )


def press(stage: Stage, clock, *codes: str) -> str:
    clock.advance(TICK_MS)
    stage.update(KeySnapshot.of(*codes))
    return stage.state_name


def audio_of(stage: Stage) -> NullAudio:
    audio = stage.resources.music.audio
    assert isinstance(audio, NullAudio)
    return audio


# ------------------------------------------------------------
# Ready
# ------------------------------------------------------------


def test_starts_ready_with_background_music(clock) -> None:
    stage = make_stage(clock)

    assert stage.state_name == "ready"
    assert audio_of(stage).looping == [BACKGROUND]


def test_ready_ignores_other_keys(clock) -> None:
    stage = make_stage(clock)
    assert press(stage, clock, ARROW_UP, ARROW_LEFT) == "ready"


def test_space_starts_race_and_stamps_time(clock) -> None:
    stage = make_stage(clock)
    assert press(stage, clock, SPACE) == "playing"
    assert stage.material.start_time == pytest.approx(TICK_MS)


# ------------------------------------------------------------
# Laps and clear
# ------------------------------------------------------------


@pytest.mark.parametrize("goal", [100.0, 101.0, 7.0])
def test_lap_rollover_after_ceil_goal_over_velocity(clock, goal: float) -> None:
    stage = make_stage(clock, fast_config(goal_distance=goal, required_laps=3))
    press(stage, clock, SPACE)
    press(stage, clock, ARROW_UP)
    assert stage.material.cart.get_velocity().y == 5.0

    ticks = 0
    while stage.material.lap_count == 0:
        press(stage, clock, ARROW_UP)
        ticks += 1
        assert ticks < 1000

    assert ticks == math.ceil(goal / 5.0)
    assert stage.material.distance == 0.0
    assert stage.state_name == "playing"


def test_rollover_resets_world_and_keeps_lateral_position(clock) -> None:
    track = TrackFactory.create("straight", length=1000.0, left=100.0, right=700.0)
    stage = make_stage(clock, fast_config(required_laps=3), track)
    press(stage, clock, SPACE)
    for _ in range(5):
        press(stage, clock, ARROW_UP, ARROW_LEFT)
    press(stage, clock, ARROW_DOWN)
    x_before = stage.material.cart.get_position().x

    while stage.material.lap_count == 0:
        press(stage, clock)

    material = stage.material
    assert material.cart.get_position().x == pytest.approx(x_before)
    assert material.cart.get_position().y == 100.0
    assert material.walls[0].p.y == pytest.approx(0.0)
    assert material.ornaments[0].p.y == pytest.approx(950.0)


def test_race_clear_records_score_and_best(clock) -> None:
    stage = make_stage(clock)
    press(stage, clock, SPACE)

    while stage.state_name == "playing":
        press(stage, clock, ARROW_UP)

    material = stage.material
    assert stage.state_name == "game_clear"
    assert material.lap_count == 2
    assert material.score == 410
    assert material.best_time == 410


def test_restart_keeps_best_and_resets_progress(clock) -> None:
    stage = make_stage(clock)
    press(stage, clock, SPACE)
    while stage.state_name == "playing":
        press(stage, clock, ARROW_UP)
    assert stage.state_name == "game_clear"
    assert press(stage, clock, ARROW_UP) == "game_clear"

    assert press(stage, clock, SPACE) == "ready"
    material = stage.material
    assert material.best_time == 410
    assert material.lap_count == 0
    assert material.distance == 0.0
    assert material.score == 0

    # A slower second race must not replace the best time.
    press(stage, clock, SPACE)
    while stage.state_name == "playing":
        clock.advance(TICK_MS)
        press(stage, clock, ARROW_UP)

    assert stage.material.score > 410
    assert stage.material.best_time == 410


@pytest.mark.parametrize("previous,expected", [(None, 610), (5000, 610), (100, 100)])
def test_default_race_clears_after_three_laps(clock, previous, expected: int) -> None:
    config = StageConfig(goal_distance=100.0, velocity_step=5.0, velocity_limit=5.0, rival_starts=())
    assert config.required_laps == 3

    stage = make_stage(clock, config)
    stage.material.best_time = previous
    press(stage, clock, SPACE)
    while stage.state_name == "playing":
        press(stage, clock, ARROW_UP)

    material = stage.material
    assert stage.state_name == "game_clear"
    assert material.lap_count == 3
    assert material.score == 610
    assert material.best_time == expected


def test_rollover_returns_rivals_to_their_start(clock) -> None:
    stage = make_stage(clock, fast_config(required_laps=3, rival_starts=((200.0, 100.0),)))
    press(stage, clock, SPACE)
    while stage.material.lap_count == 0:
        press(stage, clock, ARROW_UP)

    # Reset at the start of the tick, then advanced once by this tick's update.
    rival = stage.material.rivals[0]
    assert rival.distance == pytest.approx(RIVAL_VELOCITY)
    assert rival.get_position().x == pytest.approx(200.0)
    assert rival.get_position().y == pytest.approx(100.0 + RIVAL_VELOCITY - 5.0)


# ------------------------------------------------------------
# Game over
# ------------------------------------------------------------


def test_wall_hit_ends_race(clock) -> None:
    track = TrackLayout(segments=np.array([[350.0, 300.0, 450.0, 300.0]]))
    stage = make_stage(clock, fast_config(goal_distance=1000.0), track)
    press(stage, clock, SPACE)

    ticks = 0
    while stage.state_name == "playing":
        press(stage, clock, ARROW_UP)
        ticks += 1
        assert ticks < 200

    assert stage.state_name == "game_over"
    assert stage.material.cart.is_knocked
    assert press(stage, clock, ARROW_UP) == "game_over"
    assert press(stage, clock, SPACE) == "ready"
    assert not stage.material.cart.is_knocked


def test_wall_across_stationary_cart_ends_race(clock) -> None:
    track = TrackLayout(segments=np.array([[390.0, 90.0, 410.0, 110.0]]))
    stage = make_stage(clock, fast_config(goal_distance=1000.0), track)
    press(stage, clock, SPACE)
    assert stage.material.cart.get_velocity() == Velocity()

    assert press(stage, clock) == "game_over"
    assert stage.material.cart.is_knocked


def test_restart_after_crash_keeps_best_and_resets_progress(clock) -> None:
    track = TrackLayout(segments=np.array([[350.0, 300.0, 450.0, 300.0]]))
    stage = make_stage(clock, fast_config(goal_distance=1000.0), track)
    stage.material.best_time = 1234
    press(stage, clock, SPACE)
    while stage.state_name == "playing":
        press(stage, clock, ARROW_UP)
    assert stage.state_name == "game_over"
    assert stage.material.distance > 0.0

    press(stage, clock, SPACE)
    material = stage.material
    assert (stage.state_name, material.best_time, material.lap_count, material.distance) == (
        "ready",
        1234,
        0,
        0.0,
    )


@pytest.mark.parametrize(
    "top_y,behind",
    [
        (100.0 - CART_HEIGHT, False),
        (100.0 - CART_HEIGHT - 0.5, True),
        (100.0 + CART_HEIGHT, False),
        (5000.0, False),
    ],
)
def test_wall_behind_boundary(clock, top_y: float, behind: bool) -> None:
    material = make_stage(clock).material
    wall = Wall(Point(350.0, top_y - 40.0), Point(450.0, top_y))
    assert material.wall_behind(wall) is behind


def test_walls_behind_cart_are_not_tested(clock, monkeypatch: pytest.MonkeyPatch) -> None:
    track = TrackLayout(
        segments=np.array([[350.0, -200.0, 450.0, -100.0], [350.0, 5000.0, 450.0, 5000.0]])
    )
    material = make_stage(clock, track=track).material
    tested: List[Segment] = []

    def spy(segment: Segment) -> bool:
        tested.append(segment)
        return False

    monkeypatch.setattr(material.cart, "intersect", spy)

    assert material.hit_wall() is None
    assert tested == [material.walls[1].segment]


def test_distant_wall_ahead_does_not_end_race(clock) -> None:
    # Crosses the cart's x but sits far ahead of it.
    track = TrackLayout(segments=np.array([[350.0, 5000.0, 450.0, 5000.0]]))
    stage = make_stage(clock, fast_config(goal_distance=1000.0), track)
    press(stage, clock, SPACE)
    for _ in range(10):
        assert press(stage, clock, ARROW_UP) == "playing"


def test_rival_contact_ends_race(clock) -> None:
    stage = make_stage(clock, fast_config(rival_starts=((400.0, 100.0),)))
    press(stage, clock, SPACE)
    assert press(stage, clock) == "game_over"


def test_rival_contact_can_be_disabled(clock) -> None:
    config = fast_config(rival_starts=((400.0, 100.0),), rival_contact_ends_race=False)
    stage = make_stage(clock, config)
    press(stage, clock, SPACE)
    assert press(stage, clock) == "playing"


# ------------------------------------------------------------
# Inputs
# ------------------------------------------------------------


def test_acceleration_is_clamped(clock) -> None:
    stage = make_stage(clock, StageConfig(rival_starts=()), TrackFactory.create("empty"))
    press(stage, clock, SPACE)
    for _ in range(400):
        press(stage, clock, ARROW_UP)
    assert stage.material.cart.get_velocity().y == pytest.approx(5.0)


def test_default_acceleration_step(clock) -> None:
    stage = make_stage(clock, StageConfig(rival_starts=()), TrackFactory.create("empty"))
    press(stage, clock, SPACE)
    press(stage, clock, ARROW_UP)
    press(stage, clock, ARROW_UP)
    assert stage.material.cart.get_velocity().y == pytest.approx(0.06)


def test_brake_plays_sound_and_never_reverses(clock) -> None:
    stage = make_stage(clock)
    press(stage, clock, SPACE)
    press(stage, clock, SPACE)

    assert stage.material.cart.get_velocity().y == 0.0
    assert audio_of(stage).played == Counter({BRAKE: 1})


def test_steering_moves_and_faces(clock) -> None:
    stage = make_stage(clock, fast_config(goal_distance=10_000.0))
    press(stage, clock, SPACE)

    press(stage, clock, ARROW_LEFT)
    cart = stage.material.cart
    assert cart.get_position().x == pytest.approx(399.2)
    assert cart.get_direction() is Direction.LEFT

    press(stage, clock, ARROW_RIGHT)
    assert cart.get_position().x == pytest.approx(400.0)
    assert cart.get_direction() is Direction.RIGHT

    press(stage, clock, ARROW_DOWN)
    assert cart.get_velocity().x == 0.0
    assert cart.get_direction() is Direction.NORMAL


def test_scroll_moves_walls_by_cart_velocity(clock) -> None:
    track = TrackFactory.create("straight", length=1000.0)
    stage = make_stage(clock, fast_config(goal_distance=10_000.0), track)
    press(stage, clock, SPACE)
    press(stage, clock, ARROW_UP)
    press(stage, clock, ARROW_UP)

    assert stage.material.walls[0].p.y == pytest.approx(-10.0)
    assert stage.material.distance == pytest.approx(5.0)


# ------------------------------------------------------------
# Output
# ------------------------------------------------------------


def test_draw_order(clock, renderer) -> None:
    stage = make_stage(clock, fast_config(rival_starts=((300.0, 100.0),)), TrackFactory.create("straight"))
    stage.draw(renderer)
    names = renderer.names()

    assert names[0] == "clear"
    first_line = names.index("line")
    assert names.index("tree") < first_line
    assert names.index("normal") > first_line
    assert "Push Space Key." in renderer.texts()


def test_snapshot_is_json_safe(clock) -> None:
    stage = make_stage(clock, fast_config(rival_starts=((300.0, 100.0),)))
    press(stage, clock, SPACE)
    press(stage, clock, ARROW_UP)
    snapshot = stage.snapshot()

    assert snapshot["state"] == "playing"
    assert snapshot["cart"]["velocity"]["y"] == 5.0
    assert json.loads(json.dumps(snapshot)) == snapshot


def test_config_validation() -> None:
    with pytest.raises(ValueError):
        StageConfig(goal_distance=0.0)
    with pytest.raises(ValueError):
        StageConfig(required_laps=0)


def test_default_lap_length_and_laps() -> None:
    config = StageConfig()
    assert config.goal_distance == 4500.0
    assert config.required_laps == 3
