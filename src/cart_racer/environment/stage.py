"""
stage.py

Race state machine.

ENVIRONMENT Layer
-----------------
The race moves through four states, each a thin frozen wrapper around the
shared :class:`Material`:

    Ready --Space--> Playing --wall/rival hit--> GameOver --Space--> Ready
                             --final lap------> GameClear --Space--> Ready

``update`` on a state consumes it and returns the next state. The
:class:`Stage` object only holds whichever state is current.

Per-tick Playing order
----------------------
1. Accumulate distance from the cart's longitudinal velocity.
2. Lap rollover (rebuild walls/ornaments, reset cart and rivals) and race clear.
3. Apply inputs to the cart velocity.
4. Assign scroll velocity to ornaments and walls.
5. Advance rivals.
6. Collision tests (walls, then rivals).
7. Integrate cart, ornaments and walls once.

The clock only feeds displayed and recorded times, never control flow.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from cart_racer.core.cart import CART_HEIGHT, Cart, Direction
from cart_racer.core.geometry import Point, Velocity
from cart_racer.core.piece import Ornament, Wall
from cart_racer.core.render import Renderer
from cart_racer.core.rival import RivalBounds, RivalCart
from cart_racer.core.track import TrackLayout
from cart_racer.environment.audio import AudioSink, Music, NullAudio
from cart_racer.environment.hud import draw_overlay
from cart_racer.environment.keys import (
    ARROW_DOWN,
    ARROW_LEFT,
    ARROW_RIGHT,
    ARROW_UP,
    SPACE,
    KeyState,
)


_logger = logging.getLogger(__name__)

Clock = Callable[[], float]


def monotonic_ms() -> float:
    """Default clock in milliseconds."""
    return time.monotonic() * 1000.0


# ================================================================
# CONFIGURATION
# ================================================================


@dataclass(frozen=True)
class StageConfig:
    """
    Race tuning constants.

    Parameters
    ----------
    goal_distance : float
        Longitudinal distance of one lap [px].
    required_laps : int
        Laps needed to clear the race.
    cart_start : tuple[float, float]
        Cart start position (x, start line y).
    stage_left : float
        Left edge of the drivable corridor.
    stage_right : float
        Right edge of the drivable corridor.
    velocity_x : float
        Lateral speed while steering [px/tick].
    velocity_step : float
        Acceleration per tick while ArrowUp is held.
    brake_step : float
        Deceleration per tick while Space is held.
    velocity_limit : float
        Longitudinal velocity ceiling.
    rival_starts : tuple of (x, y)
        Rival start positions; rival numbers follow the order (1-based).
    rival_contact_ends_race : bool
        Whether touching a rival ends the race like a wall hit.
    ornament_anchor : tuple[float, float]
        Lower-left corner of the scenery strip.
    ornament_size : tuple[float, float]
        Width and height of the scenery strip.
    start_message_ms : int
        How long "Ready Go!" stays on screen.
    """

    goal_distance: float = 4500.0
    required_laps: int = 3
    cart_start: Tuple[float, float] = (400.0, 100.0)
    stage_left: float = 100.0
    stage_right: float = 700.0
    velocity_x: float = 0.8
    velocity_step: float = 0.03
    brake_step: float = 0.06
    velocity_limit: float = 5.0
    rival_starts: Tuple[Tuple[float, float], ...] = ((300.0, 100.0), (500.0, 100.0))
    rival_contact_ends_race: bool = True
    ornament_anchor: Tuple[float, float] = (120.0, 950.0)
    ornament_size: Tuple[float, float] = (10.0, 9900.0)
    start_message_ms: int = 100

    def __post_init__(self) -> None:
        if self.goal_distance <= 0.0:
            raise ValueError("goal_distance must be positive")
        if self.required_laps < 1:
            raise ValueError("required_laps must be at least 1")
        if self.velocity_limit <= 0.0:
            raise ValueError("velocity_limit must be positive")


@dataclass(frozen=True)
class StageResources:
    """
    Collaborators shared by every Material of a session.

    Parameters
    ----------
    config : StageConfig
    track : TrackLayout
    music : Music
    clock : Clock
        Millisecond clock for displayed/recorded times.
    logger : logging.Logger
        Passed to rivals for decision tracing.
    """

    config: StageConfig
    track: TrackLayout
    music: Music = field(default_factory=lambda: Music(NullAudio()))
    clock: Clock = monotonic_ms
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("cart_racer.rival"))


# ================================================================
# MATERIAL
# ================================================================


class Material:
    """
    Complete mutable session payload threaded through every race state.

    Use :meth:`new` to build one from scratch.
    """

    def __init__(
        self,
        resources: StageResources,
        *,
        cart: Cart,
        walls: List[Wall],
        ornaments: List[Ornament],
        rivals: List[RivalCart],
        best_time: Optional[int] = None,
    ) -> None:
        self.resources: StageResources = resources
        self.cart: Cart = cart
        self.walls: List[Wall] = walls
        self.ornaments: List[Ornament] = ornaments
        self.rivals: List[RivalCart] = rivals
        self.lap_count: int = 0
        self.distance: float = 0.0
        self.best_time: Optional[int] = best_time
        self.score: int = 0
        self.start_time: float = 0.0

    # ------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------

    @classmethod
    def new(cls, resources: StageResources, best_time: Optional[int] = None) -> Material:
        config = resources.config
        bounds = RivalBounds(left_edge=config.stage_left, right_edge=config.stage_right)
        rivals = [
            RivalCart(
                number,
                Point(x, y),
                config.goal_distance,
                logger=resources.logger,
                bounds=bounds,
            )
            for number, (x, y) in enumerate(config.rival_starts, start=1)
        ]
        return cls(
            resources,
            cart=Cart(Point(*config.cart_start)),
            walls=resources.track.build_walls(),
            ornaments=_build_ornaments(config),
            rivals=rivals,
            best_time=best_time,
        )

    def reset(self) -> Material:
        """
        Fresh material for a new race, keeping the best time.
        """
        return Material.new(self.resources, self.best_time)

    # ------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------

    @property
    def config(self) -> StageConfig:
        return self.resources.config

    @property
    def music(self) -> Music:
        return self.resources.music

    def now(self) -> float:
        return self.resources.clock()

    def elapsed_ms(self) -> int:
        return int(round(self.now() - self.start_time))

    # ------------------------------------------------------------
    # Race mechanics
    # ------------------------------------------------------------

    def complete_lap(self) -> None:
        """
        Count a lap and put the world back at the start line.
        """
        self.lap_count += 1
        self.distance = 0.0

        position = self.cart.get_position()
        self.cart = Cart(Point(position.x, self.config.cart_start[1]))
        self.walls = self.resources.track.build_walls()
        self.ornaments = _build_ornaments(self.config)
        for rival, (x, y) in zip(self.rivals, self.config.rival_starts):
            rival.reset(Point(x, y))

        _logger.info("Lap %d/%d complete", self.lap_count, self.config.required_laps)

    def record_finish(self) -> None:
        elapsed = self.elapsed_ms()
        self.score = elapsed
        self.best_time = elapsed if self.best_time is None else min(self.best_time, elapsed)

    def wall_behind(self, wall: Wall) -> bool:
        """
        True when the wall has scrolled entirely below the cart's lowest edge
        point ``y - CART_HEIGHT``. Such walls can no longer be hit.
        """
        return wall.segment.max_y < self.cart.get_position().y - CART_HEIGHT

    def hit_wall(self) -> Optional[Wall]:
        for wall in self.walls:
            if self.wall_behind(wall):
                continue
            if self.cart.intersect(wall.segment):
                return wall
        return None

    def hit_rival(self) -> Optional[RivalCart]:
        position = self.cart.get_position()
        for rival in self.rivals:
            if rival.check_collision_with_cart(position):
                return rival
        return None

    # ------------------------------------------------------------
    # Output
    # ------------------------------------------------------------

    def draw(self, renderer: Renderer) -> None:
        for ornament in self.ornaments:
            ornament.draw(renderer)
        for wall in self.walls:
            wall.draw(renderer)
        for rival in self.rivals:
            rival.draw(renderer)
        self.cart.draw(renderer)

    def to_dict(self) -> Dict[str, Any]:
        scroll_y = self.ornaments[0].p.y if self.ornaments else 0.0
        return {
            "lap_count": self.lap_count,
            "distance": self.distance,
            "best_time": self.best_time,
            "score": self.score,
            "scroll_y": scroll_y,
            "cart": self.cart.to_dict(),
            "rivals": [rival.to_dict() for rival in self.rivals],
        }


def _build_ornaments(config: StageConfig) -> List[Ornament]:
    x, y = config.ornament_anchor
    width, height = config.ornament_size
    return [Ornament(Point(x, y), Point(x + width, y + height))]


# ================================================================
# STATES
# ================================================================


@dataclass(frozen=True)
class Ready:
    """Title screen; Space starts the race."""

    material: Material

    name = "ready"

    def update(self, keys: KeyState) -> StageState:
        if keys.is_pressed(SPACE):
            return self.start_running()
        return self

    def start_running(self) -> Playing:
        self.material.start_time = self.material.now()
        _logger.info("Race started")
        return Playing(self.material)


@dataclass(frozen=True)
class Playing:
    """Race in progress."""

    material: Material

    name = "playing"

    def update(self, keys: KeyState) -> StageState:
        m = self.material
        config = m.config

        # 1-2. distance, lap rollover, race clear
        m.distance += m.cart.get_velocity().y
        if m.distance >= config.goal_distance:
            m.complete_lap()
            if m.lap_count >= config.required_laps:
                return self.clear()

        # 3. inputs
        velocity = self._apply_inputs(keys)
        m.cart.run(velocity)

        # 4. scroll velocity for scenery and walls
        scroll = Velocity(0.0, velocity.y)
        for ornament in m.ornaments:
            ornament.run(scroll)
        for wall in m.walls:
            wall.run(scroll)

        # 5. rivals
        for rival in m.rivals:
            rival.update(m.walls, velocity)

        # 6. collisions
        wall = m.hit_wall()
        if wall is not None:
            _logger.info("Cart hit %r at distance %.1f", wall, m.distance)
            return self.game_over()

        if config.rival_contact_ends_race:
            rival = m.hit_rival()
            if rival is not None:
                _logger.info("Cart hit rival %d at distance %.1f", rival.number, m.distance)
                return self.game_over()

        # 7. integrate
        m.cart.update()
        for ornament in m.ornaments:
            ornament.update()
        for wall in m.walls:
            wall.update()

        return self

    def _apply_inputs(self, keys: KeyState) -> Velocity:
        m = self.material
        config = m.config
        current = m.cart.get_velocity()
        vx, vy = current.x, current.y

        if keys.is_pressed(ARROW_UP):
            vy = min(vy + config.velocity_step, config.velocity_limit)
        if keys.is_pressed(ARROW_DOWN):
            vx = 0.0
            m.cart.set_direction(Direction.NORMAL)
        if keys.is_pressed(ARROW_LEFT):
            vx = -config.velocity_x
        if keys.is_pressed(ARROW_RIGHT):
            vx = config.velocity_x
        if keys.is_pressed(SPACE):
            vy -= config.brake_step
            m.music.play_brake_sound()

        return Velocity(vx, max(vy, 0.0))

    def game_over(self) -> GameOver:
        self.material.cart.knocked()
        return GameOver(self.material)

    def clear(self) -> GameClear:
        self.material.record_finish()
        _logger.info(
            "Race clear in %d ms (best %s ms)",
            self.material.score,
            self.material.best_time,
        )
        return GameClear(self.material)


@dataclass(frozen=True)
class GameOver:
    """Crashed; Space returns to the title screen."""

    material: Material

    name = "game_over"

    def update(self, keys: KeyState) -> StageState:
        if keys.is_pressed(SPACE):
            return self.new_game()
        return self

    def new_game(self) -> Ready:
        return Ready(self.material.reset())


@dataclass(frozen=True)
class GameClear:
    """All laps done; Space returns to the title screen."""

    material: Material

    name = "game_clear"

    def update(self, keys: KeyState) -> StageState:
        if keys.is_pressed(SPACE):
            return self.new_game()
        return self

    def new_game(self) -> Ready:
        return Ready(self.material.reset())


StageState = Union[Ready, Playing, GameOver, GameClear]


# ================================================================
# STAGE
# ================================================================


class Stage:
    """
    Holder of the current race state.

    Parameters
    ----------
    resources : StageResources
    best_time : int | None
        Best time carried in from a previous session [ms].
    """

    def __init__(self, resources: StageResources, best_time: Optional[int] = None) -> None:
        self._resources: StageResources = resources
        self._state: StageState = Ready(Material.new(resources, best_time))

    @classmethod
    def create(
        cls,
        *,
        config: StageConfig | None = None,
        track: TrackLayout,
        audio: AudioSink | None = None,
        clock: Clock | None = None,
        logger: logging.Logger | None = None,
    ) -> Stage:
        """
        Build a stage and start the background music.
        """
        resources = StageResources(
            config=config or StageConfig(),
            track=track,
            music=Music(audio if audio is not None else NullAudio()),
            clock=clock or monotonic_ms,
            logger=logger or logging.getLogger("cart_racer.rival"),
        )
        resources.music.play_background_music()
        return cls(resources)

    # ------------------------------------------------------------

    @property
    def state(self) -> StageState:
        return self._state

    @property
    def state_name(self) -> str:
        return self._state.name

    @property
    def material(self) -> Material:
        return self._state.material

    @property
    def resources(self) -> StageResources:
        return self._resources

    # ------------------------------------------------------------

    def update(self, keys: KeyState) -> StageState:
        """
        Advance the race by one tick.
        """
        previous = self._state.name
        self._state = self._state.update(keys)
        if self._state.name != previous:
            _logger.debug("Stage %s -> %s", previous, self._state.name)
        return self._state

    def draw(self, renderer: Renderer) -> None:
        """
        Draw one frame: scenery, walls, cars, then the HUD on top.
        """
        renderer.clear()
        self._state.material.draw(renderer)
        draw_overlay(self._state.name, self._state.material, renderer)

    def snapshot(self) -> Dict[str, Any]:
        """
        JSON-safe view of the current state (used for replay comparison).
        """
        data = self._state.material.to_dict()
        data["state"] = self._state.name
        return data
