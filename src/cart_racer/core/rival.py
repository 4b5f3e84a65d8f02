"""
rival.py

Computer-driven rival carts.

Each tick a rival casts two forward probe segments, one just outside each
flank, and checks them against the current wall set. The result picks one
of three lateral moves (straight, evade left, evade right). Rivals keep
their own lap distance and never interact with the player's lap logic.

Decision tracing goes to the logger handed in by the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Sequence, Tuple

from cart_racer.core.cart import CART_WIDTH, Direction
from cart_racer.core.geometry import (
    FloatArray,
    Point,
    Segment,
    Velocity,
    intersects_any,
    segments_to_array,
)
from cart_racer.core.piece import Wall
from cart_racer.core.render import RIVAL_LIVERY, Renderer


RIVAL_VELOCITY: float = 3.0
COLLISION_CHECK_DISTANCE: float = 80.0
PROBE_MARGIN: float = 5.0
EVASION_SPEED: float = 2.0
CART_COLLISION_RADIUS: float = 25.0


@dataclass(frozen=True)
class RivalBounds:
    """
    Lateral corridor a rival may occupy.

    Parameters
    ----------
    left_edge : float
        Left track edge [px].
    right_edge : float
        Right track edge [px].
    half_width : float
        Rival half-width [px].
    """

    left_edge: float = 100.0
    right_edge: float = 700.0
    half_width: float = CART_WIDTH

    def __post_init__(self) -> None:
        if self.right_edge - self.left_edge <= 2.0 * self.half_width:
            raise ValueError("Track corridor is narrower than a rival.")

    @property
    def min_x(self) -> float:
        return self.left_edge + self.half_width

    @property
    def max_x(self) -> float:
        return self.right_edge - self.half_width

    def contains(self, x: float) -> bool:
        return self.min_x <= x <= self.max_x

    def strictly_inside(self, x: float) -> bool:
        return self.min_x < x < self.max_x


class RivalCart:
    """
    Rival car with a forward-probe evasion heuristic.

    Parameters
    ----------
    number : int
        Identity number. Rival 1 prefers left evasions, every other rival
        prefers right, so two rivals side by side do not dodge into each
        other.
    position : Point
        Initial screen-space position.
    goal_distance : float
        Lap length after which the rival's distance wraps to zero.
    logger : logging.Logger | None
        Destination for decision tracing.
    bounds : RivalBounds | None
        Lateral corridor.
    """

    def __init__(
        self,
        number: int,
        position: Point,
        goal_distance: float,
        *,
        logger: logging.Logger | None = None,
        bounds: RivalBounds | None = None,
    ) -> None:
        if goal_distance <= 0.0:
            raise ValueError("goal_distance must be positive")

        self._number: int = number
        self._goal_distance: float = float(goal_distance)
        self._logger: logging.Logger = logger or logging.getLogger(__name__)
        self._bounds: RivalBounds = bounds or RivalBounds()

        self._position: Point = position
        self._velocity: Velocity = Velocity(0.0, RIVAL_VELOCITY)
        self._direction: Direction = Direction.NORMAL
        self._distance: float = 0.0
        self._laps: int = 0

        if not self._bounds.contains(position.x):
            raise ValueError(
                f"Rival {number} starts outside the corridor at x={position.x}"
            )

    # ------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------

    @property
    def number(self) -> int:
        return self._number

    @property
    def distance(self) -> float:
        return self._distance

    @property
    def laps(self) -> int:
        return self._laps

    @property
    def bounds(self) -> RivalBounds:
        return self._bounds

    def get_position(self) -> Point:
        return self._position

    def get_velocity(self) -> Velocity:
        return self._velocity

    def get_direction(self) -> Direction:
        return self._direction

    # ------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------

    def update(self, walls: Sequence[Wall], player_velocity: Velocity) -> None:
        """
        Advance the rival by one tick.

        Parameters
        ----------
        walls : sequence of Wall
            Current (scrolled) wall set.
        player_velocity : Velocity
            Player velocity this tick; only ``y`` is used to keep the rival
            in the player's scrolling frame.
        """
        self._distance += self._velocity.y
        self._position = Point(
            self._position.x,
            self._position.y + self._velocity.y - player_velocity.y,
        )

        left_blocked, right_blocked = self.probe(segments_to_array([w.segment for w in walls]))
        self._decide(left_blocked, right_blocked)

        next_x = self._position.x + self._velocity.x
        if self._bounds.strictly_inside(next_x):
            self._position = Point(next_x, self._position.y)
        else:
            self._logger.debug(
                "rival %d: lateral move to %.1f suppressed at track edge",
                self._number,
                next_x,
            )

        if self._distance > self._goal_distance:
            self._distance = 0.0
            self._laps += 1
            self._logger.debug("rival %d: lap %d complete", self._number, self._laps)

    def probe_segments(self) -> Tuple[Segment, Segment]:
        """
        Left and right forward probes at the current position.

        Returns
        -------
        tuple of Segment
            ``(left, right)``
        """
        x = self._position.x
        y = self._position.y
        offset = self._bounds.half_width + PROBE_MARGIN
        left = Segment(Point(x - offset, y), Point(x - offset, y + COLLISION_CHECK_DISTANCE))
        right = Segment(Point(x + offset, y), Point(x + offset, y + COLLISION_CHECK_DISTANCE))
        return left, right

    def probe(self, walls: FloatArray) -> Tuple[bool, bool]:
        """
        Test both probes against an ``(N, 4)`` wall array.

        Returns
        -------
        tuple of bool
            ``(left_blocked, right_blocked)``
        """
        left, right = self.probe_segments()
        return intersects_any(left, walls), intersects_any(right, walls)

    def _decide(self, left_blocked: bool, right_blocked: bool) -> None:
        if not left_blocked and not right_blocked:
            self._steer(Direction.NORMAL)
            return

        if self._number == 1:
            choice = Direction.LEFT if not left_blocked else Direction.RIGHT
        else:
            choice = Direction.RIGHT if not right_blocked else Direction.LEFT

        self._logger.debug(
            "rival %d: probes left=%s right=%s -> %s",
            self._number,
            left_blocked,
            right_blocked,
            choice.value,
        )
        self._steer(choice)

    def _steer(self, direction: Direction) -> None:
        if direction is Direction.LEFT:
            vx = -EVASION_SPEED
        elif direction is Direction.RIGHT:
            vx = EVASION_SPEED
        else:
            vx = 0.0
        self._velocity = Velocity(vx, self._velocity.y)
        self._direction = direction

    # ------------------------------------------------------------
    # Contact & lifecycle
    # ------------------------------------------------------------

    def check_collision_with_cart(self, point: Point) -> bool:
        """
        Radius-based contact test against the player's position.
        """
        return self._position.distance_to(point) < CART_COLLISION_RADIUS

    def reset(self, position: Point) -> None:
        self._position = position
        self._velocity = Velocity(0.0, RIVAL_VELOCITY)
        self._direction = Direction.NORMAL
        self._distance = 0.0
        self._laps = 0

    def draw(self, renderer: Renderer) -> None:
        if self._direction is Direction.LEFT:
            renderer.draw_left_facing_racing_car(self._position, RIVAL_LIVERY)
        elif self._direction is Direction.RIGHT:
            renderer.draw_right_facing_racing_car(self._position, RIVAL_LIVERY)
        else:
            renderer.draw_normal_racing_car(self._position, RIVAL_LIVERY)

    def to_dict(self) -> Dict[str, object]:
        return {
            "number": self._number,
            "position": self._position.to_dict(),
            "velocity": self._velocity.to_dict(),
            "direction": self._direction.value,
            "distance": self._distance,
        }
