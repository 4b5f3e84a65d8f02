"""
cart.py

Player cart state machine and collision geometry.

States
------
- ``CartIdle``: waiting at the start line
- ``CartRunning``: moving; ``position.x`` integrates ``velocity.x``
- ``CartKnocked``: terminal state after a collision

Each state is a frozen dataclass holding a :class:`CartContext`. Transition
methods consume the current state and return the next one; the
:class:`Cart` wrapper only stores whichever variant is current.

The cart never leaves ``CartKnocked`` by itself. The race rebuilds a fresh
cart when the player restarts.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Tuple, Union

from cart_racer.core.geometry import Point, Segment, Velocity, intersects
from cart_racer.core.render import PLAYER_LIVERY, Renderer


CART_WIDTH: float = 20.0
CART_HEIGHT: float = 50.0
CART_START_Y: float = 100.0
DIRECTION_DEAD_ZONE: float = 0.1


class Direction(Enum):
    """
    Facing of a car, derived from lateral velocity.
    """

    NORMAL = "normal"
    LEFT = "left"
    RIGHT = "right"

    @staticmethod
    def from_velocity(velocity_x: float) -> Direction:
        """
        Derive facing from the lateral velocity.

        Parameters
        ----------
        velocity_x : float

        Returns
        -------
        Direction
            ``RIGHT`` above the dead-zone, ``LEFT`` below it, else ``NORMAL``.
        """
        if velocity_x > DIRECTION_DEAD_ZONE:
            return Direction.RIGHT
        if velocity_x < -DIRECTION_DEAD_ZONE:
            return Direction.LEFT
        return Direction.NORMAL


# ============================================================
# Context
# ============================================================


@dataclass(frozen=True)
class CartContext:
    """
    Kinematic snapshot of the cart.

    Parameters
    ----------
    position : Point
        Screen-space reference point (front edge centre).
    velocity : Velocity
        ``x`` lateral [px/tick], ``y`` longitudinal [px/tick].
    direction : Direction
        Facing used for rendering.
    """

    position: Point
    velocity: Velocity
    direction: Direction = Direction.NORMAL

    def run(self, velocity: Velocity) -> CartContext:
        return CartContext(
            position=self.position,
            velocity=velocity,
            direction=Direction.from_velocity(velocity.x),
        )

    def move_lateral(self) -> CartContext:
        return replace(
            self,
            position=Point(self.position.x + self.velocity.x, self.position.y),
        )

    def with_direction(self, direction: Direction) -> CartContext:
        return replace(self, direction=direction)

    def to_dict(self) -> Dict[str, object]:
        return {
            "position": self.position.to_dict(),
            "velocity": self.velocity.to_dict(),
            "direction": self.direction.value,
        }


# ============================================================
# States
# ============================================================


@dataclass(frozen=True)
class CartIdle:
    context: CartContext

    name = "idle"

    def run(self, velocity: Velocity) -> CartRunning:
        return CartRunning(self.context.run(velocity))

    def update(self) -> CartIdle:
        return self

    def knocked(self) -> CartIdle:
        return self


@dataclass(frozen=True)
class CartRunning:
    context: CartContext

    name = "running"

    def run(self, velocity: Velocity) -> CartRunning:
        return CartRunning(self.context.run(velocity))

    def update(self) -> CartRunning:
        return CartRunning(self.context.move_lateral())

    def knocked(self) -> CartKnocked:
        return CartKnocked(self.context)


@dataclass(frozen=True)
class CartKnocked:
    context: CartContext

    name = "knocked"

    def run(self, velocity: Velocity) -> CartKnocked:
        return self

    def update(self) -> CartKnocked:
        return self

    def knocked(self) -> CartKnocked:
        return self


CartStateMachine = Union[CartIdle, CartRunning, CartKnocked]


# ============================================================
# Cart
# ============================================================


class Cart:
    """
    Player cart.

    Parameters
    ----------
    position : Point
        Initial position.
    velocity : Velocity
        Initial velocity (the cart starts ``Idle`` regardless).
    """

    def __init__(self, position: Point, velocity: Velocity | None = None) -> None:
        self._state_machine: CartStateMachine = CartIdle(
            CartContext(position=position, velocity=velocity or Velocity())
        )

    # ------------------------------------------------------------
    # State machine access
    # ------------------------------------------------------------

    @property
    def state_machine(self) -> CartStateMachine:
        return self._state_machine

    @property
    def state_name(self) -> str:
        return self._state_machine.name

    @property
    def is_knocked(self) -> bool:
        return isinstance(self._state_machine, CartKnocked)

    @property
    def context(self) -> CartContext:
        return self._state_machine.context

    # ------------------------------------------------------------
    # Events
    # ------------------------------------------------------------

    def run(self, velocity: Velocity) -> None:
        """
        Assign a new velocity; Idle carts start running.

        Facing is recomputed from ``velocity.x``. Position is untouched until
        :meth:`update`.
        """
        self._state_machine = self._state_machine.run(velocity)

    def update(self) -> None:
        """
        Integrate one tick (lateral only; longitudinal motion is the scroll).
        """
        self._state_machine = self._state_machine.update()

    def knocked(self) -> None:
        """
        Enter the terminal knocked state. No-op unless running.
        """
        self._state_machine = self._state_machine.knocked()

    def set_direction(self, direction: Direction) -> None:
        """
        Override the facing without touching velocity or state.
        """
        sm = self._state_machine
        self._state_machine = type(sm)(sm.context.with_direction(direction))

    # ------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------

    def get_position(self) -> Point:
        return self.context.position

    def get_velocity(self) -> Velocity:
        return self.context.velocity

    def get_direction(self) -> Direction:
        return self.context.direction

    # ------------------------------------------------------------
    # Collision
    # ------------------------------------------------------------

    def bounding_segments(self) -> Tuple[Segment, Segment, Segment]:
        """
        Top, right and left edges at the current position.

        There is no bottom edge.

        Returns
        -------
        tuple of Segment
        """
        x = self.context.position.x
        y = self.context.position.y
        top = Segment(Point(x - CART_WIDTH, y), Point(x + CART_WIDTH, y))
        right = Segment(Point(x + CART_WIDTH, y), Point(x + CART_WIDTH, y + CART_HEIGHT))
        left = Segment(Point(x - CART_WIDTH, y - CART_HEIGHT), Point(x - CART_WIDTH, y))
        return top, right, left

    def intersect(self, wall: Segment) -> bool:
        """
        Check whether any bounding edge crosses the wall segment.

        Parameters
        ----------
        wall : Segment

        Returns
        -------
        bool
        """
        return any(intersects(edge, wall) for edge in self.bounding_segments())

    # ------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------

    def draw(self, renderer: Renderer) -> None:
        position = Point(self.context.position.x, CART_START_Y)

        if self.is_knocked:
            renderer.draw_knocked_racing_car(position, PLAYER_LIVERY)
            return

        direction = self.context.direction
        if direction is Direction.LEFT:
            renderer.draw_left_facing_racing_car(position, PLAYER_LIVERY)
        elif direction is Direction.RIGHT:
            renderer.draw_right_facing_racing_car(position, PLAYER_LIVERY)
        else:
            renderer.draw_normal_racing_car(position, PLAYER_LIVERY)

    def to_dict(self) -> Dict[str, object]:
        data = self.context.to_dict()
        data["state"] = self.state_name
        return data
