"""
piece.py

Moving line-segment entities ("pieces") that scroll past the cart.

A piece is a segment ``(p, q)`` that translates in lockstep under its own
velocity. Walls and ornaments share the contract through the :class:`Piece`
protocol but implement it independently.

State machine
-------------
Pieces have a single state, ``Running``. Two events exist:

- ``Run(velocity)``: replace the velocity, no movement
- ``Update``: integrate once, ``p = p.add(v)`` and ``q = q.add(v)``

Velocity assignment and integration are separate phases so that a tick
applies velocity exactly once.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Protocol, Tuple, Union

from cart_racer.core.geometry import Point, Segment, Velocity
from cart_racer.core.render import Renderer


# ============================================================
# Context & Events
# ============================================================


@dataclass(frozen=True)
class MotionContext:
    """
    Mutable-by-replacement state of a piece.

    Parameters
    ----------
    p : Point
        First endpoint.
    q : Point
        Second endpoint.
    velocity : Velocity
        Scroll velocity applied on every update.
    """

    p: Point
    q: Point
    velocity: Velocity

    def run(self, velocity: Velocity) -> MotionContext:
        return replace(self, velocity=velocity)

    def update(self) -> MotionContext:
        return MotionContext(
            p=self.p.add(self.velocity),
            q=self.q.add(self.velocity),
            velocity=self.velocity,
        )


@dataclass(frozen=True)
class Run:
    velocity: Velocity


@dataclass(frozen=True)
class Update:
    pass


PieceEvent = Union[Run, Update]


# ============================================================
# State Machine
# ============================================================


@dataclass(frozen=True)
class PieceRunning:
    """
    The only piece state.
    """

    context: MotionContext

    def run(self, velocity: Velocity) -> PieceRunning:
        return PieceRunning(self.context.run(velocity))

    def update(self) -> PieceRunning:
        return PieceRunning(self.context.update())

    def transition(self, event: PieceEvent) -> PieceStateMachine:
        """
        Consume an event and return the next state.

        Raises
        ------
        TypeError
            If the event is not a piece event.
        """
        if isinstance(event, Run):
            return self.run(event.velocity)
        if isinstance(event, Update):
            return self.update()
        raise TypeError(f"Unsupported piece event: {event!r}")


PieceStateMachine = PieceRunning


def new_state_machine(p: Point, q: Point, velocity: Velocity) -> PieceStateMachine:
    return PieceRunning(MotionContext(p=p, q=q, velocity=velocity))


# ============================================================
# Piece Protocol
# ============================================================


class Piece(Protocol):
    """
    Uniform contract for scrolling segments.
    """

    def get_state_machine(self) -> PieceStateMachine:  # pragma: no cover
        ...

    def set_state_machine(self, state_machine: PieceStateMachine) -> None:  # pragma: no cover
        ...

    def run(self, velocity: Velocity) -> None:  # pragma: no cover
        ...

    def update(self) -> None:  # pragma: no cover
        ...

    def draw(self, renderer: Renderer) -> None:  # pragma: no cover
        ...

    @property
    def segment(self) -> Segment:  # pragma: no cover
        ...


# ============================================================
# Wall
# ============================================================


class Wall:
    """
    Collision boundary segment.

    Walls only ever receive a longitudinal scroll velocity; they never
    rotate or stretch.
    """

    def __init__(self, p: Point, q: Point, velocity: Velocity | None = None) -> None:
        self._state_machine: PieceStateMachine = new_state_machine(
            p, q, velocity if velocity is not None else Velocity()
        )

    @staticmethod
    def new(p: Point, q: Point, velocity: Velocity) -> Wall:
        return Wall(p, q, velocity)

    @staticmethod
    def from_coords(coords: Tuple[float, float, float, float]) -> Wall:
        x1, y1, x2, y2 = coords
        return Wall(Point(x1, y1), Point(x2, y2))

    def get_state_machine(self) -> PieceStateMachine:
        return self._state_machine

    def set_state_machine(self, state_machine: PieceStateMachine) -> None:
        self._state_machine = state_machine

    def run(self, velocity: Velocity) -> None:
        self._state_machine = self._state_machine.transition(Run(velocity))

    def update(self) -> None:
        self._state_machine = self._state_machine.transition(Update())

    @property
    def p(self) -> Point:
        return self._state_machine.context.p

    @property
    def q(self) -> Point:
        return self._state_machine.context.q

    @property
    def velocity(self) -> Velocity:
        return self._state_machine.context.velocity

    @property
    def segment(self) -> Segment:
        return Segment(self.p, self.q)

    def draw(self, renderer: Renderer) -> None:
        renderer.line(self.p, self.q)

    def __repr__(self) -> str:
        return f"Wall(p={self.p!r}, q={self.q!r})"


# ============================================================
# Ornament
# ============================================================


GOAL_OFFSET: Tuple[float, float] = (100.0, 7450.0)
GOAL_ROW_SPACING: float = 25.0
GOAL_ROWS: Tuple[str, ...] = (
    "□■□□" * 15 + "■",
    "□□■□" * 15 + "□■",
)

# (dx, dy, fruit) relative to the ornament anchor.
FRUIT_TREES: Tuple[Tuple[float, float, str], ...] = (
    (30.0, 100.0, "apple"),
    (400.0, 500.0, "orange"),
    (400.0, 1000.0, "cherry"),
    (120.0, 1500.0, "lemon"),
    (620.0, 2000.0, "plum"),
    (240.0, 2300.0, "apple"),
    (620.0, 3200.0, "orange"),
    (400.0, 4200.0, "cherry"),
    (320.0, 5000.0, "lemon"),
    (-50.0, 6000.0, "plum"),
)


class Ornament:
    """
    Scenery strip: checkered finish banner and roadside fruit trees.

    Everything is drawn relative to ``p`` so the whole strip scrolls with
    the track.
    """

    def __init__(self, p: Point, q: Point, velocity: Velocity | None = None) -> None:
        self._state_machine: PieceStateMachine = new_state_machine(
            p, q, velocity if velocity is not None else Velocity()
        )

    @staticmethod
    def new(p: Point, q: Point, velocity: Velocity) -> Ornament:
        return Ornament(p, q, velocity)

    def get_state_machine(self) -> PieceStateMachine:
        return self._state_machine

    def set_state_machine(self, state_machine: PieceStateMachine) -> None:
        self._state_machine = state_machine

    def run(self, velocity: Velocity) -> None:
        self._state_machine = self._state_machine.transition(Run(velocity))

    def update(self) -> None:
        self._state_machine = self._state_machine.transition(Update())

    @property
    def p(self) -> Point:
        return self._state_machine.context.p

    @property
    def q(self) -> Point:
        return self._state_machine.context.q

    @property
    def segment(self) -> Segment:
        return Segment(self.p, self.q)

    @property
    def goal_line_y(self) -> float:
        return self.p.y + GOAL_OFFSET[1]

    def draw(self, renderer: Renderer) -> None:
        anchor = self.p
        offset = 0.0
        for row in GOAL_ROWS:
            renderer.text(
                Point(anchor.x + GOAL_OFFSET[0], self.goal_line_y + offset),
                row,
                size=32,
                align="center",
            )
            offset += GOAL_ROW_SPACING

        for dx, dy, fruit in FRUIT_TREES:
            renderer.draw_fruit_tree(Point(anchor.x + dx, anchor.y + dy), fruit)
