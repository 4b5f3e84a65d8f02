"""
render.py

Rendering sink contract consumed by the simulation core.

The core never reads anything back from a renderer. Implementations live in
the GUI layer (pygame) or in tests (recording doubles).

Coordinates are screen-space with +y pointing up the track; renderers are
responsible for flipping into their own pixel space.
"""

from __future__ import annotations

from typing import Protocol

from cart_racer.core.geometry import Point


PLAYER_LIVERY = "red"
RIVAL_LIVERY = "blue"


class Renderer(Protocol):
    """
    Structural protocol for draw targets.
    """

    def clear(self) -> None:  # pragma: no cover
        """Clear the whole canvas."""

    def text(
        self,
        point: Point,
        text: str,
        *,
        size: int = 28,
        align: str = "left",
    ) -> None:  # pragma: no cover
        """Draw text anchored at ``point`` with ``left``/``center``/``right`` alignment."""

    def line(self, p: Point, q: Point) -> None:  # pragma: no cover
        """Draw a wall segment."""

    def draw_normal_racing_car(self, position: Point, livery: str = PLAYER_LIVERY) -> None:  # pragma: no cover
        """Car facing straight ahead."""

    def draw_left_facing_racing_car(self, position: Point, livery: str = PLAYER_LIVERY) -> None:  # pragma: no cover
        """Car steering left."""

    def draw_right_facing_racing_car(self, position: Point, livery: str = PLAYER_LIVERY) -> None:  # pragma: no cover
        """Car steering right."""

    def draw_knocked_racing_car(self, position: Point, livery: str = PLAYER_LIVERY) -> None:  # pragma: no cover
        """Car after a collision."""

    def draw_fruit_tree(self, position: Point, fruit: str) -> None:  # pragma: no cover
        """Roadside decoration."""
