"""
geometry.py

Planar primitives for the cart racing simulation core.

This module defines:

- Immutable Point and Velocity value types
- Directed Segment used by walls, cart edges and rival probes
- Exact segment intersection (orientation-sign test)
- Vectorized intersection against a wall array

Notes
-----
Screen space is used throughout: +y points forward along the track and the
world scrolls towards -y while the cart drives. ``Point.add`` therefore
*subtracts* the velocity. This sign convention is load-bearing.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Tuple

import numpy as np
from numpy.typing import NDArray


FloatArray = NDArray[np.float64]
BoolArray = NDArray[np.bool_]


# ============================================================
# Value Types
# ============================================================


@dataclass(frozen=True)
class Velocity:
    """
    Plain 2D velocity vector [px / tick].

    Parameters
    ----------
    x : float
        Lateral component.
    y : float
        Longitudinal component.
    """

    x: float = 0.0
    y: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class Point:
    """
    Immutable screen-space position.

    Parameters
    ----------
    x : float
    y : float
    """

    x: float = 0.0
    y: float = 0.0

    def add(self, velocity: Velocity) -> Point:
        """
        Translate the point by a velocity in the scrolling convention.

        The world moves backward while the viewpoint moves forward, so the
        velocity is subtracted.

        Parameters
        ----------
        velocity : Velocity

        Returns
        -------
        Point
            ``Point(x - velocity.x, y - velocity.y)``
        """
        return Point(self.x - velocity.x, self.y - velocity.y)

    def distance_to(self, other: Point) -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class Segment:
    """
    Directed line segment from ``p`` to ``q``.
    """

    p: Point
    q: Point

    @staticmethod
    def from_coords(x1: float, y1: float, x2: float, y2: float) -> Segment:
        return Segment(Point(x1, y1), Point(x2, y2))

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.p.x, self.p.y, self.q.x, self.q.y)

    @property
    def min_y(self) -> float:
        return min(self.p.y, self.q.y)

    @property
    def max_y(self) -> float:
        return max(self.p.y, self.q.y)


# ============================================================
# Intersection
# ============================================================


def _side(a: Segment, point: Point) -> float:
    # Signed cross value of ``point`` against the supporting line of ``a``.
    return (a.p.x - a.q.x) * (point.y - a.p.y) + (a.p.y - a.q.y) * (a.p.x - point.x)


def intersects(a: Segment, b: Segment) -> bool:
    """
    Test whether two segments cross.

    Both endpoints of each segment must lie strictly on opposite sides of
    the other segment's supporting line. Collinear or touching segments
    are reported as not crossing.

    Parameters
    ----------
    a : Segment
    b : Segment

    Returns
    -------
    bool
        True if the open segments cross.
    """
    return (
        _side(a, b.p) * _side(a, b.q) < 0.0
        and _side(b, a.p) * _side(b, a.q) < 0.0
    )


def segments_to_array(segments: "list[Segment] | tuple[Segment, ...]") -> FloatArray:
    """
    Pack segments into an ``(N, 4)`` float64 array of ``(x1, y1, x2, y2)``.
    """
    if len(segments) == 0:
        return np.zeros((0, 4), dtype=np.float64)
    return np.asarray([s.as_tuple() for s in segments], dtype=np.float64)


def intersects_array(segment: Segment, walls: FloatArray) -> BoolArray:
    """
    Vectorized :func:`intersects` of one segment against many.

    Parameters
    ----------
    segment : Segment
        Probe segment.
    walls : ndarray of shape (N, 4)
        Wall coordinates ``(x1, y1, x2, y2)``.

    Returns
    -------
    ndarray of shape (N,), dtype=bool
        True where the probe crosses the wall.
    """
    if walls.ndim != 2 or walls.shape[1] != 4:
        raise ValueError("walls must be of shape (N, 4)")

    ax, ay, bx, by = segment.as_tuple()
    wpx, wpy, wqx, wqy = walls[:, 0], walls[:, 1], walls[:, 2], walls[:, 3]

    # Wall endpoints against the probe line.
    side_p = (ax - bx) * (wpy - ay) + (ay - by) * (ax - wpx)
    side_q = (ax - bx) * (wqy - ay) + (ay - by) * (ax - wqx)

    # Probe endpoints against each wall line.
    side_a = (wpx - wqx) * (ay - wpy) + (wpy - wqy) * (wpx - ax)
    side_b = (wpx - wqx) * (by - wpy) + (wpy - wqy) * (wpx - bx)

    return (side_p * side_q < 0.0) & (side_a * side_b < 0.0)


def intersects_any(segment: Segment, walls: FloatArray) -> bool:
    """
    Return True if the segment crosses at least one wall.
    """
    if walls.shape[0] == 0:
        return False
    return bool(np.any(intersects_array(segment, walls)))
