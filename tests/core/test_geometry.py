"""
test_geometry.py

Unit tests for core.geometry.

These tests validate:

- Scrolling sign convention of Point.add
- Segment intersection ground truth and symmetry
- Vectorized intersection consistency with the scalar test

All tests are deterministic and contain no randomness.
"""

from __future__ import annotations

import itertools

import numpy as np
import pytest

from cart_racer.core.geometry import (
    Point,
    Segment,
    Velocity,
    intersects,
    intersects_any,
    intersects_array,
    segments_to_array,
)


def test_point_add_subtracts_velocity() -> None:
    assert Point(10.0, 20.0).add(Velocity(3.0, 5.0)) == Point(7.0, 15.0)


def test_point_add_zero_velocity_is_identity() -> None:
    p = Point(1.5, -2.5)
    assert p.add(Velocity()) == p


def test_distance_to() -> None:
    assert Point(0.0, 0.0).distance_to(Point(3.0, 4.0)) == pytest.approx(5.0)


def test_crossing_segments_intersect() -> None:
    a = Segment.from_coords(0.0, 0.0, 10.0, 10.0)
    b = Segment.from_coords(0.0, 10.0, 10.0, 0.0)
    assert intersects(a, b)


def test_parallel_segments_do_not_intersect() -> None:
    a = Segment.from_coords(0.0, 0.0, 10.0, 0.0)
    b = Segment.from_coords(0.0, 5.0, 10.0, 5.0)
    assert not intersects(a, b)


def test_touching_endpoint_is_not_a_crossing() -> None:
    a = Segment.from_coords(0.0, 0.0, 10.0, 0.0)
    b = Segment.from_coords(10.0, 0.0, 10.0, 10.0)
    assert not intersects(a, b)


def test_collinear_overlap_is_not_a_crossing() -> None:
    a = Segment.from_coords(0.0, 0.0, 10.0, 0.0)
    b = Segment.from_coords(5.0, 0.0, 15.0, 0.0)
    assert not intersects(a, b)


def test_lines_cross_but_segments_do_not() -> None:
    a = Segment.from_coords(0.0, 0.0, 1.0, 1.0)
    b = Segment.from_coords(5.0, 0.0, 4.0, 1.0)
    assert not intersects(a, b)


SEGMENTS = [
    Segment.from_coords(0.0, 0.0, 10.0, 10.0),
    Segment.from_coords(0.0, 10.0, 10.0, 0.0),
    Segment.from_coords(5.0, -5.0, 5.0, 15.0),
    Segment.from_coords(-1.0, 3.0, 2.0, 3.0),
    Segment.from_coords(20.0, 20.0, 30.0, 25.0),
    Segment.from_coords(0.0, 0.0, 10.0, 0.0),
]


@pytest.mark.parametrize("a,b", list(itertools.product(SEGMENTS, SEGMENTS)))
def test_intersection_is_symmetric(a: Segment, b: Segment) -> None:
    assert intersects(a, b) == intersects(b, a)


@pytest.mark.parametrize("a,b", list(itertools.product(SEGMENTS, SEGMENTS)))
def test_intersection_ignores_endpoint_order(a: Segment, b: Segment) -> None:
    reversed_b = Segment(b.q, b.p)
    assert intersects(a, b) == intersects(a, reversed_b)


def test_vectorized_matches_scalar() -> None:
    walls = segments_to_array(SEGMENTS)
    for probe in SEGMENTS:
        expected = [intersects(probe, w) for w in SEGMENTS]
        assert intersects_array(probe, walls).tolist() == expected


def test_intersects_any_on_empty_array() -> None:
    assert not intersects_any(SEGMENTS[0], segments_to_array([]))


def test_intersects_array_rejects_bad_shape() -> None:
    with pytest.raises(ValueError):
        intersects_array(SEGMENTS[0], np.zeros((3, 3)))


def test_segment_y_extent() -> None:
    s = Segment.from_coords(0.0, 30.0, 5.0, -10.0)
    assert s.min_y == -10.0
    assert s.max_y == 30.0
