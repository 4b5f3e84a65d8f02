"""
conftest.py

Shared test doubles: a renderer that records draw calls and a manual clock.
"""

from __future__ import annotations

from typing import Any, List, Tuple

import pytest

from cart_racer.core.geometry import Point


class RecordingRenderer:
    """Renderer double that stores every call as ``(name, args, kwargs)``."""

    def __init__(self) -> None:
        self.calls: List[Tuple[str, Tuple[Any, ...], dict]] = []

    def _record(self, name: str, *args: Any, **kwargs: Any) -> None:
        self.calls.append((name, args, kwargs))

    def clear(self) -> None:
        self._record("clear")

    def text(self, point: Point, text: str, *, size: int = 28, align: str = "left") -> None:
        self._record("text", point, text, size=size, align=align)

    def line(self, p: Point, q: Point) -> None:
        self._record("line", p, q)

    def draw_normal_racing_car(self, position: Point, livery: str = "red") -> None:
        self._record("normal", position, livery)

    def draw_left_facing_racing_car(self, position: Point, livery: str = "red") -> None:
        self._record("left", position, livery)

    def draw_right_facing_racing_car(self, position: Point, livery: str = "red") -> None:
        self._record("right", position, livery)

    def draw_knocked_racing_car(self, position: Point, livery: str = "red") -> None:
        self._record("knocked", position, livery)

    def draw_fruit_tree(self, position: Point, fruit: str) -> None:
        self._record("tree", position, fruit)

    def names(self) -> List[str]:
        return [name for name, _, _ in self.calls]

    def texts(self) -> List[str]:
        return [args[1] for name, args, _ in self.calls if name == "text"]


class ManualClock:
    """Millisecond clock moved by hand."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = float(start)

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


@pytest.fixture
def renderer() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()
