"""
track.py

Static track geometry for the racing simulation.

A track is an immutable ``(N, 4)`` array of wall segments
``(x1, y1, x2, y2)`` in screen space at zero scroll. Levels are stored as
versioned JSON descriptors::

    {
      "version": 1,
      "name": "default",
      "walls": [[x1, y1, x2, y2], ...]
    }

The race rebuilds live :class:`~cart_racer.core.piece.Wall` objects from the
layout at the start of every lap.

Notes
-----
This module belongs to the CORE layer and must not depend on:
- GUI
- Audio
- Real-time clocks
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List

import numpy as np

from cart_racer.core.geometry import FloatArray
from cart_racer.core.piece import Wall
from cart_racer.utils.registry import Registry


LEVEL_FORMAT_VERSION: int = 1
LEVELS_DIR: Path = Path(__file__).resolve().parent / "levels"


@dataclass(frozen=True)
class TrackLayout:
    """
    Immutable wall layout.

    Parameters
    ----------
    segments : ndarray of shape (N, 4)
        Wall coordinates ``(x1, y1, x2, y2)``.
    name : str
        Level name.

    Raises
    ------
    ValueError
        If the array has the wrong shape or contains non-finite values.
    """

    segments: FloatArray
    name: str = "custom"

    def __post_init__(self) -> None:
        segments = np.array(self.segments, dtype=np.float64)

        if segments.size == 0:
            segments = segments.reshape(0, 4)

        if segments.ndim != 2 or segments.shape[1] != 4:
            raise ValueError("segments must be of shape (N, 4)")

        if not np.all(np.isfinite(segments)):
            raise ValueError("segments must contain finite coordinates")

        segments.setflags(write=False)
        object.__setattr__(self, "segments", segments)

    # ------------------------------------------------------------

    def __len__(self) -> int:
        return int(self.segments.shape[0])

    @property
    def length(self) -> float:
        """
        Longitudinal extent of the layout (highest wall endpoint).
        """
        if len(self) == 0:
            return 0.0
        return float(np.max(self.segments[:, [1, 3]]))

    def build_walls(self) -> List[Wall]:
        """
        Create fresh, stationary walls for a new lap.
        """
        return [Wall.from_coords(tuple(float(v) for v in row)) for row in self.segments]

    # ------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": LEVEL_FORMAT_VERSION,
            "name": self.name,
            "walls": self.segments.tolist(),
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> TrackLayout:
        """
        Parse a level descriptor.

        Raises
        ------
        ValueError
            On unsupported versions or malformed walls.
        """
        version = data.get("version")
        if version != LEVEL_FORMAT_VERSION:
            raise ValueError(f"Unsupported level format version: {version!r}")

        walls = data.get("walls")
        if not isinstance(walls, list):
            raise ValueError("Level descriptor must contain a 'walls' list")

        for row in walls:
            if not isinstance(row, (list, tuple)) or len(row) != 4:
                raise ValueError(f"Wall entry must have 4 coordinates: {row!r}")

        segments = np.asarray(walls, dtype=np.float64).reshape(-1, 4)
        return TrackLayout(segments=segments, name=str(data.get("name", "custom")))

    @staticmethod
    def load(path: str | Path) -> TrackLayout:
        with Path(path).open("r", encoding="utf-8") as f:
            return TrackLayout.from_dict(json.load(f))

    def save(self, path: str | Path) -> None:
        with Path(path).open("w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)


# ================================================================
# Track Builders
# ================================================================

_track_registry: Registry[TrackLayout] = Registry("track")


def _default() -> TrackLayout:
    return TrackLayout.load(LEVELS_DIR / "default.json")


def _straight(
    length: float = 10000.0,
    left: float = 100.0,
    right: float = 700.0,
) -> TrackLayout:
    segments = np.array(
        [[left, 0.0, left, length], [right, 0.0, right, length]],
        dtype=np.float64,
    )
    return TrackLayout(segments=segments, name="straight")


def _empty() -> TrackLayout:
    return TrackLayout(segments=np.zeros((0, 4), dtype=np.float64), name="empty")


_track_registry.register("default", _default)
_track_registry.register("straight", _straight)
_track_registry.register("empty", _empty)


# ================================================================
# Public API
# ================================================================


class TrackFactory:
    """
    Public track factory interface.
    """

    @staticmethod
    def create(name: str, **kwargs) -> TrackLayout:
        return _track_registry.create(name, **kwargs)

    @staticmethod
    def available() -> list[str]:
        return _track_registry.available
