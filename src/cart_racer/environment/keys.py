"""
keys.py

Polled input snapshot consumed by the race state machine.

The race never sees raw key events. Each tick it receives an object that
answers ``is_pressed(code)`` for the logical codes below.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Protocol


SPACE = "Space"
ARROW_UP = "ArrowUp"
ARROW_DOWN = "ArrowDown"
ARROW_LEFT = "ArrowLeft"
ARROW_RIGHT = "ArrowRight"

KEY_CODES: FrozenSet[str] = frozenset({SPACE, ARROW_UP, ARROW_DOWN, ARROW_LEFT, ARROW_RIGHT})


class KeyState(Protocol):
    """Queryable key snapshot."""

    def is_pressed(self, code: str) -> bool:  # pragma: no cover
        ...


@dataclass(frozen=True)
class KeySnapshot:
    """
    Immutable set of held logical keys.

    Parameters
    ----------
    pressed : frozenset of str
        Held key codes.

    Raises
    ------
    ValueError
        If an unknown key code is given.
    """

    pressed: FrozenSet[str] = frozenset()

    def __post_init__(self) -> None:
        unknown = set(self.pressed) - KEY_CODES
        if unknown:
            raise ValueError(f"Unknown key codes: {sorted(unknown)}")
        object.__setattr__(self, "pressed", frozenset(self.pressed))

    @staticmethod
    def of(*codes: str) -> KeySnapshot:
        return KeySnapshot(frozenset(codes))

    @staticmethod
    def capture(keys: KeyState) -> KeySnapshot:
        """
        Freeze any key state into a snapshot (used for replay recording).
        """
        return KeySnapshot(frozenset(code for code in KEY_CODES if keys.is_pressed(code)))

    def is_pressed(self, code: str) -> bool:
        return code in self.pressed

    def to_list(self) -> List[str]:
        return sorted(self.pressed)

    @staticmethod
    def from_list(codes: Iterable[str]) -> KeySnapshot:
        return KeySnapshot(frozenset(codes))


NO_KEYS = KeySnapshot()
