"""
forward_driver.py

Simple drivers: full throttle straight ahead, and key-script playback.

AGENTS Layer
------------
- No environment access
- No randomness
- Fully deterministic
"""

from __future__ import annotations

from typing import Any, Dict, Sequence

from cart_racer.agents.base_driver import BaseDriver
from cart_racer.environment.keys import ARROW_UP, NO_KEYS, SPACE, KeySnapshot


class ForwardDriver(BaseDriver):
    """
    Presses Space on the title screen, then holds ArrowUp.
    """

    def keys(self, tick: int, snapshot: Dict[str, Any]) -> KeySnapshot:
        if snapshot.get("state") == "ready":
            return KeySnapshot.of(SPACE)
        if snapshot.get("state") == "playing":
            return KeySnapshot.of(ARROW_UP)
        return NO_KEYS


class ScriptedDriver(BaseDriver):
    """
    Plays back a fixed key sequence, then releases everything.

    Parameters
    ----------
    script : sequence of KeySnapshot
        One entry per tick.
    """

    def __init__(self, script: Sequence[KeySnapshot]) -> None:
        self._script = list(script)

    def __len__(self) -> int:
        return len(self._script)

    def keys(self, tick: int, snapshot: Dict[str, Any]) -> KeySnapshot:
        del snapshot
        if 0 <= tick < len(self._script):
            return self._script[tick]
        return NO_KEYS
