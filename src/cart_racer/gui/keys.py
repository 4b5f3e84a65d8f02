"""
keys.py

Keyboard adapter: pygame key state to logical race key codes.
"""

from __future__ import annotations

from typing import Callable, Dict, Sequence

import pygame

from cart_racer.environment.keys import (
    ARROW_DOWN,
    ARROW_LEFT,
    ARROW_RIGHT,
    ARROW_UP,
    SPACE,
    KeySnapshot,
)


PYGAME_KEYS: Dict[str, int] = {
    SPACE: pygame.K_SPACE,
    ARROW_UP: pygame.K_UP,
    ARROW_DOWN: pygame.K_DOWN,
    ARROW_LEFT: pygame.K_LEFT,
    ARROW_RIGHT: pygame.K_RIGHT,
}


class PygameKeyState:
    """
    Polls ``pygame.key.get_pressed`` and answers ``is_pressed``.

    Parameters
    ----------
    get_pressed : callable, optional
        Source of the pressed-key sequence; defaults to
        ``pygame.key.get_pressed``.
    """

    def __init__(self, get_pressed: Callable[[], Sequence[bool]] | None = None) -> None:
        self._get_pressed = get_pressed or pygame.key.get_pressed

    def is_pressed(self, code: str) -> bool:
        key = PYGAME_KEYS.get(code)
        if key is None:
            return False
        return bool(self._get_pressed()[key])

    def poll(self) -> KeySnapshot:
        """
        Freeze the keyboard into a snapshot for one tick.
        """
        pressed = self._get_pressed()
        return KeySnapshot(frozenset(code for code, key in PYGAME_KEYS.items() if pressed[key]))
