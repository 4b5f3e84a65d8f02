"""
base_driver.py

Abstract base class for scripted and computer drivers.

AGENTS Layer
------------
A driver plays the role of the keyboard: each tick it receives a read-only
snapshot of the race and returns the keys it is holding.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict

from cart_racer.environment.keys import KeySnapshot


class BaseDriver(ABC):
    """
    Abstract input provider.

    Notes
    -----
    - Called synchronously once per tick.
    - Must NOT mutate the race.
    - Must be deterministic for a given snapshot sequence.
    """

    def reset(self) -> None:
        """
        Reset internal driver memory at the start of a run.
        """
        return None

    @abstractmethod
    def keys(self, tick: int, snapshot: Dict[str, Any]) -> KeySnapshot:
        """
        Return the keys held for this tick.

        Parameters
        ----------
        tick : int
            Zero-based tick index.
        snapshot : dict
            Result of :meth:`cart_racer.environment.stage.Stage.snapshot`
            before the tick.

        Returns
        -------
        KeySnapshot
        """
        raise NotImplementedError
