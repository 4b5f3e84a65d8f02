"""
replay.py

Deterministic replay logger for races.

Each tick is written as one JSON object:

- tick
- keys held during the tick
- stage snapshot after the tick

The logger:

- Contains no randomness
- Has no timestamps
- Does not depend on GUI
- Does not depend on drivers

Log format:
JSON Lines (one JSON object per tick)

This module belongs to the UTILS layer.
"""

from __future__ import annotations

import json
from pathlib import Path
from types import TracebackType
from typing import Any, Dict, Iterator, List, Optional, TextIO, Type

from cart_racer.environment.keys import KeySnapshot, KeyState


class ReplayLogger:
    """
    Deterministic replay logger.

    Parameters
    ----------
    path : str | Path
        Output log file path.
    """

    def __init__(self, path: str | Path) -> None:
        self._path: Path = Path(path)
        self._file: TextIO = self._path.open("w", encoding="utf-8")

    def __enter__(self) -> ReplayLogger:
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.close()

    @property
    def path(self) -> Path:
        return self._path

    # ------------------------------------------------------------------

    def log_tick(
        self,
        *,
        tick: int,
        keys: KeyState,
        snapshot: Dict[str, Any],
    ) -> None:
        """
        Log a single race tick.

        Parameters
        ----------
        tick : int
            Zero-based tick index.
        keys : KeyState
            Keys applied during the tick.
        snapshot : dict
            Stage snapshot after the tick.
        """
        record: Dict[str, Any] = {
            "tick": tick,
            "keys": KeySnapshot.capture(keys).to_list(),
            "snapshot": snapshot,
        }

        self._file.write(json.dumps(record, sort_keys=True))
        self._file.write("\n")

    # ------------------------------------------------------------------

    def close(self) -> None:
        """
        Close log file.
        """
        if not self._file.closed:
            self._file.close()

    # ------------------------------------------------------------------

    @staticmethod
    def replay(path: str | Path) -> Iterator[Dict[str, Any]]:
        """
        Replay log file.

        Parameters
        ----------
        path : str | Path

        Returns
        -------
        Iterator[dict]
            Sequence of logged tick dictionaries.
        """
        with Path(path).open("r", encoding="utf-8") as f:
            for line in f:
                if line.strip():
                    yield json.loads(line)


def keys_from_replay(path: str | Path) -> List[KeySnapshot]:
    """
    Extract the recorded key sequence, one snapshot per tick.
    """
    return [KeySnapshot.from_list(record["keys"]) for record in ReplayLogger.replay(path)]
