"""
cart_racer.simulation.runner_batch

Batch (headless, synchronous) race runner.

SIMULATION Layer
----------------
Used for:
- Deterministic regression runs
- Replay recording
- Driver evaluation
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

from cart_racer.agents.base_driver import BaseDriver
from cart_racer.environment.keys import KeyState
from cart_racer.utils.replay import ReplayLogger


_logger = logging.getLogger(__name__)

FINISHED_STATES = frozenset({"game_over", "game_clear"})
TICK_MS: float = 1000.0 / 60.0


class TickClock:
    """
    Millisecond clock that only moves when the runner says so.

    Pass it as the stage clock to make recorded race times a pure function
    of the tick count.
    """

    def __init__(self, tick_ms: float = TICK_MS) -> None:
        if tick_ms <= 0.0:
            raise ValueError("tick_ms must be positive")
        self._tick_ms = float(tick_ms)
        self._ticks = 0

    def __call__(self) -> float:
        return self._ticks * self._tick_ms

    def advance(self) -> None:
        self._ticks += 1


# ================================================================
# STAGE PROTOCOL
# ================================================================


class StageLike(Protocol):
    """
    Structural protocol for the batch runner.
    """

    @property
    def state_name(self) -> str:  # pragma: no cover
        ...

    def update(self, keys: KeyState) -> Any:  # pragma: no cover
        ...

    def snapshot(self) -> Dict[str, Any]:  # pragma: no cover
        ...


# ================================================================
# CONFIGURATION
# ================================================================


@dataclass(frozen=True)
class BatchRunnerConfig:
    """
    Configuration for batch execution.

    Parameters
    ----------
    max_ticks : int
        Maximum number of race ticks.
    stop_when_finished : bool
        Stop as soon as the race reaches game over or race clear.
    """

    max_ticks: int
    stop_when_finished: bool = True

    def __post_init__(self) -> None:
        if self.max_ticks < 0:
            raise ValueError("max_ticks must be non-negative")


# ================================================================
# RESULT CONTAINER
# ================================================================


@dataclass(frozen=True)
class BatchRaceResult:
    """
    Summary of a completed batch run.

    Parameters
    ----------
    ticks : int
        Number of executed ticks.
    final_state : str
        Stage state name after the last tick.
    snapshot : dict
        Final stage snapshot.
    """

    ticks: int
    final_state: str
    snapshot: Dict[str, Any]

    @property
    def finished(self) -> bool:
        return self.final_state in FINISHED_STATES


# ================================================================
# RUNNER
# ================================================================


class BatchRunner:
    """
    Authoritative synchronous race loop.

    Loop structure::

        for tick in range(max_ticks):
            keys = driver.keys(tick, stage.snapshot())
            stage.update(keys)

    Notes
    -----
    - One call to ``update`` is one tick; no sleeping.
    - Deterministic given the driver and the stage clock.
    """

    def __init__(
        self,
        stage: StageLike,
        driver: BaseDriver,
        config: BatchRunnerConfig,
        *,
        replay: Optional[ReplayLogger] = None,
        clock: Optional[TickClock] = None,
    ) -> None:
        self._stage: StageLike = stage
        self._driver: BaseDriver = driver
        self._config: BatchRunnerConfig = config
        self._replay: Optional[ReplayLogger] = replay
        self._clock: Optional[TickClock] = clock

    # ------------------------------------------------------------

    @property
    def config(self) -> BatchRunnerConfig:
        return self._config

    # ------------------------------------------------------------

    def run(self) -> BatchRaceResult:
        """
        Drive the stage until it finishes or ``max_ticks`` is reached.

        Returns
        -------
        BatchRaceResult
        """
        self._driver.reset()

        ticks = 0
        while ticks < self._config.max_ticks:
            snapshot = self._stage.snapshot()
            keys = self._driver.keys(ticks, snapshot)
            self._stage.update(keys)
            if self._clock is not None:
                self._clock.advance()

            if self._replay is not None:
                self._replay.log_tick(tick=ticks, keys=keys, snapshot=self._stage.snapshot())

            ticks += 1
            if self._config.stop_when_finished and self._stage.state_name in FINISHED_STATES:
                break

        final = self._stage.snapshot()
        _logger.debug("Batch run stopped after %d ticks in state %s", ticks, final["state"])
        return BatchRaceResult(ticks=ticks, final_state=final["state"], snapshot=final)
