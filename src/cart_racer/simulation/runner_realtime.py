"""
cart_racer.simulation.runner_realtime

Realtime (wall-clock paced) race runner.

The stage is stepped at a fixed 60 ticks per second. Elapsed wall time is
accumulated and drained one ``frame_ms`` at a time, so the number of ticks
depends only on elapsed time, never on how fast frames are drawn. One draw
follows each batch of ticks.

Sleeping is used only to pace wall-clock speed and never affects simulation
determinism.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from cart_racer.core.render import Renderer
from cart_racer.environment.keys import KeyState


_logger = logging.getLogger(__name__)

FRAME_SIZE_MS: float = 1000.0 / 60.0


class StageLike(Protocol):
    """Structural protocol for realtime runners."""

    @property
    def state_name(self) -> str:  # pragma: no cover
        ...

    def update(self, keys: KeyState) -> object:  # pragma: no cover
        ...

    def draw(self, renderer: Renderer) -> None:  # pragma: no cover
        ...


KeySource = Callable[[], KeyState]


@dataclass(frozen=True)
class RunnerConfig:
    """Configuration for realtime execution.

    Parameters
    ----------
    frame_ms : float
        Fixed tick length in milliseconds.
    max_catchup_ticks : int | None
        Upper bound on ticks run between two draws. Backlog beyond it is
        dropped. ``None`` never drops time.
    max_ticks : int | None
        Optional hard cap on ticks for the run.
    busy_wait : bool
        If True, use a short busy-wait for sub-millisecond accuracy.
    """

    frame_ms: float = FRAME_SIZE_MS
    max_catchup_ticks: Optional[int] = 10
    max_ticks: Optional[int] = None
    busy_wait: bool = False

    def __post_init__(self) -> None:
        if self.frame_ms <= 0.0:
            raise ValueError("frame_ms must be positive")


@dataclass(frozen=True)
class RealtimeResult:
    """Result summary returned by :meth:`RealtimeRunner.run`.

    Parameters
    ----------
    ticks : int
        Number of stage ticks executed.
    frames : int
        Number of frames drawn.
    wall_time_s : float
        Total wall-clock time.
    """

    ticks: int
    frames: int
    wall_time_s: float


class RealtimeRunner:
    """Fixed-timestep race loop.

    Parameters
    ----------
    stage : StageLike
        Race to drive.
    key_source : Callable[[], KeyState]
        Polled once per tick for the held keys.
    renderer : Renderer
        Draw target, used once per frame.
    config : RunnerConfig
    on_tick : Callable[[int], None] | None
        Optional callback invoked after every tick with the tick index.
    on_frame : Callable[[], None] | None
        Optional callback invoked after every draw (e.g. display flip).
    should_stop : Callable[[], bool] | None
        Polled once per frame; returning True ends the run (window closed).
    """

    def __init__(
        self,
        stage: StageLike,
        key_source: KeySource,
        renderer: Renderer,
        config: RunnerConfig | None = None,
        *,
        on_tick: Callable[[int], None] | None = None,
        on_frame: Callable[[], None] | None = None,
        should_stop: Callable[[], bool] | None = None,
    ) -> None:
        self._stage = stage
        self._key_source = key_source
        self._renderer = renderer
        self._config = config or RunnerConfig()
        self._on_tick = on_tick
        self._on_frame = on_frame
        self._should_stop = should_stop

        self._accumulated_ms: float = 0.0
        self._last_frame_ms: Optional[float] = None
        self._ticks: int = 0
        self._frames: int = 0
        self._stop_flag = False

    @property
    def config(self) -> RunnerConfig:
        """Return the runner configuration."""
        return self._config

    @property
    def ticks(self) -> int:
        return self._ticks

    @property
    def frames(self) -> int:
        return self._frames

    def stop(self) -> None:
        """Request the run loop to stop at the next frame boundary."""
        self._stop_flag = True

    # ------------------------------------------------------------

    def frame(self, now_ms: float) -> int:
        """Run every tick due at ``now_ms`` and draw once.

        Parameters
        ----------
        now_ms : float
            Current time in milliseconds (any monotonic basis).

        Returns
        -------
        int
            Number of ticks executed for this frame.
        """
        if self._last_frame_ms is None:
            self._last_frame_ms = now_ms
        self._accumulated_ms += max(0.0, now_ms - self._last_frame_ms)
        self._last_frame_ms = now_ms

        frame_ms = self._config.frame_ms
        limit = self._config.max_catchup_ticks
        if limit is not None and self._accumulated_ms > frame_ms * (limit + 1):
            dropped = self._accumulated_ms - frame_ms * (limit + 1)
            _logger.debug("Dropping %.1f ms of simulation backlog", dropped)
            self._accumulated_ms -= dropped

        executed = 0
        while self._accumulated_ms > frame_ms:
            if self._tick_cap_reached():
                break
            self._stage.update(self._key_source())
            if self._on_tick is not None:
                self._on_tick(self._ticks)
            self._ticks += 1
            executed += 1
            self._accumulated_ms -= frame_ms

        self._stage.draw(self._renderer)
        if self._on_frame is not None:
            self._on_frame()
        self._frames += 1
        return executed

    def run(self) -> RealtimeResult:
        """Run until stopped, the stop hook fires, or the tick cap is hit."""
        self._stop_flag = False

        t_start = time.monotonic()
        t_next = t_start

        while not self._stop_flag and not self._tick_cap_reached():
            if self._should_stop is not None and self._should_stop():
                break

            self.frame(time.monotonic() * 1000.0)

            t_next += self._config.frame_ms / 1000.0
            self._sleep_until(t_next, busy_wait=self._config.busy_wait)

        wall_time_s = max(1e-12, time.monotonic() - t_start)
        _logger.info("Realtime run ended after %d ticks, %d frames", self._ticks, self._frames)
        return RealtimeResult(ticks=self._ticks, frames=self._frames, wall_time_s=wall_time_s)

    def _tick_cap_reached(self) -> bool:
        return self._config.max_ticks is not None and self._ticks >= self._config.max_ticks

    @staticmethod
    def _sleep_until(target_time: float, *, busy_wait: bool) -> None:
        """Sleep until the given monotonic time.

        Parameters
        ----------
        target_time : float
            Absolute target time (``time.monotonic()`` basis).
        busy_wait : bool
            If True, finish with a short busy-wait.
        """
        while True:
            now = time.monotonic()
            remaining = target_time - now
            if remaining <= 0.0:
                return

            if busy_wait and remaining < 0.002:
                continue

            time.sleep(max(0.0, remaining - 0.001))
