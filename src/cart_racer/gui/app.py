"""
cart_racer.gui.app

Windowed pygame front end for Cart.

GUI Layer
---------
- Owns the window and the event pump
- Feeds keyboard state to the stage once per tick
- Draws through :class:`PygameRenderer`
- Never changes race rules

Architecture
------------
- The realtime runner's fixed-step loop is authoritative.
- Stage is injected (no construction inside GUI).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import pygame

from cart_racer.environment.stage import Stage
from cart_racer.gui.keys import PygameKeyState
from cart_racer.gui.renderer import PygameRenderer, RendererConfig
from cart_racer.simulation.runner_realtime import RealtimeResult, RealtimeRunner, RunnerConfig


_logger = logging.getLogger(__name__)


# ================================================================
# CONFIGURATION
# ================================================================


@dataclass(frozen=True)
class AppConfig:
    """
    GUI configuration container.

    Parameters
    ----------
    width : int
        Window width in pixels.
    height : int
        Window height in pixels.
    window_title : str
        Window caption.
    runner : RunnerConfig
        Fixed-step loop settings.
    """

    width: int = 800
    height: int = 1000
    window_title: str = "Cart"
    runner: RunnerConfig = RunnerConfig()


# ================================================================
# APP
# ================================================================


class App:
    """
    Window plus realtime loop around a :class:`Stage`.
    """

    def __init__(self, stage: Stage, config: AppConfig | None = None) -> None:
        self._config: AppConfig = config or AppConfig()
        self._stage: Stage = stage

        pygame.init()
        self._screen: pygame.Surface = pygame.display.set_mode(
            (self._config.width, self._config.height)
        )
        pygame.display.set_caption(self._config.window_title)

        self._keys = PygameKeyState()
        self._renderer = PygameRenderer(self._screen, RendererConfig(height=self._config.height))
        self._runner = RealtimeRunner(
            stage,
            self._keys.poll,
            self._renderer,
            self._config.runner,
            on_frame=pygame.display.flip,
            should_stop=self._handle_events,
        )
        self._running: bool = False

    @property
    def stage(self) -> Stage:
        return self._stage

    # ============================================================
    # PUBLIC API
    # ============================================================

    def run(self) -> RealtimeResult:
        self._running = True
        _logger.info("Window open (%dx%d)", self._config.width, self._config.height)
        try:
            return self._runner.run()
        finally:
            pygame.quit()

    def stop(self) -> None:
        self._running = False
        self._runner.stop()

    # ============================================================
    # INTERNALS
    # ============================================================

    def _handle_events(self) -> bool:
        """Drain the event queue; True once the window should close."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.stop()
        return not self._running

