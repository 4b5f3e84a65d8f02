"""
audio.py

Audio sink for the race: one-shot brake sound and looping background music.

Sounds are loaded once at startup. A load failure raises
:class:`AssetLoadError` and aborts the launch. Playback failures during the
race are logged and otherwise ignored; they never reach simulation state.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

import pygame


_logger = logging.getLogger(__name__)


class AssetLoadError(RuntimeError):
    """Raised when a startup asset cannot be loaded or decoded."""


class AudioSink(Protocol):
    """Fire-and-forget playback."""

    def play_once(self, handle: str) -> None:  # pragma: no cover
        ...

    def play_looping(self, handle: str) -> None:  # pragma: no cover
        ...


@dataclass(frozen=True)
class AudioConfig:
    """
    Sound asset locations.

    Parameters
    ----------
    brake_sound : Path | None
        One-shot brake effect.
    background_music : Path | None
        Looping background track.
    """

    brake_sound: Optional[Path] = None
    background_music: Optional[Path] = None


BRAKE = "brake"
BACKGROUND = "background"


class NullAudio:
    """Silent sink for headless runs; counts one-shot plays per handle."""

    def __init__(self) -> None:
        self.played: Counter[str] = Counter()
        self.looping: list[str] = []

    def play_once(self, handle: str) -> None:
        self.played[handle] += 1

    def play_looping(self, handle: str) -> None:
        self.looping.append(handle)


class PygameAudio:
    """
    ``pygame.mixer`` backed sink.

    Parameters
    ----------
    config : AudioConfig

    Raises
    ------
    AssetLoadError
        If the mixer cannot start or a configured file fails to load.
    """

    def __init__(self, config: AudioConfig) -> None:
        try:
            if pygame.mixer.get_init() is None:
                pygame.mixer.init()
        except pygame.error as exc:
            raise AssetLoadError(f"Audio device unavailable: {exc}") from exc

        self._sounds: Dict[str, Any] = {}
        paths = {BRAKE: config.brake_sound, BACKGROUND: config.background_music}
        for handle, path in paths.items():
            if path is None:
                continue
            self._sounds[handle] = self._load(Path(path))

    @staticmethod
    def _load(path: Path) -> Any:
        if not path.is_file():
            raise AssetLoadError(f"Sound file not found: {path}")
        try:
            return pygame.mixer.Sound(str(path))
        except pygame.error as exc:
            raise AssetLoadError(f"Could not decode {path}: {exc}") from exc

    def play_once(self, handle: str) -> None:
        self._play(handle, loops=0)

    def play_looping(self, handle: str) -> None:
        self._play(handle, loops=-1)

    def _play(self, handle: str, *, loops: int) -> None:
        sound = self._sounds.get(handle)
        if sound is None:
            return
        sound.play(loops=loops)


class Music:
    """
    Race-facing wrapper around an :class:`AudioSink`.

    Playback errors are logged, never raised.
    """

    def __init__(self, audio: AudioSink) -> None:
        self._audio: AudioSink = audio

    @property
    def audio(self) -> AudioSink:
        return self._audio

    def play_brake_sound(self) -> None:
        self._safe_play(BRAKE, looping=False)

    def play_background_music(self) -> None:
        self._safe_play(BACKGROUND, looping=True)

    def _safe_play(self, handle: str, *, looping: bool) -> None:
        try:
            if looping:
                self._audio.play_looping(handle)
            else:
                self._audio.play_once(handle)
        except (pygame.error, OSError, RuntimeError) as exc:
            _logger.warning("Error playing %s sound: %s", handle, exc)
