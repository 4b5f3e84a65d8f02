"""
test_audio.py

Tests for the audio sinks and the race-facing Music wrapper.
"""

from __future__ import annotations

import logging
from collections import Counter
from pathlib import Path

import pygame
import pytest

from cart_racer.environment.audio import (
    BACKGROUND,
    BRAKE,
    AssetLoadError,
    AudioConfig,
    Music,
    NullAudio,
    PygameAudio,
)


class FailingAudio:
    def play_once(self, handle: str) -> None:
        raise pygame.error("device lost")

    def play_looping(self, handle: str) -> None:
        raise OSError("device lost")


def test_music_forwards_to_sink() -> None:
    audio = NullAudio()
    music = Music(audio)
    music.play_brake_sound()
    music.play_brake_sound()
    music.play_background_music()

    assert audio.played == Counter({BRAKE: 2})
    assert audio.looping == [BACKGROUND]


def test_null_audio_stays_small_over_long_runs() -> None:
    audio = NullAudio()
    music = Music(audio)
    for _ in range(10_000):
        music.play_brake_sound()

    assert len(audio.played) == 1
    assert audio.played[BRAKE] == 10_000


def test_music_logs_playback_errors(caplog: pytest.LogCaptureFixture) -> None:
    music = Music(FailingAudio())
    with caplog.at_level(logging.WARNING, logger="cart_racer.environment.audio"):
        music.play_brake_sound()
        music.play_background_music()

    messages = [r.getMessage() for r in caplog.records]
    assert any("brake" in m for m in messages)
    assert any("background" in m for m in messages)


def test_missing_sound_file_fails_at_startup(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SDL_AUDIODRIVER", "dummy")
    try:
        with pytest.raises(AssetLoadError):
            PygameAudio(AudioConfig(brake_sound=tmp_path / "missing.wav"))
    finally:
        pygame.mixer.quit()


def test_undecodable_sound_file_fails_at_startup(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SDL_AUDIODRIVER", "dummy")
    bogus = tmp_path / "bogus.wav"
    bogus.write_bytes(b"not a sound")
    try:
        with pytest.raises(AssetLoadError):
            PygameAudio(AudioConfig(background_music=bogus))
    finally:
        pygame.mixer.quit()
