"""
main_realtime.py

Windowed entrypoint for Cart.

This file wires together:

- Track layout (TrackFactory)
- Race state machine (Stage)
- Audio (pygame mixer, optional)
- Fixed-step loop and window (App)

Asset problems are reported before the window opens and end the process
with a non-zero status.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from cart_racer.core.track import TrackFactory, TrackLayout
from cart_racer.environment.audio import AssetLoadError, AudioConfig, AudioSink, NullAudio, PygameAudio
from cart_racer.environment.stage import Stage, StageConfig
from cart_racer.gui.app import App, AppConfig


_logger = logging.getLogger("cart_racer")


# ================================================================
# ARGUMENTS
# ================================================================


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Top-down scrolling cart race")
    ap.add_argument("--track", default="default", help=f"Built-in track ({', '.join(TrackFactory.available())})")
    ap.add_argument("--level", type=Path, default=None, help="Level JSON file (overrides --track)")
    ap.add_argument("--brake-sound", type=Path, default=None, help="Brake sound file")
    ap.add_argument("--music", type=Path, default=None, help="Background music file")
    ap.add_argument("--laps", type=int, default=StageConfig.required_laps, help="Laps to clear the race")
    ap.add_argument("--no-rival-contact", action="store_true", help="Rivals pass through the cart")
    ap.add_argument("--log-level", default="INFO", help="Logging level")
    return ap


def load_track(args: argparse.Namespace) -> TrackLayout:
    if args.level is not None:
        track = TrackLayout.load(args.level)
    else:
        track = TrackFactory.create(args.track)
    _logger.info("Track %s: %d walls over %.0f px", track.name, len(track), track.length)
    return track


def load_audio(args: argparse.Namespace) -> AudioSink:
    if args.brake_sound is None and args.music is None:
        return NullAudio()
    return PygameAudio(AudioConfig(brake_sound=args.brake_sound, background_music=args.music))


# ================================================================
# MAIN
# ================================================================


def main(argv: Optional[List[str]] = None) -> int:
    """
    Launch the race window. Returns the process exit status.
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        track = load_track(args)
        audio = load_audio(args)
    except (AssetLoadError, OSError, ValueError) as exc:
        _logger.error("Startup failed: %s", exc)
        return 1

    stage = Stage.create(
        config=StageConfig(
            required_laps=args.laps,
            rival_contact_ends_race=not args.no_rival_contact,
        ),
        track=track,
        audio=audio,
    )

    App(stage, AppConfig()).run()
    return 0


# ================================================================
# ENTRYPOINT
# ================================================================


if __name__ == "__main__":
    sys.exit(main())
