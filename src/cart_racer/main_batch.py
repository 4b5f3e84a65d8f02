"""
cart_racer.main_batch

Headless entry point for deterministic runs.

Architecture
------------
- Stage built fresh per run, with a tick-driven clock.
- Driver is either full-throttle or a recorded replay.
- Optional JSON Lines replay output.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from cart_racer.agents.base_driver import BaseDriver
from cart_racer.agents.forward_driver import ForwardDriver, ScriptedDriver
from cart_racer.core.track import TrackFactory
from cart_racer.environment.stage import Stage, StageConfig
from cart_racer.simulation.runner_batch import BatchRaceResult, BatchRunner, BatchRunnerConfig, TickClock
from cart_racer.utils.replay import ReplayLogger, keys_from_replay


_logger = logging.getLogger("cart_racer")


# ================================================================
# FACTORIES
# ================================================================


def make_driver(replay_in: Optional[Path]) -> BaseDriver:
    if replay_in is None:
        return ForwardDriver()
    return ScriptedDriver(keys_from_replay(replay_in))


def run_once(
    *,
    track: str = "default",
    max_ticks: int = 20_000,
    config: Optional[StageConfig] = None,
    driver: Optional[BaseDriver] = None,
    replay_out: Optional[Path] = None,
) -> BatchRaceResult:
    """
    Run one headless race and return its summary.
    """
    clock = TickClock()
    stage = Stage.create(config=config, track=TrackFactory.create(track), clock=clock)
    runner_config = BatchRunnerConfig(max_ticks=max_ticks)

    if replay_out is None:
        return BatchRunner(stage, driver or ForwardDriver(), runner_config, clock=clock).run()

    with ReplayLogger(replay_out) as replay:
        result = BatchRunner(stage, driver or ForwardDriver(), runner_config, replay=replay, clock=clock).run()
    _logger.info("Replay written to %s", replay.path)
    return result


# ================================================================
# MAIN
# ================================================================


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Run a headless Cart race")
    ap.add_argument("--track", default="default", help=f"Built-in track ({', '.join(TrackFactory.available())})")
    ap.add_argument("--max-ticks", type=int, default=20_000, help="Maximum number of ticks")
    ap.add_argument("--replay-in", type=Path, default=None, help="Drive from a recorded replay")
    ap.add_argument("--replay-out", type=Path, default=None, help="Record this run as JSON Lines")
    ap.add_argument("--log-level", default="WARNING", help="Logging level")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        driver = make_driver(args.replay_in)
        result = run_once(
            track=args.track,
            max_ticks=args.max_ticks,
            driver=driver,
            replay_out=args.replay_out,
        )
    except (OSError, ValueError, KeyError) as exc:
        _logger.error("Batch run failed: %s", exc)
        return 1

    print(json.dumps({"ticks": result.ticks, "final_state": result.final_state, "snapshot": result.snapshot}, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
