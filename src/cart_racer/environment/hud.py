"""
hud.py

Text overlays for each race state: title screen, in-race HUD, game over
and race complete. Pure output; nothing here changes race state.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from cart_racer.core.geometry import Point
from cart_racer.core.render import Renderer

if TYPE_CHECKING:
    from cart_racer.environment.stage import Material


CANVAS_WIDTH: float = 800.0
CANVAS_HEIGHT: float = 1000.0

TITLE = "Cart"
TITLE_Y = 820.0
TITLE_MESSAGE = "Push Space Key."
MESSAGE_X = CANVAS_WIDTH / 2.0
MESSAGE_Y = 660.0
MESSAGE_DISTANCE = 120.0

HUD_X = 30.0
HUD_BEST_Y = 940.0
HUD_TIME_Y = 900.0
HUD_VELOCITY_Y = 860.0
HUD_POSITION_X_Y = 820.0
HUD_POSITION_Y_Y = 780.0
HUD_LAP_X = HUD_X + 720.0

MESSAGE_RUNNING = "Ready Go!"
MESSAGE_GAMEOVER = "Game Over!"
MESSAGE_GAMECLEAR = "Race Complete!"


def format_time(milliseconds: Optional[int]) -> str:
    """
    Format a duration as ``SS.mmm``; ``--.---`` when unknown.

    Examples
    --------
    >>> format_time(12345)
    '12.345'
    """
    if milliseconds is None:
        return "--.---"
    milliseconds = max(0, int(milliseconds))
    return f"{milliseconds // 1000:02d}.{milliseconds % 1000:03d}"


def draw_overlay(state_name: str, material: Material, renderer: Renderer) -> None:
    if state_name == "ready":
        _draw_opening(renderer)
    elif state_name == "playing":
        _draw_hud(material, renderer)
    elif state_name == "game_over":
        _draw_game_over(renderer)
    elif state_name == "game_clear":
        _draw_game_clear(material, renderer)
    else:
        raise ValueError(f"Unknown stage state: {state_name!r}")


def _draw_opening(renderer: Renderer) -> None:
    renderer.text(Point(MESSAGE_X, TITLE_Y), TITLE, size=120, align="center")
    renderer.text(Point(MESSAGE_X, MESSAGE_Y), TITLE_MESSAGE, size=48, align="center")

    base = MESSAGE_Y - MESSAGE_DISTANCE
    lines = (
        (MESSAGE_X, base + 10.0, "Speed Up"),
        (MESSAGE_X, base - 30.0, "▲"),
        (MESSAGE_X - MESSAGE_DISTANCE, base - 80.0, "To Left ◀"),
        (MESSAGE_X + MESSAGE_DISTANCE + 5.0, base - 80.0, "▶ To Right"),
        (MESSAGE_X, base - 130.0, "▼"),
        (MESSAGE_X, base - 170.0, "Straighten"),
        (MESSAGE_X, base - 240.0, "[   SPACE   ]"),
        (MESSAGE_X, base - 300.0, "Brake"),
    )
    for x, y, text in lines:
        renderer.text(Point(x, y), text, size=36, align="center")


def _draw_hud(material: Material, renderer: Renderer) -> None:
    elapsed = material.elapsed_ms()
    velocity = material.cart.get_velocity()
    position = material.cart.get_position()
    config = material.config

    renderer.text(Point(HUD_X, HUD_BEST_Y), f"BEST TIME: {format_time(material.best_time)}", size=32)
    renderer.text(Point(HUD_X, HUD_TIME_Y), f"Time: {format_time(elapsed)}")
    renderer.text(Point(HUD_X, HUD_VELOCITY_Y), f"Velocity: {velocity.y:.1f}")
    renderer.text(Point(HUD_X, HUD_POSITION_X_Y), f"Position X: {position.x:.0f}")
    renderer.text(Point(HUD_X, HUD_POSITION_Y_Y), f"Position Y: {material.distance:.0f}")
    renderer.text(
        Point(HUD_LAP_X, HUD_BEST_Y),
        f"{material.lap_count + 1} / {config.required_laps}",
        size=32,
        align="right",
    )

    if elapsed < config.start_message_ms:
        renderer.text(Point(MESSAGE_X, MESSAGE_Y), MESSAGE_RUNNING, size=32, align="center")


def _draw_game_over(renderer: Renderer) -> None:
    renderer.text(Point(MESSAGE_X, MESSAGE_Y), MESSAGE_GAMEOVER, size=48, align="center")
    renderer.text(
        Point(MESSAGE_X, MESSAGE_Y - MESSAGE_DISTANCE - 10.0),
        TITLE_MESSAGE,
        size=48,
        align="center",
    )


def _draw_game_clear(material: Material, renderer: Renderer) -> None:
    config = material.config
    renderer.text(Point(MESSAGE_X, MESSAGE_Y), MESSAGE_GAMECLEAR, size=48, align="center")
    renderer.text(
        Point(MESSAGE_X, MESSAGE_Y - MESSAGE_DISTANCE),
        f"Your Time: {format_time(material.score)} s",
        size=32,
        align="center",
    )
    renderer.text(
        Point(MESSAGE_X, MESSAGE_Y - MESSAGE_DISTANCE - 50.0),
        f"{config.required_laps} Laps Completed!",
        size=32,
        align="center",
    )
