"""
renderer.py

Pygame implementation of :class:`cart_racer.core.render.Renderer`.

GUI Layer
---------
- Pure drawing: never reads or changes race state
- World y grows up the screen; pygame y grows down, so every point is
  flipped with ``screen_y = height - y``
- A failing primitive is logged at debug level and skipped; the frame and
  the race carry on

Car sprites are built from three rows (front wheels, diamond body, rear
wheels) spaced ``CART_ROW_SPACING`` apart below the anchor point.
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Tuple, TypeVar

import pygame

from cart_racer.core.geometry import Point
from cart_racer.core.render import PLAYER_LIVERY, RIVAL_LIVERY


_logger = logging.getLogger(__name__)

Color = Tuple[int, int, int]
F = TypeVar("F", bound=Callable[..., None])

CART_ROW_SPACING = 18.0
TREE_LAYER_SPACING = 12.0


# ================================================================
# CONFIGURATION
# ================================================================


@dataclass(frozen=True)
class Livery:
    """Colors for one car."""

    wheel: Color
    body: Color
    diamond: Color = (74, 159, 106)


@dataclass(frozen=True)
class RendererConfig:
    """
    Rendering configuration.

    Parameters
    ----------
    height : int
        Canvas height used for the y flip.
    background_color : Color
    line_color : Color
        Wall segments.
    font_color : Color
    liveries : dict[str, Livery]
        Car colors keyed by livery name.
    fruit_colors : dict[str, tuple[Color, float]]
        Fruit fill color and radius keyed by fruit name.
    """

    height: int = 1000
    background_color: Color = (0, 0, 0)
    line_color: Color = (0, 128, 0)
    font_color: Color = (0, 128, 0)
    liveries: Dict[str, Livery] = field(
        default_factory=lambda: {
            PLAYER_LIVERY: Livery(wheel=(42, 95, 65), body=(204, 51, 51)),
            RIVAL_LIVERY: Livery(wheel=(26, 79, 90), body=(51, 102, 204)),
        }
    )
    fruit_colors: Dict[str, Tuple[Color, float]] = field(
        default_factory=lambda: {
            "apple": ((255, 68, 68), 3.0),
            "orange": ((255, 136, 0), 3.5),
            "cherry": ((221, 0, 0), 2.5),
            "lemon": ((255, 255, 68), 3.0),
            "plum": ((136, 68, 255), 3.0),
        }
    )
    default_fruit: Tuple[Color, float] = ((68, 255, 68), 3.0)


def _guarded(method: F) -> F:
    """Log and skip drawing errors instead of raising."""

    @functools.wraps(method)
    def wrapper(self: Any, *args: Any, **kwargs: Any) -> None:
        try:
            method(self, *args, **kwargs)
        except (ValueError, TypeError, pygame.error) as exc:
            _logger.debug("Skipped %s: %s", method.__name__, exc)

    return wrapper  # type: ignore[return-value]


# ================================================================
# RENDERER
# ================================================================


class PygameRenderer:
    """
    Draws race primitives onto a pygame surface.

    Parameters
    ----------
    surface : pygame.Surface
        Target surface (usually the display surface).
    config : RendererConfig | None
    """

    def __init__(self, surface: pygame.Surface, config: RendererConfig | None = None) -> None:
        self._surface = surface
        self._config = config or RendererConfig()
        self._fonts: Dict[int, pygame.font.Font] = {}

        if not pygame.font.get_init():
            pygame.font.init()

    # ------------------------------------------------------------------
    # Coordinate helpers
    # ------------------------------------------------------------------

    def _to_screen(self, x: float, y: float) -> Tuple[int, int]:
        return int(round(x)), int(round(self._config.height - y))

    def _font(self, size: int) -> pygame.font.Font:
        font = self._fonts.get(size)
        if font is None:
            font = pygame.font.Font(None, size)
            self._fonts[size] = font
        return font

    def _livery(self, name: str) -> Livery:
        try:
            return self._config.liveries[name]
        except KeyError:
            raise ValueError(f"Unknown livery: {name!r}") from None

    # ------------------------------------------------------------------
    # Renderer protocol
    # ------------------------------------------------------------------

    @_guarded
    def clear(self) -> None:
        self._surface.fill(self._config.background_color)

    @_guarded
    def text(self, point: Point, text: str, *, size: int = 28, align: str = "left") -> None:
        image = self._font(size).render(text, True, self._config.font_color)
        rect = image.get_rect()
        anchor = self._to_screen(point.x, point.y)
        if align == "left":
            rect.midleft = anchor
        elif align == "center":
            rect.center = anchor
        elif align == "right":
            rect.midright = anchor
        else:
            raise ValueError(f"Unknown text alignment: {align!r}")
        self._surface.blit(image, rect)

    @_guarded
    def line(self, p: Point, q: Point) -> None:
        pygame.draw.line(
            self._surface,
            self._config.line_color,
            self._to_screen(p.x, p.y),
            self._to_screen(q.x, q.y),
        )

    @_guarded
    def draw_normal_racing_car(self, position: Point, livery: str = PLAYER_LIVERY) -> None:
        colors = self._livery(livery)
        x, y = position.x, position.y
        self._small_wheel(x - 12.0, y, colors.wheel)
        self._center_body(x, y, colors.body)
        self._small_wheel(x + 12.0, y, colors.wheel)
        self._diamond(x, y - CART_ROW_SPACING, colors.diamond)
        rear = y - 2.0 * CART_ROW_SPACING
        self._large_wheel(x - 12.0, rear, colors.wheel)
        self._center_body(x, rear, colors.body)
        self._large_wheel(x + 12.0, rear, colors.wheel)

    @_guarded
    def draw_left_facing_racing_car(self, position: Point, livery: str = PLAYER_LIVERY) -> None:
        self._facing_car(position, livery, lean=-1.0)

    @_guarded
    def draw_right_facing_racing_car(self, position: Point, livery: str = PLAYER_LIVERY) -> None:
        self._facing_car(position, livery, lean=1.0)

    @_guarded
    def draw_knocked_racing_car(self, position: Point, livery: str = PLAYER_LIVERY) -> None:
        colors = self._livery(livery)
        x, y = position.x, position.y
        self._large_wheel(x - 16.0, y, colors.wheel)
        self._center_body(x, y, colors.body)
        self._large_wheel(x + 16.0, y, colors.wheel)
        self._diamond(x, y - CART_ROW_SPACING, colors.diamond)
        rear = y - 2.0 * CART_ROW_SPACING
        self._small_wheel(x - 12.0, rear, colors.wheel)
        self._center_body(x, rear, colors.body)
        self._small_wheel(x + 12.0, rear, colors.wheel)

    @_guarded
    def draw_fruit_tree(self, position: Point, fruit: str) -> None:
        x, y = position.x, position.y
        forest, lime = (34, 139, 34), (50, 205, 50)

        self._leaves(x, y, forest, 6.0)
        self._fruit(x + 4.0, y + 2.0, fruit)

        y2 = y - TREE_LAYER_SPACING
        self._leaves(x - 6.0, y2, lime, 7.0)
        self._leaves(x + 6.0, y2, lime, 7.0)
        self._fruit(x - 3.0, y2 + 3.0, fruit)
        self._fruit(x + 9.0, y2 - 2.0, fruit)

        y3 = y - 2.0 * TREE_LAYER_SPACING
        self._leaves(x - 12.0, y3, forest, 8.0)
        self._leaves(x, y3, lime, 9.0)
        self._leaves(x + 12.0, y3, forest, 8.0)
        self._fruit(x - 8.0, y3 + 4.0, fruit)
        self._fruit(x + 2.0, y3 - 3.0, fruit)
        self._fruit(x + 8.0, y3 + 2.0, fruit)

        sx, sy = self._to_screen(x, y - 3.0 * TREE_LAYER_SPACING)
        pygame.draw.rect(self._surface, (139, 69, 19), pygame.Rect(sx - 4, sy - 6, 8, 12))

    # ------------------------------------------------------------------
    # Shapes
    # ------------------------------------------------------------------

    def _facing_car(self, position: Point, livery: str, *, lean: float) -> None:
        # Perspective: wheels squashed into ellipses, body shifted with the turn.
        colors = self._livery(livery)
        x, y = position.x, position.y
        for row_y, filled in ((y, True), (y - 2.0 * CART_ROW_SPACING, False)):
            self._ellipse_wheel(x + 10.0 * lean, row_y, colors.wheel, filled)
            self._center_body(x - 2.0 * lean, row_y, colors.body)
            self._ellipse_wheel(x - 14.0 * lean, row_y, colors.wheel, filled)
        self._diamond(x + 2.0 * lean, y - CART_ROW_SPACING, colors.diamond)

    def _small_wheel(self, x: float, y: float, color: Color) -> None:
        pygame.draw.circle(self._surface, color, self._to_screen(x, y), 3)

    def _large_wheel(self, x: float, y: float, color: Color) -> None:
        pygame.draw.circle(self._surface, color, self._to_screen(x, y), 4, width=2)

    def _ellipse_wheel(self, x: float, y: float, color: Color, filled: bool) -> None:
        sx, sy = self._to_screen(x, y)
        rect = pygame.Rect(sx - 2, sy - 4, 4, 8)
        pygame.draw.ellipse(self._surface, color, rect, 0 if filled else 2)

    def _center_body(self, x: float, y: float, color: Color) -> None:
        pygame.draw.circle(self._surface, color, self._to_screen(x, y), 3)

    def _diamond(self, x: float, y: float, color: Color) -> None:
        sx, sy = self._to_screen(x, y)
        points = [(sx, sy - 8), (sx + 8, sy), (sx, sy + 8), (sx - 8, sy)]
        pygame.draw.polygon(self._surface, color, points)

    def _leaves(self, x: float, y: float, color: Color, radius: float) -> None:
        pygame.draw.circle(self._surface, color, self._to_screen(x, y), int(radius))

    def _fruit(self, x: float, y: float, fruit: str) -> None:
        color, radius = self._config.fruit_colors.get(fruit, self._config.default_fruit)
        pygame.draw.circle(self._surface, color, self._to_screen(x, y), max(1, int(round(radius))))
