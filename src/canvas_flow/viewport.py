from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .types import Bounds, CanvasNode, Point
from .styles import (
    MIN_SCALE,
    MAX_SCALE,
    FIT_PADDING,
    FIT_CHROME_HEIGHT,
    FIT_TOP_OFFSET,
)

# ============================================================================
# Viewport — pan/zoom state and the model <-> screen affine map.
#
#   screen = model * scale + translate
#   model  = (screen - translate) / scale
#
# to_screen / to_model are the only places that formula lives.
# ============================================================================


def clamp_scale(scale: float) -> float:
    return max(MIN_SCALE, min(MAX_SCALE, scale))


def node_bounds(nodes: Iterable[CanvasNode]) -> Bounds | None:
    """Axis-aligned box around all node rectangles, or None for no nodes."""
    bounds: Bounds | None = None
    for n in nodes:
        if bounds is None:
            bounds = Bounds(n.x, n.y, n.x + n.width, n.y + n.height)
            continue
        bounds.min_x = min(bounds.min_x, n.x)
        bounds.min_y = min(bounds.min_y, n.y)
        bounds.max_x = max(bounds.max_x, n.x + n.width)
        bounds.max_y = max(bounds.max_y, n.y + n.height)
    return bounds


@dataclass(slots=True)
class Viewport:
    scale: float = 1.0
    translate_x: float = 0.0
    translate_y: float = 0.0
    # Screen size of the visible area, supplied by the host
    width: float = 0.0
    height: float = 0.0

    # -- coordinate conversion ----------------------------------------------

    def to_screen(self, p: Point) -> Point:
        return Point(
            x=p.x * self.scale + self.translate_x,
            y=p.y * self.scale + self.translate_y,
        )

    def to_model(self, p: Point) -> Point:
        return Point(
            x=(p.x - self.translate_x) / self.scale,
            y=(p.y - self.translate_y) / self.scale,
        )

    # -- mutation ---------------------------------------------------------------

    def resize(self, width: float, height: float) -> None:
        self.width = width
        self.height = height

    def pan_by(self, dx: float, dy: float) -> None:
        self.translate_x += dx
        self.translate_y += dy

    def zoom_at_screen_point(self, screen_x: float, screen_y: float, factor: float) -> None:
        """Zoom by ``factor`` keeping the model point under (screen_x, screen_y) fixed.

        The resulting scale saturates at the [MIN_SCALE, MAX_SCALE] range.
        """
        anchor = self.to_model(Point(x=screen_x, y=screen_y))
        self.scale = clamp_scale(self.scale * factor)
        self.translate_x = screen_x - anchor.x * self.scale
        self.translate_y = screen_y - anchor.y * self.scale

    def zoom_at_viewport_center(self, factor: float) -> None:
        self.zoom_at_screen_point(self.width / 2, self.height / 2, factor)

    def fit_to_content(
        self,
        nodes: Iterable[CanvasNode],
        viewport_width: float | None = None,
        viewport_height: float | None = None,
        top_offset: float = FIT_TOP_OFFSET,
        padding: float = FIT_PADDING,
        chrome_height: float = FIT_CHROME_HEIGHT,
    ) -> None:
        """Scale and centre all nodes in the viewport. Never zooms past 100%.

        ``chrome_height`` is screen space kept free for the toolbar when
        choosing the scale; ``top_offset`` shifts the result down to clear it.
        Does nothing when there are no nodes.
        """
        bounds = node_bounds(nodes)
        if bounds is None:
            return

        vw = self.width if viewport_width is None else viewport_width
        vh = self.height if viewport_height is None else viewport_height

        content_w = bounds.width + padding * 2
        content_h = bounds.height + padding * 2
        scale = clamp_scale(min(vw / content_w, (vh - chrome_height) / content_h, 1.0))

        self.scale = scale
        self.translate_x = (vw - bounds.width * scale) / 2 - bounds.min_x * scale
        self.translate_y = (vh - bounds.height * scale) / 2 - bounds.min_y * scale + top_offset

    # -- presentation -----------------------------------------------------------

    @property
    def zoom_percent(self) -> int:
        return round(self.scale * 100)

    def css_transform(self) -> str:
        return f"translate({self.translate_x}px, {self.translate_y}px) scale({self.scale})"

    def svg_transform(self) -> str:
        return f"translate({self.translate_x} {self.translate_y}) scale({self.scale})"
