from __future__ import annotations

import random
import zlib

from .types import CurvePrimitive, Point, RectPrimitive, RenderOptions
from .renderer import Renderer, escape_xml
from .styles import HACHURE_GAP, SKETCH_ROUGHNESS, STROKE_WIDTHS

# ============================================================================
# Sketch renderer — hand-drawn look in the spirit of rough.js.
#
# Every stroke is drawn twice with small random offsets. Randomness comes
# from a generator seeded with the CRC32 of the primitive's id, so the same
# scene always renders to the same SVG.
# ============================================================================


def _rng_for(key: str) -> random.Random:
    return random.Random(zlib.crc32(key.encode("utf-8")))


def _jitter(rng: random.Random, amount: float) -> float:
    return rng.uniform(-amount, amount)


def rough_line(
    rng: random.Random,
    a: Point,
    b: Point,
    roughness: float = SKETCH_ROUGHNESS,
) -> list[Point]:
    """A wobbly stand-in for the segment a-b: endpoints jittered, two bends."""
    spread = roughness * 1.5
    bend = roughness * 1.0
    pts = [Point(x=a.x + _jitter(rng, spread), y=a.y + _jitter(rng, spread))]
    for t in (0.35, 0.7):
        pts.append(Point(
            x=a.x + (b.x - a.x) * t + _jitter(rng, bend),
            y=a.y + (b.y - a.y) * t + _jitter(rng, bend),
        ))
    pts.append(Point(x=b.x + _jitter(rng, spread), y=b.y + _jitter(rng, spread)))
    return pts


def hachure_lines(
    x: float, y: float, w: float, h: float, gap: float = HACHURE_GAP
) -> list[tuple[Point, Point]]:
    """45° fill strokes (x + y = s) clipped to the rectangle."""
    lines: list[tuple[Point, Point]] = []
    x1, y1 = x + w, y + h
    s = x + y + gap
    while s < x1 + y1:
        xa = max(x, s - y1)
        xb = min(x1, s - y)
        if xb > xa:
            lines.append((Point(x=xa, y=s - xa), Point(x=xb, y=s - xb)))
        s += gap
    return lines


def _polyline(points: list[Point], stroke: str, width: float, extra: str = "") -> str:
    pts = " ".join(f"{p.x:.2f},{p.y:.2f}" for p in points)
    return (
        f'<polyline points="{pts}" fill="none" stroke="{stroke}" '
        f'stroke-width="{width}" stroke-linecap="round" stroke-linejoin="round"{extra} />'
    )


class SketchRenderer(Renderer):
    """Hand-drawn output. Curves are drawn from their sampled points."""

    def __init__(self, options: RenderOptions | None = None, roughness: float = SKETCH_ROUGHNESS) -> None:
        super().__init__(options)
        self.roughness = roughness

    def draw_rect(self, rect: RectPrimitive) -> str:
        rng = _rng_for(f"node:{rect.node_id}")
        width = STROKE_WIDTHS["sketch"]
        corners = [
            Point(x=rect.x, y=rect.y),
            Point(x=rect.x + rect.width, y=rect.y),
            Point(x=rect.x + rect.width, y=rect.y + rect.height),
            Point(x=rect.x, y=rect.y + rect.height),
        ]
        parts = [f'<g class="sketch-node" data-node="{escape_xml(rect.node_id)}">']

        if rect.filled and rect.fill:
            for a, b in hachure_lines(rect.x, rect.y, rect.width, rect.height):
                parts.append(_polyline(
                    rough_line(rng, a, b, self.roughness / 2), rect.fill, 1, ' opacity="0.5"'
                ))

        for i in range(4):
            a, b = corners[i], corners[(i + 1) % 4]
            for _ in range(2):
                parts.append(_polyline(rough_line(rng, a, b, self.roughness), rect.stroke, width))

        parts.append("</g>")
        return "\n".join(parts)

    def draw_curve(self, curve: CurvePrimitive) -> str:
        rng = _rng_for(f"edge:{curve.source}->{curve.target}")
        width = STROKE_WIDTHS["sketch"]
        points = curve.points
        if len(points) < 2:
            points = [curve.curve.start, curve.curve.end]

        parts: list[str] = []
        for _ in range(2):
            wobbly = [
                Point(x=p.x + _jitter(rng, self.roughness), y=p.y + _jitter(rng, self.roughness))
                for p in points
            ]
            parts.append(_polyline(wobbly, curve.stroke, width))
        return "\n".join(parts)
