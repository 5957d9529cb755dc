from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# ============================================================================
# Canvas document — nodes and edges as loaded from a .canvas JSON file
# ============================================================================

NODE_TYPES: tuple[str, ...] = ("text", "link", "group", "file")


@dataclass(slots=True)
class CanvasNode:
    id: str
    type: str
    x: float
    y: float
    width: float
    height: float
    color: str | None = None
    text: str | None = None
    url: str | None = None
    label: str | None = None
    file: str | None = None
    # Keys we don't model, written back untouched on save
    extra: dict[str, Any] = field(default_factory=dict)
    # Keys missing from the loaded JSON and filled with defaults
    implicit: frozenset[str] = frozenset()


@dataclass(slots=True)
class CanvasEdge:
    from_node: str
    to_node: str
    from_side: str | None = None
    to_side: str | None = None
    color: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class CanvasDocument:
    nodes: list[CanvasNode]
    edges: list[CanvasEdge]
    # Top-level keys other than "nodes" / "edges"
    extra: dict[str, Any] = field(default_factory=dict)


# ============================================================================
# Geometry primitives
# ============================================================================

@dataclass(slots=True)
class Point:
    x: float
    y: float


@dataclass(slots=True)
class Bounds:
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y


@dataclass(slots=True)
class CubicCurve:
    """Cubic Bézier from ``start`` to ``end`` with two control points."""

    start: Point
    cp1: Point
    cp2: Point
    end: Point

    def to_svg_path(self) -> str:
        s, c1, c2, e = self.start, self.cp1, self.cp2, self.end
        return f"M {s.x} {s.y} C {c1.x} {c1.y}, {c2.x} {c2.y}, {e.x} {e.y}"


# ============================================================================
# Scene — primitives positioned relative to a drawing surface
# ============================================================================

@dataclass(slots=True)
class RectPrimitive:
    node_id: str
    node_type: str
    x: float
    y: float
    width: float
    height: float
    stroke: str
    fill: str | None
    filled: bool
    label: str = ""


@dataclass(slots=True)
class CurvePrimitive:
    source: str
    target: str
    curve: CubicCurve
    points: list[Point]
    stroke: str


@dataclass(slots=True)
class Surface:
    """Drawing surface placed at ``origin`` in model space."""

    origin: Point
    width: float
    height: float


@dataclass(slots=True)
class Scene:
    style: str
    bounds: Bounds
    surface: Surface
    rects: list[RectPrimitive]
    curves: list[CurvePrimitive]


# ============================================================================
# Options — user-facing configuration
# ============================================================================

@dataclass(slots=True)
class LayoutOptions:
    algorithm: str | None = None
    iterations: int | None = None
    ideal_distance: float | None = None
    node_spacing: float | None = None
    layer_spacing: float | None = None


@dataclass(slots=True)
class RenderOptions:
    style: str | None = None
    margin: float | None = None
    curve_steps: int | None = None
    min_surface_width: float | None = None
    min_surface_height: float | None = None
    background: str | None = None
    font: str | None = None
