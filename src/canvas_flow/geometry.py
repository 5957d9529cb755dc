from __future__ import annotations

from .types import CanvasNode, CanvasEdge, CubicCurve, Point
from .styles import CURVATURE, CURVE_SAMPLE_STEPS

# ============================================================================
# Edge geometry — side attachment points and cubic Bézier edges.
#
# Edges always leave and enter perpendicular to the node side they are
# attached to, whatever the relative position of the two nodes. This is not
# a router: no obstacle avoidance, no shortest path.
# ============================================================================

DEFAULT_FROM_SIDE = "right"
DEFAULT_TO_SIDE = "left"

# Outward unit normal of each node side (y grows downward)
_SIDE_NORMALS: dict[str, tuple[int, int]] = {
    "right": (1, 0),
    "left": (-1, 0),
    "bottom": (0, 1),
    "top": (0, -1),
}


def attachment_point(node: CanvasNode, side: str | None) -> Point:
    """Midpoint of the given side of the node rectangle. Unknown sides mean right."""
    if side == "top":
        return Point(x=node.x + node.width / 2, y=node.y)
    if side == "bottom":
        return Point(x=node.x + node.width / 2, y=node.y + node.height)
    if side == "left":
        return Point(x=node.x, y=node.y + node.height / 2)
    return Point(x=node.x + node.width, y=node.y + node.height / 2)


def _offset_along_normal(p: Point, side: str | None, amount: float) -> Point:
    nx, ny = _SIDE_NORMALS.get(side or "", (0, 0))
    return Point(x=p.x + nx * amount, y=p.y + ny * amount)


def control_points(
    start: Point,
    end: Point,
    start_side: str | None,
    end_side: str | None,
    curvature: float = CURVATURE,
) -> tuple[Point, Point]:
    """Control points pushed out from each endpoint along its side normal."""
    cp1 = _offset_along_normal(start, start_side, curvature)
    cp2 = _offset_along_normal(end, end_side, curvature)
    return cp1, cp2


def path_command(
    start: Point,
    end: Point,
    start_side: str | None,
    end_side: str | None,
) -> CubicCurve:
    cp1, cp2 = control_points(start, end, start_side, end_side)
    return CubicCurve(start=start, cp1=cp1, cp2=cp2, end=end)


def cubic_point(curve: CubicCurve, t: float) -> Point:
    """Evaluate B(t) = (1-t)³P0 + 3(1-t)²tP1 + 3(1-t)t²P2 + t³P3."""
    mt = 1 - t
    a = mt * mt * mt
    b = 3 * mt * mt * t
    c = 3 * mt * t * t
    d = t * t * t
    p0, p1, p2, p3 = curve.start, curve.cp1, curve.cp2, curve.end
    return Point(
        x=a * p0.x + b * p1.x + c * p2.x + d * p3.x,
        y=a * p0.y + b * p1.y + c * p2.y + d * p3.y,
    )


def sample_cubic(curve: CubicCurve, steps: int = CURVE_SAMPLE_STEPS) -> list[Point]:
    """Polyline approximation with ``steps + 1`` points, endpoints exact."""
    if steps < 1:
        raise ValueError(f"steps must be >= 1, got {steps}")
    points = [cubic_point(curve, i / steps) for i in range(steps + 1)]
    points[0] = Point(x=curve.start.x, y=curve.start.y)
    points[-1] = Point(x=curve.end.x, y=curve.end.y)
    return points


def sample_curve(
    start: Point,
    end: Point,
    start_side: str | None,
    end_side: str | None,
    steps: int = CURVE_SAMPLE_STEPS,
) -> list[Point]:
    return sample_cubic(path_command(start, end, start_side, end_side), steps)


def edge_curve(edge: CanvasEdge, from_node: CanvasNode, to_node: CanvasNode) -> CubicCurve:
    """Cubic descriptor for an edge, with default sides filled in."""
    # Defaults feed the control-point offset too, so an edge without sides
    # curves exactly like one saved with explicit right/left.
    from_side = edge.from_side or DEFAULT_FROM_SIDE
    to_side = edge.to_side or DEFAULT_TO_SIDE
    start = attachment_point(from_node, from_side)
    end = attachment_point(to_node, to_side)
    return path_command(start, end, from_side, to_side)


def translate_curve(curve: CubicCurve, dx: float, dy: float) -> CubicCurve:
    return CubicCurve(
        start=Point(x=curve.start.x + dx, y=curve.start.y + dy),
        cp1=Point(x=curve.cp1.x + dx, y=curve.cp1.y + dy),
        cp2=Point(x=curve.cp2.x + dx, y=curve.cp2.y + dy),
        end=Point(x=curve.end.x + dx, y=curve.end.y + dy),
    )
