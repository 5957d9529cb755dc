from __future__ import annotations

from .types import (
    Bounds,
    CanvasNode,
    CanvasEdge,
    CurvePrimitive,
    Point,
    RectPrimitive,
    RenderOptions,
    Scene,
    Surface,
)
from .theme import resolve_color, edge_color, tint
from .styles import SCENE_MARGIN, CURVE_SAMPLE_STEPS
from .geometry import edge_curve, sample_cubic, translate_curve

# ============================================================================
# Scene assembly — node/edge data -> primitives placed on a drawing surface.
#
# Both render styles draw into a surface whose top-left sits at the top-left
# of the content bounds; every primitive is stored relative to that corner.
# The sketch surface may be larger than the bounds (a fixed big bitmap),
# the vector layer is sized to the bounds exactly. Either way
# surface.origin + local coordinate == model coordinate.
# ============================================================================

SCENE_DEFAULTS = {
    "style": "vector",
    "margin": SCENE_MARGIN,
    "curve_steps": CURVE_SAMPLE_STEPS,
    "min_surface_width": 0,
    "min_surface_height": 0,
}

RENDER_STYLES = ("vector", "sketch")


def _merge_options(options: RenderOptions | None) -> dict:
    opts = dict(SCENE_DEFAULTS)
    if options is not None:
        for key in SCENE_DEFAULTS:
            value = getattr(options, key)
            if value is not None:
                opts[key] = value
    if opts["style"] not in RENDER_STYLES:
        raise ValueError(
            f'Unknown render style "{opts["style"]}". Expected "vector" or "sketch"'
        )
    return opts


def compute_content_bounds(nodes: list[CanvasNode], margin: float = SCENE_MARGIN) -> Bounds:
    """Box around every node rectangle, grown by ``margin`` on each side.

    Returns a zero box at the origin when there are no nodes.
    """
    if not nodes:
        return Bounds(0, 0, 0, 0)
    return Bounds(
        min_x=min(n.x for n in nodes) - margin,
        min_y=min(n.y for n in nodes) - margin,
        max_x=max(n.x + n.width for n in nodes) + margin,
        max_y=max(n.y + n.height for n in nodes) + margin,
    )


def node_label(node: CanvasNode) -> str:
    """Plain-text caption shown inside a node."""
    if node.type == "group":
        return node.label or ""
    if node.type == "link":
        return node.url or ""
    if node.type == "file":
        return node.file or ""
    text = (node.text or "").strip()
    if not text:
        return ""
    return text.split("\n", 1)[0].lstrip("# ").strip()


def _surface_for(style: str, bounds: Bounds, opts: dict) -> Surface:
    origin = Point(x=bounds.min_x, y=bounds.min_y)
    if style == "sketch":
        return Surface(
            origin=origin,
            width=max(opts["min_surface_width"], bounds.width),
            height=max(opts["min_surface_height"], bounds.height),
        )
    return Surface(
        origin=origin,
        width=max(1, bounds.width),
        height=max(1, bounds.height),
    )


def build_scene(
    nodes: list[CanvasNode],
    edges: list[CanvasEdge],
    options: RenderOptions | None = None,
) -> Scene:
    """Assemble the primitive list for one frame."""
    opts = _merge_options(options)
    style = opts["style"]
    bounds = compute_content_bounds(nodes, opts["margin"])
    surface = _surface_for(style, bounds, opts)
    off_x = -surface.origin.x
    off_y = -surface.origin.y

    rects: list[RectPrimitive] = []
    for node in nodes:
        color = resolve_color(node.color)
        is_group = node.type == "group"
        if style == "sketch":
            fill = color if is_group else None
        else:
            fill = tint(color) if is_group else None
        rects.append(RectPrimitive(
            node_id=node.id,
            node_type=node.type,
            x=node.x + off_x,
            y=node.y + off_y,
            width=node.width,
            height=node.height,
            stroke=color,
            fill=fill,
            filled=is_group,
            label=node_label(node),
        ))

    by_id: dict[str, CanvasNode] = {}
    for node in nodes:
        by_id.setdefault(node.id, node)

    curves: list[CurvePrimitive] = []
    for edge in edges:
        src = by_id.get(edge.from_node)
        tgt = by_id.get(edge.to_node)
        if src is None or tgt is None:
            continue
        curve = translate_curve(edge_curve(edge, src, tgt), off_x, off_y)
        points = sample_cubic(curve, opts["curve_steps"]) if style == "sketch" else []
        curves.append(CurvePrimitive(
            source=edge.from_node,
            target=edge.to_node,
            curve=curve,
            points=points,
            stroke=edge_color(edge.color),
        ))

    return Scene(style=style, bounds=bounds, surface=surface, rects=rects, curves=curves)


def to_model_space(scene: Scene, p: Point) -> Point:
    """Absolute model position of a surface-local point."""
    return Point(x=p.x + scene.surface.origin.x, y=p.y + scene.surface.origin.y)
