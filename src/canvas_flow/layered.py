from __future__ import annotations

import logging

from grandalf.graphs import Vertex, Edge, Graph
from grandalf.layouts import SugiyamaLayout

from .types import CanvasNode, CanvasEdge

logger = logging.getLogger(__name__)

# ============================================================================
# Layered layout — grandalf's Sugiyama implementation as an opt-in
# alternative to the force-directed pass. Each connected component is laid
# out on its own, then components are placed left to right.
# ============================================================================


class _VertexView:
    """Minimal view object required by grandalf's SugiyamaLayout."""

    def __init__(self, w: float, h: float) -> None:
        self.w = w
        self.h = h
        # xy is set by the layout engine (center coordinates)
        self.xy = (0.0, 0.0)


def layered_layout(
    nodes: list[CanvasNode],
    edges: list[CanvasEdge],
    node_spacing: float = 80,
    layer_spacing: float = 120,
) -> None:
    """Reposition ``nodes`` in place in layers following edge direction.

    The top-left of the result lands at the top-left of the original
    content, so the drawing doesn't jump across the canvas.
    """
    if not nodes:
        return

    origin_x = min(n.x for n in nodes)
    origin_y = min(n.y for n in nodes)

    vertices: dict[str, Vertex] = {}
    for n in nodes:
        if n.id in vertices:
            continue
        v = Vertex(n.id)
        v.view = _VertexView(n.width, n.height)
        vertices[n.id] = v

    edges_list: list[Edge] = []
    for e in edges:
        src_v = vertices.get(e.from_node)
        tgt_v = vertices.get(e.to_node)
        # Self loops carry no layering information
        if not src_v or not tgt_v or src_v is tgt_v:
            continue
        edges_list.append(Edge(src_v, tgt_v))

    g = Graph(list(vertices.values()), edges_list)

    centers: dict[str, tuple[float, float]] = {}
    cursor_x = 0.0
    for component in g.C:
        try:
            sug = SugiyamaLayout(component)
            sug.xspace = node_spacing
            sug.yspace = layer_spacing
            sug.init_all()
            sug.draw()
        except Exception as err:
            raise RuntimeError(f"Grandalf layout failed (canvas): {err}") from err

        placed = list(component.sV)
        left = min(v.view.xy[0] - v.view.w / 2 for v in placed)
        right = max(v.view.xy[0] + v.view.w / 2 for v in placed)
        top = min(v.view.xy[1] - v.view.h / 2 for v in placed)
        for v in placed:
            cx, cy = v.view.xy
            centers[v.data] = (cx - left + cursor_x, cy - top)
        cursor_x += (right - left) + node_spacing

    logger.debug("Layered layout placed %d component(s)", len(g.C))

    for n in nodes:
        cx, cy = centers[n.id]
        n.x = origin_x + cx - n.width / 2
        n.y = origin_y + cy - n.height / 2
