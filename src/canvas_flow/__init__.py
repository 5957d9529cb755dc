"""canvas-flow — layout, edge geometry and pan/zoom for infinite-canvas diagrams."""

from __future__ import annotations

from .types import (
    CanvasDocument,
    CanvasNode,
    CanvasEdge,
    CubicCurve,
    LayoutOptions,
    Point,
    RenderOptions,
    Scene,
)
from .document import CanvasLoadError, load_canvas, dump_canvas
from .geometry import attachment_point, control_points, path_command, sample_curve
from .viewport import Viewport
from .layout import LayoutEngine, LayoutRun, force_layout
from .scene import build_scene, compute_content_bounds
from .renderer import Renderer, SvgRenderer, renderer_for
from .sketch import SketchRenderer
from .session import CanvasSession

__all__ = [
    "render_canvas",
    "load_canvas",
    "dump_canvas",
    "CanvasLoadError",
    "CanvasDocument",
    "CanvasNode",
    "CanvasEdge",
    "CanvasSession",
    "CubicCurve",
    "LayoutEngine",
    "LayoutOptions",
    "LayoutRun",
    "Point",
    "RenderOptions",
    "Renderer",
    "Scene",
    "SketchRenderer",
    "SvgRenderer",
    "Viewport",
    "attachment_point",
    "build_scene",
    "compute_content_bounds",
    "control_points",
    "force_layout",
    "path_command",
    "renderer_for",
    "sample_curve",
]


def render_canvas(
    text: str,
    options: RenderOptions | None = None,
    layout: LayoutOptions | None = None,
    auto_layout: bool = False,
) -> str:
    """Render .canvas JSON text to a standalone SVG string.

    With ``auto_layout`` the nodes are repositioned first; the input text is
    never modified.
    """
    if options is None:
        options = RenderOptions()

    doc = load_canvas(text)
    if auto_layout:
        LayoutEngine(options=layout).enter_auto(doc.nodes, doc.edges)

    scene = build_scene(doc.nodes, doc.edges, options)
    return renderer_for(scene.style, options).render(scene)
