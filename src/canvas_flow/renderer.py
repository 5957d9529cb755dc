from __future__ import annotations

from abc import ABC, abstractmethod

from .types import CurvePrimitive, RectPrimitive, RenderOptions, Scene
from .theme import DEFAULTS
from .styles import FONT_SIZES, STROKE_WIDTHS, TEXT_BASELINE_SHIFT
from .viewport import Viewport

# ============================================================================
# Rendering backends — turn a Scene into SVG text.
#
# Renderer walks the scene and hands each primitive to draw_rect /
# draw_curve; subclasses decide how a primitive looks. Coordinates inside
# the surface group are surface-local, the group itself is translated to the
# surface origin, and an optional viewport transform wraps the whole thing.
# ============================================================================


class Renderer(ABC):
    """Base class for scene renderers; backends implement draw_rect and draw_curve."""

    def __init__(self, options: RenderOptions | None = None) -> None:
        options = options or RenderOptions()
        self.background = options.background or DEFAULTS["bg"]
        self.font = options.font or "Inter"

    def render(self, scene: Scene, viewport: Viewport | None = None) -> str:
        parts: list[str] = [self._open_tag(scene, viewport)]
        defs = self.defs()
        if defs:
            parts.append(f"<defs>\n{defs}\n</defs>")

        if viewport is not None:
            parts.append(f'<g transform="{viewport.svg_transform()}">')
        origin = scene.surface.origin
        parts.append(
            f'<g class="surface surface-{scene.style}" '
            f'transform="translate({origin.x} {origin.y})">'
        )

        # Edges sit under nodes
        for curve in scene.curves:
            parts.append(self.draw_curve(curve))
        for rect in scene.rects:
            parts.append(self.draw_rect(rect))
        for rect in scene.rects:
            if rect.label:
                parts.append(self.draw_label(rect))

        parts.append("</g>")
        if viewport is not None:
            parts.append("</g>")
        parts.append("</svg>")
        return "\n".join(p for p in parts if p)

    def _open_tag(self, scene: Scene, viewport: Viewport | None) -> str:
        if viewport is not None and viewport.width > 0 and viewport.height > 0:
            width, height = viewport.width, viewport.height
            view_box = f"0 0 {width} {height}"
        else:
            width, height = scene.surface.width, scene.surface.height
            origin = scene.surface.origin
            view_box = f"{origin.x} {origin.y} {width} {height}"
        return (
            f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="{view_box}" '
            f'width="{width}" height="{height}" '
            f'style="background:{self.background};font-family:\'{self.font}\', system-ui, sans-serif">'
        )

    def defs(self) -> str:
        return ""

    @abstractmethod
    def draw_rect(self, rect: RectPrimitive) -> str:
        raise NotImplementedError

    @abstractmethod
    def draw_curve(self, curve: CurvePrimitive) -> str:
        raise NotImplementedError

    def draw_label(self, rect: RectPrimitive) -> str:
        if rect.node_type == "group":
            # Group captions sit just above the box
            return (
                f'<text x="{rect.x}" y="{rect.y - 8}" '
                f'font-size="{FONT_SIZES["group_label"]}" font-weight="600" '
                f'fill="{rect.stroke}">{escape_xml(rect.label)}</text>'
            )
        return (
            f'<text x="{rect.x + rect.width / 2}" y="{rect.y + rect.height / 2}" '
            f'text-anchor="middle" dy="{TEXT_BASELINE_SHIFT}" '
            f'font-size="{FONT_SIZES["node_label"]}" '
            f'fill="{DEFAULTS["fg"]}">{escape_xml(rect.label)}</text>'
        )


class SvgRenderer(Renderer):
    """Precise vector output: crisp rectangles and true cubic paths."""

    def draw_rect(self, rect: RectPrimitive) -> str:
        fill = rect.fill if rect.filled and rect.fill else "none"
        return (
            f'<rect x="{rect.x}" y="{rect.y}" width="{rect.width}" height="{rect.height}" '
            f'rx="8" ry="8" fill="{fill}" stroke="{rect.stroke}" '
            f'stroke-width="{STROKE_WIDTHS["vector_node"]}" data-node="{escape_xml(rect.node_id)}" />'
        )

    def draw_curve(self, curve: CurvePrimitive) -> str:
        return (
            f'<path d="{curve.curve.to_svg_path()}" fill="none" stroke="{curve.stroke}" '
            f'stroke-width="{STROKE_WIDTHS["vector_edge"]}" />'
        )


def renderer_for(style: str, options: RenderOptions | None = None) -> Renderer:
    if style == "sketch":
        from .sketch import SketchRenderer
        return SketchRenderer(options)
    if style == "vector":
        return SvgRenderer(options)
    raise ValueError(f'Unknown render style "{style}". Expected "vector" or "sketch"')


def escape_xml(text: str) -> str:
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#39;")
    )
