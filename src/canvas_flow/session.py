from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field

from .types import (
    CanvasDocument,
    CanvasNode,
    CanvasEdge,
    LayoutOptions,
    Point,
    RenderOptions,
    Scene,
    NODE_TYPES,
)
from .document import load_canvas, dump_canvas
from .layout import LayoutEngine, LayoutRun
from .renderer import renderer_for
from .scene import build_scene, RENDER_STYLES
from .theme import next_color
from .viewport import Viewport
from .styles import (
    BUTTON_ZOOM_IN,
    BUTTON_ZOOM_OUT,
    NEW_NODE_PAYLOAD,
    NEW_NODE_SIZE,
    WHEEL_ZOOM_IN,
    WHEEL_ZOOM_OUT,
)

logger = logging.getLogger(__name__)

# ============================================================================
# Session — everything one open canvas needs, passed around explicitly.
#
# Hosts feed it screen-space pointer/wheel events and viewport sizes; the
# session routes every coordinate through the viewport before touching
# nodes.
# ============================================================================


@dataclass
class _Gesture:
    kind: str  # "node" or "viewport"
    last: Point
    node_id: str | None = None


@dataclass
class CanvasSession:
    document: CanvasDocument = field(default_factory=lambda: CanvasDocument(nodes=[], edges=[]))
    viewport: Viewport = field(default_factory=Viewport)
    layout: LayoutEngine = field(default_factory=LayoutEngine)
    style: str = "vector"
    render_options: RenderOptions = field(default_factory=RenderOptions)
    _gesture: _Gesture | None = field(default=None, repr=False)

    @classmethod
    def create(
        cls,
        viewport_width: float = 0,
        viewport_height: float = 0,
        style: str = "vector",
        layout_options: LayoutOptions | None = None,
        render_options: RenderOptions | None = None,
    ) -> CanvasSession:
        session = cls(
            viewport=Viewport(width=viewport_width, height=viewport_height),
            layout=LayoutEngine(options=layout_options),
            render_options=render_options or RenderOptions(),
        )
        session.set_style(style)
        return session

    @property
    def nodes(self) -> list[CanvasNode]:
        return self.document.nodes

    @property
    def edges(self) -> list[CanvasEdge]:
        return self.document.edges

    def find_node(self, node_id: str) -> CanvasNode | None:
        for n in self.document.nodes:
            if n.id == node_id:
                return n
        return None

    def _require_node(self, node_id: str) -> CanvasNode:
        node = self.find_node(node_id)
        if node is None:
            raise KeyError(f'No node with id "{node_id}"')
        return node

    # ========================================================================
    # Load / save
    # ========================================================================

    def load(self, text: str | bytes) -> None:
        """Replace the current canvas with the given .canvas JSON.

        Raises CanvasLoadError and keeps the current canvas if the text
        can't be parsed.
        """
        doc = load_canvas(text)
        self._gesture = None
        self.layout.abort()
        self.layout.auto = False
        self.layout.snapshot = {}
        self.document = doc
        logger.info("Loaded canvas: %d nodes, %d edges", len(doc.nodes), len(doc.edges))
        self.fit_view()

    def save(self) -> str:
        return dump_canvas(self.document)

    # ========================================================================
    # Pointer gestures
    # ========================================================================

    def node_at(self, screen_x: float, screen_y: float) -> CanvasNode | None:
        """Topmost node under a screen point (later nodes draw on top)."""
        p = self.viewport.to_model(Point(x=screen_x, y=screen_y))
        for n in reversed(self.document.nodes):
            if n.x <= p.x <= n.x + n.width and n.y <= p.y <= n.y + n.height:
                return n
        return None

    def pointer_down(self, screen_x: float, screen_y: float) -> str:
        """Start a gesture: drag the node under the pointer, else pan.

        The choice holds until pointer_up. Returns the gesture kind.
        """
        node = self.node_at(screen_x, screen_y)
        last = Point(x=screen_x, y=screen_y)
        if node is not None:
            self._gesture = _Gesture(kind="node", last=last, node_id=node.id)
        else:
            self._gesture = _Gesture(kind="viewport", last=last)
        return self._gesture.kind

    def pointer_move(self, screen_x: float, screen_y: float) -> None:
        gesture = self._gesture
        if gesture is None:
            return
        dx = screen_x - gesture.last.x
        dy = screen_y - gesture.last.y
        if gesture.kind == "viewport":
            self.viewport.pan_by(dx, dy)
        else:
            node = self.find_node(gesture.node_id or "")
            if node is not None:
                node.x += dx / self.viewport.scale
                node.y += dy / self.viewport.scale
        gesture.last = Point(x=screen_x, y=screen_y)

    def pointer_up(self) -> None:
        self._gesture = None

    @property
    def gesture(self) -> str | None:
        return self._gesture.kind if self._gesture else None

    # ========================================================================
    # Zoom
    # ========================================================================

    def wheel(self, screen_x: float, screen_y: float, delta_y: float) -> None:
        factor = WHEEL_ZOOM_OUT if delta_y > 0 else WHEEL_ZOOM_IN
        self.viewport.zoom_at_screen_point(screen_x, screen_y, factor)

    def zoom_in(self) -> None:
        self.viewport.zoom_at_viewport_center(BUTTON_ZOOM_IN)

    def zoom_out(self) -> None:
        self.viewport.zoom_at_viewport_center(BUTTON_ZOOM_OUT)

    def fit_view(self) -> None:
        self.viewport.fit_to_content(self.document.nodes)

    def resize(self, width: float, height: float) -> None:
        self.viewport.resize(width, height)

    # ========================================================================
    # Editing
    # ========================================================================

    def _new_id(self) -> str:
        existing = {n.id for n in self.document.nodes}
        while True:
            node_id = uuid.uuid4().hex[:9]
            if node_id not in existing:
                return node_id

    def create_node(self, node_type: str) -> CanvasNode:
        """Add a default-sized node centred in the visible area."""
        if node_type not in NODE_TYPES:
            raise ValueError(
                f'Unknown node type "{node_type}". Expected one of: {", ".join(NODE_TYPES)}'
            )
        center = self.viewport.to_model(
            Point(x=self.viewport.width / 2, y=self.viewport.height / 2)
        )
        width = NEW_NODE_SIZE["width"]
        height = NEW_NODE_SIZE["height"]
        node = CanvasNode(
            id=self._new_id(),
            type=node_type,
            x=center.x - width / 2,
            y=center.y - height / 2,
            width=width,
            height=height,
            color="1",
        )
        payload = NEW_NODE_PAYLOAD.get(node_type)
        if payload is not None:
            key, value = payload
            setattr(node, key, value)
        self.document.nodes.append(node)
        logger.debug("Created %s node %s", node_type, node.id)
        return node

    def delete_node(self, node_id: str) -> None:
        """Remove a node together with every edge touching it."""
        self._require_node(node_id)
        self.document.nodes = [n for n in self.document.nodes if n.id != node_id]
        self.document.edges = [
            e for e in self.document.edges
            if e.from_node != node_id and e.to_node != node_id
        ]

    def cycle_color(self, node_id: str) -> str:
        node = self._require_node(node_id)
        node.color = next_color(node.color)
        return node.color

    def edit_node(self, node_id: str, value: str) -> None:
        """Set the editable payload of a node: text, url or group label."""
        node = self._require_node(node_id)
        if node.type == "text":
            node.text = value
        elif node.type == "link":
            node.url = value
        elif node.type == "group":
            node.label = value

    def editable_value(self, node_id: str) -> str:
        node = self._require_node(node_id)
        return node.text or node.url or node.label or ""

    # ========================================================================
    # Layout & rendering
    # ========================================================================

    @property
    def auto_layout(self) -> bool:
        return self.layout.auto

    def set_auto_layout(self, auto: bool) -> None:
        self.layout.set_auto(auto, self.document.nodes, self.document.edges)

    def begin_auto_layout(self) -> LayoutRun:
        return self.layout.begin_auto(self.document.nodes, self.document.edges)

    def set_style(self, style: str) -> None:
        if style not in RENDER_STYLES:
            raise ValueError(f'Unknown render style "{style}". Expected "vector" or "sketch"')
        self.style = style

    def scene(self) -> Scene:
        opts = self.render_options
        min_w = opts.min_surface_width
        min_h = opts.min_surface_height
        if self.style == "sketch":
            # The sketch surface is at least five screens wide and tall
            if min_w is None:
                min_w = self.viewport.width * 5
            if min_h is None:
                min_h = self.viewport.height * 5
        scene_opts = RenderOptions(
            style=self.style,
            margin=opts.margin,
            curve_steps=opts.curve_steps,
            min_surface_width=min_w,
            min_surface_height=min_h,
        )
        return build_scene(self.document.nodes, self.document.edges, scene_opts)

    def render(self, with_viewport: bool = True) -> str:
        renderer = renderer_for(self.style, self.render_options)
        return renderer.render(self.scene(), self.viewport if with_viewport else None)
