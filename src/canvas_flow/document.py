from __future__ import annotations

import copy
import json
import logging
import math
from typing import Any

from .types import CanvasDocument, CanvasNode, CanvasEdge

logger = logging.getLogger(__name__)

# ============================================================================
# Canvas document I/O — .canvas JSON <-> CanvasDocument
# ============================================================================

_NODE_KEYS = ("id", "type", "x", "y", "width", "height", "color", "text", "url", "label", "file")
_EDGE_KEYS = ("fromNode", "toNode", "fromSide", "toSide", "color")
# Filled in when a node omits them; left out again on save while unchanged
_NODE_DEFAULTS: dict[str, Any] = {"type": "text", "x": 0, "y": 0}


class CanvasLoadError(ValueError):
    """Raised when a canvas document cannot be parsed.

    Loading is all-or-nothing: callers keep their previous state.
    """


def load_canvas(text: str | bytes) -> CanvasDocument:
    """Parse .canvas JSON text into a document."""
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as err:
        raise CanvasLoadError(f"Invalid canvas JSON: {err}") from err
    return canvas_from_dict(data)


def canvas_from_dict(data: Any) -> CanvasDocument:
    """Build a document from already-decoded JSON data.

    The input is deep-copied, so later edits never leak back into ``data``.
    """
    if not isinstance(data, dict):
        raise CanvasLoadError("Canvas document must be a JSON object")

    raw_nodes = data.get("nodes")
    raw_edges = data.get("edges")
    if raw_nodes is None:
        raw_nodes = []
    if raw_edges is None:
        raw_edges = []
    if not isinstance(raw_nodes, list):
        raise CanvasLoadError('"nodes" must be a list')
    if not isinstance(raw_edges, list):
        raise CanvasLoadError('"edges" must be a list')

    nodes: list[CanvasNode] = []
    seen: set[str] = set()
    for i, raw in enumerate(raw_nodes):
        node = _parse_node(raw, i)
        if node.id in seen:
            raise CanvasLoadError(f'Duplicate node id "{node.id}"')
        seen.add(node.id)
        nodes.append(node)

    edges = [_parse_edge(raw, i) for i, raw in enumerate(raw_edges)]

    dangling = sum(1 for e in edges if e.from_node not in seen or e.to_node not in seen)
    if dangling:
        logger.debug("Canvas has %d edge(s) referencing missing nodes", dangling)

    extra = {k: copy.deepcopy(v) for k, v in data.items() if k not in ("nodes", "edges")}
    return CanvasDocument(nodes=nodes, edges=edges, extra=extra)


def _parse_node(raw: Any, index: int) -> CanvasNode:
    if not isinstance(raw, dict):
        raise CanvasLoadError(f"Node #{index} is not an object")

    node_id = raw.get("id")
    if not isinstance(node_id, str) or not node_id:
        raise CanvasLoadError(f"Node #{index} has no string id")

    x = _number(raw.get("x", _NODE_DEFAULTS["x"]), f'node "{node_id}" x')
    y = _number(raw.get("y", _NODE_DEFAULTS["y"]), f'node "{node_id}" y')
    width = _number(raw.get("width"), f'node "{node_id}" width')
    height = _number(raw.get("height"), f'node "{node_id}" height')
    if width <= 0 or height <= 0:
        raise CanvasLoadError(f'Node "{node_id}" must have a positive width and height')

    return CanvasNode(
        id=node_id,
        type=raw.get("type") or _NODE_DEFAULTS["type"],
        x=x,
        y=y,
        width=width,
        height=height,
        color=raw.get("color"),
        text=raw.get("text"),
        url=raw.get("url"),
        label=raw.get("label"),
        file=raw.get("file"),
        extra={k: copy.deepcopy(v) for k, v in raw.items() if k not in _NODE_KEYS},
        implicit=frozenset(k for k in _NODE_DEFAULTS if k not in raw),
    )


def _parse_edge(raw: Any, index: int) -> CanvasEdge:
    if not isinstance(raw, dict):
        raise CanvasLoadError(f"Edge #{index} is not an object")

    from_node = raw.get("fromNode")
    to_node = raw.get("toNode")
    if not isinstance(from_node, str) or not isinstance(to_node, str):
        raise CanvasLoadError(f"Edge #{index} needs string fromNode and toNode")

    return CanvasEdge(
        from_node=from_node,
        to_node=to_node,
        from_side=raw.get("fromSide"),
        to_side=raw.get("toSide"),
        color=raw.get("color"),
        extra={k: copy.deepcopy(v) for k, v in raw.items() if k not in _EDGE_KEYS},
    )


def _number(value: Any, what: str) -> float:
    # bool is an int subclass; "x": true is not a coordinate
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise CanvasLoadError(f"Expected a number for {what}, got {value!r}")
    if not math.isfinite(value):
        raise CanvasLoadError(f"Expected a finite number for {what}")
    return value


# ============================================================================
# Serialization
# ============================================================================


def node_to_dict(node: CanvasNode) -> dict[str, Any]:
    out: dict[str, Any] = {
        "id": node.id,
        "type": node.type,
        "x": node.x,
        "y": node.y,
        "width": node.width,
        "height": node.height,
    }
    for key in node.implicit:
        if out.get(key) == _NODE_DEFAULTS[key]:
            del out[key]
    for key in ("color", "text", "url", "label", "file"):
        value = getattr(node, key)
        if value is not None:
            out[key] = value
    out.update(copy.deepcopy(node.extra))
    return out


def edge_to_dict(edge: CanvasEdge) -> dict[str, Any]:
    out: dict[str, Any] = {"fromNode": edge.from_node, "toNode": edge.to_node}
    if edge.from_side is not None:
        out["fromSide"] = edge.from_side
    if edge.to_side is not None:
        out["toSide"] = edge.to_side
    if edge.color is not None:
        out["color"] = edge.color
    out.update(copy.deepcopy(edge.extra))
    return out


def canvas_to_dict(doc: CanvasDocument) -> dict[str, Any]:
    out: dict[str, Any] = {
        "nodes": [node_to_dict(n) for n in doc.nodes],
        "edges": [edge_to_dict(e) for e in doc.edges],
    }
    out.update(copy.deepcopy(doc.extra))
    return out


def dump_canvas(doc: CanvasDocument, indent: int | None = 2) -> str:
    """Serialize a document to .canvas JSON, keeping node and edge order."""
    return json.dumps(canvas_to_dict(doc), indent=indent, ensure_ascii=False)
