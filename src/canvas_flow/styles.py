from __future__ import annotations

# ============================================================================
# Edge geometry
# ============================================================================

# Distance a control point sits from its endpoint along the side normal
CURVATURE = 60

# Polyline resolution for renderers without native cubic curves
CURVE_SAMPLE_STEPS = 10

# Smallest distance used as a divisor anywhere in the engine
MIN_DISTANCE = 1.0

# ============================================================================
# Viewport
# ============================================================================

MIN_SCALE = 0.1
MAX_SCALE = 3.0

FIT_PADDING = 80

# Vertical space reserved for the toolbar when fitting, and the extra shift
# that keeps content clear of it
FIT_CHROME_HEIGHT = 100
FIT_TOP_OFFSET = 32

WHEEL_ZOOM_IN = 1.1
WHEEL_ZOOM_OUT = 0.9
BUTTON_ZOOM_IN = 1.2
BUTTON_ZOOM_OUT = 0.8

# ============================================================================
# Scene / new nodes
# ============================================================================

SCENE_MARGIN = 200

NEW_NODE_SIZE = {
    "width": 250,
    "height": 150,
}

NEW_NODE_PAYLOAD = {
    "text": ("text", "# New Node\nStart typing..."),
    "link": ("url", "https://obsidian.md"),
    "group": ("label", "New Group"),
}

# ============================================================================
# Strokes
# ============================================================================

STROKE_WIDTHS = {
    "vector_edge": 2,
    "vector_node": 1.5,
    "sketch": 1.5,
}

FONT_SIZES = {
    "node_label": 14,
    "group_label": 13,
}

TEXT_BASELINE_SHIFT = "0.35em"

# Sketch look
SKETCH_ROUGHNESS = 1.0
HACHURE_GAP = 8
