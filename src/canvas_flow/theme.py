from __future__ import annotations

import re

# ============================================================================
# Node colour palette — keyed by the canvas colour index ("1".."6")
# ============================================================================

PALETTE: dict[str, str] = {
    "1": "rgb(59, 130, 246)",
    "2": "rgb(249, 115, 22)",
    "3": "rgb(234, 179, 8)",
    "4": "rgb(34, 197, 94)",
    "5": "rgb(6, 182, 212)",
    "6": "rgb(168, 85, 247)",
}

DEFAULTS = {
    "node": "rgb(100, 116, 139)",
    "edge": "#cbd5e1",
    "bg": "#FFFFFF",
    "fg": "#27272A",
}

GROUP_FILL_ALPHA = 0.05

_RGB_RE = re.compile(r"^rgb\((\d+),\s*(\d+),\s*(\d+)\)$")


def resolve_color(color: str | None) -> str:
    """Map a palette index to a CSS colour; anything else gets the default."""
    if color is None:
        return DEFAULTS["node"]
    return PALETTE.get(str(color), DEFAULTS["node"])


def edge_color(color: str | None) -> str:
    if not color:
        return DEFAULTS["edge"]
    return resolve_color(color)


def tint(color: str, alpha: float = GROUP_FILL_ALPHA) -> str:
    """Turn ``rgb(r, g, b)`` into ``rgba(r, g, b, alpha)``.

    Colours in any other notation are returned unchanged.
    """
    m = _RGB_RE.match(color)
    if not m:
        return color
    r, g, b = m.groups()
    return f"rgba({r}, {g}, {b}, {alpha})"


def next_color(color: str | None) -> str:
    """Cycle a node colour through the palette indices 1..6."""
    try:
        current = int(color or 0)
    except ValueError:
        current = 0
    return str((current % len(PALETTE)) + 1)
