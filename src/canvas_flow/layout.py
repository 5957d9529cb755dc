from __future__ import annotations

import logging
import math
from collections.abc import Iterator
from dataclasses import dataclass, field

from .types import CanvasNode, CanvasEdge, LayoutOptions
from .styles import MIN_DISTANCE

logger = logging.getLogger(__name__)

# Layout defaults
LAYOUT_DEFAULTS = {
    "algorithm": "force",
    "iterations": 50,
    "ideal_distance": 500,
    "node_spacing": 80,
    "layer_spacing": 120,
}

LAYOUT_ALGORITHMS = ("force", "layered")


def _merge_options(options: LayoutOptions | None) -> dict:
    opts = dict(LAYOUT_DEFAULTS)
    if options is not None:
        for key in LAYOUT_DEFAULTS:
            value = getattr(options, key)
            if value is not None:
                opts[key] = value
    if opts["algorithm"] not in LAYOUT_ALGORITHMS:
        raise ValueError(
            f'Unknown layout algorithm "{opts["algorithm"]}". '
            f"Expected one of: {', '.join(LAYOUT_ALGORITHMS)}"
        )
    return opts


# ============================================================================
# Force-directed placement
#
# Repulsion between every pair of nodes (k² / d), attraction along every
# resolvable edge (d² / k), and a per-iteration displacement cap that shrinks
# linearly to zero. Nodes are represented by their (x, y) anchor, which is
# the top-left corner, not the rectangle centre, so node size skews the
# result slightly.
#
# Cost is O(n² · iterations) for repulsion plus O(e · iterations) for
# attraction. Fine for tens to a few hundred nodes; beyond that this needs a
# spatial approximation, which would change the exact trajectories.
# ============================================================================


def _resolve_edges(nodes: list[CanvasNode], edges: list[CanvasEdge]) -> list[tuple[int, int]]:
    """Map edges to (from_index, to_index) pairs, dropping dangling ones."""
    index: dict[str, int] = {}
    for i, n in enumerate(nodes):
        index.setdefault(n.id, i)
    pairs: list[tuple[int, int]] = []
    for e in edges:
        u = index.get(e.from_node)
        v = index.get(e.to_node)
        if u is None or v is None:
            continue
        pairs.append((u, v))
    return pairs


def iterate_force_layout(
    positions: list[list[float]],
    edge_pairs: list[tuple[int, int]],
    iterations: int = LAYOUT_DEFAULTS["iterations"],
    k: float = LAYOUT_DEFAULTS["ideal_distance"],
) -> Iterator[int]:
    """Run the simulation on ``positions`` in place, yielding after each iteration.

    ``positions`` is a list of mutable [x, y] pairs and ``edge_pairs`` holds
    indices into it. The yielded value is the number of completed iterations.
    """
    count = len(positions)
    k_sq = k * k

    for it in range(iterations):
        disp = [[0.0, 0.0] for _ in range(count)]

        # Repulsion between every unordered pair
        for i in range(count):
            ux, uy = positions[i]
            for j in range(i + 1, count):
                vx, vy = positions[j]
                dx = ux - vx
                dy = uy - vy
                dist = max(math.sqrt(dx * dx + dy * dy), MIN_DISTANCE)
                force = k_sq / dist
                xf = dx / dist * force
                yf = dy / dist * force
                disp[i][0] += xf
                disp[i][1] += yf
                disp[j][0] -= xf
                disp[j][1] -= yf

        # Attraction along edges
        for u, v in edge_pairs:
            dx = positions[v][0] - positions[u][0]
            dy = positions[v][1] - positions[u][1]
            dist = max(math.sqrt(dx * dx + dy * dy), MIN_DISTANCE)
            force = dist * dist / k
            xf = dx / dist * force
            yf = dy / dist * force
            disp[u][0] += xf
            disp[u][1] += yf
            disp[v][0] -= xf
            disp[v][1] -= yf

        # Capped, simultaneous move
        temperature = 0.1 * (iterations - it)
        for i in range(count):
            dx, dy = disp[i]
            length = math.sqrt(dx * dx + dy * dy)
            if length == 0:
                continue
            step = min(length, temperature)
            positions[i][0] += dx / length * step
            positions[i][1] += dy / length * step

        yield it + 1


def force_layout(
    nodes: list[CanvasNode],
    edges: list[CanvasEdge],
    iterations: int = LAYOUT_DEFAULTS["iterations"],
    k: float = LAYOUT_DEFAULTS["ideal_distance"],
) -> None:
    """Reposition ``nodes`` in place with the full blocking pass."""
    run = LayoutRun(nodes, edges, iterations=iterations, k=k)
    run.finish()


class LayoutRun:
    """An in-progress force layout that can be stepped, finished or cancelled.

    The simulation works on a private copy of the node positions. Nodes are
    only written when the run finishes, so an abandoned run leaves the graph
    exactly as it was.
    """

    def __init__(
        self,
        nodes: list[CanvasNode],
        edges: list[CanvasEdge],
        iterations: int = LAYOUT_DEFAULTS["iterations"],
        k: float = LAYOUT_DEFAULTS["ideal_distance"],
    ) -> None:
        self.nodes = nodes
        self.iterations = iterations
        self.positions = [[n.x, n.y] for n in nodes]
        self.completed = 0
        self.committed = False
        self.cancelled = False
        self._steps = iterate_force_layout(
            self.positions, _resolve_edges(nodes, edges), iterations, k
        )

    @property
    def done(self) -> bool:
        return self.committed or self.cancelled

    def step(self) -> bool:
        """Advance one iteration. Returns False once every iteration has run."""
        if self.done:
            return False
        for completed in self._steps:
            self.completed = completed
            return True
        return False

    def finish(self) -> None:
        """Run any remaining iterations and write the positions to the nodes."""
        if self.cancelled:
            raise RuntimeError("Cannot finish a cancelled layout run")
        if self.committed:
            return
        while self.step():
            pass
        for node, (x, y) in zip(self.nodes, self.positions):
            node.x = x
            node.y = y
        self.committed = True

    def cancel(self) -> None:
        if not self.committed:
            self.cancelled = True
            self._steps.close()


# ============================================================================
# Manual <-> Auto layout state machine
# ============================================================================


@dataclass
class LayoutEngine:
    """Toggles between authored positions and an automatic layout.

    Switching from manual to auto snapshots every node position and lays the
    graph out once. Switching back puts every snapshotted node back exactly
    where it was and drops the snapshot; nodes created in between stay where
    they are. Asking for the mode already in effect does nothing.
    """

    options: LayoutOptions | None = None
    auto: bool = False
    snapshot: dict[str, tuple[float, float]] = field(default_factory=dict)
    _pending: LayoutRun | None = field(default=None, repr=False)
    _pending_snapshot: dict[str, tuple[float, float]] = field(default_factory=dict, repr=False)

    def capture(self, nodes: list[CanvasNode]) -> None:
        self.snapshot = {n.id: (n.x, n.y) for n in nodes}

    def restore(self, nodes: list[CanvasNode]) -> None:
        for n in nodes:
            pos = self.snapshot.get(n.id)
            if pos is not None:
                n.x, n.y = pos

    def enter_auto(self, nodes: list[CanvasNode], edges: list[CanvasEdge]) -> None:
        """Snapshot current positions and run the configured layout to completion."""
        if self.auto:
            return
        opts = _merge_options(self.options)
        self._discard_pending()
        self.capture(nodes)
        self.auto = True
        if not nodes:
            return

        logger.debug(
            "Auto layout (%s) over %d nodes / %d edges",
            opts["algorithm"], len(nodes), len(edges),
        )
        if opts["algorithm"] == "layered":
            from .layered import layered_layout
            layered_layout(
                nodes, edges,
                node_spacing=opts["node_spacing"],
                layer_spacing=opts["layer_spacing"],
            )
        else:
            force_layout(nodes, edges, opts["iterations"], opts["ideal_distance"])

    def begin_auto(self, nodes: list[CanvasNode], edges: list[CanvasEdge]) -> LayoutRun:
        """Incremental variant of :meth:`enter_auto` for the force layout.

        Returns a run the caller steps between events. Call :meth:`commit`
        to apply it or :meth:`abort` to drop it and stay in manual mode.
        The snapshot is only taken over when the run is committed.
        """
        if self.auto:
            raise RuntimeError("Auto layout is already active")
        opts = _merge_options(self.options)
        if opts["algorithm"] != "force":
            raise ValueError("Incremental layout is only available for the force algorithm")
        self._discard_pending()
        self._pending_snapshot = {n.id: (n.x, n.y) for n in nodes}
        self._pending = LayoutRun(nodes, edges, opts["iterations"], opts["ideal_distance"])
        return self._pending

    def commit(self) -> None:
        if self._pending is None:
            raise RuntimeError("No layout run in progress")
        self._pending.finish()
        self._pending = None
        self.snapshot = self._pending_snapshot
        self._pending_snapshot = {}
        self.auto = True

    def abort(self) -> None:
        self._discard_pending()

    def exit_auto(self, nodes: list[CanvasNode]) -> None:
        self._discard_pending()
        if not self.auto:
            return
        self.restore(nodes)
        self.snapshot = {}
        self.auto = False

    def set_auto(self, auto: bool, nodes: list[CanvasNode], edges: list[CanvasEdge]) -> None:
        if auto:
            self.enter_auto(nodes, edges)
        else:
            self.exit_auto(nodes)

    def _discard_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        self._pending_snapshot = {}
