"""Tests for scene assembly: content bounds, surfaces and primitive placement."""
from __future__ import annotations

import pytest

from canvas_flow.scene import (
    build_scene,
    compute_content_bounds,
    node_label,
    to_model_space,
)
from canvas_flow.types import CanvasEdge, CanvasNode, Point, RenderOptions


def make_node(**overrides) -> CanvasNode:
    defaults = dict(id="A", type="text", x=0, y=0, width=100, height=50)
    defaults.update(overrides)
    return CanvasNode(**defaults)


def sample_nodes() -> list[CanvasNode]:
    return [
        make_node(id="a", x=-300, y=40, color="2", text="# Title\nbody"),
        make_node(id="b", x=250, y=-120, type="group", label="Cluster", width=400, height=300),
        make_node(id="c", x=90, y=500, type="link", url="https://example.com"),
    ]


def sample_edges() -> list[CanvasEdge]:
    return [
        CanvasEdge(from_node="a", to_node="b"),
        CanvasEdge(from_node="b", to_node="c", from_side="bottom", to_side="top", color="4"),
        CanvasEdge(from_node="c", to_node="ghost"),
    ]


# ============================================================================
# compute_content_bounds
# ============================================================================


class TestContentBounds:
    def test_zero_box_when_empty(self):
        b = compute_content_bounds([], 200)
        assert (b.min_x, b.min_y, b.max_x, b.max_y) == (0, 0, 0, 0)

    def test_expands_node_box_by_margin(self):
        b = compute_content_bounds(sample_nodes(), 200)
        assert b.min_x == -500
        assert b.min_y == -320
        assert b.max_x == 850
        assert b.max_y == 750

    def test_negative_only_content(self):
        b = compute_content_bounds([make_node(x=-1000, y=-1000)], 10)
        assert b.max_x == -890
        assert b.max_y == -940


# ============================================================================
# build_scene
# ============================================================================


class TestBuildScene:
    def test_vector_surface_matches_bounds(self):
        scene = build_scene(sample_nodes(), sample_edges())
        assert scene.style == "vector"
        assert scene.surface.origin == Point(x=-500, y=-320)
        assert scene.surface.width == 1350
        assert scene.surface.height == 1070

    def test_vector_surface_is_at_least_one_unit(self):
        scene = build_scene([], [])
        assert scene.surface.width == 1
        assert scene.surface.height == 1

    def test_sketch_surface_honours_minimum_size(self):
        scene = build_scene(
            sample_nodes(),
            sample_edges(),
            RenderOptions(style="sketch", min_surface_width=5000, min_surface_height=400),
        )
        assert scene.surface.origin == Point(x=-500, y=-320)
        assert scene.surface.width == 5000
        assert scene.surface.height == 1070

    def test_primitives_are_offset_by_surface_origin(self):
        scene = build_scene(sample_nodes(), sample_edges())
        rect = scene.rects[0]
        assert (rect.x, rect.y) == (-300 + 500, 40 + 320)

    def test_dangling_edges_are_skipped(self):
        scene = build_scene(sample_nodes(), sample_edges())
        assert [(c.source, c.target) for c in scene.curves] == [("a", "b"), ("b", "c")]

    def test_colors(self):
        scene = build_scene(sample_nodes(), sample_edges())
        assert scene.rects[0].stroke == "rgb(249, 115, 22)"
        assert scene.rects[2].stroke == "rgb(100, 116, 139)"
        assert scene.curves[0].stroke == "#cbd5e1"
        assert scene.curves[1].stroke == "rgb(34, 197, 94)"

    def test_group_fill_per_style(self):
        vector = build_scene(sample_nodes(), [])
        sketch = build_scene(sample_nodes(), [], RenderOptions(style="sketch"))
        assert vector.rects[1].filled and sketch.rects[1].filled
        assert vector.rects[1].fill == "rgba(100, 116, 139, 0.05)"
        assert sketch.rects[1].fill == "rgb(100, 116, 139)"
        assert vector.rects[0].fill is None

    def test_sketch_curves_are_sampled(self):
        scene = build_scene(sample_nodes(), sample_edges(), RenderOptions(style="sketch", curve_steps=8))
        curve = scene.curves[0]
        assert len(curve.points) == 9
        assert curve.points[0] == curve.curve.start
        assert curve.points[-1] == curve.curve.end

    def test_vector_curves_are_not_sampled(self):
        scene = build_scene(sample_nodes(), sample_edges())
        assert scene.curves[0].points == []

    def test_unknown_style(self):
        with pytest.raises(ValueError, match="Unknown render style"):
            build_scene([], [], RenderOptions(style="watercolor"))


class TestStyleEquivalence:
    """Vector and sketch output must land every primitive in the same place."""

    def test_rectangles_match_in_model_space(self):
        nodes, edges = sample_nodes(), sample_edges()
        vector = build_scene(nodes, edges)
        sketch = build_scene(
            nodes, edges,
            RenderOptions(style="sketch", min_surface_width=8000, min_surface_height=6000),
        )
        for v, s in zip(vector.rects, sketch.rects):
            assert to_model_space(vector, Point(x=v.x, y=v.y)) == to_model_space(sketch, Point(x=s.x, y=s.y))

    def test_rectangles_map_back_to_node_positions(self):
        nodes = sample_nodes()
        scene = build_scene(nodes, [], RenderOptions(style="sketch"))
        for node, rect in zip(nodes, scene.rects):
            assert to_model_space(scene, Point(x=rect.x, y=rect.y)) == Point(x=node.x, y=node.y)

    def test_curves_match_in_model_space(self):
        nodes, edges = sample_nodes(), sample_edges()
        vector = build_scene(nodes, edges)
        sketch = build_scene(nodes, edges, RenderOptions(style="sketch"))
        for v, s in zip(vector.curves, sketch.curves):
            for pv, ps in [
                (v.curve.start, s.curve.start),
                (v.curve.cp1, s.curve.cp1),
                (v.curve.cp2, s.curve.cp2),
                (v.curve.end, s.curve.end),
            ]:
                assert to_model_space(vector, pv) == to_model_space(sketch, ps)


class TestNodeLabel:
    def test_text_uses_first_line_without_heading_marks(self):
        assert node_label(make_node(text="# Title\nbody")) == "Title"

    def test_per_type_payloads(self):
        assert node_label(make_node(type="group", label="G")) == "G"
        assert node_label(make_node(type="link", url="https://x.y")) == "https://x.y"
        assert node_label(make_node(type="file", file="notes/a.md")) == "notes/a.md"

    def test_empty(self):
        assert node_label(make_node()) == ""
