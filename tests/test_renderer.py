"""Tests for the vector and sketch renderers.

Uses hand-built scenes so the SVG output can be checked without the
layout engine.
"""
from __future__ import annotations

import re

import pytest

from canvas_flow.renderer import Renderer, SvgRenderer, escape_xml, renderer_for
from canvas_flow.sketch import SketchRenderer, hachure_lines, rough_line, _rng_for
from canvas_flow.scene import build_scene
from canvas_flow.types import CanvasEdge, CanvasNode, Point, RenderOptions
from canvas_flow.viewport import Viewport


def make_node(**overrides) -> CanvasNode:
    defaults = dict(id="A", type="text", x=0, y=0, width=100, height=50, text="Hello")
    defaults.update(overrides)
    return CanvasNode(**defaults)


def two_node_scene(style: str = "vector"):
    nodes = [
        make_node(id="a", x=0, y=0, color="1"),
        make_node(id="b", x=400, y=0, type="group", label="Team <core>", text=None),
    ]
    edges = [CanvasEdge(from_node="a", to_node="b")]
    return build_scene(nodes, edges, RenderOptions(style=style, margin=0))


# ============================================================================
# Vector renderer
# ============================================================================


class TestSvgRenderer:
    def test_produces_svg_document(self):
        svg = SvgRenderer().render(two_node_scene())
        assert svg.startswith('<svg xmlns="http://www.w3.org/2000/svg"')
        assert svg.endswith("</svg>")

    def test_view_box_covers_surface(self):
        svg = SvgRenderer().render(two_node_scene())
        assert 'viewBox="0 0 500 50"' in svg

    def test_edges_are_cubic_paths(self):
        svg = SvgRenderer().render(two_node_scene())
        assert '<path d="M 100 25.0 C 160 25.0, 340 25.0, 400 25.0"' in svg
        assert 'stroke="#cbd5e1"' in svg

    def test_group_is_tinted(self):
        svg = SvgRenderer().render(two_node_scene())
        assert 'fill="rgba(100, 116, 139, 0.05)"' in svg

    def test_labels_are_escaped(self):
        svg = SvgRenderer().render(two_node_scene())
        assert ">Team &lt;core&gt;</text>" in svg
        assert ">Hello</text>" in svg

    def test_viewport_transform_wraps_surface(self):
        vp = Viewport(scale=2, translate_x=10, translate_y=20, width=800, height=600)
        svg = SvgRenderer().render(two_node_scene(), vp)
        assert '<g transform="translate(10 20) scale(2)">' in svg
        assert 'viewBox="0 0 800 600"' in svg

    def test_edges_drawn_before_nodes(self):
        svg = SvgRenderer().render(two_node_scene())
        assert svg.index("<path") < svg.index("<rect")

    def test_custom_background(self):
        svg = SvgRenderer(RenderOptions(background="#000")).render(two_node_scene())
        assert "background:#000" in svg


# ============================================================================
# Sketch renderer
# ============================================================================


class TestSketchRenderer:
    def test_deterministic_output(self):
        scene = two_node_scene("sketch")
        assert SketchRenderer().render(scene) == SketchRenderer().render(scene)

    def test_curves_are_polylines_not_paths(self):
        svg = SketchRenderer().render(two_node_scene("sketch"))
        assert "<path" not in svg
        assert "<polyline" in svg

    def test_rectangle_sides_are_drawn_twice(self):
        scene = build_scene([make_node(id="solo")], [], RenderOptions(style="sketch"))
        svg = SketchRenderer().render(scene)
        assert svg.count("<polyline") == 8

    def test_groups_get_hachure(self):
        plain = SketchRenderer().render(
            build_scene([make_node(id="g", type="text")], [], RenderOptions(style="sketch"))
        )
        group = SketchRenderer().render(
            build_scene([make_node(id="g", type="group")], [], RenderOptions(style="sketch"))
        )
        assert group.count("<polyline") > plain.count("<polyline")
        assert 'opacity="0.5"' in group

    def test_wobble_stays_close_to_curve(self):
        scene = two_node_scene("sketch")
        svg = SketchRenderer(roughness=1.0).render(scene)
        edge_lines = [l for l in svg.splitlines() if 'stroke="#cbd5e1"' in l]
        assert len(edge_lines) == 2
        first = re.search(r'points="([^"]+)"', edge_lines[0]).group(1).split()
        x0, y0 = (float(v) for v in first[0].split(","))
        assert x0 == pytest.approx(100, abs=1.01)
        assert y0 == pytest.approx(25, abs=1.01)


class TestSketchHelpers:
    def test_rough_line_has_four_points_near_segment(self):
        pts = rough_line(_rng_for("x"), Point(x=0, y=0), Point(x=100, y=0), roughness=1)
        assert len(pts) == 4
        assert all(abs(p.y) <= 1.5 for p in pts)

    def test_hachure_lines_stay_inside_rect(self):
        for a, b in hachure_lines(10, 20, 50, 30, gap=7):
            for p in (a, b):
                assert 10 <= p.x <= 60
                assert 20 <= p.y <= 50

    def test_hachure_covers_rect(self):
        assert len(hachure_lines(0, 0, 80, 80, gap=8)) == 19


class TestRendererFor:
    def test_selects_backend(self):
        assert isinstance(renderer_for("vector"), SvgRenderer)
        assert isinstance(renderer_for("sketch"), SketchRenderer)

    def test_unknown_style(self):
        with pytest.raises(ValueError):
            renderer_for("pixel")

    def test_base_class_is_abstract(self):
        with pytest.raises(TypeError):
            Renderer()

    def test_backend_missing_draw_curve_cannot_be_built(self):
        class RectsOnly(Renderer):
            def draw_rect(self, rect):
                return ""

        with pytest.raises(TypeError):
            RectsOnly()


def test_escape_xml():
    assert escape_xml('<a href="x">&\'') == "&lt;a href=&quot;x&quot;&gt;&amp;&#39;"
