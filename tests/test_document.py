"""Tests for loading and saving .canvas documents."""
from __future__ import annotations

import json

import pytest

from canvas_flow.document import (
    CanvasLoadError,
    canvas_from_dict,
    dump_canvas,
    load_canvas,
)

SAMPLE = {
    "nodes": [
        {"id": "a", "type": "text", "x": 0, "y": 0, "width": 250, "height": 60,
         "color": "3", "text": "# Hello"},
        {"id": "g", "type": "group", "x": -50, "y": -50, "width": 600, "height": 400,
         "label": "Group", "background": "img.png"},
        {"id": "f", "type": "file", "x": 300, "y": 10.5, "width": 200, "height": 100,
         "file": "notes/todo.md", "subpath": "#Tasks"},
        {"id": "l", "type": "link", "x": 300, "y": 200, "width": 200, "height": 100,
         "url": "https://example.com"},
    ],
    "edges": [
        {"id": "e1", "fromNode": "a", "fromSide": "bottom", "toNode": "f", "toSide": "top",
         "label": "depends", "toEnd": "arrow"},
        {"id": "e2", "fromNode": "a", "toNode": "missing"},
    ],
    "metadata": {"version": 1},
}


class TestLoad:
    def test_loads_nodes_and_edges_in_order(self):
        doc = load_canvas(json.dumps(SAMPLE))
        assert [n.id for n in doc.nodes] == ["a", "g", "f", "l"]
        assert [(e.from_node, e.to_node) for e in doc.edges] == [("a", "f"), ("a", "missing")]

    def test_payload_fields(self):
        doc = load_canvas(json.dumps(SAMPLE))
        a, g, f, l = doc.nodes
        assert a.text == "# Hello" and a.color == "3"
        assert g.label == "Group"
        assert f.file == "notes/todo.md"
        assert l.url == "https://example.com"

    def test_unknown_fields_are_kept(self):
        doc = load_canvas(json.dumps(SAMPLE))
        assert doc.nodes[1].extra == {"background": "img.png"}
        assert doc.edges[0].extra == {"id": "e1", "label": "depends", "toEnd": "arrow"}
        assert doc.extra == {"metadata": {"version": 1}}

    def test_missing_collections_mean_empty(self):
        doc = load_canvas("{}")
        assert doc.nodes == [] and doc.edges == []

    def test_dangling_edge_is_kept(self):
        doc = load_canvas(json.dumps(SAMPLE))
        assert doc.edges[1].to_node == "missing"

    def test_accepts_bytes(self):
        doc = load_canvas(json.dumps(SAMPLE).encode("utf-8"))
        assert len(doc.nodes) == 4

    def test_does_not_alias_input(self):
        data = json.loads(json.dumps(SAMPLE))
        doc = canvas_from_dict(data)
        doc.nodes[1].extra["background"] = "other.png"
        assert data["nodes"][1]["background"] == "img.png"


class TestLoadErrors:
    @pytest.mark.parametrize(
        "text",
        [
            "not json",
            "[1, 2]",
            '{"nodes": {}}',
            '{"edges": 3}',
            '{"nodes": [42]}',
            '{"nodes": [{"x": 0, "y": 0, "width": 1, "height": 1}]}',
            '{"nodes": [{"id": "a", "x": "0", "y": 0, "width": 1, "height": 1}]}',
            '{"nodes": [{"id": "a", "x": 0, "y": 0, "width": 0, "height": 1}]}',
            '{"nodes": [{"id": "a", "x": 0, "y": 0, "height": 1}]}',
            '{"nodes": [{"id": "a", "x": true, "y": 0, "width": 1, "height": 1}]}',
            '{"nodes": [{"id": "a", "x": NaN, "y": 0, "width": 1, "height": 1}]}',
            '{"edges": [{"fromNode": "a"}]}',
            '{"edges": ["a->b"]}',
        ],
    )
    def test_malformed_documents_raise(self, text):
        with pytest.raises(CanvasLoadError):
            load_canvas(text)

    def test_duplicate_ids_raise(self):
        node = {"id": "a", "x": 0, "y": 0, "width": 1, "height": 1}
        with pytest.raises(CanvasLoadError, match="Duplicate"):
            canvas_from_dict({"nodes": [node, dict(node)]})

    def test_load_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            load_canvas("{")


class TestSave:
    def test_round_trip_preserves_everything(self):
        doc = load_canvas(json.dumps(SAMPLE))
        assert json.loads(dump_canvas(doc)) == SAMPLE

    def test_round_trip_keeps_number_types(self):
        out = dump_canvas(load_canvas(json.dumps(SAMPLE)))
        assert '"x": 0,' in out
        assert '"y": 10.5,' in out

    def test_edits_are_written(self):
        doc = load_canvas(json.dumps(SAMPLE))
        doc.nodes[0].x = 123.5
        doc.nodes[0].text = "changed"
        saved = json.loads(dump_canvas(doc))
        assert saved["nodes"][0]["x"] == 123.5
        assert saved["nodes"][0]["text"] == "changed"
        assert saved["nodes"][1] == SAMPLE["nodes"][1]

    def test_absent_optional_fields_stay_absent(self):
        doc = load_canvas('{"nodes": [{"id": "a", "type": "text", "x": 0, "y": 0, "width": 5, "height": 5}]}')
        saved = json.loads(dump_canvas(doc))
        assert set(saved["nodes"][0]) == {"id", "type", "x", "y", "width", "height"}
        assert saved["edges"] == []

    def test_defaulted_keys_are_not_added_on_save(self):
        raw = {"nodes": [{"id": "a", "x": 0, "y": 0, "width": 10, "height": 10},
                         {"id": "b", "type": "file", "width": 10, "height": 10, "file": "x.md"}],
               "edges": []}
        doc = load_canvas(json.dumps(raw))
        assert doc.nodes[0].type == "text"
        assert (doc.nodes[1].x, doc.nodes[1].y) == (0, 0)
        assert json.loads(dump_canvas(doc)) == raw

    def test_moved_node_writes_its_position(self):
        doc = load_canvas('{"nodes": [{"id": "a", "width": 10, "height": 10}]}')
        doc.nodes[0].x = 40
        saved = json.loads(dump_canvas(doc))["nodes"][0]
        assert saved["x"] == 40
        assert "y" not in saved
        assert "type" not in saved
