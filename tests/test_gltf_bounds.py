import json
import struct

import numpy as np
import pytest
from pygltflib import Node

from app.domain.gltf_bounds import BoundingBox, compute_bounds, load_document, node_matrix


def _doc(nodes, scene_nodes=(0,), accessors=None):
    return {
        "asset": {"version": "2.0"},
        "scene": 0,
        "scenes": [{"nodes": list(scene_nodes)}],
        "nodes": nodes,
        "meshes": [{"primitives": [{"attributes": {"POSITION": 0}}]}],
        "accessors": accessors or [{"min": [-1.0, 0.0, -2.0], "max": [1.0, 4.0, 2.0]}],
    }


def _glb(doc) -> bytes:
    body = json.dumps(doc).encode("utf-8")
    body += b" " * ((4 - len(body) % 4) % 4)
    header = struct.pack("<III", 0x46546C67, 2, 12 + 8 + len(body))
    chunk = struct.pack("<II", len(body), 0x4E4F534A)
    return header + chunk + body


def test_plain_mesh_bounds():
    b = compute_bounds(json.dumps(_doc([{"mesh": 0}])).encode("utf-8"))
    assert b == BoundingBox(width=2.0, height=4.0, depth=4.0, center_x=0.0, center_y=2.0, center_z=0.0)


def test_glb_container_is_parsed():
    doc = _doc([{"mesh": 0}])
    assert load_document(_glb(doc)).asset.version == "2.0"
    assert compute_bounds(_glb(doc)).height == pytest.approx(4.0)


def test_translation_and_scale_of_parent_nodes():
    nodes = [
        {"children": [1], "translation": [10.0, 0.0, 0.0]},
        {"mesh": 0, "scale": [2.0, 2.0, 2.0]},
    ]
    b = compute_bounds(json.dumps(_doc(nodes)).encode("utf-8"))
    assert b.width == pytest.approx(4.0)
    assert b.height == pytest.approx(8.0)
    assert b.center_x == pytest.approx(10.0)
    assert b.center_y == pytest.approx(4.0)


def test_column_major_matrix_translation():
    m = [1, 0, 0, 0, 0, 1, 0, 0, 0, 0, 1, 0, 0, 5, 0, 1]
    b = compute_bounds(json.dumps(_doc([{"mesh": 0, "matrix": m}])).encode("utf-8"))
    assert b.center_y == pytest.approx(7.0)


def test_rotation_about_y_swaps_width_and_depth():
    s = 2 ** -0.5
    nodes = [{"mesh": 0, "rotation": [0.0, s, 0.0, s]}]
    acc = [{"min": [-3.0, 0.0, -1.0], "max": [3.0, 1.0, 1.0]}]
    b = compute_bounds(json.dumps(_doc(nodes, accessors=acc)).encode("utf-8"))
    assert b.width == pytest.approx(2.0)
    assert b.depth == pytest.approx(6.0)


def test_document_without_geometry_is_rejected():
    doc = {"asset": {"version": "2.0"}, "nodes": [{}]}
    with pytest.raises(ValueError):
        compute_bounds(json.dumps(doc).encode("utf-8"))


def test_garbage_is_rejected():
    with pytest.raises(ValueError):
        compute_bounds(b"\x00\x01not gltf at all")


def test_node_matrix_composes_trs():
    m = node_matrix(Node(translation=[1.0, 2.0, 3.0], scale=[2.0, 3.0, 4.0]))
    assert np.allclose(m[:3, 3], [1.0, 2.0, 3.0])
    assert np.allclose(np.diag(m), [2.0, 3.0, 4.0, 1.0])
    assert np.allclose(node_matrix(Node()), np.identity(4))
