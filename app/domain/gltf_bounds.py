"""Axis-aligned bounding boxes for glTF 2.0 models.

Works on either a binary `.glb` container or a plain `.gltf` JSON document,
both read with pygltflib. POSITION accessors carry `min`/`max`; their corners
are transformed through the node hierarchy of the default scene.

Primary API:
- compute_bounds(data) -> BoundingBox
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np
from pygltflib import GLTF2, Node

_GLB_MAGIC = b"glTF"


@dataclass(frozen=True)
class BoundingBox:
    width: float
    height: float
    depth: float
    center_x: float
    center_y: float
    center_z: float

    @classmethod
    def from_extent(cls, lo: np.ndarray, hi: np.ndarray) -> "BoundingBox":
        size = hi - lo
        center = (hi + lo) / 2.0
        return cls(
            width=float(size[0]),
            height=float(size[1]),
            depth=float(size[2]),
            center_x=float(center[0]),
            center_y=float(center[1]),
            center_z=float(center[2]),
        )


def load_document(data: bytes) -> GLTF2:
    """Parse GLB or glTF JSON bytes. Raises ValueError on anything else."""
    try:
        if data[:4] == _GLB_MAGIC:
            gltf = GLTF2.load_from_bytes(data)
        else:
            gltf = GLTF2.from_json(data.decode("utf-8"))
    except Exception as e:
        raise ValueError("Not a glTF document: {}".format(e)) from e
    if not isinstance(gltf, GLTF2):
        raise ValueError("Not a glTF document")
    return gltf


# -----------------------------------------------------------------------------
# Node transforms (4x4, column vectors)
# -----------------------------------------------------------------------------

def _rotation(q) -> np.ndarray:
    x, y, z, w = (float(v) for v in q)
    return np.array([
        [1 - 2 * (y * y + z * z), 2 * (x * y - z * w), 2 * (x * z + y * w)],
        [2 * (x * y + z * w), 1 - 2 * (x * x + z * z), 2 * (y * z - x * w)],
        [2 * (x * z - y * w), 2 * (y * z + x * w), 1 - 2 * (x * x + y * y)],
    ])


def node_matrix(node: Node) -> np.ndarray:
    if node.matrix is not None and len(node.matrix) == 16:
        # glTF stores matrices column-major.
        return np.array(node.matrix, dtype=float).reshape(4, 4).T

    m = np.identity(4)
    m[:3, :3] = _rotation(node.rotation or (0.0, 0.0, 0.0, 1.0)) @ np.diag(node.scale or (1.0, 1.0, 1.0))
    m[:3, 3] = node.translation or (0.0, 0.0, 0.0)
    return m


def _corners(lo, hi) -> np.ndarray:
    """The 8 box corners as homogeneous columns (4x8)."""
    xs, ys, zs = np.meshgrid((lo[0], hi[0]), (lo[1], hi[1]), (lo[2], hi[2]), indexing="ij")
    return np.vstack([xs.ravel(), ys.ravel(), zs.ravel(), np.ones(8)])


# -----------------------------------------------------------------------------
# Bounds
# -----------------------------------------------------------------------------

def _root_nodes(gltf: GLTF2) -> list[int]:
    index = gltf.scene or 0
    if 0 <= index < len(gltf.scenes) and gltf.scenes[index].nodes is not None:
        return list(gltf.scenes[index].nodes)

    children = {c for node in gltf.nodes for c in (node.children or [])}
    return [i for i in range(len(gltf.nodes)) if i not in children]


def _mesh_corners(gltf: GLTF2, mesh_index: Optional[int]) -> list[np.ndarray]:
    if mesh_index is None or not 0 <= mesh_index < len(gltf.meshes):
        return []
    out = []
    for prim in gltf.meshes[mesh_index].primitives:
        acc_index = getattr(prim.attributes, "POSITION", None)
        if acc_index is None or not 0 <= acc_index < len(gltf.accessors):
            continue
        acc = gltf.accessors[acc_index]
        if not acc.min or not acc.max or len(acc.min) < 3 or len(acc.max) < 3:
            continue
        out.append(_corners(acc.min, acc.max))
    return out


def compute_bounds(data: bytes) -> BoundingBox:
    """Compute the world-space bounding box of a glTF model.

    Raises ValueError when the document holds no measurable geometry.
    """
    gltf = load_document(data)
    points: list[np.ndarray] = []

    stack = [(i, np.identity(4)) for i in _root_nodes(gltf)]
    seen: set[int] = set()
    while stack:
        idx, parent = stack.pop()
        if idx in seen or not 0 <= idx < len(gltf.nodes):
            continue
        seen.add(idx)
        node = gltf.nodes[idx]
        world = parent @ node_matrix(node)
        for corners in _mesh_corners(gltf, node.mesh):
            points.append((world @ corners)[:3])
        for child in node.children or []:
            stack.append((child, world))

    if not points:
        raise ValueError("glTF document has no POSITION bounds")

    cloud = np.hstack(points)
    return BoundingBox.from_extent(cloud.min(axis=1), cloud.max(axis=1))


__all__ = [
    "BoundingBox",
    "compute_bounds",
    "load_document",
    "node_matrix",
]
