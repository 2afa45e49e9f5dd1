# tree_mesh.py
# Turns a branch graph into two triangle meshes: tapered bark segments and
# billboard leaf quads. Vertex indices are local to each buffer.

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np
import trimesh

from tree import BranchNode, LEAF_SIZE, SEGMENTS, TreeConfig, iter_nodes

logger = logging.getLogger(__name__)

LEAF_UVS = [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0)]


@dataclass
class MeshBuffer:
    positions: np.ndarray                # (n, 3) float32
    normals: np.ndarray                  # (n, 3) float32
    indices: np.ndarray                  # (3m,) uint32 triangle list
    uvs: Optional[np.ndarray] = None     # (n, 2) float32, leaves only

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    @property
    def triangle_count(self) -> int:
        return len(self.indices) // 3

    @property
    def faces(self) -> np.ndarray:
        return self.indices.reshape(-1, 3)

    def is_empty(self) -> bool:
        return self.vertex_count == 0

    def to_trimesh(self) -> trimesh.Trimesh:
        """Wrap the buffer as a trimesh, keeping our normals and UVs untouched."""
        visual = None
        if self.uvs is not None:
            visual = trimesh.visual.TextureVisuals(uv=self.uvs)
        return trimesh.Trimesh(
            vertices=self.positions,
            faces=self.faces.astype(np.int64),
            vertex_normals=self.normals,
            visual=visual,
            process=False,
        )


class _Builder:
    def __init__(self, with_uvs: bool = False):
        self.positions: List[np.ndarray] = []
        self.normals: List[np.ndarray] = []
        self.uvs: Optional[List[Tuple[float, float]]] = [] if with_uvs else None
        self.indices: List[int] = []

    def build(self) -> MeshBuffer:
        uvs = None
        if self.uvs is not None:
            uvs = np.array(self.uvs, dtype=np.float32).reshape(-1, 2)
        return MeshBuffer(
            positions=np.array(self.positions, dtype=np.float32).reshape(-1, 3),
            normals=np.array(self.normals, dtype=np.float32).reshape(-1, 3),
            indices=np.array(self.indices, dtype=np.uint32),
            uvs=uvs,
        )


def local_frame(direction: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Two unit vectors perpendicular to ``direction`` and to each other.

    ``forward x right`` points along ``direction``.
    """
    # find a vector not parallel to direction
    if abs(direction[1]) < 0.99:
        up = np.array([0.0, 1.0, 0.0])
    else:
        up = np.array([0.0, 0.0, 1.0])

    right = np.cross(direction, up)
    right = right / np.linalg.norm(right)
    forward = np.cross(right, direction)
    forward = forward / np.linalg.norm(forward)
    return right, forward


def add_branch(parent: BranchNode, child: BranchNode, out: _Builder, segments: int = SEGMENTS):
    """Emit one frustum between parent and child, rings at both radii."""
    base_index = len(out.positions)

    start = np.asarray(parent.position, dtype=float)
    end = np.asarray(child.position, dtype=float)
    direction = end - start
    direction = direction / np.linalg.norm(direction)
    right, forward = local_frame(direction)

    for i in range(segments + 1):
        angle = i / segments * 2.0 * math.pi
        offset = math.cos(angle) * right + math.sin(angle) * forward

        out.positions.append(start + offset * parent.radius)
        out.positions.append(end + offset * child.radius)
        # radial offset stands in for the slanted frustum normal
        out.normals.append(offset)
        out.normals.append(offset)

        if i < segments:
            i0 = base_index + i * 2          # parent ring
            i1 = i0 + 1                      # child ring
            i2 = base_index + (i + 1) * 2
            i3 = i2 + 1
            out.indices.extend((i0, i1, i2, i1, i3, i2))


def add_leaf(node: BranchNode, out: _Builder, leaf_size: float = LEAF_SIZE):
    """Emit a flat quad centred on the node, facing along its direction."""
    base_index = len(out.positions)

    direction = np.asarray(node.direction, dtype=float)
    right, forward = local_frame(direction)
    center = np.asarray(node.position, dtype=float)

    # counter-clockwise when viewed from the tip of direction
    out.positions.extend([
        center + (right + forward) * leaf_size,
        center + (right - forward) * leaf_size,
        center + (-right - forward) * leaf_size,
        center + (-right + forward) * leaf_size,
    ])
    out.normals.extend([direction] * 4)
    out.uvs.extend(LEAF_UVS)
    out.indices.extend((
        base_index, base_index + 1, base_index + 2,
        base_index, base_index + 2, base_index + 3,
    ))


def create_tree_mesh(root: BranchNode, config: Optional[TreeConfig] = None) -> Tuple[MeshBuffer, MeshBuffer]:
    """Synthesize ``(trunk, leaves)`` buffers from a finished branch graph.

    Every parent->child edge becomes one frustum in the trunk buffer, and
    every leaf node one quad in the leaf buffer. Only ``segments`` and
    ``leaf_size`` are read from the config.
    """
    config = config or TreeConfig()
    trunk = _Builder()
    leaves = _Builder(with_uvs=True)

    for node in iter_nodes(root):
        if node.is_leaf:
            add_leaf(node, leaves, config.leaf_size)
        for child in node.children:
            add_branch(node, child, trunk, config.segments)

    trunk_mesh, leaf_mesh = trunk.build(), leaves.build()
    logger.debug(
        "tree mesh: trunk %d verts / %d tris, leaves %d verts / %d tris",
        trunk_mesh.vertex_count, trunk_mesh.triangle_count,
        leaf_mesh.vertex_count, leaf_mesh.triangle_count,
    )
    return trunk_mesh, leaf_mesh
