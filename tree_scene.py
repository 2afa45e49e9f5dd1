#!/usr/bin/env python3
# pip install numpy noise trimesh matplotlib
# Assembles the generated tree into a coloured trimesh scene and exports it.

import argparse
import logging
from pathlib import Path
from typing import List, Optional

import numpy as np
import trimesh

from tree import (DEPTH, SEED, TreeConfig, count_edges, count_leaves,
                  count_nodes, grow_tree, max_depth)
from tree_mesh import MeshBuffer, create_tree_mesh

logger = logging.getLogger(__name__)

# ===== Scene settings =====
BARK_COLOR   = (0.45, 0.3, 0.2, 1.0)
LEAF_COLOR   = (0.2, 0.8, 0.2, 0.8)     # leaves are alpha-blended
GROUND_COLOR = (0.3, 0.5, 0.3, 1.0)
GROUND_SIZE  = 20.0
GROUND_THICK = 0.1

EXPORT_TYPES = ("obj", "glb", "gltf", "stl", "ply", "off")


class TreeExportError(ValueError):
    """Raised for export targets trimesh is not asked to write."""


def _rgba(color) -> np.ndarray:
    return np.round(np.asarray(color, dtype=float) * 255.0).astype(np.uint8)

def colored(buffer: MeshBuffer, color) -> trimesh.Trimesh:
    mesh = buffer.to_trimesh()
    mesh.visual = trimesh.visual.ColorVisuals(
        mesh, vertex_colors=np.tile(_rgba(color), (buffer.vertex_count, 1))
    )
    return mesh

def ground_plane(size: float = GROUND_SIZE) -> trimesh.Trimesh:
    ground = trimesh.creation.box(extents=[size, GROUND_THICK, size])
    ground.apply_translation([0.0, -GROUND_THICK / 2, 0.0])
    ground.visual.vertex_colors = np.tile(_rgba(GROUND_COLOR), (len(ground.vertices), 1))
    return ground


def build_scene_mesh(trunk: MeshBuffer, leaves: MeshBuffer, ground: bool = True) -> trimesh.Trimesh:
    """Concatenate bark, leaves and (optionally) a ground plane into one mesh."""
    meshes: List[trimesh.Trimesh] = []
    if not trunk.is_empty():
        meshes.append(colored(trunk, BARK_COLOR))
    if not leaves.is_empty():
        meshes.append(colored(leaves, LEAF_COLOR))
    if ground:
        meshes.append(ground_plane())
    if not meshes:
        return trimesh.Trimesh()
    return trimesh.util.concatenate(meshes)


def export_tree(path, trunk: MeshBuffer, leaves: MeshBuffer, ground: bool = False) -> Path:
    path = Path(path)
    file_type = path.suffix.lower().lstrip(".")
    if file_type not in EXPORT_TYPES:
        raise TreeExportError(
            f"cannot export to '{path.suffix or path.name}'; choose one of {', '.join(EXPORT_TYPES)}"
        )
    scene = build_scene_mesh(trunk, leaves, ground=ground)
    scene.export(str(path), file_type=file_type)
    logger.info("exported %d vertices / %d faces to %s", len(scene.vertices), len(scene.faces), path)
    return path


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Grow a procedural tree and export its mesh")
    parser.add_argument("--seed", type=int, default=SEED, help="Random seed")
    parser.add_argument("--depth", type=int, default=DEPTH, help="Maximum branching depth")
    parser.add_argument("--out", default="tree.obj", help="Output file (obj, glb, stl, ply, ...)")
    parser.add_argument("--ground", action="store_true", help="Add a ground plane to the export")
    parser.add_argument("--plot", action="store_true", help="Show a matplotlib preview")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")

    config = TreeConfig(seed=args.seed, depth=args.depth)

    print("Growing branches…")
    root = grow_tree(config)
    print(f"Tree has {count_nodes(root)} nodes, {count_edges(root)} branches, "
          f"{count_leaves(root)} leaves (depth {max_depth(root)})")

    print("Meshing…")
    trunk, leaves = create_tree_mesh(root, config)
    print(f"Trunk: {trunk.vertex_count} vertices, {trunk.triangle_count} triangles")
    print(f"Leaves: {leaves.vertex_count} vertices, {leaves.triangle_count} triangles")

    out = export_tree(args.out, trunk, leaves, ground=args.ground)
    print(f"Done: {out}")

    if args.plot:
        from tree_plot import plot_3d_mesh
        plot_3d_mesh(trunk, leaves)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
