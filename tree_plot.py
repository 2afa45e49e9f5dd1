# tree_plot.py
# Matplotlib previews of the branch graph and the synthesized meshes.

import numpy as np
from matplotlib import pyplot as plt
from mpl_toolkits.mplot3d import Axes3D  # noqa: F401  # needed for 3D
from mpl_toolkits.mplot3d.art3d import Poly3DCollection

from tree import BranchNode, iter_edges
from tree_mesh import MeshBuffer


def _finish(ax, title):
    ax.set_box_aspect([1,1.6,1])  # taller in Y
    ax.set_xlabel('X'); ax.set_ylabel('Y'); ax.set_zlabel('Z')
    ax.view_init(elev=15, azim=45)
    ax.set_title(title)


def plot_wire(root: BranchNode, show: bool = True):
    """Draw every branch edge as a line, thicker for thicker radii."""
    fig = plt.figure(figsize=(8, 10))
    ax = fig.add_subplot(111, projection='3d')

    edges = list(iter_edges(root))
    max_r = max((parent.radius for parent, _ in edges), default=1.0)
    for parent, child in edges:
        p0, p1 = parent.position, child.position
        x = [p0[0], p1[0]]; y = [p0[1], p1[1]]; z = [p0[2], p1[2]]
        lw = 0.5 + 2.5*(parent.radius/max_r)
        ax.plot(x, y, z, linewidth=lw, alpha=0.9, solid_capstyle='round', color='saddlebrown')

    _finish(ax, f'Procedural Tree (wireframe, {len(edges)} branches)')
    fig.tight_layout()
    if show:
        plt.show()
    return fig


def plot_3d_mesh(trunk: MeshBuffer, leaves: MeshBuffer, show: bool = True):
    """Draw trunk and leaf triangles as a single shaded collection."""
    fig = plt.figure(figsize=(12, 10))
    ax = fig.add_subplot(111, projection='3d')

    triangles = []
    colors = []
    if not trunk.is_empty():
        tris = trunk.positions[trunk.faces]
        height = max(float(trunk.positions[:, 1].max()), 1e-6)
        for tri in tris:
            # brown gradient by height
            colors.append(plt.cm.copper(0.3 + 0.4 * (np.mean(tri[:, 1]) / height)))
        triangles.extend(tris)
    if not leaves.is_empty():
        tris = leaves.positions[leaves.faces]
        colors.extend([plt.cm.Greens(0.7)] * len(tris))
        triangles.extend(tris)

    if triangles:
        mesh = Poly3DCollection(triangles, alpha=0.8, edgecolor='black', linewidth=0.1)
        mesh.set_facecolors(colors)
        ax.add_collection3d(mesh)

        vertices = np.concatenate([trunk.positions, leaves.positions])
        ax.set_xlim(vertices[:, 0].min() - 1, vertices[:, 0].max() + 1)
        ax.set_ylim(vertices[:, 1].min() - 1, vertices[:, 1].max() + 1)
        ax.set_zlim(vertices[:, 2].min() - 1, vertices[:, 2].max() + 1)

    _finish(ax, f'Procedural Tree (3D Mesh - {trunk.vertex_count} trunk vertices, '
                f'{leaves.vertex_count} leaf vertices, {len(triangles)} faces)')
    fig.tight_layout()
    if show:
        plt.show()
    return fig
