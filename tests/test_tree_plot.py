"""
Smoke tests for the matplotlib previews (Agg backend, see conftest).
"""

import pytest
from matplotlib import pyplot as plt

from tree import TreeConfig, count_edges, grow_tree
from tree_mesh import create_tree_mesh
from tree_plot import plot_3d_mesh, plot_wire


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")


def test_plot_wire(tree):
    fig = plot_wire(tree, show=False)
    ax = fig.axes[0]
    assert len(ax.lines) == count_edges(tree)


def test_plot_wire_single_leaf():
    fig = plot_wire(grow_tree(TreeConfig(depth=0)), show=False)
    assert len(fig.axes[0].lines) == 0


def test_plot_3d_mesh(tree, config):
    trunk, leaves = create_tree_mesh(tree, config)
    fig = plot_3d_mesh(trunk, leaves, show=False)
    ax = fig.axes[0]
    assert len(ax.collections) == 1
    assert f"{trunk.vertex_count} trunk vertices" in ax.get_title()


def test_plot_3d_mesh_leaf_only():
    cfg = TreeConfig(depth=0)
    trunk, leaves = create_tree_mesh(grow_tree(cfg), cfg)
    fig = plot_3d_mesh(trunk, leaves, show=False)
    assert "2 faces" in fig.axes[0].get_title()
