"""
Shared fixtures for the tree tests.
"""

import matplotlib
matplotlib.use("Agg")

import pytest

from tree import TreeConfig, generate_tree, grow_tree
from tests.fakes import ConstantNoise, MidpointRandom


@pytest.fixture
def config():
    return TreeConfig(seed=7, depth=5)


@pytest.fixture
def tree(config):
    return grow_tree(config)


@pytest.fixture
def single_branch():
    """Root plus exactly one leaf child."""
    cfg = TreeConfig(depth=1)
    return generate_tree(MidpointRandom(), ConstantNoise(), cfg), cfg
