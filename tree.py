# tree.py
# Recursive noise-guided branch graph for a stylized procedural tree.
# The graph is consumed by tree_mesh.create_tree_mesh.

import logging
import math
import random
from dataclasses import dataclass, field, replace
from typing import Iterator, List, Optional, Protocol, Tuple

import numpy as np
from noise import pnoise3

logger = logging.getLogger(__name__)

# ===== Shape defaults =====
SEED             = 1337
DEPTH            = 7          # overall complexity of the tree
START_RADIUS     = 0.2
MIN_RADIUS       = 0.01       # thinner branches stop growing
BRANCH_COUNT     = (1, 3)     # inclusive
NOISE_FREQUENCY  = 0.1        # position scale before sampling the noise field
TWIST_SCALE      = 2.0 * math.pi
BEND_RANGE       = (-math.pi / 4.0, math.pi / 4.0)
LENGTH_RANGE     = (0.5, 1.0)
LENGTH_GAIN      = 0.2        # length *= remaining_depth * gain + base
LENGTH_BASE      = 0.8
TAPER_RANGE      = (0.6, 0.8)
SEGMENTS         = 8          # ring segments around each branch
LEAF_SIZE        = 0.2        # leaf quad half-size

UP = np.array([0.0, 1.0, 0.0], dtype=float)


class TreeConfigError(ValueError):
    """Raised when a TreeConfig cannot produce a meaningful tree."""


# ---------- Basic math helpers ----------
def rot_y(v: np.ndarray, angle: float) -> np.ndarray:
    c, s = math.cos(angle), math.sin(angle)
    R = np.array([[c,0,s],[0,1,0],[-s,0,c]], dtype=float)
    return R @ v

def rot_z(v: np.ndarray, angle: float) -> np.ndarray:
    c, s = math.cos(angle), math.sin(angle)
    R = np.array([[c,-s,0],[s,c,0],[0,0,1]], dtype=float)
    return R @ v

def twist_bend(direction: np.ndarray, twist: float, bend: float) -> np.ndarray:
    # bend about Z first, then twist about the up axis
    v = rot_z(direction, bend)
    v = rot_y(v, twist)
    return v / np.linalg.norm(v)


# ---------- Injected capabilities ----------
class RandomSource(Protocol):
    def randint(self, a: int, b: int) -> int: ...
    def uniform(self, a: float, b: float) -> float: ...


class NoiseField(Protocol):
    def sample(self, x: float, y: float, z: float) -> float: ...


class PerlinNoise:
    """Coherent 3D noise backed by ``noise.pnoise3``.

    ``base`` selects the permutation offset and is folded into 0..255, so any
    integer seed is accepted. Output lies roughly in [-1, 1].
    """

    def __init__(self, base: int = 0, octaves: int = 1):
        if octaves < 1:
            raise TreeConfigError(f"octaves must be >= 1, got {octaves}")
        self.base = int(base) % 256
        self.octaves = octaves

    def sample(self, x: float, y: float, z: float) -> float:
        return pnoise3(float(x), float(y), float(z), octaves=self.octaves, base=self.base)

    def __repr__(self):
        return f"PerlinNoise(base={self.base}, octaves={self.octaves})"


# ---------- Options ----------
@dataclass
class TreeConfig:
    seed: int = SEED
    depth: int = DEPTH
    radius: float = START_RADIUS
    min_radius: float = MIN_RADIUS
    branch_count: Tuple[int, int] = BRANCH_COUNT
    noise_frequency: float = NOISE_FREQUENCY
    twist_scale: float = TWIST_SCALE
    bend_range: Tuple[float, float] = BEND_RANGE
    length_range: Tuple[float, float] = LENGTH_RANGE
    length_depth_gain: float = LENGTH_GAIN
    length_depth_base: float = LENGTH_BASE
    taper_range: Tuple[float, float] = TAPER_RANGE
    segments: int = SEGMENTS
    leaf_size: float = LEAF_SIZE

    def replace(self, **changes) -> "TreeConfig":
        return replace(self, **changes)

    def validate(self) -> "TreeConfig":
        """Reject configurations that would give a degenerate or non-tapering tree."""
        if self.depth < 0:
            raise TreeConfigError(f"depth must be >= 0, got {self.depth}")
        if self.radius <= 0:
            raise TreeConfigError(f"radius must be positive, got {self.radius}")
        if self.min_radius < 0:
            raise TreeConfigError(f"min_radius must be >= 0, got {self.min_radius}")
        if self.min_radius >= self.radius:
            raise TreeConfigError(
                f"min_radius ({self.min_radius}) must be below the starting radius ({self.radius})"
            )

        for name in ("branch_count", "bend_range", "length_range", "taper_range"):
            lo, hi = getattr(self, name)
            if lo > hi:
                raise TreeConfigError(f"{name} is inverted: {(lo, hi)}")

        lo, hi = self.branch_count
        if lo < 1:
            raise TreeConfigError(f"branch_count must start at 1 or more, got {self.branch_count}")
        lo, hi = self.taper_range
        if not (0.0 < lo and hi < 1.0):
            raise TreeConfigError(f"taper_range must lie inside (0, 1), got {self.taper_range}")
        lo, hi = self.length_range
        if lo <= 0:
            raise TreeConfigError(f"length_range must be positive, got {self.length_range}")
        if self.length_depth_gain < 0 or self.length_depth_base <= 0:
            raise TreeConfigError(
                "length scaling must be positive "
                f"(gain={self.length_depth_gain}, base={self.length_depth_base})"
            )
        if self.noise_frequency <= 0:
            raise TreeConfigError(f"noise_frequency must be positive, got {self.noise_frequency}")
        if self.segments < 3:
            raise TreeConfigError(f"segments must be >= 3, got {self.segments}")
        if self.leaf_size <= 0:
            raise TreeConfigError(f"leaf_size must be positive, got {self.leaf_size}")
        return self


def default_config(seed: int = SEED) -> TreeConfig:
    return TreeConfig(seed=seed)


# ---------- Branch graph ----------
@dataclass(frozen=True, eq=False)
class BranchNode:
    position: np.ndarray
    direction: np.ndarray
    radius: float
    children: Tuple["BranchNode", ...] = field(default=())
    is_leaf: bool = False


def generate_tree(rng: RandomSource, noise: NoiseField, config: Optional[TreeConfig] = None) -> BranchNode:
    """Grow a branch graph from the origin along the up axis.

    Every child is rotated from its parent's direction by a noise-driven
    twist and a random bend, pushed out by a depth-scaled length and thinned
    by a taper factor. Recursion stops when the depth budget is spent or the
    radius drops below ``min_radius``; those nodes are the leaves.
    """
    config = (config or TreeConfig()).validate()

    def grow(position: np.ndarray, direction: np.ndarray, radius: float, depth: int) -> BranchNode:
        if depth == 0 or radius < config.min_radius:
            return BranchNode(position, direction, radius, (), True)

        children: List[BranchNode] = []
        for _ in range(rng.randint(*config.branch_count)):
            p = position * config.noise_frequency
            noise_value = noise.sample(p[0], p[1], p[2])

            bend = rng.uniform(*config.bend_range)
            length = rng.uniform(*config.length_range) * (
                depth * config.length_depth_gain + config.length_depth_base
            )

            new_direction = twist_bend(direction, noise_value * config.twist_scale, bend)
            new_position = position + new_direction * length
            new_radius = radius * rng.uniform(*config.taper_range)

            children.append(grow(new_position, new_direction, new_radius, depth - 1))

        return BranchNode(position, direction, radius, tuple(children), False)

    root = grow(np.zeros(3, dtype=float), UP.copy(), float(config.radius), config.depth)
    logger.debug(
        "generated tree: %d nodes, %d leaves, depth %d",
        count_nodes(root), count_leaves(root), max_depth(root),
    )
    return root


def grow_tree(config: Optional[TreeConfig] = None) -> BranchNode:
    """Seeded entry point: ``random.Random(seed)`` plus a Perlin field drawn from it."""
    config = (config or TreeConfig()).validate()
    rng = random.Random(config.seed)
    noise = PerlinNoise(rng.randrange(256))
    return generate_tree(rng, noise, config)


# ---------- Walking the graph ----------
def iter_nodes(root: BranchNode) -> Iterator[BranchNode]:
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))

def iter_edges(root: BranchNode) -> Iterator[Tuple[BranchNode, BranchNode]]:
    for node in iter_nodes(root):
        for child in node.children:
            yield node, child

def count_nodes(root: BranchNode) -> int:
    return sum(1 for _ in iter_nodes(root))

def count_leaves(root: BranchNode) -> int:
    return sum(1 for n in iter_nodes(root) if n.is_leaf)

def count_edges(root: BranchNode) -> int:
    return count_nodes(root) - 1

def max_depth(root: BranchNode) -> int:
    """Number of edges on the longest root-to-leaf path."""
    if not root.children:
        return 0
    return 1 + max(max_depth(c) for c in root.children)

def tree_bounds(root: BranchNode) -> Tuple[np.ndarray, np.ndarray]:
    pts = np.array([n.position for n in iter_nodes(root)], dtype=float)
    return pts.min(axis=0), pts.max(axis=0)
