"""
Deterministic stand-ins for the random and noise capabilities.
"""


class MidpointRandom:
    """Always picks the low end of integer ranges and the middle of float ranges."""

    def randint(self, a, b):
        return a

    def uniform(self, a, b):
        return (a + b) / 2.0


class ConstantNoise:
    def __init__(self, value=0.0):
        self.value = value

    def sample(self, x, y, z):
        return self.value


class RecordingNoise(ConstantNoise):
    def __init__(self, value=0.0):
        super().__init__(value)
        self.calls = []

    def sample(self, x, y, z):
        self.calls.append((x, y, z))
        return self.value


def node_depths(root):
    """Yield (node, depth) pairs, depth counted in edges from the root."""
    stack = [(root, 0)]
    while stack:
        node, depth = stack.pop()
        yield node, depth
        stack.extend((child, depth + 1) for child in node.children)
