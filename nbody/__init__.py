"""Barnes-Hut gravitational N-body engine."""

from .body import Body
from .octree import ForceOutcome, Merge, Octant, SpatialNode, TreeSettings
from .kernels import Method
from .universe import Universe
from .scene import generate_collision, generate_galaxy, initialize

__all__ = [
    "Body", "ForceOutcome", "Merge", "Octant", "SpatialNode", "TreeSettings",
    "Method", "Universe", "generate_collision", "generate_galaxy", "initialize",
]
