"""
Barnes-Hut octree over Body objects.

Each SpatialNode is a cube (center, half_extent). A leaf holds at most one
real body; an internal node owns up to 8 lazily created children and keeps
a running aggregate (center of mass, total mass) of everything below it as
its occupant.

Containment uses strict inequalities on both bounds, so a point lying
exactly on a face of the root cube is outside and is never inserted.
Octant classification breaks ties toward the positive side on every axis.
"""

from enum import IntEnum
from typing import Iterator, List, NamedTuple, Optional, Tuple

import numpy as np

from config import nbody as config
from .body import Body, as_vector


class Octant(IntEnum):
    """Child slot of a node. Bit 0 = left (-x), bit 1 = bottom (-y), bit 2 = back (-z)."""
    RIGHT_TOP_FRONT = 0
    LEFT_TOP_FRONT = 1
    RIGHT_BOTTOM_FRONT = 2
    LEFT_BOTTOM_FRONT = 3
    RIGHT_TOP_BACK = 4
    LEFT_TOP_BACK = 5
    RIGHT_BOTTOM_BACK = 6
    LEFT_BOTTOM_BACK = 7

    @property
    def signs(self) -> Tuple[float, float, float]:
        """Direction of this octant's center relative to the parent center."""
        return (
            -1.0 if self & 1 else 1.0,
            -1.0 if self & 2 else 1.0,
            -1.0 if self & 4 else 1.0,
        )


class TreeSettings(NamedTuple):
    """Parameters shared by every node of one tree."""
    theta: float
    G: float
    softening: float
    coincidence_eps: float
    max_depth: int

    @classmethod
    def from_config(cls, **overrides) -> "TreeSettings":
        """Current config.PHYSICS values, with keyword overrides."""
        physics = config.PHYSICS
        values = {field: overrides.pop(field, physics[field]) for field in cls._fields}
        if overrides:
            raise ValueError(f"Unknown tree settings: {', '.join(sorted(overrides))}")
        return cls(**values)


class Merge(NamedTuple):
    """Two bodies replaced by one during insertion."""
    absorbed: Tuple[Body, Body]
    merged: Body


class ForceOutcome(NamedTuple):
    """Result of one force query against a tree."""
    interactions: int = 0
    absorbed: Optional[Body] = None
    merged: Optional[Body] = None

    @property
    def merge_occurred(self) -> bool:
        return self.merged is not None

    def combine(self, other: "ForceOutcome") -> "ForceOutcome":
        if self.merged is not None or other.merged is None:
            return self._replace(interactions=self.interactions + other.interactions)
        return ForceOutcome(self.interactions + other.interactions, other.absorbed, other.merged)


class SpatialNode:
    """
    A cubic region of the octree.

    Attributes:
        center: float64 (3,) centroid of the cube
        half_extent: half the side length; the cube is center +/- half_extent
        occupant: real body of a leaf, or the aggregate pseudo-body of an internal node
        children: 8 optional child nodes indexed by Octant
        depth: distance from the root (root = 0)
    """

    __slots__ = ("center", "half_extent", "occupant", "children", "depth", "settings")

    def __init__(self, center, half_extent: float, settings: Optional[TreeSettings] = None,
                 depth: int = 0):
        if not half_extent > 0.0:
            raise ValueError(f"half_extent must be positive, got {half_extent}")
        self.center = as_vector(center, "center")
        self.half_extent = float(half_extent)
        self.settings = settings if settings is not None else TreeSettings.from_config()
        self.depth = depth
        self.occupant: Optional[Body] = None
        self.children: List[Optional[SpatialNode]] = [None] * 8

    def __repr__(self) -> str:
        kind = "leaf" if self.is_external() else "internal"
        return (f"SpatialNode({kind}, depth={self.depth}, "
                f"half_extent={self.half_extent:.6g}, occupant={self.occupant!r})")

    def is_external(self) -> bool:
        return all(child is None for child in self.children)

    def is_empty(self) -> bool:
        return self.occupant is None

    def bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        return self.center - self.half_extent, self.center + self.half_extent

    def contains_point(self, p) -> bool:
        """True if p is strictly inside the cube on all three axes."""
        lo, hi = self.bounds()
        return bool(np.all(p > lo) and np.all(p < hi))

    def classify_octant(self, p) -> Octant:
        octant = 0
        if p[0] < self.center[0]:
            octant |= 1
        if p[1] < self.center[1]:
            octant |= 2
        if p[2] < self.center[2]:
            octant |= 4
        return Octant(octant)

    def _child(self, octant: Octant) -> "SpatialNode":
        """Return the child for octant, creating it on first use."""
        child = self.children[octant]
        if child is None:
            quarter = self.half_extent * 0.5
            center = self.center + quarter * np.array(octant.signs)
            child = SpatialNode(center, quarter, self.settings, self.depth + 1)
            self.children[octant] = child
        return child

    def insert(self, body: Body) -> Optional[Merge]:
        """
        Insert a body below this node.

        Points outside the cube are ignored. Returns a Merge when the depth
        cap forced two bodies into one; the caller must then replace both
        absorbed bodies with the merged one in its own collection.
        """
        if not self.contains_point(body.position):
            return None
        return self._insert(body)

    def _insert(self, body: Body) -> Optional[Merge]:
        if self.occupant is None:
            self.occupant = body
            return None

        if self.is_external():
            if self.depth >= self.settings.max_depth:
                merged = self.occupant.merge_with(body)
                absorbed = (self.occupant, body)
                self.occupant = merged
                return Merge(absorbed, merged)
            # Push the real occupant down before this node becomes internal
            resident = self.occupant
            self._child(self.classify_octant(resident.position))._insert(resident)

        result = self._child(self.classify_octant(body.position))._insert(body)
        self.occupant = self.occupant.merge_with(body)
        return result

    def accumulate_force_on(self, body: Body) -> ForceOutcome:
        """
        Add the force this subtree exerts on body into body.force.

        Leaves apply their occupant exactly. Internal nodes apply their
        aggregate when side^2 < theta^2 * d^2 and open their children
        otherwise. A leaf coincident with body is reported as a merge
        instead of producing a force; the tree itself is never modified.
        """
        occupant = self.occupant
        if occupant is None or occupant == body:
            return ForceOutcome()

        s = self.settings
        if self.is_external():
            if occupant.is_coincident_with(body, s.coincidence_eps):
                return ForceOutcome(0, occupant, body.merge_with(occupant))
            body.apply_gravity_from(occupant, s.G, s.softening)
            return ForceOutcome(1)

        size = 2.0 * self.half_extent
        if size * size < s.theta * s.theta * occupant.squared_distance_to(body):
            body.apply_gravity_from(occupant, s.G, s.softening)
            return ForceOutcome(1)

        outcome = ForceOutcome()
        for child in self.children:
            if child is not None:
                outcome = outcome.combine(child.accumulate_force_on(body))
        return outcome

    def walk(self, path: Tuple[Octant, ...] = ()) -> Iterator[Tuple[Tuple[Octant, ...], "SpatialNode"]]:
        """Yield (octant path, node) in depth-first, octant order."""
        yield path, self
        for octant, child in zip(Octant, self.children):
            if child is not None:
                yield from child.walk(path + (octant,))

    def node_count(self) -> int:
        return sum(1 for _ in self.walk())

    def depth_reached(self) -> int:
        return max(node.depth for _, node in self.walk())
