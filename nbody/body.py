"""Point-mass body used by the octree and the step driver."""

import math
import numpy as np

from config import nbody as config


def as_vector(value, name: str = "vector") -> np.ndarray:
    """Copy a 3-component sequence into a float64 array."""
    vec = np.array(value if value is not None else (0.0, 0.0, 0.0), dtype=np.float64)
    if vec.shape != (3,):
        raise ValueError(f"{name} must have exactly 3 components, got shape {vec.shape}")
    return vec


class Body:
    """
    A point mass with position, velocity, accumulated force and mass.

    All vectors are float64: positions span ~1e19 meters, where float32
    loses usable resolution.
    """

    __slots__ = ("position", "velocity", "force", "mass")

    def __init__(self, position, velocity=None, force=None, mass: float = 1.0):
        mass = float(mass)
        if not mass > 0.0:
            raise ValueError(f"Body mass must be positive, got {mass}")
        self.position = as_vector(position, "position")
        self.velocity = as_vector(velocity, "velocity")
        self.force = as_vector(force, "force")
        self.mass = mass

    def __repr__(self) -> str:
        x, y, z = self.position
        return f"Body(position=({x:.6g}, {y:.6g}, {z:.6g}), mass={self.mass:.6g})"

    def __eq__(self, other):
        if self is other:
            return True
        if not isinstance(other, Body):
            return NotImplemented
        return (
            self.mass == other.mass
            and np.array_equal(self.position, other.position)
            and np.array_equal(self.velocity, other.velocity)
            and np.array_equal(self.force, other.force)
        )

    __hash__ = None

    def copy(self) -> "Body":
        return Body(self.position, self.velocity, self.force, self.mass)

    def squared_distance_to(self, other: "Body") -> float:
        delta = self.position - other.position
        return float(delta @ delta)

    def distance_to(self, other: "Body") -> float:
        return math.sqrt(self.squared_distance_to(other))

    def reset_force(self):
        self.force[:] = 0.0

    def apply_gravity_from(self, source: "Body", G: float = None, softening: float = None):
        """
        Accumulate the softened Newtonian pull of `source` into `force`.

        F = G * m * M / (d^2 + eps^2), directed from self toward source.
        Zero separation has no direction and contributes nothing. G and
        softening default to config.PHYSICS as it stands at call time.
        """
        if G is None:
            G = config.PHYSICS["G"]
        if softening is None:
            softening = config.PHYSICS["softening"]
        delta = source.position - self.position
        dist_sq = float(delta @ delta)
        if dist_sq == 0.0:
            return
        dist = math.sqrt(dist_sq)
        magnitude = G * self.mass * source.mass / (dist_sq + softening * softening)
        self.force += delta * (magnitude / dist)

    def integrate(self, dt: float):
        """Semi-implicit Euler: velocity first, then position with the new velocity."""
        self.velocity += dt * self.force / self.mass
        self.position += dt * self.velocity

    def merge_with(self, other: "Body") -> "Body":
        """
        Perfectly inelastic merge into a new body at the mass-weighted centroid.

        Velocity and force of the result are zero: momentum is discarded,
        this is a numerical simplification rather than collision physics.
        """
        m = self.mass + other.mass
        position = (self.position * self.mass + other.position * other.mass) / m
        return Body(position, mass=m)

    def is_coincident_with(self, other: "Body", eps: float = None) -> bool:
        if eps is None:
            eps = config.PHYSICS["coincidence_eps"]
        return bool(np.all(np.abs(self.position - other.position) < eps))

    def kinetic_energy(self) -> float:
        return 0.5 * self.mass * float(self.velocity @ self.velocity)

    def momentum(self) -> np.ndarray:
        return self.mass * self.velocity
