"""
Force-method selection and Numba kernels.

The octree in `nbody.octree` is the default method. The direct O(n²) kernel
evaluates every pair with the same softened force law and serves as the
exact reference for small body counts.
"""

import math
import numpy as np
from enum import Enum
from numba import njit, prange


class Method(Enum):
    BARNES_HUT = "barnes_hut"   # Octree traversal with theta criterion
    DIRECT = "direct"           # Exact pairwise sum (Numba parallel)


def resolve_method(method) -> Method:
    """Accept a Method or its string value."""
    if isinstance(method, Method):
        return method
    try:
        return Method(method)
    except ValueError:
        raise ValueError("Unknown method: " + str(method)) from None


@njit(parallel=True, fastmath=True, cache=True)
def compute_forces_direct(
    positions: np.ndarray,
    masses: np.ndarray,
    forces: np.ndarray,
    num_bodies: int,
    G: float,
    softening: float
):
    """
    Exact softened gravity on every body from every other body.
    Pairs at zero separation are skipped (no defined direction).
    """
    softening_sq = softening * softening

    for i in prange(num_bodies):
        px = positions[i, 0]
        py = positions[i, 1]
        pz = positions[i, 2]
        mi = masses[i]

        fx, fy, fz = 0.0, 0.0, 0.0

        for j in range(num_bodies):
            if j == i:
                continue
            dx = positions[j, 0] - px
            dy = positions[j, 1] - py
            dz = positions[j, 2] - pz
            dist_sq = dx * dx + dy * dy + dz * dz
            if dist_sq == 0.0:
                continue
            dist = math.sqrt(dist_sq)

            # F = G * m_i * m_j / (r^2 + eps^2), along the unit vector
            force_mag = G * mi * masses[j] / ((dist_sq + softening_sq) * dist)
            fx += dx * force_mag
            fy += dy * force_mag
            fz += dz * force_mag

        forces[i, 0] = fx
        forces[i, 1] = fy
        forces[i, 2] = fz


# Root cube fitting: padding keeps bodies off the root faces, the floor
# keeps the cube non-degenerate when every body sits at the origin.
ROOT_PADDING = 1.1
ROOT_MIN_MARGIN = 10.0


@njit(fastmath=True, cache=True)
def compute_bounds(positions: np.ndarray, num_bodies: int) -> float:
    """Half extent of an origin-centered cube strictly containing every body."""
    farthest = 0.0
    for i in range(num_bodies):
        for axis in range(3):
            coord = abs(positions[i, axis])
            if coord > farthest:
                farthest = coord
    return farthest * ROOT_PADDING + ROOT_MIN_MARGIN
