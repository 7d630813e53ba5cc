"""
Initial-state generators.

All inputs are in light-years and solar masses (see config.nbody); the
returned bodies are in SI units. Generators are one-shot setup utilities and
never run inside a simulation step.
"""

import numpy as np
from typing import List, Sequence

from config import nbody as config
from .body import Body


def _rng(rng) -> np.random.Generator:
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(config.GALAXY["seed"] if rng is None else rng)


def random_points_ellipsoid(count: int, dimensions: Sequence[float], rng=None) -> np.ndarray:
    """
    Sample `count` points inside an origin-centered ellipsoid.

    A direction is drawn uniformly on the sphere, then each axis is scaled
    by its own uniform factor in [0, 1) times the semi-axis length, which
    concentrates points toward the center and the coordinate planes.
    """
    rng = _rng(rng)
    semi_axes = np.asarray(dimensions, dtype=np.float64)

    theta = rng.uniform(0.0, 2.0 * np.pi, count)
    phi = np.arccos(2.0 * rng.uniform(0.0, 1.0, count) - 1.0)
    scale = rng.uniform(0.0, 1.0, (count, 3))

    points = np.zeros((count, 3), dtype=np.float64)
    points[:, 0] = np.sin(phi) * np.cos(theta)
    points[:, 1] = np.sin(phi) * np.sin(theta)
    points[:, 2] = np.cos(phi)
    return points * scale * semi_axes


def orbital_velocities(positions: np.ndarray, center, central_mass: float,
                       G: float = None) -> np.ndarray:
    """
    Circular-orbit velocities about `center` in the xy plane.

    Direction is z-hat x (p - center), speed sqrt(G * M / |p - center|).
    Bodies on the rotation axis get zero velocity.
    """
    if G is None:
        G = config.PHYSICS["G"]
    rel = positions - np.asarray(center, dtype=np.float64)
    velocities = np.zeros_like(rel)

    planar = np.hypot(rel[:, 0], rel[:, 1])
    radius = np.linalg.norm(rel, axis=1)
    moving = planar > 0.0

    speed = np.sqrt(G * central_mass / radius[moving])
    velocities[moving, 0] = -rel[moving, 1] / planar[moving] * speed
    velocities[moving, 1] = rel[moving, 0] / planar[moving] * speed
    return velocities


def generate_galaxy(num_stars: int, black_hole: bool = True,
                    dimensions: Sequence[float] = None,
                    center: Sequence[float] = (0.0, 0.0, 0.0),
                    rng=None, G: float = None) -> List[Body]:
    """
    Ellipsoidal disk of stars orbiting a dominant central mass.

    Args:
        num_stars: Number of stars (the black hole is extra)
        black_hole: Append the central mass as a body at `center`
        dimensions: Ellipsoid semi-axes, light-years
        center: Galaxy center, light-years
        G: Gravitational constant used to seed the circular orbits

    Returns:
        List of bodies; the black hole, if any, is last.
    """
    if num_stars < 0:
        raise ValueError(f"num_stars must be non-negative, got {num_stars}")

    if dimensions is None:
        dimensions = config.UNIVERSE["dimensions"]
    rng = _rng(rng)
    light_year = config.UNITS["light_year"]
    solar_mass = config.UNITS["solar_mass"]
    galaxy = config.GALAXY

    origin = np.asarray(center, dtype=np.float64) * light_year
    central_mass = galaxy["central_mass"] * solar_mass

    positions = random_points_ellipsoid(num_stars, np.asarray(dimensions) * light_year, rng) + origin
    velocities = orbital_velocities(positions, origin, central_mass, G)
    masses = rng.uniform(galaxy["mass_min"], galaxy["mass_max"], num_stars) * solar_mass

    bodies = [Body(positions[i], velocities[i], mass=masses[i]) for i in range(num_stars)]

    if black_hole:
        bodies.append(Body(origin, mass=central_mass))

    print(f"[Scene] Generated galaxy: {num_stars:,} stars"
          f"{' + central black hole' if black_hole else ''}")
    return bodies


def initialize(body_count: int = None, dimensions: Sequence[float] = None,
               rng=None, G: float = None) -> List[Body]:
    """Single galaxy at the origin with a central black hole."""
    if body_count is None:
        body_count = config.UNIVERSE["count"]
    return generate_galaxy(body_count, True, dimensions, (0.0, 0.0, 0.0), rng, G)


def generate_collision(num_stars: int,
                       dimensions: Sequence[float] = (500.0, 500.0, 125.0),
                       separation: float = 1000.0,
                       approach_speed: float = 2e5,
                       rng=None, G: float = None) -> List[Body]:
    """
    Two galaxies on a collision course along the x axis.

    Args:
        num_stars: Total stars, split evenly between the galaxies
        dimensions: Semi-axes of each galaxy, light-years
        separation: Distance between the two centers, light-years
        approach_speed: Speed of each galaxy toward the other, m/s
    """
    rng = _rng(rng)
    half = num_stars // 2
    offset = separation / 2.0

    left = generate_galaxy(half, True, dimensions, (-offset, 0.0, 0.0), rng, G)
    right = generate_galaxy(num_stars - half, True, dimensions, (offset, 0.0, 0.0), rng, G)

    for body in left:
        body.velocity[0] += approach_speed
    for body in right:
        body.velocity[0] -= approach_speed

    return left + right
