"""
Barnes-Hut step driver.

Each step rebuilds a fresh octree over the current bodies, computes every
body's net force against the frozen tree, resolves merges, then integrates.
The tree never outlives the step that built it.
"""

import numpy as np
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional, Sequence

from config import nbody as config
from .body import Body
from .kernels import Method, compute_bounds, compute_forces_direct, resolve_method
from .octree import ForceOutcome, SpatialNode, TreeSettings
from . import scene


class Universe:
    """
    Owns the body collection and advances it one step at a time.

    Every PHYSICS and RUNTIME entry of config.nbody can be overridden per
    instance by keyword, e.g. Universe(500, theta=0.7, workers=4).
    """

    def __init__(self, num_bodies: Optional[int] = None, size: Optional[float] = None,
                 bodies: Optional[Iterable[Body]] = None, **overrides):
        unknown = set(overrides) - set(config.PHYSICS) - set(config.RUNTIME)
        if unknown:
            raise ValueError(f"Unknown settings: {', '.join(sorted(unknown))}")

        physics = {**config.PHYSICS, **{k: v for k, v in overrides.items() if k in config.PHYSICS}}
        runtime = {**config.RUNTIME, **{k: v for k, v in overrides.items() if k in config.RUNTIME}}

        self.num_bodies = int(config.UNIVERSE["count"] if num_bodies is None else num_bodies)
        size_ly = float(config.UNIVERSE["size"] if size is None else size)
        if self.num_bodies < 0:
            raise ValueError(f"num_bodies must be non-negative, got {self.num_bodies}")
        if not size_ly > 0.0:
            raise ValueError(f"size must be positive, got {size_ly}")
        self.size = size_ly * config.UNITS["light_year"]

        # Load physics
        self.G = float(physics["G"])
        self.softening = float(physics["softening"])
        self.theta = float(physics["theta"])
        self.time_scale = float(physics["time_scale"])
        self.coincidence_eps = float(physics["coincidence_eps"])
        self.max_depth = int(physics["max_depth"])

        self.method = resolve_method(runtime["method"])
        self.workers = int(runtime["workers"])
        self.adaptive_bounds = bool(runtime["adaptive_bounds"])
        self._validate()

        self.bodies: List[Body] = list(bodies) if bodies is not None else []

        # Per-step statistics
        self.step_count = 0
        self.tree_nodes = 0
        self.tree_depth = 0
        self.interactions = 0
        self.escaped = 0
        self.merges = 0

        print(f"[Universe] Ready: {len(self.bodies):,} bodies, {self.method.value}, "
              f"θ={self.theta}, workers={self.workers}")

    def _validate(self):
        if self.softening < 0.0:
            raise ValueError(f"softening must be non-negative, got {self.softening}")
        if self.theta < 0.0:
            raise ValueError(f"theta must be non-negative, got {self.theta}")
        if self.coincidence_eps < 0.0:
            raise ValueError(f"coincidence_eps must be non-negative, got {self.coincidence_eps}")
        if self.max_depth < 1:
            raise ValueError(f"max_depth must be at least 1, got {self.max_depth}")
        if self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")

    @property
    def settings(self) -> TreeSettings:
        return TreeSettings(self.theta, self.G, self.softening,
                            self.coincidence_eps, self.max_depth)

    # ------------------------------------------------------------------
    # Scene setup
    # ------------------------------------------------------------------

    def generate(self, dimensions: Sequence[float] = None, rng=None):
        """
        Replace the bodies with a galaxy of num_bodies stars and a central black hole.
        Orbits are seeded with this universe's G so they match the force law.
        """
        self.bodies = scene.initialize(self.num_bodies, dimensions, rng, self.G)
        print(f"[Universe] Initialized {len(self.bodies):,} bodies")

    def initialize(self, body_count: int, dimensions: Sequence[float], rng=None):
        self.num_bodies = body_count
        self.generate(dimensions, rng)

    # ------------------------------------------------------------------
    # Stepping
    # ------------------------------------------------------------------

    def build_tree(self) -> SpatialNode:
        """
        Build a fresh octree over the current bodies.

        Bodies merged by the depth cap are replaced in self.bodies before
        this returns.
        """
        half_extent = self.size
        if self.adaptive_bounds and self.bodies:
            half_extent = compute_bounds(self.positions(), len(self.bodies))

        root = SpatialNode(np.zeros(3), half_extent, self.settings)
        merges = []
        escaped = 0
        for body in self.bodies:
            if not root.contains_point(body.position):
                escaped += 1
                continue
            merge = root.insert(body)
            if merge is not None:
                merges.append((merge.absorbed, merge.merged))

        if escaped and escaped != self.escaped:
            print(f"[Universe] {escaped:,} bodies outside the simulated volume")
        self.escaped = escaped
        self._apply_merges(merges)
        return root

    def step(self, dt: float):
        """Advance every body by dt (frame seconds, scaled by time_scale)."""
        self.merges = 0
        if self.method == Method.DIRECT:
            self._direct_forces()
        else:
            self._tree_forces()

        scaled_dt = dt * self.time_scale
        for body in self.bodies:
            body.integrate(scaled_dt)
        self.step_count += 1

        if self.merges:
            print(f"[Universe] Step {self.step_count}: {self.merges} merges, "
                  f"{len(self.bodies):,} bodies remain")

    def _tree_forces(self):
        root = self.build_tree()
        self.tree_nodes = root.node_count()
        self.tree_depth = root.depth_reached()

        bodies = list(self.bodies)
        if self.workers > 1 and len(bodies) > 1:
            chunk = -(-len(bodies) // self.workers)
            chunks = [bodies[i:i + chunk] for i in range(0, len(bodies), chunk)]
            with ThreadPoolExecutor(max_workers=self.workers) as pool:
                results = pool.map(lambda part: self._query(root, part), chunks)
                outcomes = [outcome for part in results for outcome in part]
        else:
            outcomes = self._query(root, bodies)

        self.interactions = sum(outcome.interactions for outcome in outcomes)
        self._apply_merges([((body, outcome.absorbed), outcome.merged)
                            for body, outcome in zip(bodies, outcomes)
                            if outcome.merge_occurred])

    @staticmethod
    def _query(root: SpatialNode, bodies: List[Body]) -> List[ForceOutcome]:
        outcomes = []
        for body in bodies:
            body.reset_force()
            outcomes.append(root.accumulate_force_on(body))
        return outcomes

    def _direct_forces(self):
        n = len(self.bodies)
        forces = np.zeros((n, 3), dtype=np.float64)
        if n:
            compute_forces_direct(self.positions(), self.masses(), forces, n,
                                  self.G, self.softening)
        for body, force in zip(self.bodies, forces):
            body.force[:] = force
        self.tree_nodes = 0
        self.tree_depth = 0
        self.interactions = n * (n - 1)

    def _apply_merges(self, merges):
        """
        Replace each absorbed pair with its merged body.

        Requests whose bodies were already consumed by an earlier merge this
        step are dropped, so a symmetric pair (A finds B, B finds A) merges once.
        """
        if not merges:
            return
        alive = {id(body): body for body in self.bodies}
        for (first, second), merged in merges:
            if id(first) not in alive or id(second) not in alive:
                continue
            del alive[id(first)]
            del alive[id(second)]
            alive[id(merged)] = merged
            self.merges += 1
        self.bodies = list(alive.values())

    # ------------------------------------------------------------------
    # Read-back
    # ------------------------------------------------------------------

    def positions(self) -> np.ndarray:
        return np.array([b.position for b in self.bodies], dtype=np.float64).reshape(-1, 3)

    def velocities(self) -> np.ndarray:
        return np.array([b.velocity for b in self.bodies], dtype=np.float64).reshape(-1, 3)

    def masses(self) -> np.ndarray:
        return np.array([b.mass for b in self.bodies], dtype=np.float64)

    def total_mass(self) -> float:
        return float(sum(b.mass for b in self.bodies))

    def center_of_mass(self) -> np.ndarray:
        masses = self.masses()
        if not len(masses):
            return np.zeros(3)
        return (self.positions() * masses[:, None]).sum(axis=0) / masses.sum()

    def momentum(self) -> np.ndarray:
        return sum((b.momentum() for b in self.bodies), np.zeros(3))

    def kinetic_energy(self) -> float:
        return float(sum(b.kinetic_energy() for b in self.bodies))
