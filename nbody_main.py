"""
Barnes-Hut Galaxy Simulation (headless)
=======================================

Generates the default galaxy from config/nbody.py and advances it with a
fixed frame time, printing progress. Rendering lives outside this package;
a renderer only needs to call `step(dt)` and read `positions()`.
"""

import time

from config import nbody as config
from nbody import Universe

FRAME_DT = 1.0 / 60.0
FRAMES = 120


def main():
    print("[App] Initializing galaxy...")
    universe = Universe(num_bodies=config.UNIVERSE["count"])
    universe.generate(config.UNIVERSE["dimensions"])

    print("[App] Starting main loop...")
    start = time.perf_counter()
    for frame in range(1, FRAMES + 1):
        universe.step(FRAME_DT)
        if frame % 10 == 0:
            elapsed = time.perf_counter() - start
            print(f"[App] Frame {frame}  |  bodies: {len(universe.bodies):,}  |  "
                  f"tree nodes: {universe.tree_nodes:,}  |  {frame / elapsed:.2f} steps/s")

    print("[App] Done")


if __name__ == "__main__":
    main()
