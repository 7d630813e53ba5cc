"""Configuration for the Barnes-Hut galaxy simulation."""

# =============================================================================
# SCALE PRESETS - Choose one by uncommenting
# =============================================================================

# PRESET: LARGE (20K bodies, slow) - long offline runs
# BODY_COUNT = 20_000
# THETA = 0.7

# PRESET: DEFAULT (3K bodies) - matches the original galaxy scene
BODY_COUNT = 3_000
THETA = 0.5

# PRESET: SMALL (500 bodies) - quick experiments
# BODY_COUNT = 500
# THETA = 0.5

# =============================================================================

UNITS = {
    "light_year": 9.4e15,          # Meters per light-year
    "solar_mass": 2e30,            # Kilograms per solar mass
}

# Physics parameters
PHYSICS = {
    "G": 6.67e-11,                 # Gravitational constant (SI)
    "softening": 3e4,              # Softening length in meters, bounds force as d -> 0
    "theta": THETA,                # Barnes-Hut opening angle (0 = exact, higher = faster)
    "time_scale": 9.4e13,          # Frame seconds -> simulated seconds
    "coincidence_eps": 1e-11,      # Per-axis distance below which two bodies merge
    "max_depth": 64,               # Octree depth at which colliding bodies merge
}

UNIVERSE = {
    "count": BODY_COUNT,           # Number of stars (central black hole is extra)
    "size": 1000.0,                # Half extent of the simulated cube, light-years
    "dimensions": (1000.0, 1000.0, 250.0),  # Galaxy ellipsoid semi-axes, light-years
}

# Initial distribution
GALAXY = {
    "mass_min": 0.08,              # Solar masses
    "mass_max": 150.0,             # Solar masses
    "central_mass": 1e6,           # Solar masses, anchors orbital motion
    "seed": None,                  # None = fresh entropy every run
}

RUNTIME = {
    "method": "barnes_hut",        # "barnes_hut" or "direct"
    "workers": 1,                  # Threads used for the force phase
    "adaptive_bounds": False,      # Fit the root cube to the bodies every step
}
