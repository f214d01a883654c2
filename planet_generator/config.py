# planet_generator/config.py

"""
================================================================================
INTERNAL DEFAULT CONFIGURATION
================================================================================
This module contains the default, fallback internal constants for the planet
generator. These values are used if they are not explicitly provided by the
user's configuration.

DO NOT MODIFY THIS FILE FOR A SPECIFIC SIMULATION.
Instead, pass a configuration dictionary to the PlanetGenerator instance.
================================================================================
"""

# --- Randomness ---
DEFAULT_SEED = 1337

# --- Grid Resolution ---
# Cells along one side of every cube face. The octave loop doubles the noise
# grid (2, 4, 8, ...) while it stays below this value, so a power of two plus
# one gives every octave a full lattice.
DEFAULT_WIDTH = (1 << 6) + 1
MIN_WIDTH = 3

# --- Tectonics ---
DEFAULT_CONTINENT_COUNT = 6
# The boundary search radius in cells. None means "derive from the width".
DEFAULT_KERNEL_RADIUS = None
KERNEL_RADIUS_WIDTH_FACTOR = 0.75
# Plate synthesis can yield NaN for degenerate cells (a plate's own origin,
# or a rotation axis parallel to the cell's position). Those cells are set
# to this value by the first normalization pass.
DEFAULT_NAN_REPLACEMENT = 0.5

# --- Fractal Noise ---
# The octave that receives the full fractal weight. Octaves further away
# are attenuated by 1 / (distance + 1).
DEFAULT_FRACTAL_MAIN_LAYER = 1
DEFAULT_FRACTAL_WEIGHT = 0.25

# --- Hydraulic Erosion ---
# One iteration releases one droplet per cell of the whole cube.
DEFAULT_EROSION_ITERATIONS = 1
DEFAULT_EROSION_MAX_LIFETIME = 30
DEFAULT_EROSION_START_SPEED = 1.0
DEFAULT_EROSION_START_WATER = 1.0
DEFAULT_EROSION_INERTIA = 0.3
DEFAULT_EROSION_MIN_SEDIMENT_CAPACITY = 0.01
DEFAULT_EROSION_SEDIMENT_CAPACITY_FACTOR = 3.0
DEFAULT_EROSION_ERODE_SPEED = 0.3
DEFAULT_EROSION_DEPOSIT_SPEED = 0.3
DEFAULT_EROSION_GRAVITY = 4.0
DEFAULT_EROSION_EVAPORATE_SPEED = 0.01

# Records the path of the first droplet and hands it to the diagnostic hook.
DEFAULT_EROSION_TRACE = False

# --- Baking ---
DEFAULT_OUTPUT_DIRECTORY = "baked_planets"
