# planet_generator/noise.py

"""
================================================================================
SEAM-CONTINUOUS FRACTAL NOISE
================================================================================
This module adds multi-octave gradient noise on top of the plate heights. The
six faces share one lattice index space: every face owns a private block of
it, and the lattice points on a shared edge resolve to the same gradient no
matter which face samples them, so the field has no visible seams.

Data Contract:
---------------
- Inputs:
    - heights: float array (6, width, width), modified in place.
    - seed: the master seed, split into two 32-bit halves for hashing.
    - main_layer, fractal_weight: octave weighting parameters.
- Outputs:
    - The number of octaves that were added.
- Side Effects: None besides writing into `heights`.
- Invariants: For a point on an edge, sample_noise returns the same value on
  both faces sharing that edge. Cube-corner lattice points carry a zero
  gradient.
================================================================================
"""
import numpy as np
from numba import njit

from . import topology

MASK32 = 0xFFFFFFFF

# Position of each face's lattice block, in units of the octave grid width.
# The horizontal ring L, B, R, F sits side by side with U above and D below B,
# so most shared edges coincide in index space without any remapping.
LATTICE_OFFSETS = np.array([
    [0, 0],   # LEFT
    [1, 0],   # BACK
    [2, 0],   # RIGHT
    [3, 0],   # FRONT
    [1, -1],  # UP
    [1, 1],   # DOWN
], dtype=np.int64)

# Edges whose lattice points are borrowed from the neighboring face because
# the two blocks are not adjacent in index space.
NOISE_EDGE_REMAP = np.array([
    # left, right, top, bottom
    [0, 0, 0, 0],  # LEFT
    [0, 0, 0, 0],  # BACK
    [0, 0, 0, 0],  # RIGHT
    [0, 1, 0, 0],  # FRONT
    [1, 1, 1, 0],  # UP
    [1, 1, 0, 1],  # DOWN
], dtype=np.int64)


def split_seed(seed: int) -> tuple[int, int]:
    return seed & MASK32, (seed >> 32) & MASK32


def octave_weight(layer: int, main_layer: int, fractal_weight: float) -> float:
    """Octaves further from the main layer get a smaller share of the weight."""
    return fractal_weight / (abs(layer - main_layer) + 1.0)


@njit
def _rotl16(value):
    return ((value << 16) | (value >> 16)) & MASK32


@njit
def random_gradient(ix, iy, seed_a, seed_b):
    """Hashes integer lattice coordinates to a unit gradient vector."""
    a = (ix ^ seed_a) & MASK32
    b = (iy ^ seed_b) & MASK32
    a = (a * 3284157443) & MASK32
    b = b ^ _rotl16(a)
    b = (b * 1911520717) & MASK32
    a = a ^ _rotl16(b)
    a = (a * 2048419325) & MASK32
    angle = a * (np.pi / 2147483648.0)
    return np.cos(angle), np.sin(angle)


@njit
def lattice_gradient(face, ix, iy, grid_width, seed_a, seed_b):
    """
    Gradient at lattice point (ix, iy) of `face`, expressed in that face's
    frame. Edge points may be resolved on the neighboring face.
    """
    on_left = ix == 0
    on_right = ix == grid_width
    on_top = iy == 0
    on_bottom = iy == grid_width
    if (on_left or on_right) and (on_top or on_bottom):
        return 0.0, 0.0

    edge = -1
    if on_left:
        edge = topology.EDGE_LEFT
    elif on_right:
        edge = topology.EDGE_RIGHT
    elif on_top:
        edge = topology.EDGE_TOP
    elif on_bottom:
        edge = topology.EDGE_BOTTOM

    target = face
    tx = ix
    ty = iy
    rotation = topology.IDENTITY
    if edge >= 0 and NOISE_EDGE_REMAP[face, edge] == 1:
        forward = topology.EDGE_TABLE[face, edge, 1]
        target = topology.EDGE_TABLE[face, edge, 0]
        tx, ty = topology.rotate_vector(forward, ix, iy)
        tx += topology.EDGE_TABLE[face, edge, 2] * grid_width
        ty += topology.EDGE_TABLE[face, edge, 3] * grid_width
        # the hashed gradient lives in the neighbor's frame; rotate it back
        rotation = (4 - forward) % 4

    gx, gy = random_gradient(
        tx + LATTICE_OFFSETS[target, 0] * grid_width,
        ty + LATTICE_OFFSETS[target, 1] * grid_width,
        seed_a,
        seed_b,
    )
    return topology.rotate_vector(rotation, gx, gy)


@njit
def _ease(t):
    return (3.0 - 2.0 * t) * t * t


@njit
def sample_noise(face, px, py, grid_width, seed_a, seed_b):
    """Gradient noise at lattice-space position (px, py) of `face`."""
    m0 = min(int(np.floor(px)), grid_width - 1)
    n0 = min(int(np.floor(py)), grid_width - 1)
    m1 = m0 + 1
    n1 = n0 + 1

    g0x, g0y = lattice_gradient(face, m0, n0, grid_width, seed_a, seed_b)
    g1x, g1y = lattice_gradient(face, m1, n0, grid_width, seed_a, seed_b)
    g2x, g2y = lattice_gradient(face, m0, n1, grid_width, seed_a, seed_b)
    g3x, g3y = lattice_gradient(face, m1, n1, grid_width, seed_a, seed_b)

    fx = px - m0
    fy = py - n0
    s0 = g0x * fx + g0y * fy
    s1 = g1x * (fx - 1.0) + g1y * fy
    s2 = g2x * fx + g2y * (fy - 1.0)
    s3 = g3x * (fx - 1.0) + g3y * (fy - 1.0)

    f0 = s0 * _ease(1.0 - fx) + s1 * _ease(fx)
    f1 = s2 * _ease(1.0 - fx) + s3 * _ease(fx)
    return f0 * _ease(1.0 - fy) + f1 * _ease(fy)


@njit
def octave_field(width, grid_width, seed_a, seed_b):
    """One octave of noise sampled at every cell centre of all six faces."""
    field = np.empty((6, width, width))
    scale = grid_width / width
    for face in range(6):
        for y in range(width):
            py = (y + 0.5) * scale
            for x in range(width):
                px = (x + 0.5) * scale
                field[face, y, x] = sample_noise(face, px, py, grid_width, seed_a, seed_b)
    return field


def add_fractal_noise(heights: np.ndarray, seed: int, main_layer: int, fractal_weight: float, logger=None) -> int:
    """
    Adds every octave whose grid (2, 4, 8, ...) is still coarser than the
    face width. Returns the number of octaves added.
    """
    width = heights.shape[1]
    seed_a, seed_b = split_seed(seed)

    layer = 0
    while (1 << (layer + 1)) < width:
        grid_width = 1 << (layer + 1)
        weight = octave_weight(layer, main_layer, fractal_weight)
        if logger is not None:
            logger.debug(f"Noise octave {layer}: grid {grid_width}x{grid_width}, weight {weight:.4f}")
        heights += weight * octave_field(width, grid_width, seed_a, seed_b)
        layer += 1
    return layer
