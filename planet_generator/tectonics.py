# planet_generator/tectonics.py

"""
================================================================================
TECTONIC PLATE GENERATION
================================================================================
This module partitions the cube-sphere into continents with a randomized
flood fill and derives ridge and trench heights from the simulated rotation of
each plate. It is the first stage of the pipeline and lays down the
large-scale mountain ranges that the noise layer later roughens.

Data Contract:
---------------
- Inputs:
    - A PlanetRng instance, the continent count and the face width.
    - continent_ids: int array (6, width, width), UNASSIGNED before growth.
    - heights: float array (6, width, width) that receives the boundary heights.
- Outputs:
    - A list of Continent records (origin, exhausted frontier, rotation axis).
    - continent_ids filled in place, every cell assigned exactly once.
    - Boundary heights added in place (NaN for degenerate cells).
- Side Effects: Consumes the RNG stream; logs progress.
================================================================================
"""
import logging
from dataclasses import dataclass, field

import numpy as np
from numba import njit

from . import topology
from .errors import TopologyError

logger = logging.getLogger(__name__)

UNASSIGNED = -1

# Growth progress is logged every time this many cells have been claimed.
GROWTH_PROGRESS_INTERVAL = 100000


@dataclass
class Continent:
    origin: tuple[int, int, int]
    rotation_axis: np.ndarray
    frontier: list = field(default_factory=list)


def seed_continents(rng, continent_count: int, width: int) -> list[Continent]:
    """
    Draws `continent_count` distinct starting cells uniformly over the whole
    cube, then gives each continent a random rotation axis.
    """
    origins = []
    while len(origins) < continent_count:
        face = rng.integers_between(0, topology.FACE_COUNT - 1)
        x = rng.integers_between(0, width - 1)
        y = rng.integers_between(0, width - 1)
        candidate = (face, x, y)
        if candidate in origins:
            continue
        origins.append(candidate)

    continents = []
    for origin in origins:
        continent = Continent(origin=origin, rotation_axis=rng.unit_vector_3())
        continent.frontier.append(origin)
        continents.append(continent)
    return continents


def _claim_next_cell(continent: Continent, continent_ids: np.ndarray, index: int, rng):
    """Pops random frontier cells until an unassigned one is found."""
    frontier = continent.frontier
    while frontier:
        i = rng.integers_between(0, len(frontier) - 1)
        # swap-remove
        candidate = frontier[i]
        frontier[i] = frontier[-1]
        frontier.pop()

        face, x, y = candidate
        if continent_ids[face, y, x] != UNASSIGNED:
            continue
        continent_ids[face, y, x] = index
        return candidate
    return None


def grow_continents(continents: list[Continent], continent_ids: np.ndarray, rng) -> int:
    """
    Grows all continents in rounds until a full round claims no new cell.
    In each round every continent claims at most one cell, picked uniformly
    from its frontier, which produces organic rather than circular shapes.
    Returns the number of cells claimed.
    """
    width = continent_ids.shape[1]
    total = continent_ids.size
    claimed = 0

    while True:
        new_cell_was_claimed = False

        for index, continent in enumerate(continents):
            cell = _claim_next_cell(continent, continent_ids, index, rng)
            if cell is None:
                continue

            new_cell_was_claimed = True
            claimed += 1
            if claimed % GROWTH_PROGRESS_INTERVAL == 0:
                logger.debug(f"Growing continents... {claimed / total:.1%}")

            continent.frontier.extend(topology.neighbor_cells(*cell, width))

        if not new_cell_was_claimed:
            break

    return claimed


def generate_kernel(radius: float) -> tuple[np.ndarray, np.ndarray]:
    """
    Builds the boundary search kernel: every integer offset closer than the
    (truncated) radius, sorted by distance. Ties keep row-major order.
    """
    r = int(radius)
    offsets = []
    distances = []
    for ky in range(-r, r + 1):
        for kx in range(-r, r + 1):
            d = np.sqrt(kx * kx + ky * ky)
            if d < r:
                offsets.append((kx, ky))
                distances.append(d)

    distances = np.array(distances, dtype=np.float64)
    order = np.argsort(distances, kind="stable")
    return np.array(offsets, dtype=np.int64).reshape(-1, 2)[order], distances[order]


@njit
def _normalize3(x, y, z):
    length = np.sqrt(x * x + y * y + z * z)
    if length == 0.0:
        return np.nan, np.nan, np.nan
    return x / length, y / length, z / length


@njit
def _rotate_about_axis(px, py, pz, ax, ay, az, angle):
    # Rodrigues' rotation formula, axis assumed to be unit length.
    c = np.cos(angle)
    s = np.sin(angle)
    d = ax * px + ay * py + az * pz
    cx = ay * pz - az * py
    cy = az * px - ax * pz
    cz = ax * py - ay * px
    return (
        px * c + cx * s + ax * d * (1.0 - c),
        py * c + cy * s + ay * d * (1.0 - c),
        pz * c + cz * s + az * d * (1.0 - c),
    )


@njit
def _plate_motion_dot(px, py, pz, axis, origin, angle):
    """
    Projects the plate's local velocity at p onto the direction away from the
    plate's origin. Positive means the plate pushes outwards at this point.
    """
    rx, ry, rz = _rotate_about_axis(px, py, pz, axis[0], axis[1], axis[2], angle)
    vx, vy, vz = _normalize3(rx - px, ry - py, rz - pz)
    dx, dy, dz = _normalize3(px - origin[0], py - origin[1], pz - origin[2])
    return vx * dx + vy * dy + vz * dz


@njit
def _boundary_heights(continent_ids, origins, axes, offsets, distances, radius):
    width = continent_ids.shape[1]
    boundary = np.zeros(continent_ids.shape)
    # face, x, y of the first cell whose remap failed; face stays -1 otherwise
    fault = np.full(3, -1, dtype=np.int64)
    angle = 2.0 * np.pi / (4 * width)

    for face in range(continent_ids.shape[0]):
        for y in range(width):
            for x in range(width):
                own = continent_ids[face, y, x]

                for k in range(offsets.shape[0]):
                    kx = offsets[k, 0]
                    ky = offsets[k, 1]
                    if kx == 0 and ky == 0:
                        continue

                    other_face, ox, oy = topology.remap_cell(face, x + kx, y + ky, width)
                    if other_face == topology.CORNER:
                        continue
                    if other_face == topology.INVALID:
                        fault[0] = face
                        fault[1] = x + kx
                        fault[2] = y + ky
                        return boundary, fault

                    other = continent_ids[other_face, oy, ox]
                    if other == own:
                        continue

                    px, py, pz = topology.position_on_sphere(x, y, width, face)
                    qx, qy, qz = topology.position_on_sphere(ox, oy, width, other_face)
                    dot = _plate_motion_dot(px, py, pz, axes[own], origins[own], angle)
                    dot_other = _plate_motion_dot(qx, qy, qz, axes[other], origins[other], angle)

                    # Converging plates raise ridges, diverging plates open trenches.
                    h = dot * dot_other
                    if dot >= 0.0 and dot_other < 0.0:
                        h = -h

                    # half-circle falloff: full weight at the rim, none at the cell
                    a = distances[k] / radius - 1.0
                    weight = 1.0 - np.sqrt(1.0 - a * a)
                    boundary[face, y, x] = weight * h
                    break

    return boundary, fault


def calculate_boundary_heights(
    continent_ids: np.ndarray,
    continents: list[Continent],
    kernel: tuple[np.ndarray, np.ndarray],
    radius: float,
) -> np.ndarray:
    """
    Computes the plate-boundary height of every cell from the nearest cell of
    another continent. Reads continent_ids only and returns a new array.
    """
    width = continent_ids.shape[1]
    origins = np.array(
        [topology.position_on_sphere(x, y, width, face) for face, x, y in (c.origin for c in continents)],
        dtype=np.float64,
    ).reshape(-1, 3)
    axes = np.array([c.rotation_axis for c in continents], dtype=np.float64).reshape(-1, 3)
    offsets, distances = kernel

    boundary, fault = _boundary_heights(continent_ids, origins, axes, offsets, distances, float(int(radius)))
    if fault[0] != -1:
        raise TopologyError(int(fault[0]), int(fault[1]), int(fault[2]), width, "plate boundary search")
    return boundary


def apply_plate_boundaries(
    heights: np.ndarray,
    continent_ids: np.ndarray,
    continents: list[Continent],
    radius: float,
) -> tuple[float, float]:
    """Adds the boundary heights into `heights`; returns their min and max."""
    kernel = generate_kernel(radius)
    boundary = calculate_boundary_heights(continent_ids, continents, kernel, radius)
    heights += boundary
    return float(np.nanmin(heights)), float(np.nanmax(heights))
