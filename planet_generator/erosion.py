# planet_generator/erosion.py

"""
================================================================================
HYDRAULIC EROSION
================================================================================
Particle-based hydraulic erosion on the cube-sphere. Each droplet starts at
the centre of a cell, follows the bilinear gradient of the terrain, picks up
sediment while running downhill and drops it when it slows down or climbs.
Droplets that walk off a face continue on the neighbor with their position
and direction rotated into the new face's frame.

Data Contract:
---------------
- Inputs:
    - heights: float array (6, width, width) in [0, 1], modified in place.
    - A PlanetRng instance (one draw for the start offset).
    - ErosionParams.
- Outputs:
    - ErosionStats with counters and, optionally, the path of the first droplet.
- Side Effects: Mutates `heights`. Droplets run strictly one after another.
- Invariants: Erosion never takes a cell below zero.

Start cells follow a stride sequence: index = (index + stride) mod total with a
stride coprime to the cell count, so one iteration visits every cell of the
cube exactly once in a well-spread order.

Corner policy: a bilinear tap that falls diagonally past a cube corner reads
and writes the nearest cell of the droplet's own face, and a droplet whose
step leaves a face through a corner is terminated.
================================================================================
"""
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np
from numba import njit

from . import topology

GOLDEN_RATIO = (1.0 + math.sqrt(5.0)) / 2.0

MIN_DIRECTION_LENGTH = 0.01

# Termination reasons, also indices into the counters array.
_STEPS = 0
TERMINATED_LIFETIME = 1
TERMINATED_FLAT = 2
TERMINATED_CORNER = 3

TRACE_COLUMNS = 4  # face, x, y, sediment


@dataclass
class ErosionParams:
    iterations: int
    max_lifetime: int
    start_speed: float
    start_water: float
    inertia: float
    min_sediment_capacity: float
    sediment_capacity_factor: float
    erode_speed: float
    deposit_speed: float
    gravity: float
    evaporate_speed: float

    @classmethod
    def from_settings(cls, settings: dict) -> "ErosionParams":
        return cls(
            iterations=settings['erosion_iterations'],
            max_lifetime=settings['erosion_max_lifetime'],
            start_speed=settings['erosion_start_speed'],
            start_water=settings['erosion_start_water'],
            inertia=settings['erosion_inertia'],
            min_sediment_capacity=settings['erosion_min_sediment_capacity'],
            sediment_capacity_factor=settings['erosion_sediment_capacity_factor'],
            erode_speed=settings['erosion_erode_speed'],
            deposit_speed=settings['erosion_deposit_speed'],
            gravity=settings['erosion_gravity'],
            evaporate_speed=settings['erosion_evaporate_speed'],
        )


@dataclass
class ErosionStats:
    droplets: int
    steps: int
    eroded: float
    deposited: float
    terminated_lifetime: int
    terminated_flat: int
    terminated_corner: int
    stride: int
    start_index: int
    trace: Optional[np.ndarray] = None


def choose_stride(total_cells: int) -> int:
    """
    The integer closest to total_cells * golden ratio that is coprime with
    total_cells, searching outwards (c, c+1, c-1, c+2, ...).
    """
    center = int(round(total_cells * GOLDEN_RATIO))
    distance = 0
    while True:
        for candidate in (center + distance, center - distance):
            if candidate > 0 and math.gcd(candidate, total_cells) == 1:
                return candidate
        distance += 1


def index_to_cell(index: int, width: int) -> tuple[int, int, int]:
    face, rest = divmod(index, width * width)
    y, x = divmod(rest, width)
    return face, x, y


@njit
def _fill_taps(face, px, py, width, tap_face, tap_x, tap_y, tap_weight):
    """The four cells around a position and their bilinear weights."""
    sx = px - 0.5
    sy = py - 0.5
    x0 = int(np.floor(sx))
    y0 = int(np.floor(sy))
    u = sx - x0
    v = sy - y0

    # order: north-west, north-east, south-west, south-east
    for i in range(4):
        cx = x0 + (i & 1)
        cy = y0 + (i >> 1)
        f, mx, my = topology.remap_cell(face, cx, cy, width)
        if f < 0:
            f = face
            mx = min(max(cx, 0), width - 1)
            my = min(max(cy, 0), width - 1)
        tap_face[i] = f
        tap_x[i] = mx
        tap_y[i] = my

    tap_weight[0] = (1.0 - u) * (1.0 - v)
    tap_weight[1] = u * (1.0 - v)
    tap_weight[2] = (1.0 - u) * v
    tap_weight[3] = u * v
    return u, v


@njit
def _height_and_gradient(heights, tap_face, tap_x, tap_y, u, v):
    h_nw = heights[tap_face[0], tap_y[0], tap_x[0]]
    h_ne = heights[tap_face[1], tap_y[1], tap_x[1]]
    h_sw = heights[tap_face[2], tap_y[2], tap_x[2]]
    h_se = heights[tap_face[3], tap_y[3], tap_x[3]]

    gx = (h_ne - h_nw) * (1.0 - v) + (h_se - h_sw) * v
    gy = (h_sw - h_nw) * (1.0 - u) + (h_se - h_ne) * u
    h = h_nw * (1.0 - u) * (1.0 - v) + h_ne * u * (1.0 - v) + h_sw * (1.0 - u) * v + h_se * u * v
    return h, gx, gy


@njit
def simulate_droplets(
    heights, start_index, stride, droplet_count,
    max_lifetime, start_speed, start_water, inertia,
    min_sediment_capacity, sediment_capacity_factor,
    erode_speed, deposit_speed, gravity, evaporate_speed,
    trace,
):
    """
    Runs `droplet_count` droplets from the stride sequence. Returns the
    counters (steps and termination reasons), the eroded and deposited
    totals, and the trace of the first droplet with its row count.
    """
    width = heights.shape[1]
    cells_per_face = width * width
    total = 6 * cells_per_face

    counters = np.zeros(4, dtype=np.int64)
    amounts = np.zeros(2)
    trace_rows = np.full((max_lifetime + 1, TRACE_COLUMNS), np.nan)
    trace_length = 0

    tap_face = np.zeros(4, dtype=np.int64)
    tap_x = np.zeros(4, dtype=np.int64)
    tap_y = np.zeros(4, dtype=np.int64)
    tap_weight = np.zeros(4)
    new_face = np.zeros(4, dtype=np.int64)
    new_x = np.zeros(4, dtype=np.int64)
    new_y = np.zeros(4, dtype=np.int64)
    new_weight = np.zeros(4)

    index = start_index % total
    for d in range(droplet_count):
        face = index // cells_per_face
        rest = index % cells_per_face
        px = (rest % width) + 0.5
        py = (rest // width) + 0.5
        index = (index + stride) % total

        dx = 0.0
        dy = 0.0
        speed = start_speed
        water = start_water
        sediment = 0.0

        tracing = trace and d == 0
        if tracing:
            trace_rows[0, 0] = face
            trace_rows[0, 1] = px
            trace_rows[0, 2] = py
            trace_rows[0, 3] = sediment
            trace_length = 1

        reason = TERMINATED_LIFETIME
        for _step in range(max_lifetime):
            u, v = _fill_taps(face, px, py, width, tap_face, tap_x, tap_y, tap_weight)
            height, gx, gy = _height_and_gradient(heights, tap_face, tap_x, tap_y, u, v)

            dx = dx * inertia - gx * (1.0 - inertia)
            dy = dy * inertia - gy * (1.0 - inertia)
            length = np.sqrt(dx * dx + dy * dy)
            if length == 0.0:
                reason = TERMINATED_FLAT
                break
            length = max(length, MIN_DIRECTION_LENGTH)
            dx /= length
            dy /= length

            moved_face, mpx, mpy, mdx, mdy = topology.remap_position(face, px + dx, py + dy, dx, dy, width)
            if moved_face == topology.CORNER:
                reason = TERMINATED_CORNER
                break
            face = moved_face
            px = mpx
            py = mpy
            dx = mdx
            dy = mdy
            counters[_STEPS] += 1

            nu, nv = _fill_taps(face, px, py, width, new_face, new_x, new_y, new_weight)
            new_height, _gx, _gy = _height_and_gradient(heights, new_face, new_x, new_y, nu, nv)
            delta = new_height - height

            capacity = max(-delta * speed * water * sediment_capacity_factor, min_sediment_capacity)

            if sediment > capacity or delta > 0.0:
                if delta > 0.0:
                    amount = min(delta, sediment)
                else:
                    amount = (sediment - capacity) * deposit_speed
                sediment -= amount
                # deposit around the position the droplet just left
                for i in range(4):
                    heights[tap_face[i], tap_y[i], tap_x[i]] += amount * tap_weight[i]
                amounts[1] += amount
            else:
                amount = min((capacity - sediment) * erode_speed, -delta)
                for i in range(4):
                    current = heights[tap_face[i], tap_y[i], tap_x[i]]
                    removed = max(0.0, min(current, amount * tap_weight[i]))
                    heights[tap_face[i], tap_y[i], tap_x[i]] = current - removed
                    sediment += removed
                    amounts[0] += removed

            speed = np.sqrt(max(0.0, speed * speed + delta * gravity))
            water *= 1.0 - evaporate_speed

            if tracing:
                trace_rows[trace_length, 0] = face
                trace_rows[trace_length, 1] = px
                trace_rows[trace_length, 2] = py
                trace_rows[trace_length, 3] = sediment
                trace_length += 1

        counters[reason] += 1

    return counters, amounts, trace_rows, trace_length


def erode(heights: np.ndarray, rng, params: ErosionParams, trace: bool = False) -> ErosionStats:
    """
    Releases params.iterations * (6 * width^2) droplets, one full stride
    sweep over the cube per iteration.
    """
    total = heights.size
    stride = choose_stride(total)
    start_index = rng.integers_between(0, total - 1)
    droplet_count = params.iterations * total

    counters, amounts, trace_rows, trace_length = simulate_droplets(
        heights, start_index, stride, droplet_count,
        params.max_lifetime, float(params.start_speed), float(params.start_water), float(params.inertia),
        float(params.min_sediment_capacity), float(params.sediment_capacity_factor),
        float(params.erode_speed), float(params.deposit_speed), float(params.gravity),
        float(params.evaporate_speed),
        trace,
    )

    return ErosionStats(
        droplets=droplet_count,
        steps=int(counters[_STEPS]),
        eroded=float(amounts[0]),
        deposited=float(amounts[1]),
        terminated_lifetime=int(counters[TERMINATED_LIFETIME]),
        terminated_flat=int(counters[TERMINATED_FLAT]),
        terminated_corner=int(counters[TERMINATED_CORNER]),
        stride=stride,
        start_index=start_index,
        trace=trace_rows[:trace_length].copy() if trace else None,
    )
