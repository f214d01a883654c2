# planet_generator/topology.py

"""
================================================================================
CUBE-FACE TOPOLOGY
================================================================================
Static adjacency and rotation tables for the six faces of the cube-sphere, and
the remap functions every other stage uses to step from one face onto its
neighbor. The faces unfold as follows (each face is a width x width grid with
x growing to the right and y growing downwards):

            +---+
            | U |
        +---+---+---+---+
        | L | B | R | F |
        +---+---+---+---+
            | D |
            +---+

Data Contract:
---------------
- EDGE_TABLE[face, edge] = (neighbor, rotation, offset_x, offset_y).
  A continuous point p lying past `edge` of `face` maps onto the neighbor at
  rotate(rotation, p) + offset * size, where size is the face width in
  whatever unit the caller works in (cells for the grids, lattice steps for
  the noise). Any vector carried across the seam is rotated the same way.
- Rotations are quarter turns in the y-down frame of the grid:
  IDENTITY, ROTATE_CW, ROTATE_180, ROTATE_CCW. They compose by adding their
  codes modulo 4.
- Invariants: for every face and edge the neighbor's table entry for the
  shared edge is the exact inverse map (crossing out and back is a no-op).
- Corners (both axes out of range) have no single neighbor: the integer
  remap reports CORNER and callers decide what to do with it.
================================================================================
"""
import enum

import numpy as np
from numba import njit

from .errors import TopologyError


class Face(enum.IntEnum):
    LEFT = 0
    BACK = 1
    RIGHT = 2
    FRONT = 3
    UP = 4
    DOWN = 5

    @property
    def label(self) -> str:
        return "lbrfud"[self.value]


FACE_COUNT = 6

# Edges of a face, named after the out-of-range condition that selects them.
EDGE_LEFT = 0    # x < 0
EDGE_RIGHT = 1   # x >= width
EDGE_TOP = 2     # y < 0
EDGE_BOTTOM = 3  # y >= width

IDENTITY = 0
ROTATE_CW = 1    # (x, y) -> (-y, x)
ROTATE_180 = 2   # (x, y) -> (-x, -y)
ROTATE_CCW = 3   # (x, y) -> (y, -x)

# Sentinel faces returned by the compiled remaps.
CORNER = -1
INVALID = -2

EDGE_TABLE = np.array([
    # LEFT
    [[Face.FRONT, IDENTITY, 1, 0],
     [Face.BACK, IDENTITY, -1, 0],
     [Face.UP, ROTATE_CW, 0, 0],
     [Face.DOWN, ROTATE_CCW, -1, 1]],
    # BACK
    [[Face.LEFT, IDENTITY, 1, 0],
     [Face.RIGHT, IDENTITY, -1, 0],
     [Face.UP, IDENTITY, 0, 1],
     [Face.DOWN, IDENTITY, 0, -1]],
    # RIGHT
    [[Face.BACK, IDENTITY, 1, 0],
     [Face.FRONT, IDENTITY, -1, 0],
     [Face.UP, ROTATE_CCW, 1, 1],
     [Face.DOWN, ROTATE_CW, 2, 0]],
    # FRONT
    [[Face.RIGHT, IDENTITY, 1, 0],
     [Face.LEFT, IDENTITY, -1, 0],
     [Face.UP, ROTATE_180, 1, 0],
     [Face.DOWN, ROTATE_180, 1, 2]],
    # UP
    [[Face.LEFT, ROTATE_CCW, 0, 0],
     [Face.RIGHT, ROTATE_CW, 1, -1],
     [Face.FRONT, ROTATE_180, 1, 0],
     [Face.BACK, IDENTITY, 0, -1]],
    # DOWN
    [[Face.LEFT, ROTATE_CW, 1, 1],
     [Face.RIGHT, ROTATE_CCW, 0, 2],
     [Face.BACK, IDENTITY, 0, 1],
     [Face.FRONT, ROTATE_180, 1, 2]],
], dtype=np.int64)


def inverse_rotation(rotation: int) -> int:
    return (4 - rotation) % 4


def compose_rotation(first: int, second: int) -> int:
    """Rotation equivalent to applying `first` and then `second`."""
    return (first + second) % 4


@njit
def rotate_vector(rotation, vx, vy):
    """Applies a quarter-turn rotation code to a 2D vector."""
    if rotation == ROTATE_CW:
        return -vy, vx
    elif rotation == ROTATE_180:
        return -vx, -vy
    elif rotation == ROTATE_CCW:
        return vy, -vx
    return vx, vy


@njit
def map_point(face, edge, px, py, size):
    """Continuous affine map of a point across `edge` of `face`."""
    rotation = EDGE_TABLE[face, edge, 1]
    rx, ry = rotate_vector(rotation, px, py)
    return EDGE_TABLE[face, edge, 0], rx + EDGE_TABLE[face, edge, 2] * size, ry + EDGE_TABLE[face, edge, 3] * size


@njit
def remap_cell(face, x, y, width):
    """
    Resolves an integer cell that may lie one face-width past an edge.
    Returns (face, x, y); face is CORNER when both axes are out of range and
    INVALID when the mapped cell does not exist.
    """
    out_x = x < 0 or x >= width
    out_y = y < 0 or y >= width
    if not out_x and not out_y:
        return face, x, y
    if out_x and out_y:
        return CORNER, x, y

    if x < 0:
        edge = EDGE_LEFT
    elif x >= width:
        edge = EDGE_RIGHT
    elif y < 0:
        edge = EDGE_TOP
    else:
        edge = EDGE_BOTTOM

    # Map the cell centre in doubled coordinates to stay in integer math.
    rotation = EDGE_TABLE[face, edge, 1]
    cx, cy = rotate_vector(rotation, 2 * x + 1, 2 * y + 1)
    cx += 2 * EDGE_TABLE[face, edge, 2] * width
    cy += 2 * EDGE_TABLE[face, edge, 3] * width
    nx = (cx - 1) // 2
    ny = (cy - 1) // 2

    if nx < 0 or nx >= width or ny < 0 or ny >= width:
        return INVALID, x, y
    return EDGE_TABLE[face, edge, 0], nx, ny


@njit
def remap_position(face, px, py, dx, dy, width):
    """
    Moves a continuous position (and its direction) back onto a face after a
    step left the [0, width] square. Returns face CORNER when the position
    leaves through a cube corner, which has no unambiguous neighbor.
    """
    size = float(width)
    for _ in range(4):
        out_x = px < 0.0 or px > size
        out_y = py < 0.0 or py > size
        if not out_x and not out_y:
            return face, px, py, dx, dy
        if out_x and out_y:
            return CORNER, px, py, dx, dy

        if px < 0.0:
            edge = EDGE_LEFT
        elif px > size:
            edge = EDGE_RIGHT
        elif py < 0.0:
            edge = EDGE_TOP
        else:
            edge = EDGE_BOTTOM

        rotation = EDGE_TABLE[face, edge, 1]
        face, px, py = map_point(face, edge, px, py, size)
        dx, dy = rotate_vector(rotation, dx, dy)

    return CORNER, px, py, dx, dy


def cross_edge(face: int, x: int, y: int, width: int) -> tuple[Face, int, int, int]:
    """
    Maps a cell that is out of range on exactly one axis onto the neighboring
    face. Returns (face, x, y, rotation); the rotation must be applied to any
    direction or gradient carried across the seam.
    """
    mapped_face, mapped_x, mapped_y = remap_cell(int(face), x, y, width)
    if mapped_face == CORNER:
        raise TopologyError(face, x, y, width, "cube corner")
    if mapped_face == INVALID:
        raise TopologyError(face, x, y, width, "offset exceeds one face width")

    rotation = IDENTITY
    if x < 0:
        rotation = EDGE_TABLE[face, EDGE_LEFT, 1]
    elif x >= width:
        rotation = EDGE_TABLE[face, EDGE_RIGHT, 1]
    elif y < 0:
        rotation = EDGE_TABLE[face, EDGE_TOP, 1]
    elif y >= width:
        rotation = EDGE_TABLE[face, EDGE_BOTTOM, 1]
    return Face(int(mapped_face)), int(mapped_x), int(mapped_y), int(rotation)


def neighbor_cells(face: int, x: int, y: int, width: int) -> list[tuple[int, int, int]]:
    """The four grid neighbors of a cell, in left, right, up, down order."""
    neighbors = []
    for nx, ny in ((x - 1, y), (x + 1, y), (x, y - 1), (x, y + 1)):
        if 0 <= nx < width and 0 <= ny < width:
            neighbors.append((face, nx, ny))
        else:
            mapped_face, mapped_x, mapped_y, _ = cross_edge(face, nx, ny, width)
            neighbors.append((int(mapped_face), mapped_x, mapped_y))
    return neighbors


@njit
def position_on_sphere(x, y, width, face):
    """
    Maps a grid position onto the unit sphere. The cube point is warped with
    the per-axis correction s_x = x * sqrt(1 - y^2/2 - z^2/2 + y^2 z^2 / 3),
    which spreads cells far more evenly than a plain normalization.
    """
    u = 2.0 * (x / width) - 1.0
    v = 2.0 * (y / width) - 1.0

    if face == 0:  # LEFT
        cx, cy, cz = -1.0, -u, -v
    elif face == 1:  # BACK
        cx, cy, cz = u, -1.0, -v
    elif face == 2:  # RIGHT
        cx, cy, cz = 1.0, u, -v
    elif face == 3:  # FRONT
        cx, cy, cz = -u, 1.0, -v
    elif face == 4:  # UP
        cx, cy, cz = u, -v, 1.0
    else:  # DOWN
        cx, cy, cz = u, v, -1.0

    x2 = cx * cx
    y2 = cy * cy
    z2 = cz * cz
    sx = cx * np.sqrt(1.0 - y2 / 2.0 - z2 / 2.0 + y2 * z2 / 3.0)
    sy = cy * np.sqrt(1.0 - x2 / 2.0 - z2 / 2.0 + x2 * z2 / 3.0)
    sz = cz * np.sqrt(1.0 - x2 / 2.0 - y2 / 2.0 + x2 * y2 / 3.0)
    return sx, sy, sz
