"""
test_topology.py — Cube-Face Adjacency and Remap Tests
=======================================================

Verifies:
  - Every edge map has an exact inverse on the neighboring face
  - Cells stepped across a seam land on the neighbor's border and step back
  - Continuous positions and directions rotate correctly across seams
  - Corners are reported instead of silently resolved
  - The warped cube projection lands on the unit sphere
"""

import numpy as np
import pytest

from planet_generator import topology
from planet_generator.errors import TopologyError
from planet_generator.topology import Face

EDGES = (topology.EDGE_LEFT, topology.EDGE_RIGHT, topology.EDGE_TOP, topology.EDGE_BOTTOM)


def _back_edge(face, edge):
    """The edge of the neighbor that leads back to `face`."""
    neighbor = topology.EDGE_TABLE[face, edge, 0]
    matches = [e for e in EDGES if topology.EDGE_TABLE[neighbor, e, 0] == face]
    assert len(matches) == 1
    return neighbor, matches[0]


def _step_out(x, y, edge):
    if edge == topology.EDGE_LEFT:
        return x - 1, y
    if edge == topology.EDGE_RIGHT:
        return x + 1, y
    if edge == topology.EDGE_TOP:
        return x, y - 1
    return x, y + 1


class TestEdgeTable:
    """Static structure of the adjacency table."""

    def test_every_face_has_four_distinct_neighbors(self):
        for face in Face:
            neighbors = {int(topology.EDGE_TABLE[face, e, 0]) for e in EDGES}
            assert len(neighbors) == 4
            assert int(face) not in neighbors

    def test_opposite_faces_never_touch(self):
        opposite = {Face.LEFT: Face.RIGHT, Face.BACK: Face.FRONT, Face.UP: Face.DOWN}
        for a, b in opposite.items():
            assert b not in topology.EDGE_TABLE[a, :, 0]
            assert a not in topology.EDGE_TABLE[b, :, 0]

    @pytest.mark.parametrize("face", list(Face))
    @pytest.mark.parametrize("edge", EDGES)
    def test_crossing_out_and_back_is_identity(self, face, edge):
        """The neighbor's map for the shared edge undoes this face's map."""
        size = 7.0
        neighbor, back = _back_edge(face, edge)
        for px, py in [(-0.5, 2.25), (7.5, 3.0), (1.75, -0.25), (4.0, 7.5)]:
            f1, x1, y1 = topology.map_point(int(face), edge, px, py, size)
            assert f1 == neighbor
            f2, x2, y2 = topology.map_point(f1, back, x1, y1, size)
            assert f2 == face
            assert x2 == pytest.approx(px)
            assert y2 == pytest.approx(py)

        rotation = topology.EDGE_TABLE[face, edge, 1]
        back_rotation = topology.EDGE_TABLE[neighbor, back, 1]
        assert topology.compose_rotation(rotation, back_rotation) == topology.IDENTITY
        assert topology.inverse_rotation(rotation) == back_rotation

    def test_face_labels(self):
        assert "".join(face.label for face in Face) == "lbrfud"


class TestRotations:

    def test_quarter_turns(self):
        assert topology.rotate_vector(topology.ROTATE_CW, 1.0, 0.0) == (-0.0, 1.0)
        assert topology.rotate_vector(topology.ROTATE_180, 1.0, 2.0) == (-1.0, -2.0)
        assert topology.rotate_vector(topology.ROTATE_CCW, 1.0, 0.0) == (0.0, -1.0)
        assert topology.rotate_vector(topology.IDENTITY, 3.0, 4.0) == (3.0, 4.0)

    def test_inverse_and_compose(self):
        for rotation in range(4):
            inverse = topology.inverse_rotation(rotation)
            assert topology.compose_rotation(rotation, inverse) == topology.IDENTITY


class TestCellRemap:
    """Integer cells one step past an edge."""

    @pytest.mark.parametrize("width", [3, 8])
    @pytest.mark.parametrize("face", list(Face))
    @pytest.mark.parametrize("edge", EDGES)
    def test_seam_cells_are_mutual_neighbors(self, width, face, edge):
        """Stepping across a seam and back across the neighbor's edge returns home."""
        neighbor, back = _back_edge(face, edge)
        for i in range(width):
            if edge == topology.EDGE_LEFT:
                home = (0, i)
            elif edge == topology.EDGE_RIGHT:
                home = (width - 1, i)
            elif edge == topology.EDGE_TOP:
                home = (i, 0)
            else:
                home = (i, width - 1)

            out_x, out_y = _step_out(*home, edge)
            mapped_face, mx, my, _ = topology.cross_edge(face, out_x, out_y, width)
            assert mapped_face == neighbor
            assert 0 <= mx < width and 0 <= my < width

            back_x, back_y = _step_out(mx, my, back)
            returned_face, rx, ry = topology.remap_cell(int(mapped_face), back_x, back_y, width)
            assert (returned_face, rx, ry) == (face, home[0], home[1])

    def test_in_range_cell_is_unchanged(self):
        assert topology.remap_cell(2, 3, 4, 8) == (2, 3, 4)

    def test_corner_is_reported(self):
        face, _, _ = topology.remap_cell(1, -1, -1, 8)
        assert face == topology.CORNER
        with pytest.raises(TopologyError, match="cube corner"):
            topology.cross_edge(1, -1, -1, 8)

    def test_offset_past_neighbor_is_invalid(self):
        face, _, _ = topology.remap_cell(0, 17, 2, 8)
        assert face == topology.INVALID
        with pytest.raises(TopologyError) as excinfo:
            topology.cross_edge(0, 17, 2, 8)
        assert "face=0 x=17 y=2 width=8" in str(excinfo.value)

    def test_cross_edge_reports_rotation(self):
        face, x, y, rotation = topology.cross_edge(Face.UP, -1, 3, 8)
        assert face == Face.LEFT
        assert (x, y) == (3, 0)
        assert rotation == topology.ROTATE_CCW

    def test_neighbor_cells_order(self):
        neighbors = topology.neighbor_cells(Face.BACK, 0, 0, 4)
        assert neighbors[0] == (Face.LEFT, 3, 0)
        assert neighbors[1] == (Face.BACK, 1, 0)
        assert neighbors[2] == (Face.UP, 0, 3)
        assert neighbors[3] == (Face.BACK, 0, 1)


class TestPositionRemap:
    """Continuous droplet positions crossing seams."""

    def test_direction_rotates_with_position(self):
        face, px, py, dx, dy = topology.remap_position(int(Face.UP), -0.25, 3.0, -1.0, 0.0, 8)
        assert face == Face.LEFT
        assert (px, py) == pytest.approx((3.0, 0.25))
        assert (dx, dy) == pytest.approx((0.0, 1.0))

    def test_in_range_position_is_unchanged(self):
        assert topology.remap_position(3, 8.0, 0.0, 1.0, 0.0, 8) == (3, 8.0, 0.0, 1.0, 0.0)

    def test_corner_exit(self):
        face, _, _, _, _ = topology.remap_position(int(Face.BACK), -0.2, -0.2, -0.7, -0.7, 8)
        assert face == topology.CORNER

    @pytest.mark.parametrize("face", list(Face))
    def test_round_trip_through_every_edge(self, face):
        """Walking out of an edge and straight back returns to the start."""
        width = 8
        starts = [
            (0.4, 2.5, -1.0, 0.0),
            (7.6, 5.5, 1.0, 0.0),
            (3.5, 0.4, 0.0, -1.0),
            (6.5, 7.6, 0.0, 1.0),
        ]
        for px, py, dx, dy in starts:
            f1, x1, y1, dx1, dy1 = topology.remap_position(int(face), px + dx, py + dy, dx, dy, width)
            assert f1 != face
            f2, x2, y2, dx2, dy2 = topology.remap_position(f1, x1 - dx1, y1 - dy1, -dx1, -dy1, width)
            assert f2 == face
            assert (x2, y2) == pytest.approx((px, py))
            assert (-dx2, -dy2) == pytest.approx((dx, dy))


class TestSphereProjection:

    def test_on_unit_sphere(self):
        """All grid positions lie on the unit sphere."""
        width = 9
        max_err = 0.0
        for face in Face:
            for y in range(width + 1):
                for x in range(width + 1):
                    p = np.array(topology.position_on_sphere(x, y, width, int(face)))
                    max_err = max(max_err, abs(np.linalg.norm(p) - 1.0))
        assert max_err < 1e-12, f"Off unit sphere by {max_err:.2e}"

    def test_face_centers(self):
        expected = {
            Face.LEFT: (-1, 0, 0),
            Face.BACK: (0, -1, 0),
            Face.RIGHT: (1, 0, 0),
            Face.FRONT: (0, 1, 0),
            Face.UP: (0, 0, 1),
            Face.DOWN: (0, 0, -1),
        }
        for face, center in expected.items():
            p = topology.position_on_sphere(4, 4, 8, int(face))
            assert p == pytest.approx(center, abs=1e-12)

    def test_shared_edge_points_coincide(self):
        """A grid corner on a seam projects to the same point from both faces."""
        width = 8
        # BACK's left border (x = 0) is LEFT's right border (x = width).
        for y in range(width + 1):
            a = topology.position_on_sphere(0, y, width, int(Face.BACK))
            b = topology.position_on_sphere(width, y, width, int(Face.LEFT))
            assert a == pytest.approx(b, abs=1e-12)
