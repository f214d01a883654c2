"""
test_rng.py — Deterministic Random Stream Tests
================================================
"""

import numpy as np

from planet_generator.rng import PlanetRng


class TestPlanetRng:

    def test_same_seed_same_stream(self):
        a = PlanetRng(99)
        b = PlanetRng(99)
        assert [a.integers_between(0, 1000) for _ in range(50)] == [b.integers_between(0, 1000) for _ in range(50)]
        np.testing.assert_array_equal(a.unit_vector_3(), b.unit_vector_3())

    def test_different_seeds_differ(self):
        a = PlanetRng(1)
        b = PlanetRng(2)
        assert [a.integers_between(0, 10 ** 6) for _ in range(10)] != [b.integers_between(0, 10 ** 6) for _ in range(10)]

    def test_bounds_are_inclusive(self, rng):
        values = {rng.integers_between(3, 5) for _ in range(500)}
        assert values == {3, 4, 5}
        assert rng.integers_between(7, 7) == 7

    def test_returns_python_int(self, rng):
        assert type(rng.integers_between(0, 10)) is int

    def test_unit_vectors(self, rng):
        vectors = np.array([rng.unit_vector_3() for _ in range(200)])
        np.testing.assert_allclose(np.linalg.norm(vectors, axis=1), 1.0, atol=1e-12)
        # Uniform directions average out near the origin.
        assert np.linalg.norm(vectors.mean(axis=0)) < 0.25

    def test_full_64_bit_seed(self):
        rng = PlanetRng(2 ** 64 - 1)
        assert 0 <= rng.integers_between(0, 9) <= 9
