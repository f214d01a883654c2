"""
test_shaping.py — Normalization and Shaping Curve Tests
========================================================
"""

import logging

import numpy as np
import pytest

from planet_generator import shaping


class TestNormalize:

    def test_rescales_to_unit_range(self):
        heights = np.linspace(-3.0, 5.0, 6 * 4 * 4).reshape(6, 4, 4)
        low, high = shaping.normalize(heights)
        assert (low, high) == (-3.0, 5.0)
        assert heights.min() == 0.0
        assert heights.max() == 1.0

    def test_idempotent(self):
        heights = np.random.default_rng(3).normal(size=(6, 5, 5))
        shaping.normalize(heights)
        once = heights.copy()
        low, high = shaping.normalize(heights)
        assert (low, high) == (0.0, 1.0)
        np.testing.assert_array_equal(heights, once)

    def test_constant_field_is_left_alone(self):
        heights = np.full((6, 3, 3), 0.7)
        low, high = shaping.normalize(heights)
        assert low == high == pytest.approx(0.7)
        assert (heights == 0.7).all()

    def test_nan_replaced_after_rescale(self):
        heights = np.array([0.0, 2.0, np.nan, 4.0]).reshape(1, 2, 2)
        shaping.normalize(heights, nan_replacement=0.5)
        np.testing.assert_array_equal(heights.ravel(), [0.0, 0.5, 0.5, 1.0])

    def test_nan_kept_without_replacement(self):
        heights = np.array([0.0, np.nan, 4.0, 1.0]).reshape(1, 2, 2)
        shaping.normalize(heights)
        assert np.isnan(heights[0, 0, 1])
        assert np.nanmax(heights) == 1.0

    def test_all_nan(self):
        heights = np.full((6, 2, 2), np.nan)
        low, high = shaping.normalize(heights, nan_replacement=0.5)
        assert np.isnan(low) and np.isnan(high)
        assert (heights == 0.5).all()

    def test_logs_range(self, logger, caplog):
        heights = np.linspace(-2.0, 6.0, 6 * 3 * 3).reshape(6, 3, 3)
        with caplog.at_level(logging.DEBUG, logger=logger.name):
            shaping.normalize(heights, logger=logger)
        assert "[-2.0000, 6.0000]" in caplog.text

    def test_all_nan_warns(self, logger, caplog):
        heights = np.full((6, 2, 2), np.nan)
        with caplog.at_level(logging.WARNING, logger=logger.name):
            shaping.normalize(heights, logger=logger)
        assert "all NaN" in caplog.text


class TestShapeHeights:

    def test_fixed_points(self):
        heights = np.array([0.0, 0.5, 1.0]).reshape(1, 1, 3)
        shaping.shape_heights(heights)
        np.testing.assert_allclose(heights.ravel(), [0.0, 0.375, 1.0], atol=1e-12)

    def test_recorded_values(self):
        heights = np.array([0.25, 0.75]).reshape(1, 1, 2)
        shaping.shape_heights(heights)
        np.testing.assert_allclose(heights.ravel(), [0.12846295558326742, 0.64586113325019778], rtol=0.0, atol=1e-12)

    def test_stays_in_unit_range_and_monotonic(self):
        h = np.linspace(0.0, 1.0, 101)
        heights = h.reshape(1, 1, -1).copy()
        shaping.shape_heights(heights)
        shaped = heights.ravel()
        assert shaped.min() >= -1e-12
        assert shaped.max() <= 1.0 + 1e-12
        assert np.all(np.diff(shaped) >= 0.0)

    def test_mix(self):
        assert shaping.mix(2.0, 4.0, 0.0) == 2.0
        assert shaping.mix(2.0, 4.0, 1.0) == 4.0
        assert shaping.mix(2.0, 4.0, 0.25) == 2.5
