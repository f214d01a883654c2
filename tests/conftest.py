"""Shared fixtures for the planet generator tests."""

import logging
import os
import sys

import numpy as np
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from planet_generator import topology
from planet_generator.rng import PlanetRng


@pytest.fixture
def logger():
    return logging.getLogger("PlanetGeneratorTest")


@pytest.fixture
def rng():
    return PlanetRng(1234)


@pytest.fixture
def small_config():
    """A planet small enough to generate in well under a second once compiled."""
    return {
        'seed': 42,
        'width': 9,
        'continent_count': 3,
        'erosion_iterations': 1,
    }


@pytest.fixture
def sloped_heights():
    """Six faces of heights in [0, 1] that fall off towards +x on every face."""
    width = 8
    ramp = np.linspace(1.0, 0.2, width)
    heights = np.empty((topology.FACE_COUNT, width, width))
    heights[:] = ramp[np.newaxis, np.newaxis, :]
    return heights
