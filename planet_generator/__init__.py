# planet_generator/__init__.py

# This file makes the 'planet_generator' directory a Python package.
# We can also use it to define the public API of the package.

from .errors import ConfigurationError, PlanetGeneratorError, TopologyError
from .generator import HeightMap, PlanetGenerator
from .rng import PlanetRng
from .topology import Face

__all__ = [
    "ConfigurationError",
    "Face",
    "HeightMap",
    "PlanetGenerator",
    "PlanetGeneratorError",
    "PlanetRng",
    "TopologyError",
]
