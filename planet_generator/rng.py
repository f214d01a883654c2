# planet_generator/rng.py

"""
================================================================================
DETERMINISTIC RANDOM STREAM
================================================================================
A thin wrapper around a seeded NumPy Generator. A single PlanetRng instance is
created per generation run and passed explicitly to every stochastic stage,
so the whole pipeline is reproducible from the master seed.

Data Contract:
---------------
- Inputs: a non-negative integer seed.
- Outputs: inclusive uniform integers and uniform 3D unit vectors.
- Side Effects: advances the internal generator state.
- Invariants: two instances built from the same seed produce the same stream.
================================================================================
"""
import numpy as np


class PlanetRng:
    """Seeded random stream shared by continent growth and erosion."""

    def __init__(self, seed: int):
        self.seed = seed
        self._generator = np.random.default_rng(seed)

    def integers_between(self, low: int, high: int) -> int:
        """Uniform integer in the closed range [low, high]."""
        return int(self._generator.integers(low, high, endpoint=True))

    def unit_vector_3(self) -> np.ndarray:
        """Uniformly distributed direction on the unit sphere."""
        # A normalized isotropic Gaussian is uniform on the sphere. Redraw the
        # (practically impossible) near-zero sample instead of dividing by it.
        while True:
            v = self._generator.standard_normal(3)
            length = np.sqrt(np.dot(v, v))
            if length > 1e-12:
                return v / length
