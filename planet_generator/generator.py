# planet_generator/generator.py

"""
================================================================================
CORE PLANET GENERATOR
================================================================================
This module contains the main PlanetGenerator class, which runs the full
terrain pipeline on the six faces of the cube-sphere:

    plates -> normalize -> noise -> normalize -> shape -> normalize
           -> erosion -> normalize

Data Contract:
---------------
- Inputs (on initialization):
    - config (dict): A dictionary of simulation parameters which can override
      the internal defaults. Expected keys include 'seed', 'width', etc.
    - logger: A configured Python logging object for runtime messages.
    - diagnostic_hook (callable, optional): Called as hook(stage, payload)
      after every stage. Disabled when None.
- Outputs (from methods):
    - generate() returns six HeightMap records in face order L, B, R, F, U, D,
      each holding width * width heights in [0, 1], row-major.
- Side Effects: Logs messages using the provided logger.
- Invariants: Given the same seed and configuration, the output is
  byte-identical across runs and across repeated generate() calls.
================================================================================
"""

import logging
import time
from dataclasses import dataclass

import numpy as np

from . import config as DEFAULTS
from . import erosion
from . import noise
from . import shaping
from . import tectonics
from . import topology
from .errors import ConfigurationError
from .rng import PlanetRng


@dataclass
class HeightMap:
    face: topology.Face
    values: np.ndarray


class PlanetGenerator:
    """
    Generates the height data of a cube-sphere planet. This class is
    backend-only and does not handle any visualization.
    """
    def __init__(self, config: dict, logger: logging.Logger, diagnostic_hook=None):
        """
        Initializes the planet generator.

        Args:
            config (dict): User-defined parameters to override defaults.
            logger (logging.Logger): The logger instance for all output.
            diagnostic_hook (callable, optional): Receives (stage_name, payload)
                after every pipeline stage.

        Raises:
            ConfigurationError: If a parameter is out of its valid range.
        """
        self.logger = logger
        self.user_config = config
        self.diagnostic_hook = diagnostic_hook
        self.logger.info("PlanetGenerator initializing...")

        # --- Consolidate Configuration ---
        self.settings = {
            'seed': self.user_config.get('seed', DEFAULTS.DEFAULT_SEED),
            'width': self.user_config.get('width', DEFAULTS.DEFAULT_WIDTH),
            'continent_count': self.user_config.get('continent_count', DEFAULTS.DEFAULT_CONTINENT_COUNT),
            'kernel_radius': self.user_config.get('kernel_radius', DEFAULTS.DEFAULT_KERNEL_RADIUS),
            'nan_replacement': self.user_config.get('nan_replacement', DEFAULTS.DEFAULT_NAN_REPLACEMENT),

            'fractal_main_layer': self.user_config.get('fractal_main_layer', DEFAULTS.DEFAULT_FRACTAL_MAIN_LAYER),
            'fractal_weight': self.user_config.get('fractal_weight', DEFAULTS.DEFAULT_FRACTAL_WEIGHT),

            'erosion_iterations': self.user_config.get('erosion_iterations', DEFAULTS.DEFAULT_EROSION_ITERATIONS),
            'erosion_max_lifetime': self.user_config.get('erosion_max_lifetime', DEFAULTS.DEFAULT_EROSION_MAX_LIFETIME),
            'erosion_start_speed': self.user_config.get('erosion_start_speed', DEFAULTS.DEFAULT_EROSION_START_SPEED),
            'erosion_start_water': self.user_config.get('erosion_start_water', DEFAULTS.DEFAULT_EROSION_START_WATER),
            'erosion_inertia': self.user_config.get('erosion_inertia', DEFAULTS.DEFAULT_EROSION_INERTIA),
            'erosion_min_sediment_capacity': self.user_config.get('erosion_min_sediment_capacity', DEFAULTS.DEFAULT_EROSION_MIN_SEDIMENT_CAPACITY),
            'erosion_sediment_capacity_factor': self.user_config.get('erosion_sediment_capacity_factor', DEFAULTS.DEFAULT_EROSION_SEDIMENT_CAPACITY_FACTOR),
            'erosion_erode_speed': self.user_config.get('erosion_erode_speed', DEFAULTS.DEFAULT_EROSION_ERODE_SPEED),
            'erosion_deposit_speed': self.user_config.get('erosion_deposit_speed', DEFAULTS.DEFAULT_EROSION_DEPOSIT_SPEED),
            'erosion_gravity': self.user_config.get('erosion_gravity', DEFAULTS.DEFAULT_EROSION_GRAVITY),
            'erosion_evaporate_speed': self.user_config.get('erosion_evaporate_speed', DEFAULTS.DEFAULT_EROSION_EVAPORATE_SPEED),
            'erosion_trace': self.user_config.get('erosion_trace', DEFAULTS.DEFAULT_EROSION_TRACE),
        }

        # --- Derived Settings ---
        if self.settings['kernel_radius'] is None:
            self.settings['kernel_radius'] = self.settings['width'] * DEFAULTS.KERNEL_RADIUS_WIDTH_FACTOR

        self._validate_settings()

        # --- Public Properties for easy access ---
        self.seed = self.settings['seed']
        self.width = self.settings['width']

        self.logger.info(f"PlanetGenerator initialized with seed: {self.seed}")
        self.logger.info(
            f"Planet dimensions: 6 faces of {self.width}x{self.width} cells "
            f"({6 * self.width * self.width} cells), "
            f"{self.settings['continent_count']} continents, "
            f"kernel radius {int(self.settings['kernel_radius'])}"
        )

    def _validate_settings(self):
        s = self.settings

        seed = s['seed']
        if not isinstance(seed, (int, np.integer)) or isinstance(seed, bool) or not 0 <= seed < 2 ** 64:
            raise ConfigurationError(f"seed must be an integer in [0, 2^64), got {seed!r}")

        width = s['width']
        if not isinstance(width, (int, np.integer)) or isinstance(width, bool) or width < DEFAULTS.MIN_WIDTH:
            raise ConfigurationError(f"width must be an integer >= {DEFAULTS.MIN_WIDTH}, got {width!r}")

        for key in ('continent_count', 'fractal_main_layer', 'erosion_iterations', 'erosion_max_lifetime'):
            if not isinstance(s[key], (int, np.integer)) or isinstance(s[key], bool):
                raise ConfigurationError(f"{key} must be an integer, got {s[key]!r}")

        total_cells = 6 * width * width
        if not 1 <= s['continent_count'] <= total_cells:
            raise ConfigurationError(
                f"continent_count must be between 1 and {total_cells}, got {s['continent_count']}"
            )

        if not 1 <= s['kernel_radius'] <= width:
            raise ConfigurationError(f"kernel_radius must be between 1 and {width}, got {s['kernel_radius']}")

        if s['fractal_main_layer'] < 0:
            raise ConfigurationError(f"fractal_main_layer must be >= 0, got {s['fractal_main_layer']}")

        if s['erosion_iterations'] < 0:
            raise ConfigurationError(f"erosion_iterations must be >= 0, got {s['erosion_iterations']}")
        if s['erosion_max_lifetime'] < 0:
            raise ConfigurationError(f"erosion_max_lifetime must be >= 0, got {s['erosion_max_lifetime']}")

        for key in (
            'erosion_start_speed',
            'erosion_start_water',
            'erosion_min_sediment_capacity',
            'erosion_sediment_capacity_factor',
            'erosion_erode_speed',
            'erosion_deposit_speed',
            'erosion_gravity',
        ):
            if s[key] < 0:
                raise ConfigurationError(f"{key} must be >= 0, got {s[key]}")

        for key in ('erosion_inertia', 'erosion_evaporate_speed'):
            if not 0.0 <= s[key] <= 1.0:
                raise ConfigurationError(f"{key} must be within [0, 1], got {s[key]}")

    def _report(self, stage: str, payload: dict):
        if self.diagnostic_hook is not None:
            self.diagnostic_hook(stage, payload)

    # --- Pipeline Stages ---
    def generate_continents(self, rng: PlanetRng) -> tuple[list, np.ndarray]:
        """Seeds the continents and grows them until every cell is claimed."""
        width = self.width
        continent_ids = np.full((topology.FACE_COUNT, width, width), tectonics.UNASSIGNED, dtype=np.int64)

        start_time = time.perf_counter()
        continents = tectonics.seed_continents(rng, self.settings['continent_count'], width)
        claimed = tectonics.grow_continents(continents, continent_ids, rng)
        end_time = time.perf_counter()

        self.logger.info(
            f"Grew {len(continents)} continents over {claimed} cells in {end_time - start_time:.2f} seconds."
        )
        self._report("continents", {"continents": continents, "continent_ids": continent_ids})
        return continents, continent_ids

    def apply_plate_heights(self, heights: np.ndarray, continent_ids: np.ndarray, continents: list):
        """Adds the plate-boundary heights and normalizes with the NaN fallback."""
        start_time = time.perf_counter()
        low, high = tectonics.apply_plate_boundaries(
            heights, continent_ids, continents, self.settings['kernel_radius']
        )
        nan_cells = int(np.isnan(heights).sum())
        shaping.normalize(heights, nan_replacement=self.settings['nan_replacement'], logger=self.logger)
        end_time = time.perf_counter()

        self.logger.info(f"Plate boundaries computed in {end_time - start_time:.2f} seconds.")
        self.logger.debug(f"Plate height range [{low:.4f}, {high:.4f}], {nan_cells} NaN cells replaced.")
        self._report("plates", {"heights": heights, "min": low, "max": high, "nan_cells": nan_cells})

    def apply_noise(self, heights: np.ndarray):
        start_time = time.perf_counter()
        layers = noise.add_fractal_noise(
            heights,
            self.seed,
            self.settings['fractal_main_layer'],
            self.settings['fractal_weight'],
            logger=self.logger,
        )
        low, high = shaping.normalize(heights, logger=self.logger)
        end_time = time.perf_counter()

        self.logger.info(f"Added {layers} noise octaves in {end_time - start_time:.2f} seconds.")
        self._report("noise", {"heights": heights, "layers": layers, "min": low, "max": high})

    def apply_shaping(self, heights: np.ndarray):
        shaping.shape_heights(heights)
        low, high = shaping.normalize(heights, logger=self.logger)
        self._report("shaping", {"heights": heights, "min": low, "max": high})

    def apply_erosion(self, heights: np.ndarray, rng: PlanetRng) -> erosion.ErosionStats:
        params = erosion.ErosionParams.from_settings(self.settings)
        self.logger.info(
            f"Eroding with {params.iterations} iteration(s) "
            f"({params.iterations * heights.size} droplets)..."
        )

        start_time = time.perf_counter()
        stats = erosion.erode(heights, rng, params, trace=self.settings['erosion_trace'])
        low, high = shaping.normalize(heights, logger=self.logger)
        end_time = time.perf_counter()

        self.logger.info(f"Erosion complete in {end_time - start_time:.2f} seconds.")
        self.logger.debug(
            f"Erosion: {stats.steps} steps, eroded {stats.eroded:.4f}, deposited {stats.deposited:.4f}, "
            f"terminated {stats.terminated_lifetime} lifetime / {stats.terminated_flat} flat / "
            f"{stats.terminated_corner} corner"
        )
        self._report("erosion", {"heights": heights, "stats": stats, "min": low, "max": high})
        return stats

    def generate(self) -> list[HeightMap]:
        """
        Runs the whole pipeline from a fresh random stream and returns one
        HeightMap per face.
        """
        start_time = time.perf_counter()
        rng = PlanetRng(self.seed)
        width = self.width
        heights = np.zeros((topology.FACE_COUNT, width, width), dtype=np.float64)

        continents, continent_ids = self.generate_continents(rng)
        self.apply_plate_heights(heights, continent_ids, continents)
        self.apply_noise(heights)
        self.apply_shaping(heights)
        self.apply_erosion(heights, rng)

        end_time = time.perf_counter()
        self.logger.info(f"Planet generated in {end_time - start_time:.2f} seconds.")

        return [HeightMap(face=face, values=heights[face].reshape(-1).copy()) for face in topology.Face]
