# planet_generator/color_maps.py

"""
================================================================================
SHARED COLOR MAPPING UTILITIES
================================================================================
This module contains the color mapping constants and functions for converting
normalized face heights into RGB color arrays for the offline baker.

It is a pure, stateless utility with no dependency on an image library; the
caller decides how to encode the arrays.
================================================================================
"""
import numpy as np

# --- Elevation Gradient ---
# Stops are evenly spaced over [0, 1]: deep sea, shallow sea, lowland, plains,
# hills, mountains, peaks.
ELEVATION_GRADIENT_STOPS = (
    (0, 0, 138),
    (29, 144, 255),
    (4, 225, 0),
    (255, 255, 0),
    (255, 139, 0),
    (255, 3, 0),
    (166, 64, 32),
)

LUT_SIZE = 256


# --- Color Lookup Table (LUT) Generation ---
def create_elevation_lut() -> np.ndarray:
    """Creates a 256-entry color LUT by interpolating the gradient stops."""
    t = np.linspace(0.0, 1.0, LUT_SIZE)
    stops = np.array(ELEVATION_GRADIENT_STOPS, dtype=np.float64)
    positions = np.linspace(0.0, 1.0, len(stops))
    channels = [np.interp(t, positions, stops[:, c]) for c in range(3)]
    return np.round(np.stack(channels, axis=-1)).astype(np.uint8)


def _lut_indices(values: np.ndarray) -> np.ndarray:
    # NaN would cast to an arbitrary integer; treat it as sea level zero.
    clipped = np.clip(np.nan_to_num(values, nan=0.0), 0.0, 1.0)
    return np.round(clipped * (LUT_SIZE - 1)).astype(np.intp)


def get_elevation_color_array(height_values: np.ndarray, elevation_lut: np.ndarray) -> np.ndarray:
    """
    Converts a (width, width) grid of normalized heights into a
    (width, width, 3) RGB array using a pre-computed LUT. Rows stay rows, so
    the result can be handed to Pillow directly.
    """
    return elevation_lut[_lut_indices(height_values)]


def get_grayscale_color_array(height_values: np.ndarray) -> np.ndarray:
    """Converts normalized heights [0, 1] into a grayscale RGB color array."""
    gray_values = _lut_indices(height_values).astype(np.uint8)
    return np.stack([gray_values] * 3, axis=-1)


def get_continent_color_array(continent_ids: np.ndarray, continent_count: int, seed: int) -> np.ndarray:
    """Generates a color array where each continent has a unique, deterministic color."""
    rng = np.random.default_rng(seed)
    color_palette = rng.integers(0, 256, size=(continent_count, 3), dtype=np.uint8)
    return color_palette[continent_ids]
