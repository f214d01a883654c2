# planet_generator/shaping.py

"""
================================================================================
HEIGHT NORMALIZATION AND SHAPING
================================================================================
Global rescaling of all six faces into [0, 1] and the shaping curve that
pushes mid-range heights towards the extremes.

Data Contract:
---------------
- Inputs: heights, a float array (6, width, width), modified in place.
- Outputs: normalize() returns the (min, max) found before rescaling.
- Invariants: After normalize() the finite heights span exactly [0, 1] unless
  they were all equal, in which case they are left untouched. Normalizing
  twice in a row changes nothing the second time.
================================================================================
"""
import numpy as np


def normalize(heights: np.ndarray, nan_replacement: float = None, logger=None) -> tuple[float, float]:
    """
    Rescales every cell to (h - min) / (max - min) using the global range of
    all faces. NaN cells are ignored when finding the range and, when a
    replacement is given, set to that value afterwards.
    Logs the range it found when a logger is given.
    """
    nan_mask = np.isnan(heights)
    if nan_mask.all():
        if logger is not None:
            logger.warning("Normalizing heights that are all NaN")
        if nan_replacement is not None:
            heights[...] = nan_replacement
        return float("nan"), float("nan")

    low = float(np.nanmin(heights))
    high = float(np.nanmax(heights))
    if logger is not None:
        logger.debug(f"Normalizing heights from range [{low:.4f}, {high:.4f}]")

    if low < high:
        heights -= low
        heights /= high - low

    if nan_replacement is not None and nan_mask.any():
        heights[nan_mask] = nan_replacement

    return low, high


def mix(a, b, t):
    return a * (1.0 - t) + b * t


def shape_heights(heights: np.ndarray) -> None:
    """
    Blends an inverse smoothstep with a square curve, weighted by the height
    itself: low ground follows h^2 and high ground the inverse smoothstep,
    which flattens lowlands and highlands and sharpens the coast between them.
    Expects heights in [0, 1].
    """
    h = heights
    inverse_smoothstep = 0.5 - np.sin(np.arcsin(np.clip(1.0 - 2.0 * h, -1.0, 1.0)) / 3.0)
    power = h * h
    heights[...] = mix(inverse_smoothstep, power, 1.0 - h)
