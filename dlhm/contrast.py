"""
Background (DC term) removal applied to raw holograms before reconstruction.
"""
import math
from enum import Enum

import numpy as np
from numba import njit, prange

from .array_ops import PRECISION, modulus_squared, scale
from .exceptions import InvalidOptionError
from .geometry import GeometryParameters
from .illumination import spherical_wave


class ContrastMode(Enum):
    NUMERICAL = "numerical"
    AVERAGE = "average"
    NONE = "none"


GLOBAL_AVERAGE = -1


# ============================================================================
# NUMERICAL BACKGROUND
# ============================================================================

def spherical_background(M: int, N: int, geometry: GeometryParameters,
                         max_value: float) -> np.ndarray:
    """
    Intensity of the bare point-source illumination on the screen, rescaled
    onto ``[0, max_value]``.
    """
    wave = spherical_wave(M, N, geometry.wavelength, geometry.L,
                          geometry.dx, geometry.dy)
    return scale(modulus_squared(wave), max_value)


# ============================================================================
# ZONE AVERAGES
# ============================================================================

def normalize_zone_size(zone_size: int, M: int, N: int) -> int:
    """
    Zone sizes of 1 or larger than the smallest image side mean "one zone
    covering everything", reported as ``GLOBAL_AVERAGE``.
    """
    if zone_size < 1:
        raise InvalidOptionError(f"zone size must be positive, got {zone_size}")
    if zone_size == 1 or zone_size > min(M, N):
        return GLOBAL_AVERAGE
    return zone_size


@njit(cache=True, parallel=True)
def zone_averages(hologram, zone_size):
    """
    Mean of every ``zone_size x zone_size`` tile.

    Tiles hanging over the bottom / right edge only average the samples that
    exist.
    """
    M, N = hologram.shape
    x_zones = (M + zone_size - 1) // zone_size
    y_zones = (N + zone_size - 1) // zone_size

    averages = np.zeros((x_zones, y_zones), dtype=np.float64)

    for i in prange(x_zones):
        for j in range(y_zones):
            total = 0.0
            count = 0
            for m in range(i * zone_size, min((i + 1) * zone_size, M)):
                for n in range(j * zone_size, min((j + 1) * zone_size, N)):
                    total += hologram[m, n]
                    count += 1
            averages[i, j] = total / count

    return averages


def subtract_average(hologram: np.ndarray, zone_size: int) -> np.ndarray:
    M, N = hologram.shape
    zone_size = normalize_zone_size(zone_size, M, N)

    if zone_size == GLOBAL_AVERAGE:
        average = np.mean(hologram, dtype=np.float64)
        return (hologram - average).astype(PRECISION)

    averages = zone_averages(np.ascontiguousarray(hologram), zone_size)
    rows = np.arange(M) // zone_size
    cols = np.arange(N) // zone_size
    return (hologram - averages[rows[:, None], cols[None, :]]).astype(PRECISION)


# ============================================================================
# ENTRY POINT
# ============================================================================

def remove_background(hologram: np.ndarray, mode=ContrastMode.NUMERICAL,
                      geometry: GeometryParameters = None,
                      zone_size: int = 1) -> np.ndarray:
    """
    Contrast hologram from a raw hologram.

    Parameters:
    -----------
    hologram : 2D array - raw intensity recording
    mode : ContrastMode or str - numerical, average or none
    geometry : GeometryParameters - required by the numerical mode
    zone_size : int - tile size of the average mode

    Returns:
    --------
    New array; the "none" mode returns an identical copy of the input.
    """
    try:
        mode = ContrastMode(mode)
    except ValueError:
        raise InvalidOptionError(f"unknown contrast mode: {mode!r}") from None

    if mode is ContrastMode.NONE:
        return hologram.copy()

    if mode is ContrastMode.AVERAGE:
        return subtract_average(hologram, zone_size)

    if geometry is None:
        raise InvalidOptionError("numerical background removal needs the geometry")

    M, N = hologram.shape
    background = spherical_background(M, N, geometry, float(np.max(hologram)))
    return (hologram - background).astype(PRECISION)


# ============================================================================
# BORDER FILTER
# ============================================================================

def cosine_window(n: int, border: int) -> np.ndarray:
    """1D raised-cosine taper over ``border`` samples at each end."""
    window = np.ones(n, dtype=np.float64)
    if border < 2:
        return window

    ramp = (1.0 - np.cos(math.pi * np.arange(border) / (border - 1))) / 2.0
    window[:border] = ramp
    window[n - border:] = ramp[::-1]
    return window


def cosine_filter(hologram: np.ndarray, border: float) -> np.ndarray:
    """
    Smoothly taper the hologram border to zero.

    Parameters:
    -----------
    border : float - fraction of each side tapered at each end, in (0, 0.5]
    """
    if not 0 < border <= 0.5:
        raise InvalidOptionError(f"border fraction must be in (0, 0.5], got {border}")

    M, N = hologram.shape
    wx = cosine_window(M, int(border * M))
    wy = cosine_window(N, int(border * N))
    return (hologram * wx[:, None] * wy[None, :]).astype(PRECISION)
