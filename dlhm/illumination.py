"""
Diverging spherical wave emitted by the DLHM pinhole.
"""
import math

import numpy as np
from numba import njit, prange

from .array_ops import new_field


@njit(cache=True, fastmath=True, parallel=True)
def _spherical_wave(wavelength, distance, dx, dy, wave):
    M, cols = wave.shape
    N = cols // 2

    M2 = M // 2 - 1
    N2 = N // 2 - 1

    d2 = distance * distance
    k = 2.0 * math.pi / wavelength

    for i in prange(M):
        m = i - M2
        rx = d2 + m * m * dx * dx
        for j in range(N):
            n = j - N2
            r = math.sqrt(rx + n * n * dy * dy)
            phase = k * r
            factor = 1.0 / r
            wave[i, 2 * j] = factor * math.cos(phase)
            wave[i, 2 * j + 1] = factor * math.sin(phase)


def spherical_wave(M: int, N: int, wavelength: float, distance: float,
                   dx: float, dy: float) -> np.ndarray:
    """
    exp(ikr) / r sampled on an M x N plane at ``distance`` from the source.

    r = sqrt(distance^2 + (m dx)^2 + (n dy)^2) with m, n counted from
    -(M/2 - 1) and -(N/2 - 1).
    """
    wave = new_field(M, N)
    _spherical_wave(wavelength, distance, dx, dy, wave)
    return wave
