"""
Element-wise operations on interleaved complex fields.

A field of M x N complex samples is stored as an ``(M, 2N)`` float array:
column ``2k`` holds the real part and column ``2k + 1`` the imaginary part of
sample ``k``. Real grids (amplitude, phase, intensity, raw images) are plain
``(M, N)`` arrays.
"""
import math

import numpy as np
from numba import njit, prange

from .exceptions import InvalidDimensionError, InvalidOptionError

PRECISION = np.float32


# ============================================================================
# SHAPE HELPERS
# ============================================================================

def new_field(M: int, N: int) -> np.ndarray:
    """Zeroed ``(M, 2N)`` field."""
    return np.zeros((M, 2 * N), dtype=PRECISION)


def field_shape(field: np.ndarray) -> tuple:
    """Complex shape ``(M, N)`` of an interleaved field."""
    return field.shape[0], field.shape[1] // 2


def check_field(field, M, N):
    if field.ndim != 2 or field.shape != (M, 2 * N):
        raise InvalidDimensionError((M, 2 * N), field.shape)


def check_grid(grid, M, N):
    if grid.ndim != 2 or grid.shape != (M, N):
        raise InvalidDimensionError((M, N), grid.shape)


def as_field(a) -> np.ndarray:
    """Contiguous float32 copy-on-need of a field or grid."""
    return np.ascontiguousarray(a, dtype=PRECISION)


def to_complex(field: np.ndarray) -> np.ndarray:
    """numpy complex128 array holding the same samples as ``field``."""
    return field[:, 0::2].astype(np.float64) + 1j * field[:, 1::2].astype(np.float64)


def from_complex(values: np.ndarray) -> np.ndarray:
    """Interleave a numpy complex array into a float32 field."""
    M, N = values.shape
    field = new_field(M, N)
    field[:, 0::2] = values.real
    field[:, 1::2] = values.imag
    return field


# ============================================================================
# COMPLEX ARITHMETIC (in-place, interleaved)
# ============================================================================

@njit(cache=True, fastmath=True, parallel=True)
def _cmul_inplace(a, b):
    ny, nx2 = a.shape
    nx = nx2 // 2
    for y in prange(ny):
        for x in range(nx):
            ar = a[y, 2 * x]
            ai = a[y, 2 * x + 1]
            br = b[y, 2 * x]
            bi = b[y, 2 * x + 1]
            a[y, 2 * x] = ar * br - ai * bi
            a[y, 2 * x + 1] = ar * bi + ai * br


def multiply(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """
    a <- a * b, element-wise complex product of two same-shaped fields.

    Returns ``a`` for chaining.
    """
    if a.shape != b.shape:
        raise InvalidDimensionError(a.shape, b.shape)
    _cmul_inplace(a, b)
    return a


@njit(cache=True, fastmath=True, parallel=True)
def _cdiv(a, b, out):
    ny, nx2 = a.shape
    nx = nx2 // 2
    for y in prange(ny):
        for x in range(nx):
            ar = a[y, 2 * x]
            ai = a[y, 2 * x + 1]
            br = b[y, 2 * x]
            bi = b[y, 2 * x + 1]
            den = br * br + bi * bi
            out[y, 2 * x] = (ar * br + ai * bi) / den
            out[y, 2 * x + 1] = (ai * br - ar * bi) / den


def divide(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """New field ``a / b``; samples where ``b == 0`` become inf/nan."""
    if a.shape != b.shape:
        raise InvalidDimensionError(a.shape, b.shape)
    out = np.empty_like(a)
    _cdiv(a, b, out)
    return out


# ============================================================================
# EXTRACTION
# ============================================================================

@njit(cache=True, fastmath=True, parallel=True)
def _modulus(field, squared):
    ny, nx2 = field.shape
    nx = nx2 // 2
    out = np.empty((ny, nx), dtype=field.dtype)
    for y in prange(ny):
        for x in range(nx):
            re = field[y, 2 * x]
            im = field[y, 2 * x + 1]
            m2 = re * re + im * im
            if squared:
                out[y, x] = m2
            else:
                out[y, x] = math.sqrt(m2)
    return out


def modulus(field: np.ndarray) -> np.ndarray:
    return _modulus(field, False)


def modulus_squared(field: np.ndarray) -> np.ndarray:
    return _modulus(field, True)


@njit(cache=True, parallel=True)
def _phase(field):
    ny, nx2 = field.shape
    nx = nx2 // 2
    out = np.empty((ny, nx), dtype=field.dtype)
    for y in prange(ny):
        for x in range(nx):
            p = math.atan2(field[y, 2 * x + 1], field[y, 2 * x])
            # -0.0 imaginary parts give -π; keep the range half-open
            if p <= -math.pi:
                p = math.pi
            out[y, x] = p
    return out


def phase(field: np.ndarray) -> np.ndarray:
    """Argument of every sample, atan2(im, re), in (-π, π]."""
    return _phase(field)


def real(field: np.ndarray) -> np.ndarray:
    return np.ascontiguousarray(field[:, 0::2])


def imaginary(field: np.ndarray) -> np.ndarray:
    return np.ascontiguousarray(field[:, 1::2])


@njit(cache=True, fastmath=True, parallel=True)
def _complex_amplitude(phase_grid, amplitude_grid, out):
    ny, nx = phase_grid.shape
    for y in prange(ny):
        for x in range(nx):
            a = amplitude_grid[y, x]
            p = phase_grid[y, x]
            out[y, 2 * x] = a * math.cos(p)
            out[y, 2 * x + 1] = a * math.sin(p)


def complex_amplitude(phase_grid=None, amplitude=None) -> np.ndarray:
    """
    Build ``amplitude * exp(i * phase)`` as an interleaved field.

    Either argument may be a grid or a scalar; a missing phase defaults to 0
    and a missing amplitude to 1. At least one of them must be a grid.
    """
    grids = [g for g in (phase_grid, amplitude) if isinstance(g, np.ndarray)]
    if not grids:
        raise InvalidOptionError("complex_amplitude needs at least one 2D grid")
    shape = grids[0].shape
    for g in grids[1:]:
        if g.shape != shape:
            raise InvalidDimensionError(shape, g.shape)

    if phase_grid is None:
        phase_grid = 0.0
    if amplitude is None:
        amplitude = 1.0

    p = np.broadcast_to(np.asarray(phase_grid, dtype=PRECISION), shape)
    a = np.broadcast_to(np.asarray(amplitude, dtype=PRECISION), shape)

    out = new_field(shape[0], shape[1])
    _complex_amplitude(np.ascontiguousarray(p), np.ascontiguousarray(a), out)
    return out


# ============================================================================
# SCALING
# ============================================================================

def scale(grid: np.ndarray, new_max: float) -> np.ndarray:
    """
    Linear rescale of a real grid onto ``[0, new_max]``.

    A constant grid maps to all zeros.
    """
    return scale2(grid, float(np.max(grid)), float(np.min(grid)), new_max)


def scale2(grid: np.ndarray, old_max: float, old_min: float, new_max: float) -> np.ndarray:
    """Rescale ``[old_min, old_max]`` onto ``[0, new_max]`` with given bounds."""
    span = old_max - old_min
    if span == 0:
        return np.zeros_like(grid, dtype=PRECISION)
    return ((grid - old_min) * (new_max / span)).astype(PRECISION)


def log_scale(grid: np.ndarray) -> np.ndarray:
    """Natural logarithm; non-positive samples are mapped to 0."""
    out = np.zeros_like(grid, dtype=PRECISION)
    np.log(grid, out=out, where=grid > 0)
    return out


def to_byte(grid: np.ndarray) -> np.ndarray:
    """8-bit image spanning the grid's own min..max."""
    return scale(grid, 255.0).astype(np.uint8)


# ============================================================================
# QUADRANT SHIFT / PADDING
# ============================================================================

@njit(cache=True, parallel=True)
def _quadrant_shift(field):
    ny, nx2 = field.shape
    nx = nx2 // 2
    hy = ny // 2
    hx = nx // 2
    for y in prange(hy):
        y2 = y + hy
        for x in range(hx):
            x2 = x + hx
            # top-left <-> bottom-right
            tr = field[y, 2 * x]
            ti = field[y, 2 * x + 1]
            field[y, 2 * x] = field[y2, 2 * x2]
            field[y, 2 * x + 1] = field[y2, 2 * x2 + 1]
            field[y2, 2 * x2] = tr
            field[y2, 2 * x2 + 1] = ti
            # top-right <-> bottom-left
            tr = field[y, 2 * x2]
            ti = field[y, 2 * x2 + 1]
            field[y, 2 * x2] = field[y2, 2 * x]
            field[y, 2 * x2 + 1] = field[y2, 2 * x + 1]
            field[y2, 2 * x] = tr
            field[y2, 2 * x + 1] = ti


def quadrant_shift(field: np.ndarray) -> np.ndarray:
    """
    Swap diagonal quadrants in place (FFT zero-frequency recentring).

    For even sizes this equals ``numpy.fft.fftshift`` on the complex samples;
    the propagators only ever shift their even ``2M x 2N`` buffers.
    """
    _quadrant_shift(field)
    return field


def pad_field(field: np.ndarray, pad: int = 2) -> np.ndarray:
    """
    Zero-pad an ``M x N`` complex field into the centre of ``pad*M x pad*N``.

    The field starts at row ``(pad-1)*M/2`` and complex column
    ``(pad-1)*N/2``.
    """
    if pad <= 1:
        return field
    M, N = field_shape(field)
    padded = new_field(pad * M, pad * N)
    sy = (pad - 1) * M // 2
    sx = (pad - 1) * N // 2
    padded[sy:sy + M, 2 * sx:2 * (sx + N)] = field
    return padded


def unpad_field(padded: np.ndarray, out: np.ndarray) -> np.ndarray:
    """Copy the centred ``out``-sized complex window of ``padded`` into ``out``."""
    Mp, Np = field_shape(padded)
    M, N = field_shape(out)
    sy = (Mp - M) // 2
    sx = (Np - N) // 2
    out[:, :] = padded[sy:sy + M, 2 * sx:2 * (sx + N)]
    return out


def unpad_array(padded: np.ndarray, M: int, N: int) -> np.ndarray:
    """Centred ``M x N`` window of a real grid."""
    sy = (padded.shape[0] - M) // 2
    sx = (padded.shape[1] - N) // 2
    return np.ascontiguousarray(padded[sy:sy + M, sx:sx + N])
