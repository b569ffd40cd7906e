"""
High numerical aperture Bluestein propagator used to simulate DLHM holograms.

A sample-plane field is propagated over the sample-to-screen distance
``L - z`` with the same padded FFT convolution as the reconstruction path but
forward-direction chirps. The propagation lands on the "natural" grid of the
spherical wavefront, whose pitch grows as ``dxOut / r`` towards the screen
edge, so ``interpolate`` spreads those samples back onto the uniform sensor
grid.

The output-plane phase factor is not applied: only intensities of the
simulated field are ever used.
"""
import math

import numpy as np
from numba import njit, prange

from .array_ops import (PRECISION, as_field, check_field, check_grid, multiply,
                        new_field, pad_field, quadrant_shift, unpad_array,
                        unpad_field)
from .exceptions import GeometryError
from .fft import FFT2D
from .geometry import GeometryParameters


# ============================================================================
# KERNELS
# ============================================================================

@njit(cache=True, fastmath=True, parallel=True)
def _bluestein_kernels(M, N, wavelength, zp, dx, dy, dx_out, dy_out,
                       kernel1, kernel2):
    z2 = zp * zp

    M2 = M // 2 - 1
    N2 = N // 2 - 1

    k2 = math.pi / wavelength

    for i in prange(M):
        m = i - M2
        rx = 1.0 - (m * m * dx_out * dx_out / z2)

        for j in range(N):
            n = j - N2

            r = math.sqrt(rx - (n * n * dy_out * dy_out / z2))

            dX = dx_out / r
            dY = dy_out / r

            R = math.sqrt(z2 + (m * m * dX * dX) + (n * n * dY * dY))
            factor = k2 / R

            phase1 = factor * ((dx * (dx - dX) * m * m) + (dy * (dy - dY) * n * n))
            phase2 = factor * ((dx * dX * m * m) + (dy * dY * n * n))

            kernel1[i, 2 * j] = math.cos(phase1)
            kernel1[i, 2 * j + 1] = math.sin(phase1)

            kernel2[i, 2 * j] = math.cos(phase2)
            kernel2[i, 2 * j + 1] = math.sin(phase2)


# ============================================================================
# INTERPOLATION (natural grid -> uniform sensor grid)
# ============================================================================

@njit(cache=True, fastmath=True)
def _bluestein_scatter(a, zp, dx_out, dy_out, mp_min, np_min, mp_max, np_max):
    """
    Forward bilinear splatting onto a ``2*mp_max x 2*np_max`` canvas.

    Runs serially: neighbouring samples accumulate into shared cells.
    """
    M, N = a.shape
    z2 = zp * zp

    M2 = M // 2 - 1
    N2 = N // 2 - 1

    rows = 2 * mp_max
    cols = 2 * np_max
    tmp = np.zeros((rows, cols), dtype=np.float32)

    for i in range(M):
        m = i - M2
        rx = 1.0 - (m * m * dx_out * dx_out / z2)

        for j in range(N):
            n = j - N2

            r = math.sqrt(rx - (n * n * dy_out * dy_out / z2))

            mp = m / r - mp_min
            np_ = n / r - np_min

            imp = int(math.floor(mp))
            inp = int(math.floor(np_))

            if imp > 0 and imp < rows - 1 and inp > 0 and inp < cols - 1:
                # weights
                x1frac = (imp + 1.0) - mp
                x2frac = 1.0 - x1frac
                y1frac = (inp + 1.0) - np_
                y2frac = 1.0 - y1frac

                value = a[i, j]
                tmp[imp, inp] += x1frac * y1frac * value
                tmp[imp + 1, inp] += x2frac * y1frac * value
                tmp[imp, inp + 1] += x1frac * y2frac * value
                tmp[imp + 1, inp + 1] += x2frac * y2frac * value

    return tmp


# ============================================================================
# PROPAGATOR
# ============================================================================

class BluesteinHighNAPropagator:
    """
    Forward propagator from the sample plane to the screen.

    Parameters:
    -----------
    M, N : int - field size
    geometry : GeometryParameters - ``z`` is the source to sample distance,
        input pitch is the sample pitch and output pitch the screen pitch
    """

    def __init__(self, M: int, N: int, geometry: GeometryParameters):
        self.M = M
        self.N = N
        self.geometry = geometry

        # sample to screen distance
        self.z = geometry.sample_to_screen
        if self.z <= 0:
            raise GeometryError(
                f"sample must lie between source and screen (z = {geometry.z}, "
                f"L = {geometry.L})"
            )

        self._compute_output_box()

        self.kernel1 = new_field(M, N)
        kernel2 = new_field(M, N)

        _bluestein_kernels(M, N, geometry.wavelength, self.z,
                           geometry.dx, geometry.dy,
                           geometry.dx_out, geometry.dy_out,
                           self.kernel1, kernel2)

        self.fft = FFT2D(2 * M, 2 * N)
        self.kernel2 = self.fft.complex_forward(pad_field(kernel2, 2))

        for kernel in (self.kernel1, self.kernel2):
            kernel.flags.writeable = False

    @classmethod
    def from_parameters(cls, M, N, wavelength, z, L, dx, dy, dx_out, dy_out):
        return cls(M, N, GeometryParameters(wavelength, z, L, dx, dy, dx_out, dy_out))

    def _compute_output_box(self):
        g = self.geometry
        z2 = self.z * self.z

        # widest screen index used by the kernels must stay inside the
        # hemisphere seen from the sample
        mm = self.M // 2
        nn = self.N // 2
        edge = 1.0 - (mm * mm * g.dx_out ** 2 / z2) - (nn * nn * g.dy_out ** 2 / z2)
        if edge <= 0:
            raise GeometryError(
                f"screen of {self.M * g.dx_out} x {self.N * g.dy_out} is too wide "
                f"for a sample to screen distance of {self.z}"
            )

        M2 = self.M // 2 - 1
        N2 = self.N // 2 - 1

        self.r_max = math.sqrt(1.0 - (M2 * M2 * g.dx_out ** 2 / z2)
                               - (N2 * N2 * g.dy_out ** 2 / z2))
        self.mp_min = -M2 / self.r_max
        self.np_min = -N2 / self.r_max

        self.mp_max = int(math.ceil((M2 + 1) / self.r_max))
        self.np_max = int(math.ceil((N2 + 1) / self.r_max))

    def diffract(self, field: np.ndarray) -> np.ndarray:
        """Propagate ``field`` (float32, ``(M, 2N)``) to the screen, in place."""
        check_field(field, self.M, self.N)

        multiply(field, self.kernel1)
        padded = pad_field(field, 2)

        self.fft.complex_forward(padded)
        multiply(padded, self.kernel2)
        self.fft.complex_inverse(padded, scale=True)

        quadrant_shift(padded)
        unpad_field(padded, field)
        return field

    def interpolate(self, a: np.ndarray) -> np.ndarray:
        """
        Resample a real grid from the natural propagation grid onto the sensor.

        The samples are splatted onto a ``2*mp_max x 2*np_max`` canvas which is
        then cropped to its centred M x N window.
        """
        check_grid(a, self.M, self.N)
        a = as_field(a)

        g = self.geometry
        tmp = _bluestein_scatter(a, self.z, g.dx_out, g.dy_out,
                                 self.mp_min, self.np_min,
                                 self.mp_max, self.np_max)

        return unpad_array(tmp, self.M, self.N).astype(PRECISION, copy=False)
