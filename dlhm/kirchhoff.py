"""
Kirchhoff-Helmholtz reconstruction for digital lensless holographic microscopy.

The recorded hologram is sampled uniformly on the screen, but the point-source
geometry makes the diffraction integral a convolution only in the transformed
coordinates

    X = x L / sqrt(L^2 + x^2),   Y = y L / sqrt(L^2 + y^2)

so the hologram is first remapped onto a uniform (X, Y) grid and then
propagated with a zero-padded FFT convolution:

    U = outputPhase * shift(IFFT[ FFT[pad(I * kernel1)] * FFT[pad(kernel2)] ])
"""
import math

import numpy as np
from numba import njit, prange

from .array_ops import (PRECISION, as_field, check_field, check_grid,
                        complex_amplitude, multiply, new_field, pad_field,
                        quadrant_shift, unpad_field)
from .exceptions import GeometryError
from .fft import FFT2D
from .geometry import GeometryParameters, inverse_transform, transformed_grid


# ============================================================================
# KERNELS
# ============================================================================

@njit(cache=True, fastmath=True, parallel=True)
def _kirchhoff_kernels(M, N, wavelength, z, L, dX, dY, dx_out, dy_out,
                       kernel1, kernel2, output_phase):
    """
    kernel1      : obliquity / 1/R^2 weight and phase, applied before padding
    kernel2      : quadratic chirp exp(-i phase2), convolved after padding
    output_phase : dX dY exp(i phase2), applied on the output plane
    """
    L2 = L * L
    z2 = z * z

    M2 = M // 2 - 1
    N2 = N // 2 - 1

    k = 2.0 * math.pi / wavelength
    factor = k / L2
    factor2 = k / (2.0 * L)
    area = dX * dY

    for i in prange(M):
        m = i - M2

        Rx = L2 - m * m * dX * dX
        rpx = z2 + m * m * dx_out * dx_out
        a = m * m * dX * dx_out

        for j in range(N):
            n = j - N2

            R = math.sqrt(Rx - n * n * dY * dY)
            rp2 = rpx + n * n * dy_out * dy_out

            phase1 = -factor * R * (z * L - rp2 / 2.0)
            phase2 = -factor2 * (a + n * n * dY * dy_out)

            factor3 = (-0.5 / wavelength) * (1.0 / (R * R)) * (1.0 + R / L)
            phase = phase1 + phase2

            # factor3 * i * exp(i phase)
            kernel1[i, 2 * j] = -factor3 * math.sin(phase)
            kernel1[i, 2 * j + 1] = factor3 * math.cos(phase)

            kernel2[i, 2 * j] = math.cos(-phase2)
            kernel2[i, 2 * j + 1] = math.sin(-phase2)

            output_phase[i, 2 * j] = area * math.cos(phase2)
            output_phase[i, 2 * j + 1] = area * math.sin(phase2)


# ============================================================================
# INTERPOLATION (uniform screen grid -> uniform transformed grid)
# ============================================================================

@njit(cache=True, fastmath=True, parallel=True)
def _kirchhoff_interpolate(holo, L, x0, y0, dx, dy, X0, Y0, dX, dY, out):
    """
    Inverse bilinear remap, one quadrant computed and mirrored into the others.

    Transformed samples whose source cell falls outside the first quadrant of
    the hologram (or on its first row / column) contribute nothing.
    """
    M, N = holo.shape

    M2 = M // 2
    N2 = N // 2

    end_m = M - 1
    end_n = N - 1

    for i in prange(M2):
        X = X0 + i * dX
        for j in range(N2):
            Y = Y0 + j * dY

            new_x, new_y = inverse_transform(X, Y, L)

            xc = (new_x - x0) / dx
            yc = (new_y - y0) / dy

            ixc = int(math.floor(xc))
            iyc = int(math.floor(yc))

            if ixc > 0 and ixc < M2 and iyc > 0 and iyc < N2:
                x1frac = ixc + 1.0 - xc
                x2frac = 1.0 - x1frac
                y1frac = iyc + 1.0 - yc
                y2frac = 1.0 - y1frac

                x1y1 = x1frac * y1frac
                x1y2 = x1frac * y2frac
                x2y1 = x2frac * y1frac
                x2y2 = x2frac * y2frac

                out[i, j] = (x1y1 * holo[ixc, iyc]
                             + x2y1 * holo[ixc + 1, iyc]
                             + x1y2 * holo[ixc, iyc + 1]
                             + x2y2 * holo[ixc + 1, iyc + 1])

                out[end_m - i, j] = (x1y1 * holo[end_m - ixc, iyc]
                                     + x2y1 * holo[end_m - (ixc + 1), iyc]
                                     + x1y2 * holo[end_m - ixc, iyc + 1]
                                     + x2y2 * holo[end_m - (ixc + 1), iyc + 1])

                out[i, end_n - j] = (x1y1 * holo[ixc, end_n - iyc]
                                     + x2y1 * holo[ixc + 1, end_n - iyc]
                                     + x1y2 * holo[ixc, end_n - (iyc + 1)]
                                     + x2y2 * holo[ixc + 1, end_n - (iyc + 1)])

                out[end_m - i, end_n - j] = (x1y1 * holo[end_m - ixc, end_n - iyc]
                                             + x2y1 * holo[end_m - (ixc + 1), end_n - iyc]
                                             + x1y2 * holo[end_m - ixc, end_n - (iyc + 1)]
                                             + x2y2 * holo[end_m - (ixc + 1), end_n - (iyc + 1)])


# ============================================================================
# PROPAGATOR
# ============================================================================

class KirchhoffHelmholtzPropagator:
    """
    Back-propagates an M x N hologram to the plane at ``geometry.z``.

    Kernels are computed once here and never modified afterwards, so one
    instance can serve any number of ``diffract`` calls (from several threads
    if needed).

    Parameters:
    -----------
    M, N : int - hologram size (rows along x, columns along y)
    geometry : GeometryParameters - input pitch is the screen pitch, output
        pitch the reconstruction-plane pitch
    """

    def __init__(self, M: int, N: int, geometry: GeometryParameters):
        self.M = M
        self.N = N
        self.geometry = geometry

        L = geometry.L

        # hologram and transformed coordinates
        self.x0, self.X0, self.dX = transformed_grid(M, geometry.dx, L)
        self.y0, self.Y0, self.dY = transformed_grid(N, geometry.dy, L)

        self._check_transformed_grid()

        self.kernel1 = new_field(M, N)
        self.output_phase = new_field(M, N)
        kernel2 = new_field(M, N)

        _kirchhoff_kernels(M, N, geometry.wavelength, geometry.z, L,
                           self.dX, self.dY, geometry.dx_out, geometry.dy_out,
                           self.kernel1, kernel2, self.output_phase)

        self.fft = FFT2D(2 * M, 2 * N)
        self.kernel2 = self.fft.complex_forward(pad_field(kernel2, 2))

        for kernel in (self.kernel1, self.kernel2, self.output_phase):
            kernel.flags.writeable = False

    @classmethod
    def from_parameters(cls, M, N, wavelength, z, L, dx, dy, dx_out, dy_out):
        return cls(M, N, GeometryParameters(wavelength, z, L, dx, dy, dx_out, dy_out))

    def _check_transformed_grid(self):
        L2 = self.geometry.L ** 2

        # both interpolation and kernels need L^2 - X^2 - Y^2 > 0 everywhere
        X = max(abs(self.X0), abs(self.dX * (self.M // 2)))
        Y = max(abs(self.Y0), abs(self.dY * (self.N // 2)))
        if L2 - X * X - Y * Y <= 0:
            raise GeometryError(
                f"screen of {self.M} x {self.N} pixels is too large for L = "
                f"{self.geometry.L}: transformed grid leaves the source sphere"
            )

    def interpolate(self, holo: np.ndarray) -> np.ndarray:
        """
        Remap a real M x N hologram onto the transformed grid.

        Returns:
        --------
        (M, 2N) field whose real part is the remapped hologram and whose
        imaginary part is zero.
        """
        check_grid(holo, self.M, self.N)
        holo = as_field(holo)

        g = self.geometry
        tmp = np.zeros((self.M, self.N), dtype=PRECISION)
        _kirchhoff_interpolate(holo, g.L, self.x0, self.y0, g.dx, g.dy,
                               self.X0, self.Y0, self.dX, self.dY, tmp)

        return complex_amplitude(None, tmp)

    def diffract(self, field: np.ndarray) -> np.ndarray:
        """
        Propagate ``field`` to the reconstruction plane, in place.

        ``field`` must be a float32 ``(M, 2N)`` array; it is overwritten with
        the reconstructed wavefield and also returned.
        """
        check_field(field, self.M, self.N)

        multiply(field, self.kernel1)
        padded = pad_field(field, 2)

        self.fft.complex_forward(padded)
        multiply(padded, self.kernel2)
        self.fft.complex_inverse(padded, scale=True)

        quadrant_shift(padded)
        unpad_field(padded, field)

        multiply(field, self.output_phase)
        return field

    def reconstruct(self, holo: np.ndarray) -> np.ndarray:
        """interpolate + diffract into a fresh field."""
        return self.diffract(self.interpolate(holo))
