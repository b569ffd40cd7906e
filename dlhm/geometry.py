"""
Point-source geometry shared by the reconstruction and simulation propagators.

All lengths handed to this package must be expressed in one unit (micrometres
by convention). Array axis 0 runs along x (``M`` samples, pitch ``dx``) and
axis 1 along y (``N`` samples, pitch ``dy``).
"""
import math
from dataclasses import dataclass

import numpy as np
from numba import njit

from .exceptions import GeometryError

# Simulations above this numerical aperture are allowed but flagged.
MAX_NUMERICAL_APERTURE = 0.57

# Relative tolerance used to reject source-to-sample == source-to-screen.
_DEGENERATE_TOLERANCE = 1e-9


# ============================================================================
# GEOMETRY PARAMETERS
# ============================================================================

@dataclass(frozen=True)
class GeometryParameters:
    """
    Immutable description of one DLHM set-up.

    Parameters:
    -----------
    wavelength : float - illumination wavelength
    z : float - source to sample (reconstruction plane) distance
    L : float - source to screen distance
    dx, dy : float - input pixel pitch
    dx_out, dy_out : float - output pixel pitch
    """
    wavelength: float
    z: float
    L: float
    dx: float
    dy: float
    dx_out: float
    dy_out: float

    def __post_init__(self):
        for name in ("wavelength", "z", "L", "dx", "dy", "dx_out", "dy_out"):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise GeometryError(f"{name} must be finite, got {value}")

        if self.wavelength <= 0:
            raise GeometryError(f"wavelength must be positive, got {self.wavelength}")
        if self.L <= 0:
            raise GeometryError(f"L must be positive, got {self.L}")

        for name in ("dx", "dy", "dx_out", "dy_out"):
            if getattr(self, name) <= 0:
                raise GeometryError(f"{name} must be positive, got {getattr(self, name)}")

        if abs(self.L - self.z) <= _DEGENERATE_TOLERANCE * self.L:
            raise GeometryError(
                f"z ({self.z}) must differ from L ({self.L}); the propagation "
                f"distance L - z would vanish"
            )

    @property
    def sample_to_screen(self) -> float:
        return self.L - self.z

    @classmethod
    def automatic(cls, wavelength, z, L, dx, dy):
        """Output pitch follows the geometric magnification z/L."""
        return cls(wavelength, z, L, dx, dy,
                   automatic_output_pitch(dx, z, L),
                   automatic_output_pitch(dy, z, L))

    @classmethod
    def from_extents(cls, M, N, wavelength, z, L, width, height,
                     out_width, out_height):
        """Build the geometry from physical field sizes instead of pitches."""
        return cls(wavelength, z, L,
                   width / M, height / N,
                   out_width / M, out_height / N)


def automatic_output_pitch(pitch: float, z: float, L: float) -> float:
    """
    Reconstruction pitch of the magnified sample plane, ``pitch * z / L``.

    At ``z == 0`` the plane collapses onto the source; the pitch then falls
    back to ``pitch / L`` so batch sweeps starting at the pinhole still get a
    usable grid.
    """
    if z == 0:
        return pitch / L
    return pitch * z / L


def numerical_aperture(width: float, height: float, L: float) -> float:
    """NA of a ``width x height`` screen placed at ``L`` from the source."""
    return math.sin(math.atan(0.5 * min(width, height) / L))


# ============================================================================
# COORDINATE TRANSFORMATION
# ============================================================================

@njit(cache=True)
def transform_coordinate(x, L):
    """
    Map a physical screen coordinate to the point-source coordinate.

    X = x L / sqrt(L^2 + x^2)

    Works on scalars and numpy arrays.
    """
    return x * L / np.sqrt(L * L + x * x)


@njit(cache=True)
def inverse_transform(X, Y, L):
    """
    Map transformed coordinates back to physical screen coordinates.

    x = X L / sqrt(L^2 - X^2 - Y^2), and the same for y.
    """
    inv_r = 1.0 / np.sqrt(L * L - X * X - Y * Y)
    return X * L * inv_r, Y * L * inv_r


def transformed_grid(n: int, pitch: float, L: float) -> tuple:
    """
    Uniform transformed grid spanning an ``n`` pixel screen axis.

    The physical axis starts at ``-pitch * n / 2`` and its last sample sits at
    ``pitch * (n/2 - 1)``. Both ends are transformed and the spacing is the
    transformed span divided by ``n``.

    Returns:
    --------
    (origin, transformed_origin, transformed_pitch)
    """
    origin = -pitch * n / 2.0
    last = pitch * (n // 2 - 1)

    transformed_origin = transform_coordinate(origin, L)
    transformed_last = transform_coordinate(last, L)

    return origin, float(transformed_origin), float((transformed_last - transformed_origin) / n)
