"""
DLHM hologram simulation: a sample illuminated by the pinhole's spherical
wave is propagated to the screen with the Bluestein high-NA propagator.
"""
import time
import warnings
from dataclasses import dataclass

import numpy as np

from . import array_ops
from .bluestein import BluesteinHighNAPropagator
from .exceptions import GeometryError, InvalidOptionError
from .geometry import MAX_NUMERICAL_APERTURE, GeometryParameters, numerical_aperture
from .illumination import spherical_wave


@dataclass
class SimulationResult:
    hologram: np.ndarray
    reference: np.ndarray = None
    contrast: np.ndarray = None
    numerical_aperture: float = 0.0


def sample_field(amplitude: np.ndarray = None, phase: np.ndarray = None) -> np.ndarray:
    """
    Complex transmittance of the sample.

    A missing phase means a pure amplitude object, a missing amplitude a pure
    phase object. Amplitudes outside [0, 1] are linearly rescaled onto [0, 1].
    """
    if amplitude is None and phase is None:
        raise InvalidOptionError("the sample needs an amplitude image, a phase image or both")
    if amplitude is not None and phase is not None and amplitude.shape != phase.shape:
        raise InvalidOptionError(
            f"amplitude {amplitude.shape} and phase {phase.shape} images differ in size"
        )

    if amplitude is not None:
        amplitude = np.asarray(amplitude, dtype=np.float32)
        a_max = float(np.max(amplitude))
        a_min = float(np.min(amplitude))
        if a_max > 1 or a_min < 0:
            amplitude = array_ops.scale2(amplitude, a_max, a_min, 1.0)

    if phase is not None:
        phase = np.asarray(phase, dtype=np.float32)

    return array_ops.complex_amplitude(phase, amplitude)


def simulation_geometry(M: int, N: int, wavelength: float, z: float, L: float,
                        screen_width: float, screen_height: float,
                        sample_width: float = None,
                        sample_height: float = None) -> GeometryParameters:
    """
    Geometry of a simulation from physical sizes.

    The sample plane is the input (pitch ``sample / M``) and the screen the
    output. Without explicit sample sizes the sample covers the screen
    demagnified by ``z / L``.
    """
    if sample_width is None:
        sample_width = screen_width * z / L
    if sample_height is None:
        sample_height = screen_height * z / L

    return GeometryParameters.from_extents(M, N, wavelength, z, L,
                                           sample_width, sample_height,
                                           screen_width, screen_height)


def simulate(geometry: GeometryParameters, amplitude: np.ndarray = None,
             phase: np.ndarray = None, reference: bool = False,
             contrast: bool = False, verbose: bool = False) -> SimulationResult:
    """
    Simulate the hologram recorded for one sample.

    Parameters:
    -----------
    geometry : GeometryParameters - z source to sample, L source to screen,
        input pitch on the sample, output pitch on the screen
    amplitude, phase : 2D arrays - sample description, at least one required
    reference : bool - also return the hologram of the bare illumination
    contrast : bool - also return hologram - reference
    verbose : bool - print progress

    Returns:
    --------
    SimulationResult with M x N float32 intensity images.
    """
    if geometry.z <= 0:
        raise GeometryError(f"the sample must be in front of the source, got z = {geometry.z}")

    field = sample_field(amplitude, phase)
    M, N = array_ops.field_shape(field)

    na = numerical_aperture(M * geometry.dx_out, N * geometry.dy_out, geometry.L)
    if na > MAX_NUMERICAL_APERTURE:
        warnings.warn(
            f"numerical aperture {na:.3f} is above {MAX_NUMERICAL_APERTURE}; "
            f"the simulated hologram may not be reliable",
            UserWarning,
            stacklevel=2,
        )

    t0 = time.perf_counter()
    if verbose:
        print(f"Simulating {M}x{N} hologram (NA = {na:.3f})...")
        print("  Step 1: Building propagator...")

    propagator = BluesteinHighNAPropagator(M, N, geometry)

    if verbose:
        print("  Step 2: Illuminating the sample...")
    illumination = spherical_wave(M, N, geometry.wavelength, geometry.z,
                                  geometry.dx, geometry.dy)
    array_ops.multiply(field, illumination)

    if verbose:
        print("  Step 3: Propagating to the screen...")
    propagator.diffract(field)
    hologram = propagator.interpolate(array_ops.modulus_squared(field))

    result = SimulationResult(hologram=hologram, numerical_aperture=na)

    if reference or contrast:
        if verbose:
            print("  Step 4: Propagating the bare illumination...")
        propagator.diffract(illumination)
        ref = propagator.interpolate(array_ops.modulus_squared(illumination))
        if reference:
            result.reference = ref
        if contrast:
            result.contrast = (hologram - ref).astype(np.float32)

    if verbose:
        print(f"  Simulation time: {time.perf_counter() - t0:.3f} seconds")

    return result
