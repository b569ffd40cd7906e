"""
Multi-plane sweep: one interpolated hologram propagated to a range of z.

Interpolation only depends on L and the screen pitch, so the field is
interpolated once by the caller (``reconstruct(...).interpolated``) and every
plane gets its own propagator. Planes are independent of each other.
"""
import math
import time
from dataclasses import dataclass, field as dataclass_field

import numpy as np

from . import array_ops
from .exceptions import InvalidOptionError
from .geometry import GeometryParameters, automatic_output_pitch
from .kirchhoff import KirchhoffHelmholtzPropagator
from .reconstruction import OutputOptions, extract_outputs

# amplitude and intensity stacks are always stored as 8-bit images
ALWAYS_BYTE = ("amplitude", "intensity")


@dataclass
class SweepResult:
    z: list = dataclass_field(default_factory=list)
    labels: list = dataclass_field(default_factory=list)
    stacks: dict = dataclass_field(default_factory=dict)
    cancelled: bool = False


def plane_distances(z_start: float, z_end: float, z_step: float) -> np.ndarray:
    """Distances ``z_start, z_start + z_step, ...`` up to and including ``z_end``."""
    if z_step <= 0:
        raise InvalidOptionError(f"z step must be positive, got {z_step}")
    if z_end < z_start:
        raise InvalidOptionError(f"z end ({z_end}) is before z start ({z_start})")

    planes = int(math.floor((z_end - z_start) / z_step + 1e-9)) + 1
    return z_start + z_step * np.arange(planes)


def _format(value):
    return f"{value:.4f}".rstrip("0").rstrip(".")


def _phase_to_byte(phase):
    # fixed -π..π display range
    return array_ops.scale2(phase, math.pi, -math.pi, 255.0).astype(np.uint8)


def best_focus(stack: np.ndarray) -> int:
    """Index of the plane with the largest variance (sharpest focus)."""
    variances = [np.var(plane) for plane in stack]
    return int(np.argmax(variances))


def sweep(field: np.ndarray, wavelength: float, L: float, dx: float, dy: float,
          z_values, output_pitch: tuple = None,
          options: OutputOptions = OutputOptions(),
          should_stop=None, progress=None, verbose: bool = False) -> SweepResult:
    """
    Reconstruct an interpolated field at every distance in ``z_values``.

    Parameters:
    -----------
    field : (M, 2N) array - interpolated hologram, left untouched
    wavelength, L, dx, dy : float - set-up shared by every plane
    z_values : iterable of float - reconstruction distances
    output_pitch : (dx_out, dy_out) - fixed output pitch; when omitted each
        plane uses the automatic pitch ``dx * z / L``
    options : OutputOptions - images to stack. Amplitude and intensity are
        always converted to 8-bit; phase, real and imaginary only when listed
        in ``options.byte`` (phase over a fixed -π..π range).
    should_stop : callable - polled before each plane; returning True ends
        the sweep with ``cancelled`` set
    progress : callable(done, total) - called after each plane
    verbose : bool - print per-plane timing

    Returns:
    --------
    SweepResult with one ``(planes, M, N)`` stack per selected output.
    """
    z_values = [float(z) for z in z_values]
    M = field.shape[0]
    N = field.shape[1] // 2
    total = len(z_values)

    result = SweepResult()
    planes = {name: [] for name in options.selected}

    t0 = time.perf_counter()
    for done, z in enumerate(z_values):
        if should_stop is not None and should_stop():
            result.cancelled = True
            if verbose:
                print(f"  Sweep cancelled after {done}/{total} planes")
            break

        if output_pitch is None:
            dx_out = automatic_output_pitch(dx, z, L)
            dy_out = automatic_output_pitch(dy, z, L)
        else:
            dx_out, dy_out = output_pitch

        geometry = GeometryParameters(wavelength, z, L, dx, dy, dx_out, dy_out)
        propagator = KirchhoffHelmholtzPropagator(M, N, geometry)
        output_field = propagator.diffract(field.astype(np.float32, copy=True))

        images = extract_outputs(output_field, OutputOptions(options.selected, options.log))
        for name, image in images.items():
            if name in ALWAYS_BYTE:
                image = array_ops.to_byte(image)
            elif name in options.byte:
                image = _phase_to_byte(image) if name == "phase" else array_ops.to_byte(image)
            planes[name].append(image)

        label = f"z = {_format(z)}"
        if output_pitch is None:
            label += f"; W = {_format(M * dx_out)} um; H = {_format(N * dy_out)} um"

        result.z.append(z)
        result.labels.append(label)

        if progress is not None:
            progress(done + 1, total)
        if verbose:
            print(f"  Plane {done + 1}/{total} ({label}) - {time.perf_counter() - t0:.1f}s")

    result.stacks = {name: np.stack(images) if images else np.empty((0, M, N))
                     for name, images in planes.items()}
    return result
