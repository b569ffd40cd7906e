"""
Single-plane DLHM reconstruction: contrast hologram -> interpolation ->
Kirchhoff-Helmholtz propagation -> selected output images.
"""
import time
from dataclasses import dataclass, field as dataclass_field

import numpy as np

from . import array_ops
from .contrast import ContrastMode, cosine_filter, remove_background
from .exceptions import InvalidDimensionError, InvalidOptionError
from .geometry import GeometryParameters
from .kirchhoff import KirchhoffHelmholtzPropagator

OUTPUTS = ("phase", "amplitude", "intensity", "real", "imaginary")
LOG_SCALABLE = ("amplitude", "intensity")


@dataclass(frozen=True)
class OutputOptions:
    """
    Which images to extract from a reconstructed field and how to scale them.

    selected : outputs to produce, any of OUTPUTS
    log : outputs (amplitude / intensity) given a natural-log scale
    byte : outputs converted to 8-bit over their own min..max
    """
    selected: tuple = ("phase", "amplitude")
    log: tuple = ()
    byte: tuple = ()

    def __post_init__(self):
        for attr in ("selected", "log", "byte"):
            object.__setattr__(self, attr, tuple(getattr(self, attr)))

        for name in self.selected + self.byte:
            if name not in OUTPUTS:
                raise InvalidOptionError(f"unknown output {name!r}, expected one of {OUTPUTS}")
        for name in self.log:
            if name not in LOG_SCALABLE:
                raise InvalidOptionError(f"only {LOG_SCALABLE} can be log scaled, got {name!r}")


@dataclass
class ReconstructionResult:
    field: np.ndarray
    interpolated: np.ndarray
    outputs: dict = dataclass_field(default_factory=dict)


# ============================================================================
# OUTPUT EXTRACTION
# ============================================================================

_EXTRACTORS = {
    "phase": array_ops.phase,
    "amplitude": array_ops.modulus,
    "intensity": array_ops.modulus_squared,
    "real": array_ops.real,
    "imaginary": array_ops.imaginary,
}


def extract_outputs(field: np.ndarray, options: OutputOptions,
                    phase_field: np.ndarray = None) -> dict:
    """
    Real images requested by ``options``.

    ``phase_field`` overrides the field the phase is taken from (hologram /
    reference quotient).
    """
    outputs = {}
    for name in options.selected:
        source = phase_field if (name == "phase" and phase_field is not None) else field
        image = _EXTRACTORS[name](source)

        if name in options.log:
            image = array_ops.log_scale(image)
        if name in options.byte:
            image = array_ops.to_byte(image)

        outputs[name] = image
    return outputs


# ============================================================================
# RECONSTRUCTION
# ============================================================================

def _propagate(propagator, holo, border):
    if border is not None:
        holo = cosine_filter(holo, border)
    return propagator.diffract(propagator.interpolate(holo))


def reconstruct(hologram: np.ndarray, geometry: GeometryParameters,
                reference: np.ndarray = None,
                contrast=ContrastMode.NUMERICAL, zone_size: int = 1,
                border: float = None, options: OutputOptions = OutputOptions(),
                field: np.ndarray = None, verbose: bool = False) -> ReconstructionResult:
    """
    Reconstruct one plane of a DLHM hologram.

    Parameters:
    -----------
    hologram : 2D array - raw hologram (M x N)
    geometry : GeometryParameters - screen pitch in, reconstruction pitch out
    reference : 2D array - optional hologram recorded without the sample. The
        contrast hologram is then hologram - reference, and the phase output
        is taken from the quotient of both propagated fields.
    contrast : ContrastMode - background removal when no reference is given
    zone_size : int - tile size for ContrastMode.AVERAGE
    border : float - optional cosine taper fraction applied before interpolation
    options : OutputOptions - images to extract
    field : (M, 2N) array - previously interpolated field; skips contrast
        removal and interpolation
    verbose : bool - print progress

    Returns:
    --------
    ReconstructionResult with the propagated field, the interpolated field
    (reusable for other planes) and the requested images.
    """
    M, N = hologram.shape
    if reference is not None and reference.shape != hologram.shape:
        raise InvalidDimensionError(hologram.shape, reference.shape)

    t0 = time.perf_counter()
    if verbose:
        print(f"Reconstructing {M}x{N} hologram at z = {geometry.z}...")

    propagator = KirchhoffHelmholtzPropagator(M, N, geometry)

    quotient = None
    if reference is not None and "phase" in options.selected:
        if verbose:
            print("  Step 0: Propagating hologram and reference for the phase...")
        holo_field = _propagate(propagator, array_ops.as_field(hologram), border)
        ref_field = _propagate(propagator, array_ops.as_field(reference), border)
        quotient = array_ops.divide(holo_field, ref_field)

    if field is None:
        if reference is not None:
            contrast_holo = (np.asarray(hologram, dtype=np.float32)
                             - np.asarray(reference, dtype=np.float32))
        else:
            if verbose:
                print(f"  Step 1: Removing background ({getattr(contrast, 'value', contrast)})...")
            contrast_holo = remove_background(hologram, contrast, geometry, zone_size)

        if border is not None:
            contrast_holo = cosine_filter(contrast_holo, border)

        if verbose:
            print("  Step 2: Coordinate transformation and interpolation...")
            print(f"    dX = {propagator.dX:.6e}, dY = {propagator.dY:.6e}")
        interpolated = propagator.interpolate(contrast_holo)
    else:
        array_ops.check_field(field, M, N)
        interpolated = field

    if verbose:
        print("  Step 3: Kirchhoff-Helmholtz propagation...")
    output_field = propagator.diffract(interpolated.astype(np.float32, copy=True))

    outputs = extract_outputs(output_field, options, phase_field=quotient)

    if verbose:
        print(f"  Reconstruction time: {time.perf_counter() - t0:.3f} seconds")

    return ReconstructionResult(field=output_field, interpolated=interpolated,
                                outputs=outputs)
