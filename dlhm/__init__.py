"""
Digital lensless holographic microscopy: Kirchhoff-Helmholtz reconstruction
and Bluestein high-NA simulation of point-source holograms.
"""
from .batch import SweepResult, best_focus, plane_distances, sweep
from .bluestein import BluesteinHighNAPropagator
from .contrast import ContrastMode, cosine_filter, remove_background
from .exceptions import DLHMError, GeometryError, InvalidDimensionError, InvalidOptionError
from .geometry import (MAX_NUMERICAL_APERTURE, GeometryParameters,
                       automatic_output_pitch, numerical_aperture)
from .kirchhoff import KirchhoffHelmholtzPropagator
from .reconstruction import OutputOptions, ReconstructionResult, reconstruct
from .simulation import SimulationResult, simulate, simulation_geometry

__version__ = "0.1.0"
