"""
Shared fixtures for the DLHM test-suite.
"""
import matplotlib
import pytest

matplotlib.use("Agg")

from dlhm.geometry import GeometryParameters


@pytest.fixture
def geometry():
    """lambda = 0.5, z = 1000, L = 5000, 5 um screen pixels, 1 um output."""
    return GeometryParameters(0.5, 1000.0, 5000.0, 5.0, 5.0, 1.0, 1.0)
