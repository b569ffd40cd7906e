"""
Exception types raised by the DLHM reconstruction and simulation code.
"""


class DLHMError(Exception):
    """Base class for every error raised by this package."""
    pass


class InvalidDimensionError(DLHMError, ValueError):
    """
    An array does not have the shape a propagator was built for.

    Parameters:
    -----------
    expected : tuple - shape the propagator requires
    actual : tuple - shape that was passed in
    """

    def __init__(self, expected, actual):
        self.expected = tuple(expected)
        self.actual = tuple(actual)
        message = (
            f"Array dimension must be {self.expected[0]} x {self.expected[1]}"
            f" (got {' x '.join(str(s) for s in self.actual)})."
        )
        super().__init__(message)


class GeometryError(DLHMError, ValueError):
    """Degenerate or physically impossible propagation geometry."""
    pass


class InvalidOptionError(DLHMError, ValueError):
    """Unknown mode, out of range option or inconsistent workflow inputs."""
    pass
