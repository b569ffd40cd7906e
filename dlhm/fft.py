"""
Fixed-size 2D complex FFT over interleaved ``(rows, 2*cols)`` buffers.

The transform is computed by numpy on a ``complex64`` view of the buffer, so
results are written back into the same memory.
"""
import numpy as np

from .array_ops import PRECISION, check_field


class FFT2D:
    """
    In-place forward / inverse FFT for one buffer size.

    Parameters:
    -----------
    rows, cols : int - complex size of the buffers this instance accepts
    """

    def __init__(self, rows: int, cols: int):
        self.rows = rows
        self.cols = cols

    def _view(self, buffer):
        check_field(buffer, self.rows, self.cols)
        if buffer.dtype != PRECISION or not buffer.flags.c_contiguous:
            raise TypeError("FFT buffers must be C-contiguous float32 arrays")
        return buffer.view(np.complex64)

    def complex_forward(self, buffer: np.ndarray) -> np.ndarray:
        """Unscaled forward transform, in place."""
        view = self._view(buffer)
        view[...] = np.fft.fft2(view)
        return buffer

    def complex_inverse(self, buffer: np.ndarray, scale: bool = True) -> np.ndarray:
        """
        Inverse transform, in place.

        With ``scale`` the result is divided by ``rows * cols`` so that a
        forward / inverse pair is the identity.
        """
        view = self._view(buffer)
        view[...] = np.fft.ifft2(view, norm="backward" if scale else "forward")
        return buffer
