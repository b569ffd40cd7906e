"""
Hologram image input / output through OpenCV.
"""
import cv2
import numpy as np

from .array_ops import PRECISION, to_byte


def load_hologram(path, normalize: bool = False) -> np.ndarray:
    """
    Read an image file as a float32 grayscale hologram.

    With ``normalize`` 8-bit values are divided by 255.
    """
    image = cv2.imread(str(path), cv2.IMREAD_GRAYSCALE)
    if image is None:
        raise FileNotFoundError(f"could not read image: {path}")

    image = image.astype(PRECISION)
    if normalize:
        image /= 255.0
    return image


def crop_center(image: np.ndarray, rows: int, cols: int = None) -> np.ndarray:
    """Centred ``rows x cols`` window (square when ``cols`` is omitted)."""
    if cols is None:
        cols = rows

    h, w = image.shape[:2]
    if rows > h or cols > w:
        raise ValueError(f"cannot crop {rows}x{cols} out of a {h}x{w} image")

    start_h = (h - rows) // 2
    start_w = (w - cols) // 2
    return np.ascontiguousarray(image[start_h:start_h + rows, start_w:start_w + cols])


def save_image(path, grid: np.ndarray) -> None:
    """Save a real grid as an 8-bit image spanning its own min..max."""
    image = grid if grid.dtype == np.uint8 else to_byte(grid)
    if not cv2.imwrite(str(path), image):
        raise OSError(f"could not write image: {path}")


def save_float(path, grid: np.ndarray) -> None:
    """Save a real grid unscaled as a 32-bit float TIFF."""
    if not cv2.imwrite(str(path), np.ascontiguousarray(grid, dtype=np.float32)):
        raise OSError(f"could not write image: {path}")
