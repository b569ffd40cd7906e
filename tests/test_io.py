import cv2
import numpy as np
import pytest

from dlhm.io import crop_center, load_hologram, save_float, save_image


class TestImageIO:

    def setup_method(self):
        self.grid = np.tile(np.arange(16, dtype=np.float32) * 17.0, (8, 1))

    def test_byte_round_trip(self, tmp_path):
        path = tmp_path / "hologram.png"
        save_image(path, self.grid)

        image = load_hologram(path)
        assert image.dtype == np.float32
        assert image.shape == (8, 16)
        np.testing.assert_array_equal(image, self.grid)

    def test_normalize(self, tmp_path):
        path = tmp_path / "hologram.png"
        save_image(path, self.grid)

        image = load_hologram(path, normalize=True)
        assert image.max() == pytest.approx(1.0)
        assert image.min() == 0.0

    def test_save_float(self, tmp_path):
        path = tmp_path / "phase.tif"
        grid = np.linspace(-np.pi, np.pi, 48, dtype=np.float32).reshape(6, 8)

        save_float(path, grid)

        np.testing.assert_array_equal(cv2.imread(str(path), cv2.IMREAD_UNCHANGED), grid)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_hologram(tmp_path / "missing.png")

    def test_unwritable(self, tmp_path):
        with pytest.raises((OSError, cv2.error)):
            save_image(tmp_path / "hologram.unknownext", self.grid)


class TestCropCenter:

    def test_square(self):
        image = np.arange(100).reshape(10, 10)
        np.testing.assert_array_equal(crop_center(image, 4), image[3:7, 3:7])

    def test_rectangular(self):
        image = np.arange(60).reshape(6, 10)
        np.testing.assert_array_equal(crop_center(image, 2, 6), image[2:4, 2:8])

    def test_too_large(self):
        with pytest.raises(ValueError):
            crop_center(np.zeros((4, 4)), 5)
