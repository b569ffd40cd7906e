import numpy as np
import pytest

from dlhm.contrast import (GLOBAL_AVERAGE, ContrastMode, cosine_filter, cosine_window,
                           normalize_zone_size, remove_background,
                           spherical_background, zone_averages)
from dlhm.exceptions import InvalidOptionError
from dlhm.geometry import GeometryParameters


class TestRemoveBackground:

    def setup_method(self):
        rng = np.random.default_rng(3)
        self.hologram = rng.random((32, 24)).astype(np.float32) * 100
        self.geometry = GeometryParameters(0.5, 1000.0, 5000.0, 5.0, 5.0, 1.0, 1.0)

    def test_none_returns_copy(self):
        out = remove_background(self.hologram, ContrastMode.NONE)

        assert out is not self.hologram
        np.testing.assert_array_equal(out, self.hologram)

    def test_mode_from_string(self):
        out = remove_background(self.hologram, "none")
        np.testing.assert_array_equal(out, self.hologram)

    def test_unknown_mode(self):
        with pytest.raises(InvalidOptionError):
            remove_background(self.hologram, "median")

    def test_numerical_needs_geometry(self):
        with pytest.raises(InvalidOptionError):
            remove_background(self.hologram, ContrastMode.NUMERICAL)

    @pytest.mark.parametrize("zone_size", [1, 25, 100])
    def test_global_average(self, zone_size):
        out = remove_background(self.hologram, ContrastMode.AVERAGE, zone_size=zone_size)

        np.testing.assert_allclose(out, self.hologram - self.hologram.mean(dtype=np.float64),
                                   atol=1e-4)
        assert abs(out.mean(dtype=np.float64)) < 1e-4

    def test_zone_average_removes_zone_means(self):
        out = remove_background(self.hologram, ContrastMode.AVERAGE, zone_size=8)

        for i in range(0, 32, 8):
            for j in range(0, 24, 8):
                assert abs(out[i:i + 8, j:j + 8].mean(dtype=np.float64)) < 1e-4

    def test_numerical_background_of_background(self):
        background = spherical_background(32, 24, self.geometry, 10.0)
        out = remove_background(background, ContrastMode.NUMERICAL, self.geometry)

        assert background.max() == pytest.approx(10.0)
        np.testing.assert_allclose(out, 0.0, atol=1e-5)


class TestZones:

    def test_normalize_zone_size(self):
        assert normalize_zone_size(1, 32, 24) == GLOBAL_AVERAGE
        assert normalize_zone_size(25, 32, 24) == GLOBAL_AVERAGE
        assert normalize_zone_size(24, 32, 24) == 24
        assert normalize_zone_size(4, 32, 24) == 4

    @pytest.mark.parametrize("zone_size", [0, -3])
    def test_invalid_zone_size(self, zone_size):
        with pytest.raises(InvalidOptionError):
            normalize_zone_size(zone_size, 32, 24)

    def test_partial_zones(self):
        hologram = np.arange(25, dtype=np.float32).reshape(5, 5)
        averages = zone_averages(hologram, 2)

        assert averages.shape == (3, 3)
        assert averages[0, 0] == pytest.approx(hologram[0:2, 0:2].mean())
        assert averages[2, 1] == pytest.approx(hologram[4:5, 2:4].mean())
        assert averages[2, 2] == pytest.approx(hologram[4, 4])


class TestCosineFilter:

    def test_window(self):
        window = cosine_window(16, 4)

        assert window[0] == pytest.approx(0.0)
        assert window[3] == pytest.approx(1.0)
        assert window[-1] == pytest.approx(0.0)
        np.testing.assert_array_equal(window[4:12], 1.0)
        np.testing.assert_allclose(window, window[::-1])

    def test_short_border_is_identity(self):
        np.testing.assert_array_equal(cosine_window(16, 1), 1.0)

    def test_filter(self):
        out = cosine_filter(np.ones((16, 20), dtype=np.float32), 0.25)

        assert out.dtype == np.float32
        assert out[0, 0] == pytest.approx(0.0)
        assert out[8, 10] == pytest.approx(1.0)
        np.testing.assert_array_equal(out[:, 0], 0.0)

    @pytest.mark.parametrize("border", [0.0, 0.6, -0.1])
    def test_invalid_border(self, border):
        with pytest.raises(InvalidOptionError):
            cosine_filter(np.ones((8, 8)), border)
