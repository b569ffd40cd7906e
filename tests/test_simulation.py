import numpy as np
import pytest

from dlhm import array_ops
from dlhm.exceptions import GeometryError, InvalidOptionError
from dlhm.geometry import GeometryParameters
from dlhm.simulation import sample_field, simulate, simulation_geometry


class TestSampleField:

    def test_amplitude_rescaled(self):
        amplitude = np.array([[0.0, 1.0], [2.0, 4.0]], dtype=np.float32)
        field = sample_field(amplitude=amplitude)

        np.testing.assert_allclose(array_ops.real(field), [[0.0, 0.25], [0.5, 1.0]])
        np.testing.assert_array_equal(array_ops.imaginary(field), 0.0)

    def test_amplitude_in_range_kept(self):
        amplitude = np.array([[0.2, 0.4], [0.6, 0.8]], dtype=np.float32)
        np.testing.assert_allclose(array_ops.real(sample_field(amplitude=amplitude)), amplitude)

    def test_phase_only(self):
        phase = np.array([[0.0, 1.0], [2.0, 3.0]], dtype=np.float32)
        field = sample_field(phase=phase)

        np.testing.assert_allclose(array_ops.modulus(field), 1.0, rtol=1e-6)
        np.testing.assert_allclose(array_ops.phase(field), phase, atol=1e-6)

    def test_missing_sample(self):
        with pytest.raises(InvalidOptionError):
            sample_field()

    def test_shape_mismatch(self):
        with pytest.raises(InvalidOptionError):
            sample_field(np.ones((4, 4)), np.zeros((4, 5)))


class TestSimulationGeometry:

    def test_automatic_sample_size(self):
        g = simulation_geometry(64, 64, 0.5, 1000.0, 5000.0, 320.0, 320.0)

        assert g.dx_out == pytest.approx(5.0)
        assert g.dx == pytest.approx(1.0)

    def test_explicit_sample_size(self):
        g = simulation_geometry(64, 32, 0.5, 1000.0, 5000.0, 320.0, 160.0, 128.0, 32.0)
        assert (g.dx, g.dy) == (2.0, 1.0)
        assert (g.dx_out, g.dy_out) == (5.0, 5.0)


class TestSimulate:

    M = 64
    N = 64

    def setup_method(self):
        self.geometry = simulation_geometry(self.M, self.N, 0.5, 1000.0, 5000.0, 320.0, 320.0)

        yy, xx = np.mgrid[-32:32, -32:32]
        self.disk = (np.hypot(xx, yy) > 6).astype(np.float32)

    def test_hologram_only(self):
        result = simulate(self.geometry, amplitude=self.disk)

        assert result.hologram.shape == (self.M, self.N)
        assert result.hologram.dtype == np.float32
        assert np.all(result.hologram >= 0)
        assert result.reference is None
        assert result.contrast is None
        assert 0 < result.numerical_aperture < 0.57

    def test_contrast_is_difference(self):
        result = simulate(self.geometry, amplitude=self.disk, reference=True, contrast=True)

        np.testing.assert_allclose(result.contrast, result.hologram - result.reference,
                                   rtol=1e-6, atol=1e-12)
        assert np.any(result.contrast != 0)

    def test_transparent_sample_has_no_contrast(self):
        result = simulate(self.geometry, amplitude=np.ones((self.M, self.N), np.float32),
                          contrast=True)

        assert result.reference is None
        np.testing.assert_array_equal(result.contrast, 0.0)

    def test_phase_object(self):
        result = simulate(self.geometry, phase=(1 - self.disk) * 0.5)
        assert np.all(np.isfinite(result.hologram))

    def test_sample_at_source(self):
        g = GeometryParameters(0.5, -100.0, 5000.0, 1.0, 1.0, 5.0, 5.0)
        with pytest.raises(GeometryError):
            simulate(g, amplitude=self.disk)

    def test_high_numerical_aperture_warns(self):
        # screen half-width about 0.698 L
        g = simulation_geometry(self.M, self.N, 0.5, 10.0, 1000.0, 1396.0, 1396.0)
        with pytest.warns(UserWarning, match="numerical aperture"):
            result = simulate(g, amplitude=self.disk)
        assert result.numerical_aperture > 0.57

    def test_verbose(self, capsys):
        simulate(self.geometry, amplitude=self.disk, verbose=True)
        assert "Simulation time" in capsys.readouterr().out
