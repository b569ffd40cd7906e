import numpy as np
import pytest

from dlhm.contrast import ContrastMode
from dlhm.exceptions import InvalidDimensionError, InvalidOptionError
from dlhm.geometry import GeometryParameters
from dlhm.reconstruction import OUTPUTS, OutputOptions, reconstruct


class TestOutputOptions:

    def test_defaults(self):
        options = OutputOptions()
        assert options.selected == ("phase", "amplitude")
        assert options.log == ()
        assert options.byte == ()

    def test_lists_become_tuples(self):
        options = OutputOptions(["intensity"], ["intensity"], ["intensity"])
        assert options.selected == ("intensity",)
        assert hash(options)

    def test_unknown_output(self):
        with pytest.raises(InvalidOptionError):
            OutputOptions(selected=("phase", "hue"))

    def test_log_phase(self):
        with pytest.raises(InvalidOptionError):
            OutputOptions(selected=("phase",), log=("phase",))


class TestReconstruct:

    M = 64
    N = 64

    def setup_method(self):
        self.geometry = GeometryParameters.automatic(0.5, 1000.0, 5000.0, 5.0, 5.0)

        rng = np.random.default_rng(11)
        self.reference = (100 + rng.random((self.M, self.N))).astype(np.float32)
        self.hologram = (self.reference + 10 * rng.random((self.M, self.N))).astype(np.float32)

    def test_default_outputs(self):
        result = reconstruct(self.hologram, self.geometry)

        assert set(result.outputs) == {"phase", "amplitude"}
        for image in result.outputs.values():
            assert image.shape == (self.M, self.N)
            assert np.all(np.isfinite(image))

        phase = result.outputs["phase"]
        assert np.all(phase > -np.float32(np.pi)) and np.all(phase <= np.float32(np.pi))
        assert result.field.shape == (self.M, 2 * self.N)
        assert result.interpolated.shape == (self.M, 2 * self.N)

    def test_all_outputs(self):
        result = reconstruct(self.hologram, self.geometry,
                             options=OutputOptions(selected=OUTPUTS))

        assert tuple(result.outputs) == OUTPUTS
        np.testing.assert_allclose(result.outputs["intensity"],
                                   result.outputs["amplitude"] ** 2, rtol=1e-4, atol=1e-12)

    @pytest.mark.parametrize("contrast", list(ContrastMode))
    def test_contrast_modes(self, contrast):
        result = reconstruct(self.hologram, self.geometry, contrast=contrast, zone_size=16)
        assert np.all(np.isfinite(result.field))

    def test_zero_hologram(self):
        result = reconstruct(np.zeros((self.M, self.N), np.float32), self.geometry,
                             contrast=ContrastMode.NONE)
        np.testing.assert_array_equal(result.outputs["amplitude"], 0.0)

    def test_reuse_interpolated_field(self):
        first = reconstruct(self.hologram, self.geometry)
        second = reconstruct(self.hologram, self.geometry, field=first.interpolated)

        assert second.interpolated is first.interpolated
        np.testing.assert_array_equal(second.field, first.field)

    def test_interpolated_field_is_not_modified(self):
        first = reconstruct(self.hologram, self.geometry)
        cached = first.interpolated.copy()

        reconstruct(self.hologram, self.geometry, field=first.interpolated)

        np.testing.assert_array_equal(first.interpolated, cached)

    def test_reuse_wrong_shape(self):
        with pytest.raises(InvalidDimensionError):
            reconstruct(self.hologram, self.geometry,
                        field=np.zeros((self.M, self.N), np.float32))

    def test_reference(self):
        result = reconstruct(self.hologram, self.geometry, reference=self.reference,
                             options=OutputOptions(selected=("phase", "intensity")))

        assert result.outputs["phase"].shape == (self.M, self.N)
        assert result.outputs["intensity"].shape == (self.M, self.N)

    def test_reference_contrast(self):
        result = reconstruct(self.hologram, self.geometry, reference=self.reference,
                             options=OutputOptions(selected=("amplitude",)))
        expected = reconstruct(self.hologram - self.reference, self.geometry,
                               contrast=ContrastMode.NONE,
                               options=OutputOptions(selected=("amplitude",)))

        np.testing.assert_allclose(result.outputs["amplitude"],
                                   expected.outputs["amplitude"], rtol=1e-5, atol=1e-12)

    def test_reference_shape_mismatch(self):
        with pytest.raises(InvalidDimensionError):
            reconstruct(self.hologram, self.geometry, reference=self.reference[:, :32])

    def test_log_and_byte(self):
        options = OutputOptions(selected=("amplitude", "intensity"),
                                log=("intensity",), byte=("amplitude",))
        result = reconstruct(self.hologram, self.geometry, options=options)

        assert result.outputs["amplitude"].dtype == np.uint8
        assert result.outputs["intensity"].dtype == np.float32

    def test_border_filter(self):
        result = reconstruct(self.hologram, self.geometry, border=0.1)
        assert np.all(np.isfinite(result.field))

    def test_verbose(self, capsys):
        reconstruct(self.hologram, self.geometry, verbose=True)
        out = capsys.readouterr().out

        assert "Step 1" in out
        assert "Reconstruction time" in out
