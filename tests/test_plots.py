import matplotlib
import numpy as np

matplotlib.use("Agg")

import matplotlib.pyplot as plt
from matplotlib.figure import Figure

from dlhm.geometry import GeometryParameters
from dlhm.plots import plot_reconstruction, plot_sweep
from dlhm.reconstruction import reconstruct


class TestPlots:

    def setup_method(self):
        rng = np.random.default_rng(9)
        self.hologram = rng.random((32, 32)).astype(np.float32) - 0.5

    def teardown_method(self):
        plt.close("all")

    def test_plot_reconstruction(self):
        geometry = GeometryParameters.automatic(0.5, 1000.0, 5000.0, 5.0, 5.0)
        result = reconstruct(self.hologram, geometry)

        fig = plot_reconstruction(self.hologram, result.field, z=1000.0, title="test")

        assert isinstance(fig, Figure)
        # four images and their colorbars
        assert len(fig.axes) == 8

    def test_plot_reconstruction_zero_hologram(self):
        field = np.zeros((32, 64), dtype=np.float32)
        fig = plot_reconstruction(np.zeros((32, 32)), field)
        assert isinstance(fig, Figure)

    def test_plot_sweep(self):
        stack = np.stack([np.full((8, 8), 1.0), np.eye(8) * 10, np.eye(8)])

        best, fig = plot_sweep(stack, [1.0, 2.0, 3.0], labels=["a", "b", "c"])

        assert best == 1
        assert isinstance(fig, Figure)
