"""
matplotlib overview figures for reconstructions and z sweeps.
"""
import matplotlib.pyplot as plt
import numpy as np

from . import array_ops
from .batch import best_focus


def plot_reconstruction(hologram: np.ndarray, field: np.ndarray, z: float = None,
                        title: str = None):
    """
    2 x 2 overview: contrast hologram, intensity, log intensity and phase.

    Parameters:
    -----------
    hologram : 2D array - contrast hologram
    field : (M, 2N) array - reconstructed field
    z : float - reconstruction distance shown in the titles

    Returns:
    --------
    matplotlib Figure
    """
    intensity = array_ops.modulus_squared(field)
    phase = array_ops.phase(field)

    fig, axes = plt.subplots(2, 2, figsize=(12, 10))
    if title:
        fig.suptitle(title, fontsize=14, fontweight='bold')

    limit = float(np.max(np.abs(hologram))) or 1.0
    im0 = axes[0, 0].imshow(hologram, cmap='RdBu', vmin=-limit, vmax=limit)
    axes[0, 0].set_title('Contrast Hologram')
    axes[0, 0].axis('off')
    fig.colorbar(im0, ax=axes[0, 0], fraction=0.046)

    label = 'Reconstructed Intensity' if z is None else f'Reconstructed Intensity at z={z:g}'
    im1 = axes[0, 1].imshow(intensity, cmap='hot')
    axes[0, 1].set_title(label)
    axes[0, 1].axis('off')
    fig.colorbar(im1, ax=axes[0, 1], fraction=0.046)

    im2 = axes[1, 0].imshow(np.log10(intensity + 1e-10), cmap='hot')
    axes[1, 0].set_title('Intensity (log scale)')
    axes[1, 0].axis('off')
    fig.colorbar(im2, ax=axes[1, 0], fraction=0.046)

    im3 = axes[1, 1].imshow(phase, cmap='twilight', vmin=-np.pi, vmax=np.pi)
    axes[1, 1].set_title('Reconstructed Phase')
    axes[1, 1].axis('off')
    fig.colorbar(im3, ax=axes[1, 1], fraction=0.046)

    fig.tight_layout()
    return fig


def plot_sweep(stack: np.ndarray, z_values, labels=None):
    """
    Best-focus plane of a sweep next to its focus curve (variance vs z).

    Returns:
    --------
    (best plane index, matplotlib Figure)
    """
    z_values = list(z_values)
    variances = [np.var(plane) for plane in stack]
    best = best_focus(stack)

    fig, (ax0, ax1) = plt.subplots(1, 2, figsize=(14, 6))

    label = labels[best] if labels else f"z = {z_values[best]:g}"
    im = ax0.imshow(stack[best], cmap='viridis')
    ax0.set_title(f'Best Focus\n({label})', fontsize=12, fontweight='bold')
    ax0.set_xlabel('Y (pixels)')
    ax0.set_ylabel('X (pixels)')
    fig.colorbar(im, ax=ax0, fraction=0.046, pad=0.04)

    ax1.plot(z_values, variances, 'bo-', linewidth=2, markersize=6)
    ax1.plot(z_values[best], variances[best], 'ro', markersize=10, label='Best Focus')
    ax1.set_xlabel('Reconstruction Distance')
    ax1.set_ylabel('Variance (Focus Quality)')
    ax1.set_title('Focus Quality vs Distance')
    ax1.legend()
    ax1.grid(True, alpha=0.3)

    fig.tight_layout()
    return best, fig
