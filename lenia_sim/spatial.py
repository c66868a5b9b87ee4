"""
Direct spatial convolution

Sums each cell's side x side neighbourhood weighted by the kernel. Cost is
O(N * side^2), so this path only pays off for small kernels; it also serves
as the independent cross-check for the spectral path.

Boundaries:
    wrap - periodic (torus), identical topology to the FFT path
    zero - zero padding; matches the FFT path only away from the edges
"""

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

BOUNDARIES = {
    "wrap": "wrap",
    "zero": "constant",
}


def pad_grid(grid, p, boundary="wrap"):
    """Pad a grid by p cells on every side."""
    try:
        mode = BOUNDARIES[boundary]
    except KeyError:
        raise ValueError(f"Unknown boundary: {boundary!r}. "
                         f"Available: {list(BOUNDARIES)}") from None
    return np.pad(grid, p, mode=mode)


def convolve(grid, K, boundary="wrap"):
    """Potential of every cell via direct neighbourhood sums.

    The kernel is radially symmetric, so correlation and convolution agree
    and no flip is needed.
    """
    grid = np.asarray(grid, dtype=np.float64)
    side = K.shape[0]
    p = (side - 1) // 2
    padded = pad_grid(grid, p, boundary)
    # (H, W, side, side) view, no copy
    windows = sliding_window_view(padded, K.shape)
    return np.einsum("ijkl,kl->ij", windows, K)
