"""
Spectral Transform - FFT plumbing for frequency-domain convolution

Convolution in the spatial domain is an elementwise product in the
frequency domain, so the potential of a whole grid costs two 2-D FFTs
and one complex multiply instead of N * side^2 multiply-adds.

Transforms use scipy.fft with the default "backward" normalization:
forward is unscaled and inverse divides by H*W, so inverse(forward(x))
reproduces x. Both accept a `workers` count for multithreaded transforms.
"""

from concurrent.futures import ThreadPoolExecutor

import numpy as np
import scipy.fft

# Below this many rows per band, threading costs more than it saves
_MIN_BAND_ROWS = 16


def forward(m, workers=1):
    """2-D discrete Fourier transform of a real matrix."""
    return scipy.fft.fft2(np.asarray(m, dtype=np.float64), workers=workers)


def inverse(z, workers=1):
    """Inverse 2-D discrete Fourier transform. Returns a complex matrix."""
    return scipy.fft.ifft2(z, workers=workers)


def complex_multiply(a, b, workers=1):
    """Elementwise complex product C[i,j] = A[i,j] * B[i,j].

    With workers > 1 the rows are split into contiguous bands and each band
    is multiplied on its own thread (numpy releases the GIL for the ufunc).
    Every cell is independent, so the result is identical to the serial path.
    """
    a = np.asarray(a)
    b = np.asarray(b)
    if a.shape != b.shape:
        raise ValueError(f"shape mismatch: {a.shape} vs {b.shape}")

    out = np.empty(a.shape, dtype=np.result_type(a, b, np.complex128))
    rows = a.shape[0]
    n_bands = min(max(1, int(workers)), max(1, rows // _MIN_BAND_ROWS))
    if n_bands == 1:
        np.multiply(a, b, out=out)
        return out

    bounds = np.linspace(0, rows, n_bands + 1).astype(int)

    def _band(k):
        lo, hi = bounds[k], bounds[k + 1]
        np.multiply(a[lo:hi], b[lo:hi], out=out[lo:hi])

    with ThreadPoolExecutor(max_workers=n_bands) as pool:
        # list() re-raises any exception from a band
        list(pool.map(_band, range(n_bands)))
    return out


def real_part(z):
    """Discard imaginary components (numerical noise after a real convolution)."""
    return np.ascontiguousarray(np.real(z), dtype=np.float64)


def circular_shift(m, dy, dx):
    """Move entry (i, j) to ((i + dy) mod H, (j + dx) mod W)."""
    return np.roll(np.roll(m, dy, axis=0), dx, axis=1)
