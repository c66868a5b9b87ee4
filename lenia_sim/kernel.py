"""
Kernel construction - radial field, ring profiles, normalization, spectrum

The Lenia kernel is a stack of concentric rings. The distance from the
centre is scaled into a "ring index" v = dist * dx * len(beta), so ring k
covers v in [k, k+1) and is weighted by beta[k]. Inside each ring a smooth
core profile of frac(v) gives a bump that vanishes at both ring edges.

Reference: Bert Chan, "Lenia - Biology of Artificial Life" (2019), 2.2.1
"""

import numpy as np

from .errors import DegenerateKernel
from .spectral import circular_shift, forward

CORE_ALPHA = 4.0


def radial_field(R):
    """Distance-from-centre matrix of side 2R+1: entry (R+i, R+j) = sqrt(i^2 + j^2)."""
    y, x = np.ogrid[-R:R+1, -R:R+1]
    return np.sqrt(x * x + y * y, dtype=np.float64)


def kernel_core_exp(r, a=CORE_ALPHA):
    """Exponential bump exp(a - a / (4r(1-r))), zero outside the open interval (0, 1)."""
    r = np.asarray(r, dtype=np.float64)
    inside = (r > 0) & (r < 1)
    # Evaluate on a safe copy so the singular edges never reach the division
    rr = np.where(inside, r, 0.5)
    return np.where(inside, np.exp(a - a / (4 * rr * (1 - rr))), 0.0)


def kernel_core_poly(r, a=CORE_ALPHA):
    """Polynomial bump (4r(1-r))^a."""
    r = np.clip(np.asarray(r, dtype=np.float64), 0.0, 1.0)
    return (4 * r * (1 - r)) ** a


KERNEL_CORES = {
    "exp": kernel_core_exp,
    "poly": kernel_core_poly,
}


def resolve_core(core):
    """Accept a core name from KERNEL_CORES or any callable r -> profile."""
    if callable(core):
        return core
    try:
        return KERNEL_CORES[core]
    except KeyError:
        raise ValueError(f"Unknown kernel core: {core!r}. "
                         f"Available: {list(KERNEL_CORES)}") from None


def build_kernel(R, dx, beta, core=kernel_core_exp):
    """Build the normalized (2R+1) x (2R+1) ring kernel.

    Args:
        R: Kernel radius in cells (positive integer)
        dx: Cell size in kernel units, normally 1/R
        beta: Sequence of non-negative ring weights (one ring per entry)
        core: Radial profile applied to the fractional ring index

    Returns:
        Kernel matrix whose entries sum to 1

    Raises:
        DegenerateKernel: if the ring-weighted sum is zero
    """
    core = resolve_core(core)
    beta = np.asarray(beta, dtype=np.float64)
    n_rings = len(beta)

    v = radial_field(int(R)) * (dx * n_rings)
    ring = np.floor(v).astype(np.int64)
    inside = ring < n_rings

    K = np.zeros_like(v)
    K[inside] = beta[ring[inside]] * core(v[inside] - ring[inside])

    total = K.sum()
    if not np.isfinite(total) or total <= 0:
        raise DegenerateKernel(
            f"kernel weights sum to {total} for R={R}, beta={list(beta)}; "
            f"cannot normalize")
    return K / total


def derive_spectrum(K, height, width, workers=1):
    """Frequency-domain kernel for a height x width grid.

    The kernel is zero-padded into the grid's top-left corner, then rolled
    by -R on both axes so its centre sits at (0, 0) for circular convolution.
    """
    kh, kw = K.shape
    if kh > height or kw > width:
        raise ValueError(f"kernel {K.shape} does not fit grid {(height, width)}")
    R = (kh - 1) // 2
    padded = np.zeros((height, width), dtype=np.float64)
    padded[:kh, :kw] = K
    return forward(circular_shift(padded, -R, -R), workers=workers)
