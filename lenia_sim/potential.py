"""
Potential computation strategies

Two interchangeable ways to convolve the world with the kernel:

    spectral - FFT product with the precomputed kernel spectrum, O(N log N)
    spatial  - direct neighbourhood sums, O(N * side^2)

"auto" picks spatial for kernels up to `spatial_max_radius` and spectral
otherwise. With the default wrap boundary both give the same result to
floating-point tolerance.
"""

from . import spatial
from .spectral import complex_multiply, forward, inverse, real_part

STRATEGIES = ("auto", "spectral", "spatial")

DEFAULT_SPATIAL_MAX_RADIUS = 3


def spectral_potential(grid, spectrum, workers=1):
    """U = Re(IFFT(K_hat * FFT(grid)))"""
    world_fft = forward(grid, workers=workers)
    return real_part(inverse(complex_multiply(spectrum, world_fft, workers=workers),
                             workers=workers))


def spatial_potential(grid, K, boundary="wrap"):
    return spatial.convolve(grid, K, boundary=boundary)


def select_strategy(strategy, R, spatial_max_radius=DEFAULT_SPATIAL_MAX_RADIUS):
    """Resolve "auto" to a concrete strategy for a kernel of radius R."""
    if strategy not in STRATEGIES:
        raise ValueError(f"Unknown potential strategy: {strategy!r}. "
                         f"Available: {list(STRATEGIES)}")
    if strategy == "auto":
        return "spatial" if R <= spatial_max_radius else "spectral"
    return strategy


def compute_potential(grid, K, spectrum, strategy="spectral", boundary="wrap",
                      workers=1, spatial_max_radius=DEFAULT_SPATIAL_MAX_RADIUS):
    """Convolve grid with kernel K using the chosen strategy.

    Args:
        grid: (H, W) world
        K: (2R+1, 2R+1) normalized kernel
        spectrum: FFT of K embedded at the grid origin (see kernel.derive_spectrum)
        strategy: "auto", "spectral" or "spatial"
        boundary: Spatial-path boundary, "wrap" or "zero"
        workers: Threads for the FFTs and the complex multiply
        spatial_max_radius: Largest R handled by the spatial path under "auto"

    Returns:
        (H, W) potential matrix
    """
    R = (K.shape[0] - 1) // 2
    chosen = select_strategy(strategy, R, spatial_max_radius)
    if chosen == "spatial":
        return spatial_potential(grid, K, boundary=boundary)
    return spectral_potential(grid, spectrum, workers=workers)
