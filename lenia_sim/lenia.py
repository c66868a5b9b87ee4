"""
Lenia - Continuous Cellular Automaton Engine

A continuous generalization of Conway's Game of Life where:
- States are continuous [0, 1] instead of binary
- Neighborhoods use smooth ring kernels instead of discrete counts
- Growth/decay is governed by a Gaussian growth function
- Time steps are fractional (dt = 1/T) for smooth evolution

Each step:
    U     = K * A                      (potential, spectral or spatial)
    A'    = clip(A + dt * G(U), 0, 1)  (G = Gaussian growth around mu)

The kernel is a stack of concentric rings weighted by beta; changing R or
beta marks it dirty and it is rebuilt, under the engine lock, before the
next step uses it.

Reference: Bert Chan, "Lenia - Biology of Artificial Life" (2019)
"""

import math
import numbers

import numpy as np

from .engine_base import CAEngine
from .errors import InvalidParameter, OutOfBounds, NonFiniteState
from .growth import growth
from .kernel import build_kernel, derive_spectrum, resolve_core
from .potential import (
    STRATEGIES, DEFAULT_SPATIAL_MAX_RADIUS, compute_potential, select_strategy,
)
from .presets import get_preset, scale_radius
from .spatial import BOUNDARIES


# ---------------------------------------------------------------------------
# Initial states
# ---------------------------------------------------------------------------

def _half_extent(rng, dim):
    """Random patch half-size: ~4-10% of the axis, never more than half of it."""
    cap = dim // 2
    lo = min(max(1, dim // 25), cap)
    hi = min(max(lo + 1, dim // 10), cap + 1)
    return int(rng.integers(lo, hi))


def seed_patchy(rng, height, width):
    """Random rectangles of uniform noise on an empty world.

    Patch count grows with the width (about width/50 to width/30); every
    patch lies fully inside the grid.
    """
    world = np.zeros((height, width), dtype=np.float64)
    lo = max(1, width // 50)
    hi = max(lo + 1, width // 30)
    for _ in range(int(rng.integers(lo, hi))):
        hy = _half_extent(rng, height)
        hx = _half_extent(rng, width)
        cy = int(rng.integers(hy, height - hy + 1))
        cx = int(rng.integers(hx, width - hx + 1))
        world[cy - hy:cy + hy, cx - hx:cx + hx] = rng.random((2 * hy, 2 * hx))
    return world


def seed_full(rng, height, width):
    """Every cell uniform in [0, 1)."""
    return rng.random((height, width))


SEED_MODES = {
    "patchy": seed_patchy,
    "full": seed_full,
}


# ---------------------------------------------------------------------------
# Parameter validation
# ---------------------------------------------------------------------------

def _real(name, value):
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidParameter(f"{name} must be a real number, got {value!r}")
    return float(value)


def _check_dimension(name, value):
    size = _real(name, value)
    if not math.isfinite(size) or size <= 0 or not size.is_integer():
        raise InvalidParameter(f"grid {name} must be a positive integer, got {value!r}")
    return int(size)


def _check_R(value):
    R = _real("R", value)
    if not math.isfinite(R) or R <= 0 or not R.is_integer():
        raise InvalidParameter(f"R must be a positive integer, got {value!r}")
    return int(R)


def _check_T(value):
    T = _real("T", value)
    # T = inf is allowed and freezes the world (dt = 0)
    if math.isnan(T) or T <= 0:
        raise InvalidParameter(f"T must be > 0, got {value!r}")
    return T


def _check_mu(value):
    mu = _real("mu", value)
    if not 0.0 <= mu <= 1.0:
        raise InvalidParameter(f"mu must be in [0, 1], got {value!r}")
    return mu


def _check_sigma(value):
    sigma = _real("sigma", value)
    if not math.isfinite(sigma) or sigma <= 0:
        raise InvalidParameter(f"sigma must be finite and > 0, got {value!r}")
    return sigma


def _check_beta(value):
    if isinstance(value, (str, bytes)):
        raise InvalidParameter(f"beta must be a sequence of numbers, got {value!r}")
    try:
        beta = tuple(_real("beta", b) for b in value)
    except TypeError:
        raise InvalidParameter(f"beta must be a sequence of numbers, got {value!r}") from None
    if not beta:
        raise InvalidParameter("beta must have at least one ring weight")
    for b in beta:
        if not math.isfinite(b) or b < 0:
            raise InvalidParameter(f"beta weights must be finite and >= 0, got {list(beta)}")
    return beta


_VALIDATORS = {
    "R": _check_R,
    "T": _check_T,
    "mu": _check_mu,
    "sigma": _check_sigma,
    "beta": _check_beta,
}

# Accept the usual spellings (R/r, Mu/mu, Beta/beta, ...)
_PARAM_ALIASES = {k.lower(): k for k in _VALIDATORS}


def _canonical(name):
    try:
        return _PARAM_ALIASES[str(name).lower()]
    except KeyError:
        raise InvalidParameter(f"Unknown parameter: {name!r}. "
                               f"Settable: {list(_VALIDATORS)}") from None


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class Lenia(CAEngine):

    engine_name = "lenia"
    engine_label = "Lenia"

    def __init__(self, height=512, width=None, R=13, T=10, mu=0.15, sigma=0.015,
                 beta=None, core="exp", strategy="auto",
                 spatial_max_radius=DEFAULT_SPATIAL_MAX_RADIUS, boundary="wrap",
                 workers=1, seed=None, init="patchy"):
        """
        Args:
            height, width: Grid dimensions (width defaults to height)
            R: Kernel radius in cells
            T: Time resolution (dt = 1/T, higher = smoother/slower)
            mu: Growth function center (neighborhood density that promotes growth)
            sigma: Growth function width (tolerance around mu)
            beta: Ring weights, one concentric kernel ring per entry
            core: Ring profile, "exp", "poly" or a callable r -> value
            strategy: Potential path, "auto", "spectral" or "spatial"
            spatial_max_radius: Largest R that "auto" sends to the spatial path
            boundary: Spatial-path boundary, "wrap" or "zero"
            workers: Threads used by the FFTs and the complex multiply
            seed: RNG seed for reproducible initial states
            init: Initial state mode ("patchy", "full") or None for empty
        """
        height = _check_dimension("height", height)
        width = height if width is None else _check_dimension("width", width)
        super().__init__(height, width)

        self.R = _check_R(R)
        self.T = _check_T(T)
        self.mu = _check_mu(mu)
        self.sigma = _check_sigma(sigma)
        self.beta = _check_beta([1.0] if beta is None else beta)
        self._check_fits(self.R)

        try:
            self.core = resolve_core(core)
        except ValueError as e:
            raise InvalidParameter(str(e)) from None
        if strategy not in STRATEGIES:
            raise InvalidParameter(f"Unknown potential strategy: {strategy!r}. "
                                   f"Available: {list(STRATEGIES)}")
        if boundary not in BOUNDARIES:
            raise InvalidParameter(f"Unknown boundary: {boundary!r}. "
                                   f"Available: {list(BOUNDARIES)}")
        self.strategy = strategy
        self.spatial_max_radius = int(spatial_max_radius)
        self.boundary = boundary
        self.workers = max(1, int(workers))

        self.rng = np.random.default_rng(seed)
        self.kernel = None
        self.kernel_fft = None
        self._kernel_dirty = True
        self.rebuild_kernel()

        if init is not None:
            self.reinitialize(init)

    @classmethod
    def from_preset(cls, key, height=512, width=None, **overrides):
        """Create an engine from a named preset, R scaled to the grid size."""
        preset = get_preset(key)
        if preset is None:
            raise InvalidParameter(f"Unknown preset: {key!r}")
        size = min(height, height if width is None else width)
        kwargs = {
            "R": scale_radius(preset["R"], size),
            "T": preset["T"],
            "mu": preset["mu"],
            "sigma": preset["sigma"],
            "beta": preset["beta"],
            "init": preset.get("seed", "patchy"),
        }
        kwargs.update(overrides)
        return cls(height, width, **kwargs)

    # -- derived parameters ------------------------------------------------

    @property
    def dx(self):
        return 1.0 / self.R

    @property
    def dt(self):
        return 1.0 / self.T

    @property
    def kernel_side(self):
        return 2 * self.R + 1

    def _check_fits(self, R):
        if 2 * R + 1 > min(self.height, self.width):
            raise InvalidParameter(
                f"kernel side {2 * R + 1} (R={R}) exceeds grid {self.height}x{self.width}")

    # -- kernel ------------------------------------------------------------

    def rebuild_kernel(self):
        """Recompute kernel and its spectrum from the current R and beta."""
        with self._lock:
            K = build_kernel(self.R, self.dx, self.beta, self.core)
            K_fft = derive_spectrum(K, self.height, self.width, workers=self.workers)
            self.kernel = K
            self.kernel_fft = K_fft
            self._kernel_dirty = False

    @property
    def kernel_dirty(self):
        return self._kernel_dirty

    def get_kernel_value(self, row, col):
        """Kernel weight at (row, col), valid for 0 <= row, col < 2R+1 of the current R."""
        with self._lock:
            if self._kernel_dirty:
                self.rebuild_kernel()
            K = self.kernel
        side = K.shape[0]
        if not (0 <= row < side and 0 <= col < side):
            raise OutOfBounds(f"kernel cell ({row}, {col}) outside {side}x{side} kernel")
        return float(K[row, col])

    # -- stepping ----------------------------------------------------------

    def potential(self, strategy=None):
        """Potential of the current world (default: the engine's strategy)."""
        with self._lock:
            if self._kernel_dirty:
                self.rebuild_kernel()
            return compute_potential(
                self.world, self.kernel, self.kernel_fft,
                strategy=strategy or self.strategy, boundary=self.boundary,
                workers=self.workers, spatial_max_radius=self.spatial_max_radius)

    @property
    def active_strategy(self):
        """Concrete path ("spectral"/"spatial") the next step will use."""
        return select_strategy(self.strategy, self.R, self.spatial_max_radius)

    def step(self):
        """Advance one time step. Returns the world state."""
        with self._lock:
            # mu/sigma/T may change concurrently; use one consistent snapshot
            mu, sigma, dt = self.mu, self.sigma, self.dt

            U = self.potential()
            updated = self.world + dt * growth(U, mu, sigma)
            if not np.isfinite(updated).all():
                raise NonFiniteState(
                    f"non-finite activations at generation {self.generation} "
                    f"(mu={mu}, sigma={sigma}, dt={dt})")
            np.clip(updated, 0.0, 1.0, out=updated)

            self.world = updated
            self.generation += 1
            return updated

    # -- parameters --------------------------------------------------------

    def set_parameter(self, name, value):
        """Validate and set one of R, T, mu, sigma, beta.

        R and beta changes are checked against a trial kernel first, so a
        degenerate ring configuration is rejected without touching state.
        """
        key = _canonical(name)
        if value is None:
            raise InvalidParameter(f"{key} cannot be None")
        self.set_params(**{key: value})

    def set_params(self, mu=None, sigma=None, T=None, R=None, beta=None, **_kw):
        """Update parameters. Marks the kernel dirty if R or beta changes.

        All values are validated before any of them is applied. Unknown keys
        (preset metadata such as "name" or "seed") are ignored.
        """
        updates = {}
        for key, value in (("mu", mu), ("sigma", sigma), ("T", T), ("R", R), ("beta", beta)):
            if value is not None:
                updates[key] = _VALIDATORS[key](value)

        structural = {k: v for k, v in updates.items() if k in ("R", "beta")}
        # Trial kernel and apply under one lock hold, so concurrent R and beta
        # writes are each checked against the other's committed value
        with self._lock:
            if structural:
                new_R = structural.get("R", self.R)
                new_beta = structural.get("beta", self.beta)
                self._check_fits(new_R)
                # Raises DegenerateKernel before anything is applied
                build_kernel(new_R, 1.0 / new_R, new_beta, self.core)

            for key, value in updates.items():
                setattr(self, key, value)
            if structural:
                self._kernel_dirty = True

    def get_params(self):
        return {
            "R": self.R,
            "T": self.T,
            "mu": self.mu,
            "sigma": self.sigma,
            "beta": list(self.beta),
        }

    # -- initial state -----------------------------------------------------

    def reinitialize(self, mode="patchy"):
        """Replace the world with a fresh initial state.

        Waits for any in-flight step (the engine lock) before swapping, so a
        step computed from the old world can never overwrite the new one.
        Kernel and parameters are untouched.
        """
        try:
            make = SEED_MODES[mode]
        except KeyError:
            raise InvalidParameter(f"Unknown initial state mode: {mode!r}. "
                                   f"Available: {list(SEED_MODES)}") from None
        with self._lock:
            self.world = make(self.rng, self.height, self.width)
            self.generation = 0
        return self.world

    def seed(self, seed_type="patchy"):
        """Seed the world based on type string."""
        return self.reinitialize(seed_type)


def create_simulation(height, width, R, T, mu, sigma, beta, **options):
    """Build a Lenia engine; raises InvalidParameter for invalid parameters."""
    return Lenia(height, width, R=R, T=T, mu=mu, sigma=sigma, beta=beta, **options)
