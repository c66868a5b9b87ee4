"""
Lenia Parameter Presets

Each preset defines a kernel (R, beta rings) and growth (mu, sigma, T)
known to produce interesting behaviors, plus the initial state mode
("seed") it is usually started from. Radii are tuned for a 512 grid;
scale_radius() adapts them to other resolutions.
"""

from .errors import InvalidParameter

BASE_RES = 512  # Presets are tuned for this resolution

PRESETS = {
    "triple_ring": {
        "name": "Triple Ring",
        "description": "Three-ring kernel with wide, slowly drifting colonies",
        "R": 80, "T": 40, "mu": 0.23, "sigma": 0.024,
        "beta": [1.0, 0.6, 0.3],
        "seed": "patchy",
    },
    "orbium": {
        "name": "Orbium",
        "description": "Single-ring glider, the classic Lenia creature",
        "R": 13, "T": 10, "mu": 0.15, "sigma": 0.015,
        "beta": [1.0],
        "seed": "patchy",
    },
    "geminium": {
        "name": "Hydrogeminium",
        "description": "Three-ring kernel producing self-replicating cells",
        "R": 18, "T": 10, "mu": 0.26, "sigma": 0.036,
        "beta": [0.5, 1.0, 0.667],
        "seed": "patchy",
    },
    "froth": {
        "name": "Froth",
        "description": "Dense two-ring soup from a fully random world",
        "R": 10, "T": 10, "mu": 0.23, "sigma": 0.024,
        "beta": [1.0, 0.6],
        "seed": "full",
    },
}

PRESET_ORDER = ["triple_ring", "orbium", "geminium", "froth"]


def get_preset(name):
    """Get a preset by name. Returns None if not found."""
    return PRESETS.get(name)


def list_presets():
    """Return list of (key, name, description) for presets."""
    return [(k, PRESETS[k]["name"], PRESETS[k]["description"])
            for k in PRESET_ORDER if k in PRESETS]


def scale_radius(R, size, base_res=BASE_RES):
    """Scale a preset radius to a grid of `size` cells, keeping the kernel inside it."""
    scaled = max(1, int(round(R * size / base_res)))
    return min(scaled, max(1, (size - 1) // 2))


def parse_beta(text):
    """Parse "1,0.6,0.3" into ring weights.

    Entries that are not numbers are skipped; an empty result is an error.
    """
    beta = []
    for value in str(text).split(","):
        try:
            beta.append(float(value))
        except ValueError:
            continue
    if not beta:
        raise InvalidParameter(f"no ring weights in beta string {text!r}")
    return beta
