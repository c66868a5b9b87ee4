"""
Abstract Base Class for Cellular Automaton Engines

Owns the world grid and the lock that serializes whole-grid updates.
Subclasses build the next world off to the side and publish it with a
single reference swap, so a reader holding `world` never sees a partially
updated grid.
"""

from abc import ABC, abstractmethod
import threading

import numpy as np

from .errors import OutOfBounds


class CAEngine(ABC):
    """Base class for cellular automaton engines."""

    engine_name = ""   # e.g. "lenia"
    engine_label = ""  # e.g. "Lenia"

    def __init__(self, height=512, width=None):
        self.height = int(height)
        self.width = int(height if width is None else width)
        self.world = np.zeros((self.height, self.width), dtype=np.float64)
        self.generation = 0
        # Held for every read-modify-write of world or kernel
        self._lock = threading.RLock()

    @property
    def shape(self):
        return (self.height, self.width)

    @abstractmethod
    def step(self):
        """Advance one time step. Returns the world (display) state."""

    def step_n(self, n):
        """Advance n steps. Returns final state."""
        for _ in range(n):
            self.step()
        return self.world

    @abstractmethod
    def set_params(self, **params):
        """Update engine parameters."""

    @abstractmethod
    def get_params(self):
        """Return dict of current parameter values."""

    @abstractmethod
    def seed(self, seed_type="patchy"):
        """Seed the world based on type string."""

    def get_cell_value(self, row, col):
        """Activation at (row, col) of the last published world."""
        world = self.world
        h, w = world.shape
        if not (0 <= row < h and 0 <= col < w):
            raise OutOfBounds(f"cell ({row}, {col}) outside {h}x{w} world")
        return float(world[row, col])

    def snapshot(self):
        """Copy of the current world, safe to keep across steps."""
        return self.world.copy()

    @property
    def stats(self):
        """Return current world statistics."""
        world = self.world
        return {
            "generation": self.generation,
            "mass": float(world.sum()),
            "mean": float(world.mean()),
            "max": float(world.max()),
            "alive_pct": float((world > 0.01).sum()) / world.size * 100,
        }
