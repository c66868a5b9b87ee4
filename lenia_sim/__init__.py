"""
Lenia continuous cellular automaton engine.

Contains:
- kernel    : radial field, ring profiles, kernel + spectrum construction
- spectral  : FFT pair, complex multiply, circular shift
- spatial   : direct neighbourhood convolution
- potential : spectral/spatial strategy selection
- growth    : Gaussian growth mapping
- lenia     : the engine (state, step, reinitialize, parameters)
- presets   : named parameter sets
- driver    : background tick thread
"""

from .errors import (
    LeniaError, InvalidParameter, DegenerateKernel, OutOfBounds, NonFiniteState,
)
from .lenia import Lenia, create_simulation
from .driver import SimulationDriver

__all__ = [
    "Lenia", "create_simulation", "SimulationDriver",
    "LeniaError", "InvalidParameter", "DegenerateKernel", "OutOfBounds",
    "NonFiniteState",
]
