"""
Exception types raised by the Lenia engine.

Construction and parameter errors are raised synchronously, before any
state is touched. Each type also derives from the builtin that callers
would naturally catch (ValueError, IndexError, FloatingPointError).
"""


class LeniaError(Exception):
    """Base class for all engine errors."""


class InvalidParameter(LeniaError, ValueError):
    """A parameter is out of range (R<=0, T<=0, sigma<=0, empty beta, ...)."""


class DegenerateKernel(LeniaError, ValueError):
    """The ring-weighted kernel sums to zero and cannot be normalized."""


class OutOfBounds(LeniaError, IndexError):
    """A cell or kernel coordinate lies outside the matrix."""


class NonFiniteState(LeniaError, FloatingPointError):
    """A step produced NaN or infinite activations."""
