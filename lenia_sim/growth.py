"""Gaussian growth mapping: potential -> growth rate in (-1, 1]."""

import numpy as np


def bell(x, center, width):
    """Gaussian bell curve"""
    return np.exp(-0.5 * ((x - center) / width) ** 2)


def growth(U, mu, sigma):
    """g(u) = 2 * exp(-(u - mu)^2 / (2 sigma^2)) - 1, peak 1 at u == mu."""
    return 2.0 * bell(U, mu, sigma) - 1.0
