"""
Packaging for the Lenia engine.

The wheel ships only the `lenia_sim` package; the test modules at the
repository root are not installed.
"""

from setuptools import setup, find_packages


setup(
    name="lenia-sim",
    version="0.1.0",
    description="Lenia continuous cellular automaton engine (spectral and spatial convolution)",
    packages=find_packages(include=["lenia_sim", "lenia_sim.*"]),
    python_requires=">=3.9",
    install_requires=[
        "numpy>=1.20",
        "scipy>=1.4",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    entry_points={
        "console_scripts": [
            "lenia-sim=lenia_sim.__main__:main",
        ],
    },
)
