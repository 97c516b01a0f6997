"""MASI-weighted inter-rater agreement with permutation tests."""

__version__ = "0.1.0"
