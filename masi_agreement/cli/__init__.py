"""CLI entry points for masi-agreement."""

__all__ = [
    "main",
    "run_experiment",
    "similarity_matrix",
]
