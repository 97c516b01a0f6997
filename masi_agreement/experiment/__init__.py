"""Permutation experiment subpackage."""

from .coefficients import CoefficientBackend, CoefficientEstimate, IrrCacBackend
from .permutation import reshuffle, trial_generators
from .runner import AgreementExperiment, ExperimentResult, TrialFailure, run_experiment
from .reporter import build_experiment_report, empirical_p_value, print_experiment_summary

__all__ = [
    "CoefficientBackend",
    "CoefficientEstimate",
    "IrrCacBackend",
    "reshuffle",
    "trial_generators",
    "AgreementExperiment",
    "ExperimentResult",
    "TrialFailure",
    "run_experiment",
    "build_experiment_report",
    "empirical_p_value",
    "print_experiment_summary",
]
