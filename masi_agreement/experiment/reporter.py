"""
Reports for permutation agreement experiments.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from ..constants import ALPHA, KAPPA
from ..infra.io import save_json
from ..metrics.similarity import SimilarityMatrix
from .runner import ExperimentResult

INTERPRETATION_SCALE = {
    "< 0.00": "Poor (less than chance)",
    "0.00 - 0.20": "Slight agreement",
    "0.21 - 0.40": "Fair agreement",
    "0.41 - 0.60": "Moderate agreement",
    "0.61 - 0.80": "Substantial agreement",
    "0.81 - 1.00": "Almost perfect agreement",
}

_DISPLAY_NAMES = {ALPHA: "Krippendorff's alpha", KAPPA: "Fleiss' kappa"}


def _valid(null_samples: Sequence[Optional[float]]) -> np.ndarray:
    return np.array([v for v in null_samples if v is not None], dtype=float)


def empirical_p_value(
    observed: float, null_samples: Sequence[Optional[float]]
) -> Optional[float]:
    """Fraction of (non-missing) null samples at least as large as ``observed``."""
    values = _valid(null_samples)
    if values.size == 0:
        return None
    return round(float(np.mean(values >= observed)), 6)


def summarize_null(null_samples: Sequence[Optional[float]]) -> Dict[str, Any]:
    """Descriptive statistics of a null distribution."""
    values = _valid(null_samples)
    summary: Dict[str, Any] = {
        "n": int(values.size),
        "n_missing": len(null_samples) - int(values.size),
    }
    if values.size == 0:
        return summary
    summary.update(
        {
            "mean": round(float(values.mean()), 6),
            "std": round(float(values.std(ddof=1)), 6) if values.size > 1 else 0.0,
            "min": round(float(values.min()), 6),
            "max": round(float(values.max()), 6),
            "q025": round(float(np.percentile(values, 2.5)), 6),
            "q975": round(float(np.percentile(values, 97.5)), 6),
        }
    )
    return summary


def interpret_coefficient(value: float) -> str:
    """Landis-Koch reading of an agreement coefficient."""
    if value < 0:
        return "Poor"
    elif value < 0.21:
        return "Slight"
    elif value < 0.41:
        return "Fair"
    elif value < 0.61:
        return "Moderate"
    elif value < 0.81:
        return "Substantial"
    else:
        return "Almost Perfect"


def build_experiment_report(
    result: ExperimentResult,
    matrix: Optional[SimilarityMatrix] = None,
    include_null_samples: bool = True,
    metadata: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Assemble a JSON-ready report from an experiment result."""
    coefficients = {}
    for name, estimate in result.observed.items():
        nulls = result.null_samples[name]
        entry = {
            "observed": estimate.to_dict(),
            "interpretation": interpret_coefficient(estimate.value),
            "p_value": empirical_p_value(estimate.value, nulls),
            "null_summary": summarize_null(nulls),
        }
        if include_null_samples:
            entry["null_samples"] = list(nulls)
        coefficients[name] = entry

    failures: List[Dict[str, Any]] = [f.to_dict() for f in result.failures]
    report = {
        "created_at": datetime.now(timezone.utc).isoformat(),
        "metadata": dict(metadata or {}),
        "trials": {
            "requested": result.requested_trials,
            "completed": result.completed_trials,
            "failed_computations": len(failures),
            "budget_exhausted": result.budget_exhausted,
            "partial": result.partial,
            "seed": result.seed,
            "elapsed_seconds": result.elapsed_seconds,
        },
        "coefficients": coefficients,
        "failures": failures,
        "interpretation": {"scale": INTERPRETATION_SCALE},
    }
    if matrix is not None:
        report["similarity_matrix"] = matrix.to_dict()
    return report


def save_experiment_report(report: Dict[str, Any], output_path: Path) -> Path:
    path = save_json(report, output_path)
    print(f"Agreement report saved to: {path}")
    return path


def print_experiment_summary(report: Dict[str, Any]) -> None:
    """Print a formatted summary of the experiment report."""
    trials = report["trials"]

    print("\n" + "=" * 70)
    print("MASI-WEIGHTED AGREEMENT (PERMUTATION TEST)")
    print("=" * 70)

    matrix = report.get("similarity_matrix")
    if matrix:
        print(f"\nDistinct responses: {len(matrix['labels'])}")
    print(f"Trials: {trials['completed']}/{trials['requested']} completed")
    if trials["partial"]:
        print(
            f"  Partial result: {trials['failed_computations']} failed computations, "
            f"budget exhausted={trials['budget_exhausted']}"
        )

    for name, entry in report["coefficients"].items():
        observed = entry["observed"]
        print(f"\n--- {_DISPLAY_NAMES.get(name, name)} ---")
        line = f"  observed = {observed['value']:.3f} ({entry['interpretation']})"
        if observed["ci_lower"] is not None and observed["ci_upper"] is not None:
            line += (
                f", {observed['confidence_level']:.0%} CI "
                f"[{observed['ci_lower']:.3f}, {observed['ci_upper']:.3f}]"
            )
        print(line)

        summary = entry["null_summary"]
        if summary["n"]:
            print(
                f"  null: mean={summary['mean']:.3f}, sd={summary['std']:.3f}, "
                f"95% range [{summary['q025']:.3f}, {summary['q975']:.3f}] "
                f"(n={summary['n']})"
            )
        if entry["p_value"] is not None:
            print(f"  empirical p = {entry['p_value']:.4f}")

    print("\n--- Interpretation Guide ---")
    for range_str, meaning in report["interpretation"]["scale"].items():
        print(f"  {range_str}: {meaning}")

    print("=" * 70)
