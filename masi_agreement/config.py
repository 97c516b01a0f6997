"""
Configuration management for agreement experiments.
"""

from dataclasses import dataclass, fields
from typing import Any, Dict, List, Optional

from .constants import (
    DEFAULT_CONFIDENCE_LEVEL,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_SEPARATOR,
    DEFAULT_TRIALS,
    DEFAULT_WORKERS,
    Executor,
)
from .errors import ConfigurationError
from .infra.env import read_env_values
from .infra.io import load_yaml

# Environment variable -> (field, parser)
_ENV_FIELDS = {
    "MASI_SEPARATOR": ("separator", str),
    "MASI_TRIALS": ("trials", int),
    "MASI_CONFIDENCE_LEVEL": ("confidence_level", float),
    "MASI_SEED": ("seed", int),
    "MASI_WORKERS": ("workers", int),
    "MASI_EXECUTOR": ("executor", str),
    "MASI_TIME_BUDGET": ("time_budget", float),
    "MASI_OUTPUT_DIR": ("output_dir", str),
}


@dataclass
class ExperimentConfig:
    """Settings for one permutation agreement experiment."""

    # Parsing
    separator: str = DEFAULT_SEPARATOR

    # Permutation test
    trials: int = DEFAULT_TRIALS
    confidence_level: float = DEFAULT_CONFIDENCE_LEVEL
    seed: Optional[int] = None

    # Execution
    workers: int = DEFAULT_WORKERS
    executor: str = Executor.PROCESS.value
    time_budget: Optional[float] = None

    # Similarity matrix
    jaccard_only: bool = False
    empty_fallback: Optional[float] = None

    # Paths
    output_dir: str = DEFAULT_OUTPUT_DIR

    @classmethod
    def from_yaml(cls, path: str) -> "ExperimentConfig":
        """
        Load configuration from a YAML file.

        Expected layout::

            experiment:
              trials: 500
              seed: 42
            matrix:
              separator: ", "
              jaccard_only: false
            output_dir: outputs
        """
        raw = load_yaml(path)
        values: Dict[str, Any] = {}
        values.update(raw.get("experiment") or {})
        values.update(raw.get("matrix") or {})
        if "output_dir" in raw:
            values["output_dir"] = raw["output_dir"]

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown config keys in {path}: {', '.join(unknown)}"
            )

        config = cls(**values)
        config._validate()
        return config

    @classmethod
    def from_env(cls) -> "ExperimentConfig":
        """Load configuration from MASI_* environment variables (and .env)."""
        config = cls(**read_env_values(_ENV_FIELDS))
        config._validate()
        return config

    def override(self, **overrides: Any) -> "ExperimentConfig":
        """Return a copy with every non-None override applied."""
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values.update({k: v for k, v in overrides.items() if v is not None})
        config = ExperimentConfig(**values)
        config._validate()
        return config

    def _validate(self) -> None:
        """Validate configuration values."""
        problems: List[str] = []
        if not isinstance(self.separator, str) or not self.separator:
            problems.append("separator must be a non-empty string")
        if self.trials < 0:
            problems.append(f"trials must be >= 0 (got {self.trials})")
        if not 0.0 < self.confidence_level < 1.0:
            problems.append(
                f"confidence_level must be in (0, 1) (got {self.confidence_level})"
            )
        if self.workers < 1:
            problems.append(f"workers must be >= 1 (got {self.workers})")
        if self.executor not in {e.value for e in Executor}:
            problems.append(f"executor must be 'process' or 'thread' (got {self.executor!r})")
        if self.time_budget is not None and self.time_budget <= 0:
            problems.append(f"time_budget must be positive (got {self.time_budget})")
        if self.empty_fallback is not None and not 0.0 <= self.empty_fallback <= 1.0:
            problems.append(
                f"empty_fallback must be in [0, 1] (got {self.empty_fallback})"
            )

        if problems:
            raise ConfigurationError("Invalid configuration: " + "; ".join(problems))

    def experiment_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for AgreementExperiment."""
        return {
            "separator": self.separator,
            "confidence_level": self.confidence_level,
            "workers": self.workers,
            "executor": self.executor,
            "time_budget": self.time_budget,
            "jaccard_only": self.jaccard_only,
            "empty_fallback": self.empty_fallback,
        }
