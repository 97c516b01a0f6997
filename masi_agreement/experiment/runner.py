"""Permutation-test orchestration for MASI-weighted agreement."""

import logging
import math
import time
from concurrent.futures import (
    ProcessPoolExecutor,
    ThreadPoolExecutor,
    TimeoutError as FuturesTimeoutError,
    as_completed,
)
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd
from tqdm.auto import tqdm

from ..constants import (
    ALPHA,
    DEFAULT_CONFIDENCE_LEVEL,
    DEFAULT_SEPARATOR,
    DEFAULT_TRIALS,
    DEFAULT_WORKERS,
    KAPPA,
    Executor,
)
from ..errors import ConfigurationError
from ..metrics.similarity import SimilarityMatrix, build_similarity_matrix
from .coefficients import CoefficientBackend, CoefficientEstimate, IrrCacBackend
from .permutation import reshuffle, trial_generators

logger = logging.getLogger(__name__)

_COEFFICIENT_METHODS = {ALPHA: "compute_alpha", KAPPA: "compute_kappa"}


@dataclass
class TrialFailure:
    """A coefficient that could not be computed on one reshuffled table."""

    trial: int
    coefficient: str
    error: str

    def to_dict(self) -> Dict[str, Any]:
        return {"trial": self.trial, "coefficient": self.coefficient, "error": self.error}


@dataclass
class TrialOutcome:
    trial: int
    values: Dict[str, Optional[float]]
    failures: List[TrialFailure] = field(default_factory=list)


@dataclass
class ExperimentResult:
    """Observed estimates plus the null samples of every finished trial."""

    observed_alpha: CoefficientEstimate
    observed_kappa: CoefficientEstimate
    alpha_null: List[Optional[float]]
    kappa_null: List[Optional[float]]
    requested_trials: int
    completed_trials: int
    failures: List[TrialFailure] = field(default_factory=list)
    budget_exhausted: bool = False
    elapsed_seconds: float = 0.0
    seed: Optional[int] = None

    @property
    def partial(self) -> bool:
        """True if any trial was skipped or any null sample is missing."""
        return self.completed_trials < self.requested_trials or bool(self.failures)

    @property
    def observed(self) -> Dict[str, CoefficientEstimate]:
        return {ALPHA: self.observed_alpha, KAPPA: self.observed_kappa}

    @property
    def null_samples(self) -> Dict[str, List[Optional[float]]]:
        return {ALPHA: self.alpha_null, KAPPA: self.kappa_null}


def run_trial(
    trial: int,
    table: pd.DataFrame,
    matrix: SimilarityMatrix,
    backend: CoefficientBackend,
    confidence_level: float,
    rng: np.random.Generator,
) -> TrialOutcome:
    """
    Reshuffle ``table`` once and compute both coefficients on it.

    Backend errors and undefined (NaN) estimates are recorded as failures
    instead of raised, so one degenerate permutation never ends the run.
    Module-level so process pools can pickle it.
    """
    permuted = reshuffle(table, rng)
    outcome = TrialOutcome(trial=trial, values={})
    for name, method in _COEFFICIENT_METHODS.items():
        try:
            estimate = getattr(backend, method)(
                permuted, matrix.values, matrix.labels, confidence_level
            )
            value = float(estimate.value)
            if math.isnan(value):
                raise ValueError("coefficient is undefined (NaN)")
        except Exception as e:
            outcome.values[name] = None
            outcome.failures.append(
                TrialFailure(trial=trial, coefficient=name, error=f"{type(e).__name__}: {e}")
            )
        else:
            outcome.values[name] = value
    return outcome


class AgreementExperiment:
    """Observed MASI-weighted alpha/kappa and their permutation null samples."""

    def __init__(
        self,
        backend: Optional[CoefficientBackend] = None,
        separator: str = DEFAULT_SEPARATOR,
        confidence_level: float = DEFAULT_CONFIDENCE_LEVEL,
        workers: int = DEFAULT_WORKERS,
        executor: str = Executor.PROCESS.value,
        time_budget: Optional[float] = None,
        show_progress: bool = True,
        jaccard_only: bool = False,
        empty_fallback: Optional[float] = None,
    ):
        if not 0.0 < confidence_level < 1.0:
            raise ConfigurationError(
                f"confidence_level must be in (0, 1), got {confidence_level}"
            )
        if workers < 1:
            raise ConfigurationError(f"workers must be >= 1, got {workers}")
        if time_budget is not None and time_budget <= 0:
            raise ConfigurationError(f"time_budget must be positive, got {time_budget}")
        try:
            self.executor = Executor(executor)
        except ValueError:
            raise ConfigurationError(
                f"Unknown executor '{executor}'; expected one of "
                f"{[e.value for e in Executor]}"
            ) from None

        self.backend = backend if backend is not None else IrrCacBackend()
        # Backends with a narrower accepted range reject it before any trial runs
        validate_level = getattr(self.backend, "validate_confidence_level", None)
        if validate_level is not None:
            validate_level(confidence_level)
        self.separator = separator
        self.confidence_level = confidence_level
        self.workers = workers
        self.time_budget = time_budget
        self.show_progress = show_progress
        self.jaccard_only = jaccard_only
        self.empty_fallback = empty_fallback

    def build_matrix(self, table: pd.DataFrame) -> SimilarityMatrix:
        return build_similarity_matrix(
            table,
            separator=self.separator,
            jaccard_only=self.jaccard_only,
            empty_fallback=self.empty_fallback,
        )

    def _observe(
        self, table: pd.DataFrame, matrix: SimilarityMatrix
    ) -> List[CoefficientEstimate]:
        return [
            getattr(self.backend, method)(
                table, matrix.values, matrix.labels, self.confidence_level
            )
            for method in _COEFFICIENT_METHODS.values()
        ]

    def _budget_left(self, started: float) -> Optional[float]:
        if self.time_budget is None:
            return None
        return self.time_budget - (time.monotonic() - started)

    def _run_sequential(
        self,
        table: pd.DataFrame,
        matrix: SimilarityMatrix,
        generators: List[np.random.Generator],
        started: float,
    ) -> List[TrialOutcome]:
        outcomes = []
        for trial, rng in enumerate(
            tqdm(generators, desc="Permutation trials", disable=not self.show_progress)
        ):
            remaining = self._budget_left(started)
            if remaining is not None and remaining <= 0:
                break
            outcomes.append(
                run_trial(trial, table, matrix, self.backend, self.confidence_level, rng)
            )
        return outcomes

    def _run_pool(
        self,
        table: pd.DataFrame,
        matrix: SimilarityMatrix,
        generators: List[np.random.Generator],
        started: float,
    ) -> List[TrialOutcome]:
        pool_cls = (
            ProcessPoolExecutor if self.executor is Executor.PROCESS else ThreadPoolExecutor
        )
        pool = pool_cls(max_workers=self.workers)
        futures = [
            pool.submit(
                run_trial, trial, table, matrix, self.backend, self.confidence_level, rng
            )
            for trial, rng in enumerate(generators)
        ]
        outcomes = []
        expired = False
        try:
            for future in tqdm(
                as_completed(futures, timeout=self._budget_left(started)),
                desc="Permutation trials",
                total=len(futures),
                disable=not self.show_progress,
            ):
                outcomes.append(future.result())
        except FuturesTimeoutError:
            expired = True
        finally:
            pool.shutdown(wait=not expired, cancel_futures=True)
        return outcomes

    def run(
        self,
        table: pd.DataFrame,
        trials: int = DEFAULT_TRIALS,
        seed: Optional[int] = None,
        matrix: Optional[SimilarityMatrix] = None,
    ) -> ExperimentResult:
        """
        Compute observed coefficients and ``trials`` permutation null samples.

        Args:
            table: Ratings, items as rows and raters as columns
            trials: Number of reshuffled tables to score
            seed: Seed for the per-trial random streams
            matrix: Precomputed weight matrix (built from ``table`` if omitted)

        Returns:
            ExperimentResult; null lists hold one entry per finished trial in
            trial order, None where that coefficient failed.
        """
        if trials < 0:
            raise ConfigurationError(f"trials must be >= 0, got {trials}")

        started = time.monotonic()
        if matrix is None:
            matrix = self.build_matrix(table)
        observed_alpha, observed_kappa = self._observe(table, matrix)

        generators = trial_generators(seed, trials)
        if not generators:
            outcomes = []
        elif self.workers <= 1:
            outcomes = self._run_sequential(table, matrix, generators, started)
        else:
            outcomes = self._run_pool(table, matrix, generators, started)
        outcomes.sort(key=lambda o: o.trial)

        failures = [failure for outcome in outcomes for failure in outcome.failures]
        budget_exhausted = len(outcomes) < trials
        if failures:
            logger.warning(
                "%d coefficient computations failed across %d trials; "
                "recorded as missing null samples",
                len(failures),
                len({f.trial for f in failures}),
            )
        if budget_exhausted:
            logger.warning(
                "Time budget of %.1fs exhausted after %d of %d trials",
                self.time_budget or 0.0,
                len(outcomes),
                trials,
            )

        return ExperimentResult(
            observed_alpha=observed_alpha,
            observed_kappa=observed_kappa,
            alpha_null=[o.values.get(ALPHA) for o in outcomes],
            kappa_null=[o.values.get(KAPPA) for o in outcomes],
            requested_trials=trials,
            completed_trials=len(outcomes),
            failures=failures,
            budget_exhausted=budget_exhausted,
            elapsed_seconds=round(time.monotonic() - started, 3),
            seed=seed,
        )


def run_experiment(
    table: pd.DataFrame,
    trials: int = DEFAULT_TRIALS,
    seed: Optional[int] = None,
    backend: Optional[CoefficientBackend] = None,
    **kwargs: Any,
) -> ExperimentResult:
    """Convenience wrapper: build an AgreementExperiment and run it."""
    experiment = AgreementExperiment(backend=backend, **kwargs)
    return experiment.run(table, trials=trials, seed=seed)
