"""
Agreement coefficient backends.

The experiment only needs something that turns (ratings, weights, labels,
confidence level) into an estimate; ``IrrCacBackend`` does so with the
``irrCAC`` package, which supports custom weight matrices for both
Krippendorff's alpha and Fleiss' kappa.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol, Sequence, Tuple

import numpy as np
import pandas as pd
from irrCAC.raw import CAC

from ..constants import ALPHA, KAPPA
from ..errors import ConfigurationError
from ..metrics.labels import is_missing

# irrCAC rejects confidence levels outside this closed range
IRRCAC_CONFIDENCE_RANGE = (0.90, 0.99)


@dataclass(frozen=True)
class CoefficientEstimate:
    """A coefficient value with its confidence interval."""

    name: str
    value: float
    interval: Tuple[Optional[float], Optional[float]] = (None, None)
    confidence_level: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "value": self.value,
            "ci_lower": self.interval[0],
            "ci_upper": self.interval[1],
            "confidence_level": self.confidence_level,
        }


class CoefficientBackend(Protocol):
    def compute_alpha(
        self,
        ratings: pd.DataFrame,
        weights: np.ndarray,
        labels: Sequence[str],
        confidence_level: float,
    ) -> CoefficientEstimate: ...

    def compute_kappa(
        self,
        ratings: pd.DataFrame,
        weights: np.ndarray,
        labels: Sequence[str],
        confidence_level: float,
    ) -> CoefficientEstimate: ...


def check_labels(ratings: pd.DataFrame, labels: Sequence[str]) -> None:
    """Raise ValueError if a non-missing rating is absent from ``labels``."""
    known = set(labels)
    unknown = sorted(
        {
            str(value)
            for value in np.asarray(ratings, dtype=object).ravel()
            if not is_missing(value) and value not in known
        }
    )
    if unknown:
        raise ValueError(f"Ratings contain values missing from the weight labels: {unknown}")


def _parse_interval(raw: Any) -> Tuple[Optional[float], Optional[float]]:
    try:
        lower, upper = raw
        return float(lower), float(upper)
    except (TypeError, ValueError):
        return None, None


class IrrCacBackend:
    """Krippendorff's alpha and Fleiss' kappa via ``irrCAC.raw.CAC``."""

    def __init__(self, digits: int = 5):
        self.digits = digits

    @staticmethod
    def validate_confidence_level(confidence_level: float) -> None:
        """Raise ConfigurationError outside the range irrCAC accepts."""
        lower, upper = IRRCAC_CONFIDENCE_RANGE
        if not lower <= confidence_level <= upper:
            raise ConfigurationError(
                f"confidence_level must be in [{lower:.2f}, {upper:.2f}] "
                f"for the irrCAC backend (got {confidence_level})"
            )

    def _cac(
        self,
        ratings: pd.DataFrame,
        weights: np.ndarray,
        labels: Sequence[str],
        confidence_level: float,
    ):
        self.validate_confidence_level(confidence_level)
        check_labels(ratings, labels)
        # irrCAC expects items as rows and raters as columns, NaN for missing
        frame = ratings.astype(object).where(~ratings.isna(), np.nan)
        return CAC(
            frame,
            weights=np.asarray(weights, dtype=float),
            categories=list(labels),
            confidence_level=confidence_level,
            digits=self.digits,
        )

    @staticmethod
    def _to_estimate(
        name: str, result: Dict[str, Any], confidence_level: float
    ) -> CoefficientEstimate:
        est = result["est"]
        return CoefficientEstimate(
            name=name,
            value=float(est["coefficient_value"]),
            interval=_parse_interval(est.get("confidence_interval")),
            confidence_level=confidence_level,
        )

    def compute_alpha(
        self,
        ratings: pd.DataFrame,
        weights: np.ndarray,
        labels: Sequence[str],
        confidence_level: float,
    ) -> CoefficientEstimate:
        cac = self._cac(ratings, weights, labels, confidence_level)
        return self._to_estimate(ALPHA, cac.krippendorff(), confidence_level)

    def compute_kappa(
        self,
        ratings: pd.DataFrame,
        weights: np.ndarray,
        labels: Sequence[str],
        confidence_level: float,
    ) -> CoefficientEstimate:
        cac = self._cac(ratings, weights, labels, confidence_level)
        return self._to_estimate(KAPPA, cac.fleiss(), confidence_level)
