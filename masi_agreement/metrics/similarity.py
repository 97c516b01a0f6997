"""
Pairwise MASI weight matrix over the distinct responses of a ratings table.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from ..constants import DEFAULT_SEPARATOR, LARGE_LABEL_SPACE_WARNING, Mode
from ..errors import ConfigurationError
from .labels import is_missing, parse_label_set
from .masi import masi

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class SimilarityMatrix:
    """
    Square weight matrix indexed by raw response strings.

    ``labels`` is the sorted index shared by both axes. ``values`` is made
    read-only on construction so the matrix can be shared between trials.
    """

    labels: Tuple[str, ...]
    values: np.ndarray
    mode: Mode = Mode.SIMILARITY

    def __post_init__(self) -> None:
        values = np.array(self.values, dtype=float)
        n = len(self.labels)
        if values.shape != (n, n):
            raise ValueError(
                f"Matrix shape {values.shape} does not match {n} labels"
            )
        values.setflags(write=False)
        object.__setattr__(self, "labels", tuple(self.labels))
        object.__setattr__(self, "values", values)
        object.__setattr__(self, "mode", Mode(self.mode))

    def __len__(self) -> int:
        return len(self.labels)

    def index_of(self, raw: str) -> int:
        try:
            return self.labels.index(raw)
        except ValueError:
            raise KeyError(f"Response {raw!r} is not in the matrix index") from None

    def weight(self, a: str, b: str) -> float:
        return float(self.values[self.index_of(a), self.index_of(b)])

    def is_symmetric(self) -> bool:
        return bool(np.allclose(self.values, self.values.T))

    def to_distance(self) -> "SimilarityMatrix":
        """Return the 1 - similarity matrix (or back again)."""
        flipped = Mode.DISTANCE if self.mode is Mode.SIMILARITY else Mode.SIMILARITY
        return SimilarityMatrix(self.labels, 1.0 - self.values, mode=flipped)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            np.array(self.values), index=list(self.labels), columns=list(self.labels)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode.value,
            "labels": list(self.labels),
            "values": self.values.tolist(),
        }


def collect_responses(table: pd.DataFrame) -> List[str]:
    """Sorted distinct non-missing raw responses across every cell."""
    responses = {
        value for value in np.asarray(table, dtype=object).ravel() if not is_missing(value)
    }
    non_strings = sorted({type(v).__name__ for v in responses if not isinstance(v, str)})
    if non_strings:
        raise TypeError(
            f"Ratings must hold raw response strings, found: {', '.join(non_strings)}"
        )
    return sorted(responses)


def build_similarity_matrix(
    table: pd.DataFrame,
    separator: str = DEFAULT_SEPARATOR,
    jaccard_only: bool = False,
    empty_fallback: Optional[float] = None,
) -> SimilarityMatrix:
    """
    Fill the MASI similarity for every ordered pair of distinct responses.

    Cost is quadratic in the number of distinct raw responses, which is fine
    for closed label vocabularies but not for open-ended ones.

    Raises:
        ConfigurationError: if the table has no non-missing response.
    """
    labels = collect_responses(table)
    if not labels:
        raise ConfigurationError(
            "Ratings table contains no non-missing responses; nothing to weight"
        )
    if len(labels) > LARGE_LABEL_SPACE_WARNING:
        logger.warning(
            "Building a %dx%d similarity matrix; this grows quadratically with "
            "the number of distinct responses",
            len(labels),
            len(labels),
        )

    parsed = [parse_label_set(raw, separator) for raw in labels]
    n = len(labels)
    values = np.empty((n, n), dtype=float)
    for i in range(n):
        for j in range(i, n):
            weight = masi(
                parsed[i],
                parsed[j],
                mode=Mode.SIMILARITY,
                jaccard_only=jaccard_only,
                empty_fallback=empty_fallback,
            )
            values[i, j] = weight
            values[j, i] = weight

    logger.debug("Built similarity matrix over %d distinct responses", n)
    return SimilarityMatrix(tuple(labels), values)
