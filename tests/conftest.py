import math
import threading
import time
from pathlib import Path

import pytest

from masi_agreement.data import as_ratings_table, load_ratings
from masi_agreement.experiment.coefficients import CoefficientEstimate
from masi_agreement.metrics.labels import is_missing

SAMPLE_RATINGS = Path(__file__).resolve().parents[1] / "data" / "sample_ratings.csv"


def unanimity(ratings) -> float:
    """Share of items whose (2+) non-missing responses are all identical."""
    rows = ratings.to_numpy(dtype=object).tolist()
    agreeing = 0
    for row in rows:
        present = [v for v in row if not is_missing(v)]
        if len(present) >= 2 and len(set(present)) == 1:
            agreeing += 1
    return agreeing / len(rows)


class FakeBackend:
    """Deterministic stand-in for the coefficient library that records calls."""

    def __init__(self, delay=0.0, fail_kappa_every=None, nan_alpha_every=None):
        self.delay = delay
        self.fail_kappa_every = fail_kappa_every
        self.nan_alpha_every = nan_alpha_every
        self.calls = []
        self._lock = threading.Lock()

    def _record(self, name, ratings, weights, labels, confidence_level):
        with self._lock:
            self.calls.append((name, ratings, weights, tuple(labels), confidence_level))
            return sum(1 for call in self.calls if call[0] == name)

    def compute_alpha(self, ratings, weights, labels, confidence_level):
        n = self._record("alpha", ratings, weights, labels, confidence_level)
        if self.delay and n > 1:
            time.sleep(self.delay)
        value = unanimity(ratings)
        if self.nan_alpha_every and n > 1 and (n - 1) % self.nan_alpha_every == 0:
            value = math.nan
        return CoefficientEstimate("krippendorff_alpha", value, (value - 0.1, value + 0.1), confidence_level)

    def compute_kappa(self, ratings, weights, labels, confidence_level):
        n = self._record("kappa", ratings, weights, labels, confidence_level)
        if self.delay and n > 1:
            time.sleep(self.delay)
        if self.fail_kappa_every and n > 1 and (n - 1) % self.fail_kappa_every == 0:
            raise ValueError("fewer than 2 raters on every item")
        value = unanimity(ratings) - 0.05
        return CoefficientEstimate("fleiss_kappa", value, (value - 0.1, value + 0.1), confidence_level)

    def count(self, name):
        return sum(1 for call in self.calls if call[0] == name)


@pytest.fixture
def fake_backend():
    return FakeBackend()


@pytest.fixture
def sample_path():
    return SAMPLE_RATINGS


@pytest.fixture
def sample_table():
    return load_ratings(SAMPLE_RATINGS, item_column="item")


@pytest.fixture
def small_table():
    return as_ratings_table(
        [
            ["a, b", "a", "a, b"],
            ["b", "b", None],
            ["a", "b, c", "c"],
            [None, "a, b", "a, b"],
        ]
    )


@pytest.fixture
def make_backend():
    return FakeBackend
