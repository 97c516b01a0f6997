"""
Whole-table reshuffling for permutation (null distribution) tests.
"""

from typing import List, Optional

import numpy as np
import pandas as pd


def reshuffle(
    table: pd.DataFrame, rng: Optional[np.random.Generator] = None
) -> pd.DataFrame:
    """
    Redistribute every cell value uniformly at random over the whole table.

    Cells are flattened row-major (missing markers included), permuted
    without replacement and folded back into the original shape. Index and
    columns are kept, so the multiset of values is unchanged while the
    item/rater association is destroyed.
    """
    rng = rng if rng is not None else np.random.default_rng()
    values = table.to_numpy(dtype=object)
    shuffled = rng.permutation(values.ravel()).reshape(values.shape)
    return pd.DataFrame(shuffled, index=table.index.copy(), columns=table.columns.copy())


def trial_generators(seed: Optional[int], trials: int) -> List[np.random.Generator]:
    """One independent generator per trial, reproducible from ``seed``."""
    children = np.random.SeedSequence(seed).spawn(trials)
    return [np.random.default_rng(child) for child in children]
