"""
Parsing of raw multi-label responses into label sets.
"""

from typing import Any, FrozenSet

import pandas as pd

from ..constants import DEFAULT_SEPARATOR
from ..errors import MissingResponseError


def is_missing(value: Any) -> bool:
    """True for None and NaN-like cells (what pandas treats as missing)."""
    if isinstance(value, str):
        return False
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        # Array-likes are never a single missing cell
        return False


def parse_label_set(raw: Any, separator: str = DEFAULT_SEPARATOR) -> FrozenSet[str]:
    """
    Split a raw response into its set of label tokens.

    Tokens are not stripped, so the separator must match the data exactly
    (``"l1, l2"`` needs ``", "``). An empty string yields the empty set.

    Raises:
        MissingResponseError: if ``raw`` is a missing marker; missing cells
            must be filtered out before parsing.
        TypeError: if ``raw`` is not a string.
    """
    if is_missing(raw):
        raise MissingResponseError(
            "Cannot parse a missing response into a label set; filter missing cells first"
        )
    if not isinstance(raw, str):
        raise TypeError(f"Expected a raw response string, got {type(raw).__name__}")
    if not separator:
        raise ValueError("Label separator must be a non-empty string")
    if raw == "":
        return frozenset()
    return frozenset(raw.split(separator))
