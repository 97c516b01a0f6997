"""
MASI (Measuring Agreement on Set-valued Items) similarity and distance.

MASI scales the Jaccard similarity of two label sets by a monotonicity
coefficient that rewards identical sets over subsets, subsets over partial
overlaps, and gives disjoint sets nothing.
"""

from enum import Enum
from typing import AbstractSet, Optional, Union

from ..constants import Mode
from ..errors import DomainError


class SetRelation(Enum):
    """How two label sets relate, in priority order."""

    IDENTICAL = "identical"
    SUBSET = "subset"
    OVERLAP = "overlap"
    DISJOINT = "disjoint"


_MONOTONICITY = {
    SetRelation.IDENTICAL: 1.0,
    SetRelation.SUBSET: 2.0 / 3.0,
    SetRelation.OVERLAP: 1.0 / 3.0,
    SetRelation.DISJOINT: 0.0,
}


def classify_relation(only_x: int, only_y: int, shared: int) -> SetRelation:
    """
    Classify two sets from their cardinalities.

    Args:
        only_x: |x - y|
        only_y: |y - x|
        shared: |x & y|
    """
    if only_x == 0 and only_y == 0:
        return SetRelation.IDENTICAL
    if only_x == 0 or only_y == 0:
        return SetRelation.SUBSET
    if shared != 0:
        return SetRelation.OVERLAP
    return SetRelation.DISJOINT


def monotonicity(relation: SetRelation) -> float:
    return _MONOTONICITY[relation]


def jaccard(x: AbstractSet[str], y: AbstractSet[str]) -> float:
    """Intersection over union; undefined (DomainError) for two empty sets."""
    shared = len(x & y)
    union = len(x) + len(y) - shared
    if union == 0:
        raise DomainError("Jaccard similarity is undefined for two empty label sets")
    return shared / union


def masi(
    x: AbstractSet[str],
    y: AbstractSet[str],
    mode: Union[Mode, str] = Mode.SIMILARITY,
    jaccard_only: bool = False,
    empty_fallback: Optional[float] = None,
) -> float:
    """
    MASI similarity (or distance) between two label sets.

    Args:
        x, y: Label sets
        mode: "similarity" or "distance" (1 - similarity)
        jaccard_only: Skip the monotonicity coefficient
        empty_fallback: Similarity to use when both sets are empty

    Returns:
        Value in [0, 1]

    Raises:
        ValueError: ``empty_fallback`` outside [0, 1].
        DomainError: both sets empty, ``jaccard_only`` set and no
            ``empty_fallback`` given.
    """
    mode = Mode(mode)
    if empty_fallback is not None and not 0.0 <= empty_fallback <= 1.0:
        raise ValueError(f"empty_fallback must be in [0, 1], got {empty_fallback}")
    x = frozenset(x)
    y = frozenset(y)

    if not x and not y:
        if empty_fallback is not None:
            similarity = float(empty_fallback)
        elif jaccard_only:
            raise DomainError(
                "Jaccard similarity of two empty label sets is undefined; "
                "pass empty_fallback to define it"
            )
        else:
            # Identical sets: M = 1 stands in for the 0/0 ratio
            similarity = 1.0
    else:
        relation = classify_relation(len(x - y), len(y - x), len(x & y))
        similarity = jaccard(x, y)
        if not jaccard_only:
            similarity *= monotonicity(relation)

    if mode is Mode.DISTANCE:
        return 1.0 - similarity
    return similarity


def masi_distance(x: AbstractSet[str], y: AbstractSet[str]) -> float:
    return masi(x, y, mode=Mode.DISTANCE)
