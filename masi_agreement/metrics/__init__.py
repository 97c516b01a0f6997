"""Set-valued label metrics subpackage."""

from .labels import is_missing, parse_label_set
from .masi import SetRelation, classify_relation, jaccard, masi, masi_distance
from .similarity import SimilarityMatrix, build_similarity_matrix, collect_responses

__all__ = [
    "is_missing",
    "parse_label_set",
    "SetRelation",
    "classify_relation",
    "jaccard",
    "masi",
    "masi_distance",
    "SimilarityMatrix",
    "build_similarity_matrix",
    "collect_responses",
]
