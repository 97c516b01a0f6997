"""
Shared constants used across the codebase.
"""

from enum import Enum


class Mode(str, Enum):
    """Whether MASI values are reported as similarity or distance."""

    SIMILARITY = "similarity"
    DISTANCE = "distance"


class Executor(str, Enum):
    """Worker pool flavours for permutation trials."""

    PROCESS = "process"
    THREAD = "thread"


# Raw responses look like "l1, l2"
DEFAULT_SEPARATOR = ", "

# Permutation test
DEFAULT_TRIALS = 500
DEFAULT_CONFIDENCE_LEVEL = 0.95
DEFAULT_WORKERS = 1

# Distinct responses above this make the quadratic matrix build slow
LARGE_LABEL_SPACE_WARNING = 200

# Default paths
DEFAULT_RATINGS_PATH = "./data/sample_ratings.csv"
DEFAULT_ITEM_COLUMN = "item"
DEFAULT_OUTPUT_DIR = "./outputs"
DEFAULT_REPORT_NAME = "agreement_report.json"

# Coefficient names used in results and reports
ALPHA = "krippendorff_alpha"
KAPPA = "fleiss_kappa"
