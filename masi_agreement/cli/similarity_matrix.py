#!/usr/bin/env python
"""Print or export the MASI weight matrix of a ratings file."""

import argparse
from pathlib import Path
from typing import Optional

import pandas as pd

from ..constants import DEFAULT_ITEM_COLUMN, DEFAULT_RATINGS_PATH, DEFAULT_SEPARATOR
from ..data import load_ratings
from ..infra.io import save_frame_csv
from ..metrics.similarity import build_similarity_matrix


def main(argv: Optional[list] = None) -> pd.DataFrame:
    parser = argparse.ArgumentParser(description="Pairwise MASI weights between responses")
    parser.add_argument("--ratings", type=Path, default=Path(DEFAULT_RATINGS_PATH))
    parser.add_argument("--item_column", default=DEFAULT_ITEM_COLUMN)
    parser.add_argument(
        "--no_item_column",
        action="store_const",
        const=None,
        dest="item_column",
        help="Treat every column as a rater",
    )
    parser.add_argument("--separator", default=DEFAULT_SEPARATOR)
    parser.add_argument("--distance", action="store_true", help="Report 1 - similarity")
    parser.add_argument("--jaccard_only", action="store_true")
    parser.add_argument(
        "--empty_fallback",
        type=float,
        default=None,
        help="Similarity of two empty label sets under --jaccard_only",
    )
    parser.add_argument("--output", type=Path, default=None, help="Write matrix as CSV")
    args = parser.parse_args(argv)

    table = load_ratings(args.ratings, item_column=args.item_column)
    matrix = build_similarity_matrix(
        table,
        separator=args.separator,
        jaccard_only=args.jaccard_only,
        empty_fallback=args.empty_fallback,
    )
    if args.distance:
        matrix = matrix.to_distance()

    frame = matrix.to_frame()
    with pd.option_context("display.width", 160, "display.max_columns", None):
        print(frame.round(4))

    if args.output:
        path = save_frame_csv(frame, args.output)
        print(f"\nMatrix saved to: {path}")

    return frame


if __name__ == "__main__":
    main()
