#!/usr/bin/env python
"""
Run the MASI-weighted agreement permutation test on a ratings file.
"""

import argparse
import logging
from pathlib import Path
from typing import Optional

from ..config import ExperimentConfig
from ..constants import (
    DEFAULT_ITEM_COLUMN,
    DEFAULT_RATINGS_PATH,
    DEFAULT_REPORT_NAME,
    Executor,
)
from ..data import load_ratings
from ..experiment.reporter import (
    build_experiment_report,
    print_experiment_summary,
    save_experiment_report,
)
from ..experiment.runner import AgreementExperiment


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Krippendorff's alpha and Fleiss' kappa with MASI weights, "
        "plus permutation null distributions"
    )
    parser.add_argument(
        "--ratings",
        type=Path,
        default=Path(DEFAULT_RATINGS_PATH),
        help="CSV/TSV/JSON ratings file (rows = items, columns = raters)",
    )
    parser.add_argument(
        "--item_column",
        default=DEFAULT_ITEM_COLUMN,
        help=f"Column holding item ids (default: {DEFAULT_ITEM_COLUMN})",
    )
    parser.add_argument(
        "--no_item_column",
        action="store_const",
        const=None,
        dest="item_column",
        help="Treat every column as a rater",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="YAML config (default: MASI_* environment variables)",
    )
    parser.add_argument("--separator", default=None, help="Label separator, e.g. ', '")
    parser.add_argument("--trials", type=int, default=None, help="Permutation trials")
    parser.add_argument(
        "--confidence_level",
        type=float,
        default=None,
        help="Confidence level of the reported intervals (0.90-0.99 with irrCAC)",
    )
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--workers", type=int, default=None)
    parser.add_argument(
        "--executor", choices=[e.value for e in Executor], default=None
    )
    parser.add_argument(
        "--time_budget",
        type=float,
        default=None,
        help="Seconds after which remaining trials are abandoned",
    )
    parser.add_argument(
        "--jaccard_only",
        action="store_true",
        default=None,
        help="Weight by plain Jaccard similarity instead of MASI",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Report path (default: <output_dir>/agreement_report.json)",
    )
    parser.add_argument(
        "--no_null_samples",
        action="store_false",
        dest="include_null_samples",
        help="Omit raw null samples from the report",
    )
    parser.add_argument(
        "--no_progress",
        action="store_false",
        dest="show_progress",
        help="Disable the progress bar",
    )
    return parser


def resolve_config(args: argparse.Namespace) -> ExperimentConfig:
    base = (
        ExperimentConfig.from_yaml(args.config)
        if args.config
        else ExperimentConfig.from_env()
    )
    return base.override(
        separator=args.separator,
        trials=args.trials,
        confidence_level=args.confidence_level,
        seed=args.seed,
        workers=args.workers,
        executor=args.executor,
        time_budget=args.time_budget,
        jaccard_only=args.jaccard_only,
    )


def main(argv: Optional[list] = None) -> dict:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    config = resolve_config(args)
    output = args.output or Path(config.output_dir) / DEFAULT_REPORT_NAME

    table = load_ratings(args.ratings, item_column=args.item_column)
    print(f"Loaded ratings: {table.shape[0]} items x {table.shape[1]} raters")

    experiment = AgreementExperiment(
        show_progress=args.show_progress, **config.experiment_kwargs()
    )
    matrix = experiment.build_matrix(table)
    result = experiment.run(table, trials=config.trials, seed=config.seed, matrix=matrix)

    report = build_experiment_report(
        result,
        matrix=matrix,
        include_null_samples=args.include_null_samples,
        metadata={"ratings": str(args.ratings), "separator": config.separator},
    )
    save_experiment_report(report, output)
    print_experiment_summary(report)

    # Return report for programmatic use
    return report


if __name__ == "__main__":
    main()
