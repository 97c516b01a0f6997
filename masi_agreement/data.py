"""
Loading ratings tables (items as rows, raters as columns).
"""

from pathlib import Path
from typing import Any, Optional, Union

import pandas as pd

from .infra.io import load_json
from .metrics.labels import is_missing


def _normalize_cell(value: Any) -> Any:
    if is_missing(value):
        return None
    return value if isinstance(value, str) else str(value)


def as_ratings_table(data: Any, item_column: Optional[str] = None) -> pd.DataFrame:
    """
    Build a ratings table from in-memory data.

    Accepted formats:
    - DataFrame (copied)
    - List of rows, each a list of responses or a {rater: response} dict
    - Dict of {rater: [responses]}

    Missing cells become None; other non-string cells are stringified.
    """
    if isinstance(data, pd.DataFrame):
        table = data.copy()
    elif isinstance(data, dict):
        table = pd.DataFrame(dict(data))
    elif isinstance(data, list):
        if data and all(isinstance(row, dict) for row in data):
            table = pd.DataFrame.from_records(data)
        else:
            table = pd.DataFrame(data)
            table.columns = [f"rater_{i + 1}" for i in range(table.shape[1])]
    else:
        raise ValueError(
            "Ratings must be a DataFrame, a list of rows or a dict of rater columns."
        )

    if item_column is not None:
        if item_column not in table.columns:
            raise ValueError(f"Item column '{item_column}' not found in ratings")
        table = table.set_index(item_column)

    table = table.astype(object).apply(lambda col: col.map(_normalize_cell))
    return table


def load_ratings(
    path: Union[str, Path], item_column: Optional[str] = None
) -> pd.DataFrame:
    """
    Load a ratings table from CSV or JSON.

    CSV cells are read verbatim as strings and only blank cells count as
    missing, so responses such as "NA" survive as labels. JSON may hold a
    list of row records or a {rater: [responses]} mapping.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Ratings file not found: {path}")

    suffix = path.suffix.lower()
    if suffix in {".csv", ".tsv"}:
        frame = pd.read_csv(
            path,
            sep="\t" if suffix == ".tsv" else ",",
            dtype=str,
            keep_default_na=False,
            na_values=[""],
        )
        return as_ratings_table(frame, item_column=item_column)
    if suffix == ".json":
        return as_ratings_table(load_json(path), item_column=item_column)
    raise ValueError(f"Unsupported ratings format '{path.suffix}' (use .csv, .tsv or .json)")
