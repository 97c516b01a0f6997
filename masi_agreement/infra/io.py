"""File I/O helpers for reports, configs and matrices."""

import json
import math
from pathlib import Path
from typing import Any, Dict, Union

import numpy as np
import pandas as pd
import yaml


def load_yaml(path: Union[str, Path]) -> Dict[str, Any]:
    """Load a YAML mapping; an empty file yields an empty dict."""
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_json(path: Union[str, Path]) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def to_jsonable(value: Any) -> Any:
    """
    Convert numpy scalars/arrays and NaN into plain JSON values.

    NaN and infinities become None so reports stay valid JSON.
    """
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    if isinstance(value, np.ndarray):
        return to_jsonable(value.tolist())
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def save_json(
    data: Any,
    path: Union[str, Path],
    indent: int = 2,
    ensure_ascii: bool = False,
) -> Path:
    """Save data as JSON, creating parent directories if needed."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(
            to_jsonable(data), f, indent=indent, ensure_ascii=ensure_ascii, default=str
        )
    return path


def save_frame_csv(frame: pd.DataFrame, path: Union[str, Path]) -> Path:
    """Write a labelled DataFrame (index included) to CSV."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    frame.to_csv(path, encoding="utf-8")
    return path
