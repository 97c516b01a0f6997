"""Infrastructure utilities subpackage."""

from .env import load_env, read_env_values
from .io import load_json, load_yaml, save_frame_csv, save_json, to_jsonable

__all__ = [
    "load_env",
    "load_json",
    "load_yaml",
    "read_env_values",
    "save_frame_csv",
    "save_json",
    "to_jsonable",
]
