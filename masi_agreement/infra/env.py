"""Environment helpers."""

import os
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from dotenv import load_dotenv

from ..errors import ConfigurationError

_ENV_LOADED = False


def load_env(dotenv_path: Optional[str] = None) -> None:
    """Load MASI_* settings from a .env file, once per process."""
    global _ENV_LOADED
    if not _ENV_LOADED:
        load_dotenv(dotenv_path)
        _ENV_LOADED = True


def read_env_values(
    variables: Mapping[str, Tuple[str, Callable[[str], Any]]],
) -> Dict[str, Any]:
    """
    Parse the set variables of ``{env_name: (field, parser)}``.

    Unset or blank variables are skipped; a value the parser rejects raises
    ConfigurationError naming the variable.
    """
    load_env()
    values: Dict[str, Any] = {}
    for env_name, (field_name, parse) in variables.items():
        raw = os.getenv(env_name)
        if raw is None or raw == "":
            continue
        try:
            values[field_name] = parse(raw)
        except ValueError:
            raise ConfigurationError(f"Invalid value for {env_name}: {raw!r}") from None
    return values
