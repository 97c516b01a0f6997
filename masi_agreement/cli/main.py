#!/usr/bin/env python3
"""Consolidated CLI for masi-agreement with subcommands."""

import argparse
import importlib
import sys
from typing import Callable, Dict, Tuple


_COMMANDS: Dict[str, Tuple[str, str]] = {
    "run": ("masi_agreement.cli.run_experiment", "main"),
    "matrix": ("masi_agreement.cli.similarity_matrix", "main"),
}


def _load_handler(command: str) -> Callable[[], None]:
    module_name, func_name = _COMMANDS[command]
    module = importlib.import_module(module_name)
    return getattr(module, func_name)


def _dispatch(command: str, args: list) -> None:
    handler = _load_handler(command)
    sys.argv = [f"masi-agreement {command}"] + args
    handler()


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="masi-agreement",
        description="MASI-weighted inter-rater agreement with permutation tests",
    )
    parser.add_argument("command", choices=sorted(_COMMANDS.keys()))
    parser.add_argument("args", nargs=argparse.REMAINDER)

    args = parser.parse_args()
    _dispatch(args.command, args.args)


if __name__ == "__main__":
    main()
