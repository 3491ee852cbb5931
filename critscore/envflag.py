"""Fill command-line flags from environment variables.

A mapping relates environment variable names to flag names. Flags given on
the command line take precedence over the environment.
"""

from __future__ import annotations

import argparse
import os
from typing import Any, Mapping, Optional, Sequence

_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE = {"0", "f", "F", "FALSE", "false", "False"}


def _find_action(parser: argparse.ArgumentParser, flag: str) -> Optional[argparse.Action]:
    wanted = {flag, f"-{flag}", f"--{flag}"}
    for action in parser._actions:
        if wanted.intersection(action.option_strings):
            return action
    return None


def _convert(action: argparse.Action, value: str) -> Any:
    if action.nargs == 0:
        if not isinstance(action.const, bool):
            raise argparse.ArgumentError(action, "cannot be set from the environment")
        if value in _TRUE:
            return True
        if value in _FALSE:
            return False
        raise argparse.ArgumentError(action, f"invalid boolean value: {value!r}")
    converted: Any = value
    if callable(action.type):
        try:
            converted = action.type(value)
        except (TypeError, ValueError, argparse.ArgumentTypeError) as exc:
            raise argparse.ArgumentError(action, f"invalid value {value!r}: {exc}") from exc
    if action.choices is not None and converted not in action.choices:
        raise argparse.ArgumentError(action, f"invalid choice: {value!r}")
    return converted


def assign(parser: argparse.ArgumentParser, mapping: Mapping[str, str]) -> None:
    """Set flag defaults from every non-empty environment variable in mapping.

    Raises argparse.ArgumentError if a flag is missing or a value is invalid.
    """
    for env_name, flag in mapping.items():
        value = os.environ.get(env_name)
        if not value:
            continue
        action = _find_action(parser, flag)
        if action is None:
            raise argparse.ArgumentError(
                None, f"no such flag -{flag} for environment variable {env_name}"
            )
        parser.set_defaults(**{action.dest: _convert(action, value)})


def parse_args(
    parser: argparse.ArgumentParser,
    args: Optional[Sequence[str]],
    mapping: Mapping[str, str],
) -> argparse.Namespace:
    """Apply mapping from the environment, then parse args with parser.

    If assigning fails and the parser exits on error, it exits with status 2;
    otherwise the error is raised.
    """
    try:
        assign(parser, mapping)
    except argparse.ArgumentError as exc:
        if parser.exit_on_error:
            parser.error(str(exc))
        raise
    return parser.parse_args(args)