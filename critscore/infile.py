"""Opening of input files, with a name that stands for standard input."""

from __future__ import annotations

import sys
from typing import TextIO

STDIN_NAME = "-"


def open_input(filename: str, stdin_name: str = STDIN_NAME) -> TextIO:
    """Open filename for reading as text.

    If stdin_name is non-empty and filename equals it, standard input is
    returned. A missing file raises FileNotFoundError.
    """
    if stdin_name and filename == stdin_name:
        return sys.stdin
    return open(filename, encoding="utf-8")