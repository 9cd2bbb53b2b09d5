"""Diagnostic output for relevant-specs."""

from __future__ import annotations

import sys
from typing import TextIO

PREFIX = "[relevant-specs]"


def warn(message: str, stream: TextIO | None = None) -> None:
    """Write a prefixed diagnostic line to stderr."""

    print(f"{PREFIX} {message}", file=stream or sys.stderr)


def detail(message: str, stream: TextIO | None = None) -> None:
    print(f"  {message}", file=stream or sys.stderr)
