#!/usr/bin/env python3
"""Pre-push hook entry point wrapping the relevant-specs CLI."""

from __future__ import annotations

import sys

from relevant_specs.cli import main

if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
