"""relevant-specs: run only the specs touched by a branch before pushing."""

from __future__ import annotations

from importlib import metadata

try:  # pragma: no cover - best effort during development
    __version__ = metadata.version("relevant-specs")
except metadata.PackageNotFoundError:  # pragma: no cover - local/dev installs
    __version__ = "0.1.0"

from .runner import RelevantSpecsRunner

__all__ = ["RelevantSpecsRunner", "__version__"]
