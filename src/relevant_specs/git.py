"""Git queries used to discover changed files."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path

from .config import DEFAULT_UPSTREAM
from .reporting import warn


@dataclass
class GitInspector:
    """Run git in ``cwd`` and report missing signals as ``None`` or ``[]``."""

    cwd: Path

    def _git(self, *args: str) -> str | None:
        try:
            result = subprocess.run(
                ["git", *args],
                cwd=self.cwd,
                text=True,
                capture_output=True,
                check=False,
            )
        except OSError:
            return None
        if result.returncode != 0:
            return None
        return result.stdout

    def repository_root(self) -> Path | None:
        output = self._git("rev-parse", "--show-toplevel")
        if output is None or not output.strip():
            return None
        return Path(output.strip())

    def base_commit(self, upstream: str = DEFAULT_UPSTREAM) -> str | None:
        output = self._git("merge-base", upstream, "HEAD")
        base = output.strip() if output else ""
        if base:
            return base
        warn(f"Warning: Could not find {upstream}")
        return None

    def changed_files(self, base: str) -> list[str]:
        output = self._git("diff", "--name-only", base, "HEAD")
        if output is None:
            warn(f"Warning: Could not list files changed since {base}")
            return []
        entries = (line.strip() for line in output.splitlines())
        return [entry for entry in entries if entry]

    def changed_since_upstream(self, upstream: str = DEFAULT_UPSTREAM) -> list[str]:
        base = self.base_commit(upstream)
        if base is None:
            return []
        return self.changed_files(base)


__all__ = ["GitInspector"]
