"""Public runner orchestration for relevant-specs."""

from __future__ import annotations

import os
import subprocess
from typing import Sequence

from .config import SpecsConfig
from .git import GitInspector
from .mapper import SpecMapper
from .prompt import (
    ControllingTerminal,
    Terminal,
    confirm_proceed_after_failure,
    confirm_run,
)
from .reporting import detail, warn


class SpecRunner:
    """Run the test command for a set of specs and decide the exit status."""

    def __init__(self, config: SpecsConfig, terminal: Terminal):
        self.config = config
        self.terminal = terminal

    def display(self, specs: Sequence[str]) -> None:
        warn("Running changed unit specs:")
        for spec in sorted(specs):
            detail(spec)

    def command(self, specs: Sequence[str]) -> list[str]:
        return [*self.config.test_command, *sorted(set(specs))]

    def execute(self, specs: Sequence[str]) -> int:
        env = os.environ.copy()
        if self.config.env:
            env.update(self.config.env)
        try:
            completed = subprocess.run(
                self.command(specs), cwd=self.config.root, env=env
            )
        except OSError as exc:
            warn(f"Could not start {self.config.test_command[0]} ({exc}).")
            return 127
        return completed.returncode

    def run_specs(self, specs: Sequence[str]) -> int:
        if not specs:
            warn("No relevant unit specs found; allowing push.")
            return 0

        specs = sorted(set(specs))
        self.display(specs)

        if self.config.dry_run:
            return 0

        if self.config.confirm_run and not confirm_run(self.terminal):
            warn("Skipping specs; allowing push.")
            return 0

        if self.execute(specs) == 0:
            return 0
        return self.handle_failure()

    def handle_failure(self) -> int:
        if confirm_proceed_after_failure(self.terminal):
            warn("Proceeding with push despite spec failures.")
            return 0
        warn("Push aborted. Please fix the specs.")
        return 1


class RelevantSpecsRunner:
    """High-level interface combining change detection, mapping and execution."""

    def __init__(self, config: SpecsConfig, terminal: Terminal | None = None):
        self.config = config
        self.git = GitInspector(config.root)
        self.mapper = SpecMapper(config)
        self.spec_runner = SpecRunner(config, terminal or ControllingTerminal())

    def collect_changes(self) -> list[str]:
        return self.git.changed_since_upstream(self.config.upstream)

    def plan(self, changed_files: Sequence[str]) -> list[str]:
        return self.mapper.collect(changed_files)

    def run(self, changed_files: Sequence[str] | None = None) -> int:
        changed = (
            list(changed_files) if changed_files is not None else self.collect_changes()
        )
        if not changed:
            warn("No changed files detected; allowing push.")
            return 0
        return self.spec_runner.run_specs(self.plan(changed))


__all__ = ["RelevantSpecsRunner", "SpecRunner"]
