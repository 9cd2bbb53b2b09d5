"""Command-line interface for relevant-specs."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

from . import __version__
from .config import ConfigError, SpecsConfig, load_config, parse_command
from .git import GitInspector
from .mapper import relative_to_root
from .prompt import Terminal
from .reporting import warn
from .runner import RelevantSpecsRunner


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="relevant-specs",
        description="Run only the specs covering files changed since the upstream branch.",
    )
    parser.add_argument(
        "--root",
        type=Path,
        help="Directory inside the repository (defaults to the current directory).",
    )
    parser.add_argument(
        "--config", type=Path, help="Path to a relevant-specs TOML configuration file."
    )
    parser.add_argument(
        "--upstream", help="Upstream branch used to find the base commit."
    )
    parser.add_argument(
        "--test-command", help="Shell-style command used to execute specs."
    )
    parser.add_argument(
        "--confirm",
        action="store_true",
        help="Ask before running the selected specs.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List relevant specs without running them.",
    )
    parser.add_argument(
        "--version", action="store_true", help="Show relevant-specs version and exit."
    )
    parser.add_argument(
        "paths",
        nargs="*",
        help="Explicit paths to treat as changed instead of asking git.",
    )
    return parser


def apply_cli_overrides(config: SpecsConfig, args: argparse.Namespace) -> SpecsConfig:
    overrides: dict[str, object] = {}

    if args.upstream:
        overrides["upstream"] = args.upstream
    if args.test_command:
        overrides["test_command"] = parse_command(args.test_command)
    if args.confirm:
        overrides["confirm_run"] = True
    if args.dry_run:
        overrides["dry_run"] = True

    if overrides:
        config = config.with_overrides(**overrides)
    return config


def resolve_changed_paths(
    args: argparse.Namespace, config: SpecsConfig
) -> list[str] | None:
    if not args.paths:
        return None
    resolved: list[str] = []
    for entry in args.paths:
        candidate = Path(entry)
        if candidate.is_absolute():
            resolved.append(relative_to_root(candidate.resolve(), config.root))
        else:
            resolved.append(candidate.as_posix())
    return resolved


def main(argv: Sequence[str] | None = None, terminal: Terminal | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return 0

    root = GitInspector(args.root or Path.cwd()).repository_root()
    if root is None:
        return 0

    try:
        config = load_config(root=root, config_path=args.config)
        config = apply_cli_overrides(config, args)
    except ConfigError as exc:
        warn(f"Invalid configuration: {exc}")
        return 2

    runner = RelevantSpecsRunner(config, terminal=terminal)
    return runner.run(resolve_changed_paths(args, config))


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
