"""Configuration utilities for relevant-specs."""

from __future__ import annotations

import os
import shlex
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, MutableMapping, Sequence

from .reporting import warn

DEFAULT_UPSTREAM = "origin/main"

DEFAULT_TEST_COMMAND = (
    "bundle",
    "exec",
    "rspec",
    "--format",
    "progress",
    "--fail-fast",
)

DEFAULT_SPEC_DIR = "spec"

# Source directory -> spec directory, evaluated in this order.
DEFAULT_MAPPINGS: tuple[tuple[str, str], ...] = (
    ("app/models", "spec/models"),
    ("app/controllers", "spec/controllers"),
    ("app/services", "spec/services"),
    ("lib", "spec/lib"),
    ("app/helpers", "spec/helpers"),
    ("app/queries", "spec/queries"),
    ("app/decorators", "spec/decorators"),
    ("app/mailers", "spec/mailers"),
    ("app/jobs", "spec/jobs"),
    ("app/observers", "spec/observers"),
)

CONFIG_FILENAMES = ("relevant-specs.toml", ".relevant-specs.toml", "pyproject.toml")

TRUTHY = {"1", "true", "yes", "on"}


class ConfigError(ValueError):
    """Raised when a configuration source holds an invalid value."""


@dataclass(frozen=True)
class SpecsConfig:
    """Top-level configuration consumed by :class:`RelevantSpecsRunner`."""

    root: Path
    upstream: str = DEFAULT_UPSTREAM
    test_command: tuple[str, ...] = DEFAULT_TEST_COMMAND
    mappings: tuple[tuple[str, str], ...] = DEFAULT_MAPPINGS
    spec_dir: str = DEFAULT_SPEC_DIR
    confirm_run: bool = False
    dry_run: bool = False
    env: Mapping[str, str] | None = None

    def with_overrides(self, **updates: object) -> "SpecsConfig":
        return replace(self, **updates)


def parse_command(command: str | Sequence[str] | None) -> tuple[str, ...]:
    if command is None:
        return DEFAULT_TEST_COMMAND
    if isinstance(command, str):
        tokens = shlex.split(command)
    else:
        tokens = [str(item) for item in command]
    if not tokens:
        raise ConfigError("Test command must not be empty")
    return tuple(tokens)


def parse_flag(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in TRUTHY
    raise ConfigError(f"Expected a boolean, got {value!r}")


def _load_toml(path: Path) -> Mapping[str, object]:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"{path.name}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"{path.name}: cannot be read ({exc})") from exc


def _string(data: Mapping[str, object], key: str) -> str:
    value = data[key]
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"Configuration key '{key}' must be a non-empty string")
    return value.strip()


def _table(data: Mapping[str, object], key: str) -> Mapping[str, object]:
    value = data[key]
    if not isinstance(value, Mapping):
        raise ConfigError(f"Configuration key '{key}' must be a table")
    return value


def load_config_from_mapping(
    root: Path,
    data: Mapping[str, object],
    base: SpecsConfig | None = None,
) -> SpecsConfig:
    """Create a :class:`SpecsConfig` from a raw mapping (e.g. parsed TOML)."""

    base = base or SpecsConfig(root=root)
    overrides: MutableMapping[str, object] = {}

    if "upstream" in data:
        overrides["upstream"] = _string(data, "upstream")

    if "test-command" in data:
        command = data["test-command"]
        if not isinstance(command, (str, list)):
            raise ConfigError(
                "Configuration key 'test-command' must be a string or a list"
            )
        overrides["test_command"] = parse_command(command)

    if "spec-dir" in data:
        overrides["spec_dir"] = _string(data, "spec-dir").strip("/")

    if "confirm-run" in data:
        overrides["confirm_run"] = parse_flag(data["confirm-run"])

    if "dry-run" in data:
        overrides["dry_run"] = parse_flag(data["dry-run"])

    if "mappings" in data:
        section = _table(data, "mappings")
        mappings: list[tuple[str, str]] = []
        for source, target in section.items():
            if not isinstance(target, str) or not target.strip("/"):
                raise ConfigError(
                    f"Mapping for '{source}' must be a non-empty directory string"
                )
            mappings.append((str(source).strip("/"), target.strip("/")))
        overrides["mappings"] = tuple(mappings)

    if "env" in data:
        section = _table(data, "env")
        overrides["env"] = {str(k): str(v) for k, v in section.items()}

    return replace(base, **overrides)


def load_discovered_config(root: Path, base: SpecsConfig) -> SpecsConfig:
    """Apply the first config file at ``root`` holding a relevant-specs section.

    A file that cannot be read, parsed or applied is reported and skipped so
    that a broken project file never blocks a push.
    """

    for name in CONFIG_FILENAMES:
        path = root / name
        if not path.is_file():
            continue
        try:
            section = _extract_section(path, _load_toml(path))
            if section is None:
                continue
            return _apply_section(root, path, section, base)
        except ConfigError as exc:
            warn(f"Ignoring configuration ({exc}); using defaults.")
            return base
    return base


def _apply_section(
    root: Path, path: Path, section: Mapping[str, object], base: SpecsConfig
) -> SpecsConfig:
    try:
        return load_config_from_mapping(root, section, base=base)
    except ConfigError as exc:
        raise ConfigError(f"{path.name}: {exc}") from exc


def _extract_section(
    path: Path, data: Mapping[str, object]
) -> Mapping[str, object] | None:
    if path.name == "pyproject.toml":
        tool = data.get("tool")
        section = tool.get("relevant-specs") if isinstance(tool, Mapping) else None
        return section if isinstance(section, Mapping) else None
    section = data.get("relevant-specs")
    if isinstance(section, Mapping):
        return section
    # Dedicated files may keep their keys at the top level.
    return data


def load_config(
    root: Path,
    config_path: Path | None = None,
    env_prefix: str = "RELEVANT_SPECS_",
) -> SpecsConfig:
    """Load configuration from defaults, optional TOML, and environment variables."""

    config = SpecsConfig(root=root)

    if config_path is not None:
        if not config_path.is_file():
            raise ConfigError(f"Configuration file '{config_path}' does not exist")
        section = _extract_section(config_path, _load_toml(config_path))
        if section is not None:
            config = _apply_section(root, config_path, section, config)
    else:
        config = load_discovered_config(root, config)

    env_map: dict[str, str] = {
        key[len(env_prefix) :].lower().replace("_", "-"): value
        for key, value in os.environ.items()
        if key.startswith(env_prefix)
    }

    if env_map.get("upstream", "").strip():
        config = config.with_overrides(upstream=env_map["upstream"].strip())

    if "test-command" in env_map:
        config = config.with_overrides(
            test_command=parse_command(env_map["test-command"])
        )

    if "confirm-run" in env_map:
        config = config.with_overrides(confirm_run=parse_flag(env_map["confirm-run"]))

    if "dry-run" in env_map:
        config = config.with_overrides(dry_run=parse_flag(env_map["dry-run"]))

    return config


__all__ = [
    "ConfigError",
    "SpecsConfig",
    "DEFAULT_MAPPINGS",
    "DEFAULT_TEST_COMMAND",
    "DEFAULT_UPSTREAM",
    "load_config",
    "load_config_from_mapping",
    "load_discovered_config",
    "parse_command",
]
