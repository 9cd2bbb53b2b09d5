"""Map changed source files onto the spec files that cover them."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

from .config import DEFAULT_MAPPINGS, DEFAULT_SPEC_DIR, SpecsConfig


@dataclass(frozen=True)
class SpecRule:
    """A single ``(pattern, template)`` entry of the mapping table."""

    pattern: re.Pattern[str]
    template: str

    def apply(self, path: str) -> str | None:
        match = self.pattern.match(path)
        if match is None:
            return None
        return match.expand(self.template)


def directory_rule(source_dir: str, spec_dir: str) -> SpecRule:
    """``<source_dir>/X.ext`` becomes ``<spec_dir>/X_spec.ext``."""

    pattern = re.compile(rf"^{re.escape(source_dir)}/(?P<stem>.+)(?P<ext>\.[^./]+)$")
    # Backslashes in the template are meaningful to ``Match.expand``.
    target = spec_dir.replace("\\", "\\\\")
    return SpecRule(pattern, target + r"/\g<stem>_spec\g<ext>")


def self_rule(spec_dir: str) -> SpecRule:
    """Spec files already under ``spec_dir`` map to themselves."""

    pattern = re.compile(rf"^{re.escape(spec_dir)}/.+_spec\.[^./]+$")
    return SpecRule(pattern, r"\g<0>")


def build_rules(
    mappings: Iterable[tuple[str, str]] = DEFAULT_MAPPINGS,
    spec_dir: str = DEFAULT_SPEC_DIR,
) -> tuple[SpecRule, ...]:
    rules = [directory_rule(source, target) for source, target in mappings]
    rules.append(self_rule(spec_dir))
    return tuple(rules)


DEFAULT_RULES = build_rules()


def map_to_spec(path: str, rules: Sequence[SpecRule] = DEFAULT_RULES) -> str | None:
    """Return the candidate spec path for ``path``; the first matching rule wins."""

    for rule in rules:
        candidate = rule.apply(path)
        if candidate is not None:
            return candidate
    return None


class SpecMapper:
    """Resolve changed files into the sorted set of existing spec paths."""

    def __init__(self, config: SpecsConfig):
        self.config = config
        self.rules = build_rules(config.mappings, config.spec_dir)

    def map_to_spec(self, path: str) -> str | None:
        return map_to_spec(path, self.rules)

    def collect(self, changed_files: Iterable[str]) -> list[str]:
        specs: set[str] = set()
        for changed in changed_files:
            candidate = self.map_to_spec(changed)
            if candidate is None:
                continue
            if not (self.config.root / candidate).is_file():
                continue
            specs.add(candidate)
        return sorted(specs)


def relative_to_root(path: Path, root: Path) -> str:
    if path.is_relative_to(root):
        return path.relative_to(root).as_posix()
    return path.as_posix()


__all__ = [
    "DEFAULT_RULES",
    "SpecMapper",
    "SpecRule",
    "build_rules",
    "map_to_spec",
    "relative_to_root",
]
