from __future__ import annotations

import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

import pytest

from relevant_specs.config import SpecsConfig, load_config


@dataclass
class RepoHelper:
    root: Path

    def git(self, *args: str) -> subprocess.CompletedProcess[str]:
        result = subprocess.run(
            ["git", *args],
            cwd=self.root,
            text=True,
            capture_output=True,
            check=False,
        )
        if result.returncode != 0:
            raise RuntimeError(f"git {' '.join(args)} failed: {result.stderr}")
        return result

    def write(self, relative: str, content: str = "") -> Path:
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    def stage(self, *paths: str) -> None:
        self.git("add", *paths)

    def commit(self, message: str = "feat: initial") -> None:
        self.git("commit", "-m", message)

    def mark_upstream(self, ref: str = "origin/main") -> None:
        """Point a remote-tracking ref at the current HEAD."""

        self.git("update-ref", f"refs/remotes/{ref}", "HEAD")

    def config(self, **overrides: object) -> SpecsConfig:
        config = load_config(root=self.root)
        if overrides:
            config = config.with_overrides(**overrides)
        return config


@dataclass
class FakeTerminal:
    """Terminal double returning canned answers, or failing when exhausted."""

    answers: list[str] = field(default_factory=list)
    prompts: list[str] = field(default_factory=list)
    error: OSError | None = None

    def ask(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.answers.pop(0)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in (
        "RELEVANT_SPECS_UPSTREAM",
        "RELEVANT_SPECS_TEST_COMMAND",
        "RELEVANT_SPECS_CONFIRM_RUN",
        "RELEVANT_SPECS_DRY_RUN",
    ):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def repo(tmp_path: Path) -> Iterable[RepoHelper]:
    root = tmp_path / "repo"
    root.mkdir()
    subprocess.run(
        ["git", "init"], cwd=root, check=True, text=True, capture_output=True
    )
    subprocess.run(
        ["git", "config", "user.name", "Relevant Specs"], cwd=root, check=True, text=True
    )
    subprocess.run(
        ["git", "config", "user.email", "specs@example.com"],
        cwd=root,
        check=True,
        text=True,
    )
    subprocess.run(
        ["git", "config", "commit.gpgsign", "false"], cwd=root, check=True, text=True
    )

    helper = RepoHelper(root.resolve())
    yield helper


@pytest.fixture
def rails_repo(repo):
    """A repository with sources, specs and ``origin/main`` at the first commit."""

    repo.write("app/models/user.rb", "class User; end\n")
    repo.write("app/controllers/sessions_controller.rb", "class SessionsController; end\n")
    repo.write("lib/foo.rb", "module Foo; end\n")
    repo.write("README.md", "# app\n")
    repo.write("spec/models/user_spec.rb", "describe User\n")
    repo.write(
        "spec/controllers/sessions_controller_spec.rb", "describe SessionsController\n"
    )
    repo.write("spec/lib/foo_spec.rb", "describe Foo\n")
    repo.stage(".")
    repo.commit("chore: initial layout")
    repo.mark_upstream()
    return repo


@pytest.fixture
def terminal() -> FakeTerminal:
    return FakeTerminal()
