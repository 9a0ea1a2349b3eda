from __future__ import annotations

import os
import subprocess
from pathlib import Path

import pytest


def _run(cmd: list[str], *, cwd: Path, env: dict[str, str] | None = None) -> str:
    proc = subprocess.run(cmd, cwd=str(cwd), env=env, check=True, capture_output=True, text=True)
    return proc.stdout


class RepoBuilder:
    def __init__(self, repo: Path) -> None:
        self.repo = repo
        repo.mkdir(parents=True, exist_ok=True)
        _run(["git", "init", "-q"], cwd=repo)
        _run(["git", "config", "user.name", "Test User"], cwd=repo)
        _run(["git", "config", "user.email", "test@example.com"], cwd=repo)
        _run(["git", "config", "commit.gpgsign", "false"], cwd=repo)

    def write(self, path: str, content: str = "x\n") -> None:
        target = self.repo / path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")

    def commit(
        self,
        message: str,
        *,
        date: str = "2025-03-10T12:00:00Z",
        author: str = "Test User <test@example.com>",
    ) -> str:
        env = os.environ.copy()
        env["GIT_AUTHOR_DATE"] = date
        env["GIT_COMMITTER_DATE"] = date
        _run(["git", "add", "-A"], cwd=self.repo)
        _run(["git", "commit", "-q", "--allow-empty", f"--author={author}", "-m", message], cwd=self.repo, env=env)
        return _run(["git", "rev-parse", "HEAD"], cwd=self.repo).strip()

    def git(self, *args: str) -> str:
        return _run(["git", *args], cwd=self.repo)


@pytest.fixture
def make_repo():
    def factory(path: Path) -> RepoBuilder:
        return RepoBuilder(path)

    return factory
