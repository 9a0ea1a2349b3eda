from __future__ import annotations

import os
import re
import subprocess
from pathlib import Path

from .models import CommitRecord, FileChange

DEFAULT_EXCLUDE_DIRNAMES = frozenset({".git", "node_modules"})

_CARD_RE = re.compile(r"card (\d+)", re.IGNORECASE)
_TASK_RE = re.compile(r"task (\d+)", re.IGNORECASE)
_LOG_FORMAT = "%H%x09%an%x09%ae%x09%aI%x09%s"


class GitError(RuntimeError):
    def __init__(self, args: list[str], repo: Path, code: int, stderr: str) -> None:
        self.git_args = list(args)
        self.repo = repo
        self.code = code
        self.stderr = stderr
        detail = stderr.strip()[:500] or f"exit code {code}"
        super().__init__(f"git {' '.join(args)} failed in {repo}: {detail}")


def run_git(args: list[str], cwd: Path, timeout_s: int = 300) -> tuple[int, str, str]:
    proc = subprocess.run(
        ["git", *args],
        cwd=str(cwd),
        capture_output=True,
        text=True,
        encoding="utf-8",
        errors="replace",
        timeout=timeout_s,
    )
    return proc.returncode, proc.stdout, proc.stderr


def _checked_git(args: list[str], repo: Path) -> str:
    code, out, err = run_git(args, cwd=repo)
    if code != 0:
        raise GitError(args, repo, code, err)
    return out


def discover_git_roots(root: Path, exclude_dirnames: set[str] | frozenset[str] = DEFAULT_EXCLUDE_DIRNAMES) -> list[Path]:
    roots: list[Path] = []

    def onerror(err: OSError) -> None:
        _ = err

    for dirpath, dirnames, filenames in os.walk(root, onerror=onerror):
        if ".git" in dirnames or ".git" in filenames:
            roots.append(Path(dirpath))
            dirnames[:] = []
            continue
        dirnames[:] = sorted(d for d in dirnames if d not in exclude_dirnames and d != ".git")
    return sorted(roots, key=lambda p: p.as_posix())


def parse_reference(subject: str) -> str | None:
    m = _CARD_RE.search(subject or "") or _TASK_RE.search(subject or "")
    return m.group(1) if m else None


def parse_log(output: str) -> list[CommitRecord]:
    commits: list[CommitRecord] = []
    for line in output.splitlines():
        if not line.strip():
            continue
        parts = line.split("\t", 4)
        parts += [""] * (5 - len(parts))
        sha, name, email, date_iso, subject = parts
        commits.append(
            CommitRecord(
                sha=sha.strip(),
                author_name=name,
                author_email=email,
                date_iso=date_iso,
                subject=subject,
                reference=parse_reference(subject),
            )
        )
    return commits


def get_commits(
    repo: Path,
    *,
    author_pattern: str = "",
    since: str = "",
    until: str = "",
    include_merges: bool = False,
) -> list[CommitRecord]:
    args = ["log", f"--pretty=format:{_LOG_FORMAT}"]
    if author_pattern:
        args += ["--extended-regexp", f"--author={author_pattern}"]
    if since:
        args.append(f"--since={since}")
    if until:
        args.append(f"--until={until}")
    if not include_merges:
        args.append("--no-merges")
    return parse_log(_checked_git(args, repo))


def parse_name_status(output: str) -> list[FileChange]:
    changes: list[FileChange] = []
    for raw in output.splitlines():
        line = raw.strip()
        if not line or not line[0].isupper():
            continue
        parts = line.split("\t")
        status = parts[0].strip()
        if len(parts) < 2:
            continue
        # renames and copies list source then destination
        path = parts[-1] if status[:1] in ("R", "C") else "\t".join(parts[1:])
        if path:
            changes.append(FileChange(path=path, status=status))
    return changes


def get_files_for_commit(repo: Path, sha: str) -> list[FileChange]:
    out = _checked_git(["-c", "core.quotepath=off", "diff-tree", "--no-commit-id", "--name-status", "-r", "--root", sha], repo)
    return parse_name_status(out)


def load_commits(
    repo: Path,
    *,
    author_pattern: str = "",
    since: str = "",
    until: str = "",
    include_merges: bool = False,
) -> list[CommitRecord]:
    commits = get_commits(repo, author_pattern=author_pattern, since=since, until=until, include_merges=include_merges)
    for commit in commits:
        commit.files = get_files_for_commit(repo, commit.sha)
    return commits


def get_authors_for_range(repo: Path, *, since: str = "", until: str = "") -> list[tuple[int, str]]:
    args = ["shortlog", "-sne"]
    if since:
        args.append(f"--since={since}")
    if until:
        args.append(f"--until={until}")
    # without a revision shortlog reads stdin
    args.append("HEAD")
    out = _checked_git(args, repo)
    authors: list[tuple[int, str]] = []
    for line in out.splitlines():
        line = line.strip()
        if not line:
            continue
        count_s, _, who = line.partition("\t")
        if not who:
            count_s, _, who = line.partition(" ")
        try:
            count = int(count_s.strip())
        except ValueError:
            continue
        authors.append((count, who.strip()))
    return authors
