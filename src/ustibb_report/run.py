from __future__ import annotations

import subprocess
import sys
from pathlib import Path

from .aggregate import aggregate_project
from .config import RunConfig
from .git import GitError, discover_git_roots, get_authors_for_range, load_commits
from .identity import author_pattern, load_author_map, resolve_author_matchers
from .merge import collect_final_report
from .models import CategoryRule, ProjectReport
from .periods import parse_period
from .render import RUN_TOTAL_PREFIX, fmt_number, render_final_report
from .rules import load_rules, rules_by_code
from .write import ensure_dir, remove_project_report, write_final_report, write_project_report

REPO_ERRORS = (GitError, OSError, subprocess.TimeoutExpired, ValueError)


def date_range(cfg: RunConfig) -> tuple[str, str]:
    if cfg.period:
        p = parse_period(cfg.period)
        return p.since, p.until
    return cfg.since, cfg.until


def format_startup_header(
    *,
    root: Path,
    output_dir: Path,
    rules_path: Path,
    rule_count: int,
    author_matchers: list[str],
    since: str,
    until: str,
    allow_duplicates: bool,
    card: str,
) -> str:
    who = ", ".join(author_matchers) if author_matchers else "(all authors)"
    lines = [
        "ustibb-report",
        "",
        "Run plan:",
        f"1) Rules: {rules_path} ({rule_count} categories)",
        f"2) Discover repos under: {root}",
        f"3) Read commits by {who} ({since or 'beginning'} .. {until or 'now'}); read-only git log/diff-tree",
        f"4) Classify changed files; duplicates {'kept' if allow_duplicates else 'suppressed'} per category",
        f"5) Write reports: {output_dir}/<project>/commits.txt and final-commit-report.txt" + (f" (card {card})" if card else ""),
        "",
    ]
    return "\n".join(lines)


def process_repo(
    repo: Path,
    *,
    rules: list[CategoryRule],
    cfg: RunConfig,
    author_regex: str,
    since: str,
    until: str,
) -> ProjectReport:
    print(f"Processing {repo}")
    commits = load_commits(repo, author_pattern=author_regex, since=since, until=until, include_merges=cfg.include_merges)
    report = aggregate_project(
        rules,
        commits,
        allow_duplicates=cfg.allow_duplicates,
        project=repo.name,
        path_prefix=repo.name,
    )
    write_project_report(cfg.output_dir, report)
    return report


def rebuild_final_report(cfg: RunConfig, rules: list[CategoryRule], project_names: list[str] | None = None) -> Path:
    final = collect_final_report(cfg.output_dir, project_names)
    text = render_final_report(final, rules_by_code(rules), extra_codes=list(cfg.extra_categories), card=cfg.card)
    return write_final_report(cfg.output_dir, text)


def run_report(cfg: RunConfig) -> int:
    rules = load_rules(cfg.rules_path)
    matchers = resolve_author_matchers(cfg.author, load_author_map(cfg.author_map_path)) if cfg.author else []
    since, until = date_range(cfg)
    root = cfg.base_dir.resolve()

    print(
        format_startup_header(
            root=root,
            output_dir=cfg.output_dir,
            rules_path=cfg.rules_path,
            rule_count=len(rules),
            author_matchers=matchers,
            since=since,
            until=until,
            allow_duplicates=cfg.allow_duplicates,
            card=cfg.card,
        )
    )

    ensure_dir(cfg.output_dir)
    repos = discover_git_roots(root, cfg.exclude_dirnames)
    if not repos:
        print(f"No git repositories found under: {root}", file=sys.stderr)
        return 2

    total = 0
    failed: list[Path] = []
    written: list[str] = []
    for repo in repos:
        try:
            report = process_repo(repo, rules=rules, cfg=cfg, author_regex=author_pattern(matchers), since=since, until=until)
        except REPO_ERRORS as e:
            print(f"Failed to process {repo}: {e}", file=sys.stderr)
            failed.append(repo)
            if repo.name not in written:
                remove_project_report(cfg.output_dir, repo.name)
            continue
        written.append(repo.name)
        total += report.total

    print(f"{RUN_TOTAL_PREFIX} {fmt_number(total)}")
    if failed:
        print(f"Note: {len(failed)} of {len(repos)} repos failed and were left out of the report.")
    final_path = rebuild_final_report(cfg, rules, written)
    print(f"Done. Reports in: {cfg.output_dir} (final: {final_path.name})")
    return 0


def list_authors(cfg: RunConfig) -> int:
    since, until = date_range(cfg)
    root = cfg.base_dir.resolve()
    repos = discover_git_roots(root, cfg.exclude_dirnames)
    if not repos:
        print(f"No git repositories found under: {root}", file=sys.stderr)
        return 2
    for repo in repos:
        try:
            authors = get_authors_for_range(repo, since=since, until=until)
        except REPO_ERRORS as e:
            print(f"Failed to list authors in {repo}: {e}", file=sys.stderr)
            continue
        print(f"[{repo.name}]")
        for count, who in authors:
            print(f"{count:>6}  {who}")
        print("")
    return 0
