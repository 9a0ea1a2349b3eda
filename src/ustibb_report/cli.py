from __future__ import annotations

import argparse
import dataclasses
import sys
from pathlib import Path

from .config import RunConfig, build_run_config, load_config
from .rules import RuleError, load_rules
from .run import list_authors, rebuild_final_report, run_report


def _add_config_arg(p: argparse.ArgumentParser) -> None:
    p.add_argument("--config", type=Path, default=Path("config.json"), help="Path to config.json.")


def _add_range_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--root", type=Path, default=None, help="Root directory to scan for git repos (overrides `baseDir`).")
    p.add_argument("--since", type=str, default=None, help="Only commits after this date (git --since).")
    p.add_argument("--until", type=str, default=None, help="Only commits before this date (git --until).")
    p.add_argument("--period", type=str, default=None, help="Shortcut for since/until: YYYY, YYYYH1, YYYYH2 or YYYY-MM.")


def _add_output_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--output-dir", type=Path, default=None, help="Where per-project and final reports go (overrides `outputDir`).")
    p.add_argument("--rules", type=Path, default=None, help="Category rule file (overrides `rulesPath`).")
    p.add_argument("--card", type=str, default=None, help="Reference label printed under the extra categories (overrides `card`).")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Bill git activity in USTIBB per category of file change.")
    _add_config_arg(parser)
    _add_range_args(parser)
    _add_output_args(parser)
    parser.add_argument("--author", type=str, default=None, help="Author id, expanded through the author map (overrides `author`).")
    dup = parser.add_mutually_exclusive_group()
    dup.add_argument("--allow-duplicates", dest="allow_duplicates", action="store_true", default=None, help="Bill every change of the same file.")
    dup.add_argument("--no-duplicates", dest="allow_duplicates", action="store_false", default=None, help="Bill each file once per category.")
    parser.add_argument("--include-merges", action="store_true", default=None, help="Include merge commits.")
    return parser


def _run_config(args: argparse.Namespace) -> RunConfig:
    config_path: Path = args.config
    cfg = build_run_config(load_config(config_path), base=config_path.resolve().parent)
    overrides: dict[str, object] = {}
    for attr, field in (
        ("root", "base_dir"),
        ("output_dir", "output_dir"),
        ("rules", "rules_path"),
        ("author", "author"),
        ("since", "since"),
        ("until", "until"),
        ("period", "period"),
        ("card", "card"),
        ("allow_duplicates", "allow_duplicates"),
        ("include_merges", "include_merges"),
    ):
        value = getattr(args, attr, None)
        if value is not None:
            overrides[field] = value
    # explicit dates win over a configured period
    if ("since" in overrides or "until" in overrides) and "period" not in overrides:
        overrides["period"] = ""
    return dataclasses.replace(cfg, **overrides)


def _print_root_help() -> None:
    p = _build_parser()
    p.prog = "ustibb-report"
    p.print_help()
    print("")
    print("commands:")
    print("  run            Bill every repo under --root and write the reports (default).")
    print("  merge          Rebuild final-commit-report.txt from existing project reports.")
    print("  authors        List commit authors per repo, to help fill author_map.json.")
    print("")
    print("Run `ustibb-report <command> --help` for command-specific options.")


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    if argv and argv[0] in ("-h", "--help"):
        _print_root_help()
        return 0

    try:
        if argv and argv[0] == "merge":
            p = argparse.ArgumentParser(prog="ustibb-report merge", description="Rebuild the cross-project report from existing project reports.")
            _add_config_arg(p)
            _add_output_args(p)
            cfg = _run_config(p.parse_args(argv[1:]))
            path = rebuild_final_report(cfg, load_rules(cfg.rules_path))
            print(f"Done. Final report: {path}")
            return 0
        if argv and argv[0] == "authors":
            p = argparse.ArgumentParser(prog="ustibb-report authors", description="List commit authors per repo.")
            _add_config_arg(p)
            _add_range_args(p)
            return list_authors(_run_config(p.parse_args(argv[1:])))
        if argv and argv[0] == "run":
            argv = argv[1:]
        parser = _build_parser()
        parser.prog = "ustibb-report"
        return run_report(_run_config(parser.parse_args(argv)))
    except (RuleError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
