from __future__ import annotations

import json
import re
import sys
from collections.abc import Iterable
from pathlib import Path

from .models import FinalReport, ProjectReport
from .render import PROJECT_TOTAL_PREFIX, SUBTOTAL_PREFIX
from .write import PROJECT_JSON_NAME, PROJECT_REPORT_NAME, REPORT_SCHEMA_VERSION

CATEGORY_HEADER_RE = re.compile(r"^\d+(?:\.\d+)+ -")


def _is_total_line(line: str) -> bool:
    s = line.strip()
    return s.startswith(SUBTOTAL_PREFIX) or s.startswith(PROJECT_TOTAL_PREFIX)


def parse_project_report(text: str) -> dict[str, list[str]]:
    """
    Recover `header -> change lines` from a rendered project report.

    Lines before the first category header are ignored. Inside a category,
    subtotal, grand-total and blank lines are dropped without closing the
    category; every other line belongs to the active header. A header with
    no lines still yields an (empty) entry.
    """
    sections: dict[str, list[str]] = {}
    current: str | None = None
    for raw in text.splitlines():
        if CATEGORY_HEADER_RE.match(raw):
            current = raw.strip()
            sections.setdefault(current, [])
            continue
        if current is None:
            continue
        if not raw.strip() or _is_total_line(raw):
            continue
        sections[current].append(raw.strip())
    return sections


def report_sections(report: ProjectReport) -> dict[str, list[str]]:
    return {g.header.strip(): [line.strip() for line in g.lines] for g in report.groups.values()}


def merge_project_reports(projects: Iterable[tuple[str, dict[str, list[str]]]]) -> FinalReport:
    final = FinalReport()
    for project, sections in projects:
        for header, lines in sections.items():
            final.touch(header)
            for line in lines:
                final.add(header, project, line)
    return final


def _sections_from_json(path: Path) -> dict[str, list[str]] | None:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        print(f"Warning: ignoring unreadable {path}: {e}", file=sys.stderr)
        return None
    version = data.get("schema_version") if isinstance(data, dict) else None
    if version != REPORT_SCHEMA_VERSION:
        print(f"Warning: ignoring {path}: unsupported schema_version {version!r}", file=sys.stderr)
        return None
    sections: dict[str, list[str]] = {}
    for g in data.get("groups") or []:
        header = f"{g.get('code', '')} - {g.get('description', '')}".strip()
        sections[header] = [str(line).strip() for line in (g.get("lines") or []) if str(line).strip()]
    return sections


def load_project_sections(project_dir: Path) -> dict[str, list[str]] | None:
    json_path = project_dir / PROJECT_JSON_NAME
    if json_path.exists():
        sections = _sections_from_json(json_path)
        if sections is not None:
            return sections
    text_path = project_dir / PROJECT_REPORT_NAME
    if not text_path.exists():
        return None
    return parse_project_report(text_path.read_text(encoding="utf-8"))


def collect_final_report(output_dir: Path, project_names: Iterable[str] | None = None) -> FinalReport:
    """
    Merge the project reports under `output_dir`.

    With `project_names` only those projects are read, in that order (a run
    passes its repos in discovery order). Without it every project directory
    is read in name order.
    """
    if project_names is None:
        dirs = sorted((p for p in output_dir.iterdir() if p.is_dir()), key=lambda p: p.name)
    else:
        dirs = [output_dir / name for name in dict.fromkeys(project_names)]
    projects: list[tuple[str, dict[str, list[str]]]] = []
    for project_dir in dirs:
        sections = load_project_sections(project_dir)
        if sections is None:
            continue
        projects.append((project_dir.name, sections))
    return merge_project_reports(projects)
