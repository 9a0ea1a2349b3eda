from __future__ import annotations

import json
from pathlib import Path

from .models import ProjectReport
from .render import render_project_report

PROJECT_REPORT_NAME = "commits.txt"
PROJECT_JSON_NAME = "commits.json"
FINAL_REPORT_NAME = "final-commit-report.txt"
REPORT_SCHEMA_VERSION = 1


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def write_json(path: Path, data: object) -> None:
    path.write_text(json.dumps(data, indent=2, sort_keys=False, ensure_ascii=False), encoding="utf-8")


def project_report_json(report: ProjectReport) -> dict[str, object]:
    return {
        "schema_version": REPORT_SCHEMA_VERSION,
        "project": report.project,
        "groups": [
            {
                "code": g.code,
                "description": g.description,
                "unit_value": g.unit_value,
                "count": g.count,
                "subtotal": g.subtotal,
                "lines": list(g.lines),
            }
            for g in report.groups.values()
        ],
        "total": report.total,
    }


def write_project_report(output_dir: Path, report: ProjectReport) -> Path:
    project_dir = output_dir / report.project
    ensure_dir(project_dir)
    # the merger prefers commits.json; never leave an older one next to fresh text
    json_path = project_dir / PROJECT_JSON_NAME
    json_path.unlink(missing_ok=True)
    text_path = project_dir / PROJECT_REPORT_NAME
    text_path.write_text(render_project_report(report), encoding="utf-8")
    write_json(json_path, project_report_json(report))
    return text_path


def remove_project_report(output_dir: Path, project: str) -> None:
    project_dir = output_dir / project
    for name in (PROJECT_JSON_NAME, PROJECT_REPORT_NAME):
        (project_dir / name).unlink(missing_ok=True)


def write_final_report(output_dir: Path, text: str) -> Path:
    ensure_dir(output_dir)
    path = output_dir / FINAL_REPORT_NAME
    path.write_text(text, encoding="utf-8")
    return path
