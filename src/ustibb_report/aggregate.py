from __future__ import annotations

from collections.abc import Iterable

from .classify import classify
from .models import CategoryGroup, CategoryRule, CommitRecord, ProjectReport
from .render import DEFAULT_REFERENCE_LABEL, format_change_line
from .rules import rules_by_code


def aggregate_project(
    rules: list[CategoryRule],
    commits: Iterable[CommitRecord],
    *,
    allow_duplicates: bool,
    project: str = "",
    path_prefix: str = "",
    reference_label: str = DEFAULT_REFERENCE_LABEL,
) -> ProjectReport:
    by_code = rules_by_code(rules)
    groups: dict[str, CategoryGroup] = {}

    for commit in commits:
        for change in commit.files:
            code = classify(rules, change.path, change.status)
            if code is None:
                continue
            group = groups.get(code)
            if group is None:
                rule = by_code[code]
                group = CategoryGroup(code=code, description=rule.description, unit_value=rule.unit_value)
                groups[code] = group
            if not allow_duplicates and change.path in group.seen_paths:
                continue
            group.seen_paths.add(change.path)
            shown = f"{path_prefix}/{change.path}" if path_prefix else change.path
            group.lines.append(format_change_line(shown, commit, reference_label))

    return ProjectReport(project=project, groups={code: groups[code] for code in sorted(groups)})

