from __future__ import annotations

from .models import CategoryRule, CommitRecord, FinalReport, ProjectReport

DEFAULT_REFERENCE_LABEL = "card"
SUBTOTAL_PREFIX = "Total USTIBB:"
PROJECT_TOTAL_PREFIX = "Total geral do projeto:"
RUN_TOTAL_PREFIX = "Total geral de USTIBB:"
DIVIDER = "---"


def fmt_number(n: float) -> str:
    if isinstance(n, float) and n.is_integer():
        return str(int(n))
    return str(n)


def format_change_line(path: str, commit: CommitRecord, label: str = DEFAULT_REFERENCE_LABEL) -> str:
    base = f"{path}#{commit.short_sha};"
    if commit.reference is not None:
        return f"{base} {label} {commit.reference}"
    return base


def render_project_report(report: ProjectReport) -> str:
    out: list[str] = []
    for group in report.groups.values():
        out.append(group.header)
        out.extend(group.lines)
        out.append(f"{SUBTOTAL_PREFIX} {group.count} x {fmt_number(group.unit_value)} = {fmt_number(group.subtotal)}")
        out.append("")
    out.append(f"{PROJECT_TOTAL_PREFIX} {fmt_number(report.total)}")
    return "\n".join(out)


def render_final_report(
    final: FinalReport,
    rules: dict[str, CategoryRule],
    *,
    extra_codes: list[str],
    card: str = "",
    label: str = DEFAULT_REFERENCE_LABEL,
) -> str:
    out: list[str] = []
    headers = list(final.categories)
    for i, header in enumerate(headers):
        out.append(header)
        out.append("")
        for project, lines in final.categories[header].items():
            out.append(f"[{project}]")
            out.extend(lines)
            out.append("")
        if i < len(headers) - 1:
            out.append(DIVIDER)
            out.append("")

    if headers and extra_codes:
        out.append(DIVIDER)
        out.append("")
    for i, code in enumerate(extra_codes):
        rule = rules.get(code)
        if rule is None:
            continue
        out.append(rule.header)
        if card:
            out.append(f"{label} {card}")
        # position in the configured list, not among emitted entries
        if i < len(extra_codes) - 1:
            out.append(DIVIDER)
        out.append("")
    return "\n".join(out)
