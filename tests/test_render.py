from __future__ import annotations

from ustibb_report.aggregate import aggregate_project
from ustibb_report.models import CommitRecord, FileChange, FinalReport
from ustibb_report.render import fmt_number, format_change_line, render_final_report, render_project_report
from ustibb_report.rules import parse_rules, rules_by_code

RULES = parse_rules(
    {
        "5.1.1": {"descricao": "Cria tela", "ustibb": 2, "extensoes": [".ui"]},
        "5.1.2": {"descricao": "Altera tela", "ustibb": 1, "extensoes": [".ui"]},
        "5.32.1": {"descricao": "Reunião", "ustibb": 1, "extensoes": [], "acao": "altera"},
        "5.32.2": {"descricao": "Documentação", "ustibb": 1, "extensoes": [], "acao": "altera"},
    }
)


def test_fmt_number() -> None:
    assert fmt_number(3) == "3"
    assert fmt_number(2.0) == "2"
    assert fmt_number(1.5) == "1.5"


def test_format_change_line() -> None:
    commit = CommitRecord(sha="abcdef1234567890", reference="42")
    assert format_change_line("a.ui", commit) == "a.ui#abcdef1234; card 42"
    assert format_change_line("a.ui", commit, label="task") == "a.ui#abcdef1234; task 42"
    assert format_change_line("a.ui", CommitRecord(sha="abcdef1234567890")) == "a.ui#abcdef1234;"


def test_render_project_report() -> None:
    commit = CommitRecord(
        sha="abcdef1234567890",
        subject="card 42 fix",
        reference="42",
        files=[FileChange(path="a.ui", status="A"), FileChange(path="b.ui", status="M")],
    )
    report = aggregate_project(RULES, [commit], allow_duplicates=True, project="p")
    assert render_project_report(report) == "\n".join(
        [
            "5.1.1 - Cria tela",
            "a.ui#abcdef1234; card 42",
            "Total USTIBB: 1 x 2 = 2",
            "",
            "5.1.2 - Altera tela",
            "b.ui#abcdef1234; card 42",
            "Total USTIBB: 1 x 1 = 1",
            "",
            "Total geral do projeto: 3",
        ]
    )


def test_render_empty_project_report() -> None:
    report = aggregate_project(RULES, [], allow_duplicates=True, project="p")
    assert render_project_report(report) == "Total geral do projeto: 0"


def _final() -> FinalReport:
    final = FinalReport()
    final.add("5.1.1 - Cria tela", "alpha", "alpha/a.ui#1111111111;")
    final.add("5.1.1 - Cria tela", "beta", "beta/b.ui#2222222222; card 3")
    final.add("5.1.2 - Altera tela", "beta", "beta/c.ui#3333333333;")
    return final


def test_render_final_report_with_extras_and_card() -> None:
    text = render_final_report(_final(), rules_by_code(RULES), extra_codes=["5.32.1", "5.32.2"], card="99")
    assert text == "\n".join(
        [
            "5.1.1 - Cria tela",
            "",
            "[alpha]",
            "alpha/a.ui#1111111111;",
            "",
            "[beta]",
            "beta/b.ui#2222222222; card 3",
            "",
            "---",
            "",
            "5.1.2 - Altera tela",
            "",
            "[beta]",
            "beta/c.ui#3333333333;",
            "",
            "---",
            "",
            "5.32.1 - Reunião",
            "card 99",
            "---",
            "",
            "5.32.2 - Documentação",
            "card 99",
            "",
        ]
    )


def test_render_final_report_skips_unknown_extras() -> None:
    text = render_final_report(_final(), rules_by_code(RULES), extra_codes=["5.32.1", "5.32.9"])
    assert text.endswith("\n".join(["---", "", "5.32.1 - Reunião", "---", ""]))
    assert "5.32.9" not in text


def test_render_final_report_without_categories_has_no_leading_divider() -> None:
    text = render_final_report(FinalReport(), rules_by_code(RULES), extra_codes=["5.32.1"])
    assert text == "5.32.1 - Reunião\n"
