from __future__ import annotations

import json
from pathlib import Path

from .models import CREATION, MODIFICATION, CategoryRule

CREATION_KEYWORD = "cria"
MODIFICATION_KEYWORD = "altera"

_ACTION_ALIASES = {
    "cria": CREATION,
    "criacao": CREATION,
    "criação": CREATION,
    "creation": CREATION,
    "altera": MODIFICATION,
    "alteracao": MODIFICATION,
    "alteração": MODIFICATION,
    "modification": MODIFICATION,
}


class RuleError(ValueError):
    pass


def action_from_description(code: str, description: str) -> str | None:
    desc = description.lower()
    is_creation = CREATION_KEYWORD in desc
    is_modification = MODIFICATION_KEYWORD in desc
    if is_creation and is_modification:
        raise RuleError(f"rule {code}: description mentions both {CREATION_KEYWORD!r} and {MODIFICATION_KEYWORD!r}; set 'acao'")
    if is_creation:
        return CREATION
    if is_modification:
        return MODIFICATION
    # not billed per file, e.g. meetings listed as extra categories
    return None


def _normalize_extension(ext: str) -> str:
    e = str(ext).strip().lower()
    if e and not e.startswith("."):
        e = "." + e
    return e


def parse_rule(code: str, entry: dict) -> CategoryRule:
    code = str(code or "").strip()
    if not code:
        raise RuleError("rule without a code")
    if not isinstance(entry, dict):
        raise RuleError(f"rule {code}: expected an object, got {type(entry).__name__}")

    description = entry.get("descricao")
    if not isinstance(description, str) or not description.strip():
        raise RuleError(f"rule {code}: missing 'descricao'")

    unit_value = entry.get("ustibb")
    if isinstance(unit_value, bool) or not isinstance(unit_value, (int, float)):
        raise RuleError(f"rule {code}: 'ustibb' must be a number, got {unit_value!r}")

    extensions = entry.get("extensoes")
    if not isinstance(extensions, list):
        raise RuleError(f"rule {code}: 'extensoes' must be a list")

    raw_action = entry.get("acao")
    if raw_action is None:
        action = action_from_description(code, description)
    else:
        action = _ACTION_ALIASES.get(str(raw_action).strip().lower(), "")
        if not action:
            raise RuleError(f"rule {code}: unknown 'acao' {raw_action!r}")

    return CategoryRule(
        code=code,
        description=description,
        unit_value=unit_value,
        extensions=frozenset(e for e in (_normalize_extension(x) for x in extensions) if e),
        action=action,
    )


def parse_rules(data: object) -> list[CategoryRule]:
    """
    Build the ordered rule list from either shape of the rule file:
      - {"5.1.1": {"descricao": ..., "ustibb": ..., "extensoes": [...]}, ...}
      - [{"codigo": "5.1.1", "descricao": ..., ...}, ...]
    Document order is precedence order.
    """
    if isinstance(data, dict):
        items = list(data.items())
    elif isinstance(data, list):
        items = []
        for entry in data:
            if not isinstance(entry, dict):
                raise RuleError(f"rule list entries must be objects, got {type(entry).__name__}")
            items.append((entry.get("codigo", ""), entry))
    else:
        raise RuleError("rule file must hold an object or a list")

    rules: list[CategoryRule] = []
    seen: set[str] = set()
    for code, entry in items:
        rule = parse_rule(code, entry)
        if rule.code in seen:
            raise RuleError(f"duplicate rule code: {rule.code}")
        seen.add(rule.code)
        rules.append(rule)
    return rules


def load_rules(path: Path) -> list[CategoryRule]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise RuleError(f"{path}: invalid JSON ({e})") from e
    return parse_rules(data)


def rules_by_code(rules: list[CategoryRule]) -> dict[str, CategoryRule]:
    return {r.code: r for r in rules}
