from __future__ import annotations

import json
import sys
from pathlib import Path

_REGEX_SPECIALS = set(".*+?^${}()|[]\\")


def load_author_map(path: Path) -> dict[str, dict]:
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        print(f"Could not read author map {path}: {e}", file=sys.stderr)
        return {}
    if not isinstance(data, dict):
        print(f"Could not read author map {path}: expected an object", file=sys.stderr)
        return {}
    return data


def _str_list(value: object) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if isinstance(v, str)]


def resolve_author_matchers(author_id: str, author_map: dict[str, dict] | None = None) -> list[str]:
    """
    Expand an author id into every name/email/login it commits under.

    The author map looks like:
      {"jdoe": {"aliases": [...], "names": [...], "emails": [...], "logins": [...]}}
    Unknown ids resolve to themselves.
    """
    entry = (author_map or {}).get(author_id) or {}
    if not isinstance(entry, dict):
        entry = {}
    parts = [
        author_id,
        *_str_list(entry.get("aliases")),
        *_str_list(entry.get("names")),
        *_str_list(entry.get("emails")),
        *_str_list(entry.get("logins")),
    ]
    out: list[str] = []
    for p in parts:
        p = (p or "").strip()
        if p and p not in out:
            out.append(p)
    if not out:
        print(f"Warning: no author matchers resolved for {author_id!r}, using raw value.", file=sys.stderr)
        return [author_id]
    return out


def escape_regex(value: str) -> str:
    return "".join("\\" + ch if ch in _REGEX_SPECIALS else ch for ch in value)


def author_pattern(matchers: list[str]) -> str:
    return "|".join(escape_regex(m) for m in matchers if m)
