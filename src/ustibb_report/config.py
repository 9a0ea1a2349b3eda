from __future__ import annotations

import dataclasses
import json
from pathlib import Path

from .git import DEFAULT_EXCLUDE_DIRNAMES

DEFAULT_EXTRA_CATEGORIES = ("5.32.1", "5.32.2", "5.32.3")


@dataclasses.dataclass(frozen=True)
class RunConfig:
    author: str = ""
    since: str = ""
    until: str = ""
    period: str = ""
    base_dir: Path = Path("..")
    output_dir: Path = Path("output")
    allow_duplicates: bool = True
    card: str = ""
    rules_path: Path = Path("ustibb_map.json")
    author_map_path: Path = Path("author_map.json")
    extra_categories: tuple[str, ...] = DEFAULT_EXTRA_CATEGORIES
    exclude_dirnames: frozenset[str] = DEFAULT_EXCLUDE_DIRNAMES
    include_merges: bool = False


def load_config(config_path: Path) -> dict:
    if not config_path.exists():
        return {}
    data = json.loads(config_path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{config_path}: expected a JSON object")
    return data


def _resolve(value: object, default: Path, base: Path) -> Path:
    s = str(value or "").strip()
    p = Path(s) if s else default
    return p if p.is_absolute() else (base / p)


def _str(value: object) -> str:
    return value.strip() if isinstance(value, str) else ""


def build_run_config(config: dict, *, base: Path) -> RunConfig:
    """
    Turn a raw config.json dict into a RunConfig. Relative paths resolve
    against `base` (the directory holding config.json).

    `allowDuplicates` falls back to true unless it is a real boolean; `card`
    falls back to the legacy `task` key.
    """
    allow_duplicates = config.get("allowDuplicates")
    if not isinstance(allow_duplicates, bool):
        allow_duplicates = True

    card = config.get("card")
    if not isinstance(card, str):
        card = config.get("task") if isinstance(config.get("task"), str) else ""

    extras_raw = config.get("extraCategories")
    if isinstance(extras_raw, list):
        extras = tuple(str(c).strip() for c in extras_raw if str(c).strip())
    else:
        extras = DEFAULT_EXTRA_CATEGORIES

    exclude_raw = config.get("excludeDirnames")
    exclude = set(DEFAULT_EXCLUDE_DIRNAMES)
    if isinstance(exclude_raw, list):
        exclude.update(str(d) for d in exclude_raw if str(d).strip())

    return RunConfig(
        author=_str(config.get("author")),
        since=_str(config.get("since")),
        until=_str(config.get("until")),
        period=_str(config.get("period")),
        base_dir=_resolve(config.get("baseDir"), Path(".."), base),
        output_dir=_resolve(config.get("outputDir"), Path("output"), base),
        allow_duplicates=allow_duplicates,
        card=card.strip(),
        rules_path=_resolve(config.get("rulesPath"), Path("ustibb_map.json"), base),
        author_map_path=_resolve(config.get("authorMapPath"), Path("author_map.json"), base),
        extra_categories=extras,
        exclude_dirnames=frozenset(exclude),
        include_merges=config.get("includeMerges") is True,
    )
