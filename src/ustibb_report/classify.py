from __future__ import annotations

from pathlib import PurePosixPath

from .models import CREATION, MODIFICATION, CategoryRule


def extension_for_path(path: str) -> str:
    base = path.replace("\\", "/").rsplit("/", 1)[-1]
    return PurePosixPath(base).suffix.lower() if base else ""


def is_creation_status(status: str) -> bool:
    return status.startswith("A")


def classify(rules: list[CategoryRule], path: str, status: str) -> str | None:
    """
    Return the code of the first rule (in list order) that claims the file's
    extension for the change's action, or None when no rule does.

    Rules may overlap on extension and action; the earlier rule always wins.
    """
    ext = extension_for_path(path)
    wanted = CREATION if is_creation_status(status) else MODIFICATION
    for rule in rules:
        if ext in rule.extensions and rule.action == wanted:
            return rule.code
    return None
