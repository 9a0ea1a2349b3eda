from __future__ import annotations

import dataclasses

CREATION = "creation"
MODIFICATION = "modification"


@dataclasses.dataclass(frozen=True)
class CategoryRule:
    code: str
    description: str
    unit_value: float
    extensions: frozenset[str]
    action: str | None  # CREATION, MODIFICATION or None for rules never matched by files

    @property
    def header(self) -> str:
        return f"{self.code} - {self.description}"


@dataclasses.dataclass(frozen=True)
class FileChange:
    path: str
    status: str  # git name-status letter(s), e.g. "A", "M", "R100"


@dataclasses.dataclass
class CommitRecord:
    sha: str
    author_name: str = ""
    author_email: str = ""
    date_iso: str = ""
    subject: str = ""
    reference: str | None = None
    files: list[FileChange] = dataclasses.field(default_factory=list)

    @property
    def short_sha(self) -> str:
        return self.sha[:10]


@dataclasses.dataclass
class CategoryGroup:
    code: str
    description: str
    unit_value: float
    lines: list[str] = dataclasses.field(default_factory=list)
    seen_paths: set[str] = dataclasses.field(default_factory=set)

    @property
    def header(self) -> str:
        return f"{self.code} - {self.description}"

    @property
    def count(self) -> int:
        return len(self.lines)

    @property
    def subtotal(self) -> float:
        return len(self.lines) * self.unit_value


@dataclasses.dataclass
class ProjectReport:
    project: str
    groups: dict[str, CategoryGroup]  # ascending code order

    @property
    def total(self) -> float:
        return sum(g.subtotal for g in self.groups.values())


@dataclasses.dataclass
class FinalReport:
    # header -> project -> lines; both levels in first-seen order
    categories: dict[str, dict[str, list[str]]] = dataclasses.field(default_factory=dict)

    def add(self, header: str, project: str, line: str) -> None:
        self.categories.setdefault(header, {}).setdefault(project, []).append(line)

    def touch(self, header: str) -> None:
        self.categories.setdefault(header, {})
