"""Shared data models for the repository parser."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class SyntaxDiagnostic:
    """One grammar deviation reported by the parser."""

    line: int
    column: int
    message: str
    kind: str = "SyntaxError"

    def __str__(self) -> str:
        return f"line {self.line}:{self.column} - {self.message}"


@dataclass
class ParseRecord:
    """Tracks the parse (and optional render) result for a single source file."""

    filename: str
    filepath: str
    status: str = "pending"
    diagnostics: list[SyntaxDiagnostic] = field(default_factory=list)
    error: Optional[str] = None
    image_path: Optional[str] = None
    parse_time_s: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.status == "success"


@dataclass
class RunSummary:
    """Running totals for one traversal of a repository."""

    total: int = 0
    succeeded: int = 0
    failed: int = 0
    records: list[ParseRecord] = field(default_factory=list)

    def add(self, record: ParseRecord) -> None:
        self.records.append(record)
        self.total += 1
        if record.succeeded:
            self.succeeded += 1
        else:
            self.failed += 1

    @property
    def failures(self) -> list[ParseRecord]:
        return [r for r in self.records if not r.succeeded]
