"""
import_engine.report - Structured result of a CSV import run.

Exactly one RowMessage is recorded per processed data row.  Secondary
facts about a row (pages created for references, files that failed to
attach) ride along in RowMessage.details.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional


class Severity(str, Enum):
    INFO    = "info"
    WARNING = "warning"
    ERROR   = "error"


class Outcome(str, Enum):
    CREATED   = "created"
    MODIFIED  = "modified"
    UNCHANGED = "unchanged"
    SKIPPED   = "skipped"
    FAILED    = "failed"


_DEFAULT_SEVERITY = {
    Outcome.CREATED:   Severity.INFO,
    Outcome.MODIFIED:  Severity.INFO,
    Outcome.UNCHANGED: Severity.INFO,
    Outcome.SKIPPED:   Severity.WARNING,
    Outcome.FAILED:    Severity.ERROR,
}


@dataclass
class RowMessage:
    row: int
    outcome: Outcome
    severity: Severity
    name: str
    reason: str
    details: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "row": self.row,
            "outcome": self.outcome.value,
            "severity": self.severity.value,
            "name": self.name,
            "reason": self.reason,
            "details": list(self.details),
        }


@dataclass
class ImportReport:
    total_rows: int = 0
    imported: int = 0
    messages: list[RowMessage] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)     # run-level, e.g. column binding
    binding: Optional[dict] = None

    def add(
        self,
        row: int,
        outcome: Outcome,
        name: Optional[str],
        reason: str,
        details: Iterable[str] = (),
        severity: Optional[Severity] = None,
    ) -> RowMessage:
        msg = RowMessage(
            row=row,
            outcome=outcome,
            severity=severity or _DEFAULT_SEVERITY[outcome],
            name=name or "",
            reason=reason,
            details=list(details),
        )
        self.messages.append(msg)
        if outcome in (Outcome.CREATED, Outcome.MODIFIED):
            self.imported += 1
        return msg

    def count(self, outcome: Outcome) -> int:
        return sum(1 for m in self.messages if m.outcome is outcome)

    @property
    def errors(self) -> list[RowMessage]:
        return [m for m in self.messages if m.severity is Severity.ERROR]

    def to_dict(self) -> dict:
        return {
            "total_rows": self.total_rows,
            "imported": self.imported,
            "created": self.count(Outcome.CREATED),
            "modified": self.count(Outcome.MODIFIED),
            "unchanged": self.count(Outcome.UNCHANGED),
            "skipped": self.count(Outcome.SKIPPED),
            "failed": self.count(Outcome.FAILED),
            "warnings": list(self.warnings),
            "binding": self.binding,
            "messages": [m.to_dict() for m in self.messages],
        }
