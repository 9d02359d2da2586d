"""Severity and evaluation result models."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field


class Severity(enum.IntEnum):
    """Check verdict; the integer value is the monitoring plugin exit code."""

    OK = 0
    WARNING = 1
    CRITICAL = 2
    UNKNOWN = 3

    @property
    def label(self) -> str:
        return _SEVERITY_LABELS[self]


_SEVERITY_LABELS: dict[Severity, str] = {
    Severity.OK: "OK - Cluster is healthy.",
    Severity.WARNING: "WARNING - Cluster has warnings.",
    Severity.CRITICAL: "CRITICAL - Cluster has critical issues.",
    Severity.UNKNOWN: "UNKNOWN",
}


@dataclass
class EvaluationResult:
    severity: Severity = Severity.OK
    lines: list[str] = field(default_factory=list)

    def add(self, *lines: str) -> None:
        self.lines.extend(lines)

    def escalate(self, severity: Severity) -> None:
        if severity > self.severity:
            self.severity = severity
