"""Core result data structures for the style checker."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .nodes import Span
from .severity import Severity

SEVERITY_ORDER: Sequence[Severity] = (
    Severity.ERROR,
    Severity.WARNING,
    Severity.INFORMATION,
)


@dataclass(frozen=True)
class Finding:
    """A violation reported by a rule, before it is stamped with provenance."""

    message: str
    span: Span
    severity: Optional[Severity] = None


@dataclass(frozen=True)
class Diagnostic:
    """Capture a single reported style violation."""

    message: str
    severity: Severity
    rule_name: str
    span: Span

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "severity": self.severity.value,
            "rule_name": self.rule_name,
            "span": self.span.to_dict(),
        }


@dataclass(frozen=True)
class RuleFault:
    """Record a rule that failed on a node. Never shown as a diagnostic."""

    rule_name: str
    kind: str
    span: Span
    error: str


@dataclass
class Summary:
    """Aggregate diagnostic counts by severity."""

    error: int = 0
    warning: int = 0
    information: int = 0

    def increment(self, severity: Severity) -> None:
        attr = severity.value.lower()
        setattr(self, attr, getattr(self, attr) + 1)

    def to_dict(self) -> Dict[str, int]:
        return {severity.value.lower(): getattr(self, severity.value.lower()) for severity in SEVERITY_ORDER}

    def as_rows(self) -> List[Tuple[str, int]]:
        """Return severity/count pairs ordered for reporting."""

        return [(severity.value, getattr(self, severity.value.lower())) for severity in SEVERITY_ORDER]

    @property
    def total(self) -> int:
        return sum(getattr(self, severity.value.lower()) for severity in SEVERITY_ORDER)


@dataclass
class LintResult:
    """Ordered diagnostics of one traversal, plus the faults it swallowed."""

    path: Optional[str] = None
    summary: Summary = field(default_factory=Summary)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    faults: List[RuleFault] = field(default_factory=list)
    nodes_visited: int = 0
    aborted: bool = False

    def add_diagnostic(self, diagnostic: Diagnostic) -> None:
        self.summary.increment(diagnostic.severity)
        self.diagnostics.append(diagnostic)

    def add_fault(self, fault: RuleFault) -> None:
        self.faults.append(fault)

    def passed(self, fail_on: Severity = Severity.WARNING) -> bool:
        return not any(d.severity.exit_priority >= fail_on.exit_priority for d in self.diagnostics)

    def to_dict(self, fail_on: Severity = Severity.WARNING) -> Dict[str, object]:
        return {
            "path": self.path,
            "summary": self.summary.to_dict(),
            "diagnostics": [diagnostic.to_dict() for diagnostic in self.diagnostics],
            "faults": len(self.faults),
            "aborted": self.aborted,
            "passed": self.passed(fail_on),
        }

    def exit_code(self, fail_on: Severity = Severity.WARNING) -> int:
        worst = max((d.severity.exit_priority for d in self.diagnostics), default=-1)
        if worst < fail_on.exit_priority:
            return 0
        return max(worst, 1)


def format_summary_table(results: Sequence[LintResult], fail_on: Severity = Severity.WARNING) -> str:
    """Create a human-readable report for console output."""

    totals = Summary()
    lines: List[str] = []
    for result in results:
        for diagnostic in result.diagnostics:
            totals.increment(diagnostic.severity)
            span = diagnostic.span
            location = span.file or result.path or "<unknown>"
            lines.append(
                f"{location}:{span.start_line}:{span.start_column}: "
                f"[{diagnostic.severity.value}] {diagnostic.rule_name}: {diagnostic.message}"
            )
    if lines:
        lines.append("")

    lines.append("Lint Summary")
    lines.append("=" * 40)
    header = f"{'Severity':<12} | {'Count':>5}"
    lines.append(header)
    lines.append("-" * len(header))
    for severity, count in totals.as_rows():
        lines.append(f"{severity:<12} | {count:>5}")
    lines.append("-" * len(header))
    passed = all(result.passed(fail_on) for result in results)
    lines.append(f"Status      : {'PASS' if passed else 'FAIL'}")
    lines.append(f"Files       : {len(results)}")
    lines.append(f"Diagnostics : {totals.total}")
    faults = sum(len(result.faults) for result in results)
    if faults:
        lines.append(f"Rule faults : {faults}")
    return "\n".join(lines)
