"""Severity definitions for style diagnostics."""

from __future__ import annotations

from enum import Enum


class Severity(str, Enum):
    """Enumerate the supported severity levels for diagnostics."""

    ERROR = "Error"
    WARNING = "Warning"
    INFORMATION = "Information"

    @property
    def exit_priority(self) -> int:
        """Return an integer ranking to drive exit code decisions."""

        ordering = {
            Severity.ERROR: 2,
            Severity.WARNING: 1,
            Severity.INFORMATION: 0,
        }
        return ordering[self]

    @classmethod
    def parse(cls, value: str) -> "Severity":
        """Look up a severity by name, ignoring case."""

        for severity in cls:
            if severity.value.lower() == str(value).lower():
                return severity
        raise ValueError(f"Unknown severity: {value!r}")
