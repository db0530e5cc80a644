"""Configuration file support."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, Optional

import yaml

from .errors import ConfigError
from .severity import Severity
from .utils import read_yaml_file

DEFAULT_CONFIG_FILENAME = ".stylecheck.yaml"
KNOWN_KEYS = {"disable", "severity", "fail_on"}


@dataclass(frozen=True)
class LintConfig:
    """Rule selection and severity overrides applied to the registry."""

    disable: FrozenSet[str] = frozenset()
    severity: Dict[str, Severity] = field(default_factory=dict)
    fail_on: Severity = Severity.WARNING

    def validate(self, known_rules: Iterable[str]) -> None:
        known = set(known_rules)
        unknown = sorted((set(self.disable) | set(self.severity)) - known)
        if unknown:
            raise ConfigError(f"Unknown rule name(s) in configuration: {', '.join(unknown)}")


def load_config(path: Optional[Path]) -> LintConfig:
    """Read a YAML config; a missing file gives the defaults."""

    if path is None:
        return LintConfig()
    try:
        data = read_yaml_file(path)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Config {path} is not valid YAML: {exc}") from exc
    if data is None:
        return LintConfig()
    return parse_config(data)


def parse_config(data: Any) -> LintConfig:
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping")
    unknown_keys = sorted(set(data) - KNOWN_KEYS)
    if unknown_keys:
        raise ConfigError(f"Unknown configuration key(s): {', '.join(unknown_keys)}")

    disable = data.get("disable") or []
    if isinstance(disable, str):
        disable = [disable]
    if not isinstance(disable, list) or not all(isinstance(name, str) for name in disable):
        raise ConfigError("'disable' must be a list of rule names")

    overrides = data.get("severity") or {}
    if not isinstance(overrides, dict):
        raise ConfigError("'severity' must map rule names to severities")
    try:
        severity = {str(name): Severity.parse(value) for name, value in overrides.items()}
        fail_on = Severity.parse(data.get("fail_on", Severity.WARNING.value))
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc

    return LintConfig(disable=frozenset(disable), severity=severity, fail_on=fail_on)
