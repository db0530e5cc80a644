"""Rule registry for the style checker."""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Callable, Dict, FrozenSet, Iterable, Iterator, List, Optional, Protocol, Tuple, Union

from stylecheck.errors import DuplicateRuleName, RegistryFrozen
from stylecheck.nodes import NodeKind, SyntaxNode
from stylecheck.result import Diagnostic, Finding
from stylecheck.severity import Severity
from stylecheck.utils.text_index import SourceText

if TYPE_CHECKING:
    from stylecheck.config import LintConfig

logger = logging.getLogger(__name__)

RuleOutput = Union[None, Finding, Diagnostic, Iterable[Union[Finding, Diagnostic]]]


class RuleCallback(Protocol):
    """Signature implemented by every rule."""

    def __call__(self, node: SyntaxNode, source: SourceText) -> RuleOutput:
        """Inspect ``node`` and return zero or more findings."""


@dataclass(frozen=True)
class RegisteredRule:
    """A rule callback together with its registration key."""

    name: str
    kinds: FrozenSet[NodeKind]
    callback: RuleCallback
    severity: Severity = Severity.WARNING
    description: str = ""


class RuleRegistry:
    """Map node kinds to the rules interested in them, in registration order.

    Lookups never lock; once :meth:`freeze` is called the registry rejects
    further registrations and is safe to share between threads.
    """

    def __init__(self) -> None:
        self._rules: Dict[str, RegisteredRule] = {}
        self._by_kind: Dict[NodeKind, Tuple[RegisteredRule, ...]] = {}
        self._frozen = False

    def register(
        self,
        name: str,
        kinds: Iterable[NodeKind],
        callback: RuleCallback,
        severity: Severity = Severity.WARNING,
        description: str = "",
    ) -> RegisteredRule:
        kind_set = frozenset(kinds)
        if not kind_set:
            raise ValueError(f"Rule {name!r} must declare at least one node kind")
        rule = RegisteredRule(name, kind_set, callback, severity, description)
        self._add(rule)
        return rule

    def rule(
        self,
        name: str,
        kinds: Iterable[NodeKind],
        severity: Severity = Severity.WARNING,
        description: str = "",
    ) -> Callable[[RuleCallback], RuleCallback]:
        """Decorator form of :meth:`register`."""

        def decorator(callback: RuleCallback) -> RuleCallback:
            self.register(name, kinds, callback, severity, description or (callback.__doc__ or "").strip())
            return callback

        return decorator

    def _add(self, rule: RegisteredRule) -> None:
        if self._frozen:
            raise RegistryFrozen(f"Cannot register {rule.name!r}: registry is frozen")
        if rule.name in self._rules:
            raise DuplicateRuleName(rule.name)
        self._rules[rule.name] = rule
        # Kinds are iterated in enum order so the table does not depend on set hashing.
        for kind in NodeKind:
            if kind in rule.kinds:
                self._by_kind[kind] = self._by_kind.get(kind, ()) + (rule,)

    def lookup(self, kind: NodeKind) -> Tuple[RegisteredRule, ...]:
        return self._by_kind.get(kind, ())

    def get(self, name: str) -> Optional[RegisteredRule]:
        return self._rules.get(name)

    def names(self) -> List[str]:
        return list(self._rules)

    def freeze(self) -> "RuleRegistry":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def configured(self, config: "LintConfig") -> "RuleRegistry":
        """Return a frozen copy with ``config`` applied."""

        config.validate(self._rules)
        selected = RuleRegistry()
        for rule in self._rules.values():
            if rule.name in config.disable:
                logger.debug("Rule %s disabled by configuration", rule.name)
                continue
            override = config.severity.get(rule.name)
            selected._add(replace(rule, severity=override) if override else rule)
        return selected.freeze()

    def __iter__(self) -> Iterator[RegisteredRule]:
        return iter(self._rules.values())

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, name: object) -> bool:
        return name in self._rules


def load_rules(registry: RuleRegistry) -> RuleRegistry:
    """Register every built-in rule module into ``registry``."""

    from . import blocks, layout, naming, statements

    for module in (naming, layout, blocks, statements):
        module.register(registry)
    return registry


@functools.lru_cache(maxsize=None)
def default_registry() -> RuleRegistry:
    """Return the process-wide registry of built-in rules, built once."""

    registry = load_rules(RuleRegistry()).freeze()
    logger.debug("Registered %d built-in rules", len(registry))
    return registry
