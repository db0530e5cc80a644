"""Walk a syntax tree and dispatch each node to the rules registered for its kind."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Set, Tuple

from .errors import FileUnavailable
from .nodes import SyntaxNode
from .result import Diagnostic, Finding, LintResult, RuleFault
from .rules import RegisteredRule, RuleRegistry, default_registry
from .utils.text_index import SourceText, TextIndex
from .utils.tree import load_tree

logger = logging.getLogger(__name__)

StopCheck = Callable[[], bool]


def invoke(
    rule: RegisteredRule,
    node: SyntaxNode,
    source: SourceText,
) -> Tuple[List[Diagnostic], Optional[RuleFault]]:
    """Run one rule on one node; never raises.

    Returns the diagnostics of the invocation, or an empty list and the
    fault that replaced them.
    """

    try:
        output = rule.callback(node, source)
        diagnostics = _normalize(rule, node, output)
    except FileUnavailable as exc:
        logger.debug("Rule %s skipped %r: %s", rule.name, node, exc)
        return [], None
    except _MalformedOutput as exc:
        logger.warning("Rule %s returned malformed output for %r: %s", rule.name, node, exc)
        return [], RuleFault(rule.name, "malformed-result", node.span, str(exc))
    except Exception as exc:
        logger.warning("Rule %s raised on %r: %s: %s", rule.name, node, type(exc).__name__, exc)
        return [], RuleFault(rule.name, "exception", node.span, f"{type(exc).__name__}: {exc}")
    return diagnostics, None


class _MalformedOutput(Exception):
    pass


def _normalize(rule: RegisteredRule, node: SyntaxNode, output: object) -> List[Diagnostic]:
    if output is None:
        return []
    if isinstance(output, (Finding, Diagnostic)):
        return [_stamp(rule, output)]
    if isinstance(output, (str, bytes)) or not isinstance(output, Iterable):
        raise _MalformedOutput(f"unexpected {type(output).__name__}")
    diagnostics = []
    for item in output:
        if not isinstance(item, (Finding, Diagnostic)):
            raise _MalformedOutput(f"unexpected {type(item).__name__} in results")
        diagnostics.append(_stamp(rule, item))
    return diagnostics


def _stamp(rule: RegisteredRule, item: Finding | Diagnostic) -> Diagnostic:
    if isinstance(item, Diagnostic):
        return replace(item, rule_name=rule.name, severity=rule.severity)
    return Diagnostic(
        message=item.message,
        severity=item.severity or rule.severity,
        rule_name=rule.name,
        span=item.span,
    )


def traverse(
    root: SyntaxNode,
    path: Optional[str] = None,
    registry: Optional[RuleRegistry] = None,
    should_stop: Optional[StopCheck] = None,
) -> LintResult:
    """Visit ``root`` and its descendants in pre-order and collect diagnostics.

    Diagnostics of an ancestor precede those of its descendants and
    diagnostics on one node follow rule registration order. ``path`` is the
    source file used by text rules when a span carries none. ``should_stop``
    is polled between node visits; returning true ends the walk early.
    """

    registry = registry if registry is not None else default_registry()
    source = SourceText(TextIndex(), default_path=path or root.span.file)
    result = LintResult(path=source.default_path)
    seen: Set[int] = set()
    stack = [root]

    while stack:
        if should_stop is not None and should_stop():
            logger.info("Traversal of %s stopped after %d nodes", result.path, result.nodes_visited)
            result.aborted = True
            break
        node = stack.pop()
        if id(node) in seen:
            logger.warning("Node %r reached twice; skipping shared subtree", node)
            continue
        seen.add(id(node))
        result.nodes_visited += 1

        for rule in registry.lookup(node.kind):
            diagnostics, fault = invoke(rule, node, source)
            if fault is not None:
                result.add_fault(fault)
            for diagnostic in diagnostics:
                result.add_diagnostic(diagnostic)

        stack.extend(reversed(node.children))

    logger.debug(
        "Traversed %s: %d nodes, %d diagnostics, %d faults",
        result.path,
        result.nodes_visited,
        len(result.diagnostics),
        len(result.faults),
    )
    return result


def lint_tree_file(
    tree_path: str,
    registry: Optional[RuleRegistry] = None,
    source_path: Optional[str] = None,
) -> LintResult:
    """Load one serialized tree and traverse it."""

    root = load_tree(Path(tree_path), file=source_path)
    if root is None:
        raise FileUnavailable(tree_path, "tree document not found")
    return traverse(root, path=source_path, registry=registry)


def lint_tree_files(
    tree_paths: Sequence[str],
    registry: Optional[RuleRegistry] = None,
    source_paths: Optional[Sequence[Optional[str]]] = None,
    jobs: int = 1,
) -> List[LintResult]:
    """Traverse many trees, in parallel when ``jobs > 1``; results keep input order."""

    registry = registry if registry is not None else default_registry()
    sources = list(source_paths) if source_paths else [None] * len(tree_paths)
    if len(sources) != len(tree_paths):
        raise ValueError("source_paths must pair one-to-one with tree_paths")

    if jobs <= 1 or len(tree_paths) <= 1:
        return [lint_tree_file(tree, registry, src) for tree, src in zip(tree_paths, sources)]
    with ThreadPoolExecutor(max_workers=jobs) as executor:
        futures = [executor.submit(lint_tree_file, tree, registry, src) for tree, src in zip(tree_paths, sources)]
        return [future.result() for future in futures]
