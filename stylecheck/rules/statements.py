"""Statement-level rules: loop control, parameter sets and return values."""

from __future__ import annotations

from typing import Any, Dict, Optional

from stylecheck.nodes import NodeKind, SyntaxNode
from stylecheck.result import Finding
from stylecheck.severity import Severity
from stylecheck.utils.text_index import SourceText

from . import RuleRegistry

MAX_ANCESTOR_DEPTH = 64


def check_continue_in_loop(node: SyntaxNode, source: SourceText) -> Optional[Finding]:
    depth = 0
    for ancestor in node.ancestors(limit=MAX_ANCESTOR_DEPTH):
        depth += 1
        if ancestor.kind is NodeKind.LOOP_STATEMENT:
            return None
        if ancestor.kind is NodeKind.FUNCTION_DEFINITION or ancestor.parent is None:
            return Finding("'continue' used outside of a loop.", node.span)
    if depth == 0:
        return Finding("'continue' used outside of a loop.", node.span)
    return None


def _named_arguments(node: SyntaxNode) -> Dict[str, Any]:
    arguments = node.attributes.get("named_arguments") or {}
    return {str(key).lower(): value for key, value in arguments.items()}


def check_default_parameter_set(node: SyntaxNode, source: SourceText) -> Optional[Finding]:
    cmdlet_binding = None
    uses_parameter_sets = False
    for child in node.walk(stop_at=(NodeKind.FUNCTION_DEFINITION,)):
        if child.kind is not NodeKind.ATTRIBUTE:
            continue
        name = (child.name or "").lower()
        if name == "cmdletbinding" and cmdlet_binding is None:
            cmdlet_binding = child
        elif name == "parameter" and "parametersetname" in _named_arguments(child):
            uses_parameter_sets = True
    if not uses_parameter_sets:
        return None
    if cmdlet_binding is not None and _named_arguments(cmdlet_binding).get("defaultparametersetname"):
        return None
    anchor = cmdlet_binding or node
    return Finding(
        f"Function '{node.name}' uses parameter sets but sets no DefaultParameterSetName in [CmdletBinding()].",
        anchor.span,
    )


def check_return_sub_expression(node: SyntaxNode, source: SourceText) -> Optional[Finding]:
    if node.children and node.children[0].kind is NodeKind.SUB_EXPRESSION:
        return Finding("Return the value directly instead of wrapping it in a sub-expression.", node.children[0].span)
    return None


def register(registry: RuleRegistry) -> None:
    registry.register(
        "ContinueOutsideLoop",
        {NodeKind.CONTINUE_STATEMENT},
        check_continue_in_loop,
        severity=Severity.ERROR,
        description="'continue' only appears inside a loop of the same function.",
    )
    registry.register(
        "DefaultParameterSet",
        {NodeKind.FUNCTION_DEFINITION},
        check_default_parameter_set,
        description="Functions with parameter sets declare a DefaultParameterSetName.",
    )
    registry.register(
        "ReturnSubExpression",
        {NodeKind.RETURN_STATEMENT},
        check_return_sub_expression,
        severity=Severity.INFORMATION,
        description="Return values are not wrapped in $( ).",
    )
