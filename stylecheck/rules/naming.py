"""Naming conventions for functions, types, attributes, variables and constants."""

from __future__ import annotations

import re
from typing import Any, List, Optional

from stylecheck.nodes import NodeKind, SyntaxNode
from stylecheck.result import Finding
from stylecheck.utils.text_index import SourceText

from . import RuleRegistry

# Verb-Noun, each hyphen-separated segment capitalized; the noun may be several words.
FUNCTION_NAME_PATTERN = re.compile(r"^[A-Z][a-z]+-(?:[A-Z][a-z0-9]+)+$")
# A single capitalized word.
TYPE_NAME_PATTERN = re.compile(r"^[A-Z][a-z0-9]*$")
LEADING_CAPITAL_PATTERN = re.compile(r"^[A-Z]")

GLOBAL_SCOPE = "global"
CONSTANT_COMMANDS = {"set-variable", "new-variable"}


def check_function_name(node: SyntaxNode, source: SourceText) -> Optional[Finding]:
    if node.name and FUNCTION_NAME_PATTERN.match(node.name):
        return None
    return Finding(f"Function name '{node.name}' must be in Verb-Noun Pascal Case.", node.span)


def check_type_name(node: SyntaxNode, source: SourceText) -> Optional[Finding]:
    if node.name and TYPE_NAME_PATTERN.match(node.name):
        return None
    return Finding(f"Class name '{node.name}' must be a single capitalized word.", node.span)


def check_attribute_name(node: SyntaxNode, source: SourceText) -> Optional[Finding]:
    if _leading_capital(node.name):
        return None
    return Finding(f"Attribute '{node.name}' must start with a capital letter.", node.span)


def check_global_variable_name(node: SyntaxNode, source: SourceText) -> Optional[Finding]:
    scope, _, variable = (node.name or "").lstrip("$").partition(":")
    if scope.lower() != GLOBAL_SCOPE or not variable:
        return None
    if _leading_capital(variable):
        return None
    return Finding(f"Global variable '{variable}' must start with a capital letter.", node.span)


def check_parameter_name(node: SyntaxNode, source: SourceText) -> Optional[Finding]:
    name = (node.name or "").lstrip("$")
    if _leading_capital(name):
        return None
    return Finding(f"Parameter '{name}' must start with a capital letter.", node.span)


def check_constant_name(node: SyntaxNode, source: SourceText) -> Optional[Finding]:
    if (node.name or "").lower() not in CONSTANT_COMMANDS:
        return None
    arguments = [str(arg) for arg in node.attributes.get("arguments") or []]
    option = _named_argument(arguments, "-Option")
    if option is None or "constant" not in option.lower():
        return None
    name = _named_argument(arguments, "-Name")
    if name is None:
        name = _first_positional(arguments)
    if name is None:
        return None
    name = name.strip("'\"")
    if _leading_capital(name):
        return None
    return Finding(f"Constant '{name}' must start with a capital letter.", node.span)


def _leading_capital(name: Optional[str]) -> bool:
    return bool(name) and LEADING_CAPITAL_PATTERN.match(name) is not None


def _named_argument(arguments: List[str], flag: str) -> Optional[str]:
    for index, argument in enumerate(arguments[:-1]):
        if argument.lower() == flag.lower():
            return arguments[index + 1]
    return None


def _first_positional(arguments: List[str]) -> Optional[str]:
    skip_next = False
    for argument in arguments:
        if skip_next:
            skip_next = False
            continue
        if argument.startswith("-"):
            skip_next = True
            continue
        return argument
    return None


def register(registry: RuleRegistry) -> None:
    rules: List[Any] = [
        ("FunctionName", NodeKind.FUNCTION_DEFINITION, check_function_name,
         "Function names use Verb-Noun Pascal Case."),
        ("TypeName", NodeKind.TYPE_DEFINITION, check_type_name,
         "Class names are a single capitalized word."),
        ("AttributeName", NodeKind.ATTRIBUTE, check_attribute_name,
         "Attribute names start with a capital letter."),
        ("GlobalVariableName", NodeKind.VARIABLE_REFERENCE, check_global_variable_name,
         "Global variables start with a capital letter."),
        ("ParameterName", NodeKind.PARAMETER, check_parameter_name,
         "Parameter names start with a capital letter."),
        ("ConstantName", NodeKind.COMMAND, check_constant_name,
         "Constants declared with Set-Variable/New-Variable start with a capital letter."),
    ]
    for name, kind, callback, description in rules:
        registry.register(name, {kind}, callback, description=description)
