"""Typed syntax tree consumed by the rule engine.

The tree is produced by an external parser (or loaded from a serialized
document with :mod:`stylecheck.utils.tree`). Children are owned by their
parent; the ``parent`` link is a weak reference used for lookups only.
"""

from __future__ import annotations

import weakref
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional


class NodeKind(str, Enum):
    """Closed set of node kinds that rules can register against."""

    FUNCTION_DEFINITION = "FunctionDefinition"
    TYPE_DEFINITION = "TypeDefinition"
    PARAMETER = "Parameter"
    ATTRIBUTE = "Attribute"
    VARIABLE_REFERENCE = "VariableReference"
    COMMAND = "Command"
    NAMED_BLOCK = "NamedBlock"
    SCRIPT_BLOCK = "ScriptBlock"
    RETURN_STATEMENT = "ReturnStatement"
    SUB_EXPRESSION = "SubExpression"
    CONTINUE_STATEMENT = "ContinueStatement"
    LOOP_STATEMENT = "LoopStatement"
    STATEMENT = "Statement"
    EXPRESSION = "Expression"


@dataclass(frozen=True)
class Span:
    """Source extent of a node. Lines and columns are 1-based."""

    start_offset: int
    end_offset: int
    start_line: int
    end_line: int
    file: Optional[str] = None
    start_column: int = 1
    end_column: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file": self.file,
            "start_offset": self.start_offset,
            "end_offset": self.end_offset,
            "start_line": self.start_line,
            "end_line": self.end_line,
            "start_column": self.start_column,
            "end_column": self.end_column,
        }


@dataclass(eq=False)
class SyntaxNode:
    """One construct of a parsed script."""

    kind: NodeKind
    span: Span
    name: Optional[str] = None
    attributes: Dict[str, Any] = field(default_factory=dict)
    children: List["SyntaxNode"] = field(default_factory=list)
    _parent: Optional["weakref.ReferenceType[SyntaxNode]"] = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        for child in self.children:
            child._parent = weakref.ref(self)

    @property
    def parent(self) -> Optional["SyntaxNode"]:
        if self._parent is None:
            return None
        return self._parent()

    @property
    def is_root(self) -> bool:
        return self.parent is None

    def add_child(self, child: "SyntaxNode") -> "SyntaxNode":
        child._parent = weakref.ref(self)
        self.children.append(child)
        return child

    def ancestors(self, limit: Optional[int] = None) -> Iterator["SyntaxNode"]:
        """Yield parents from the nearest outward, at most ``limit`` of them."""

        node = self.parent
        depth = 0
        while node is not None:
            if limit is not None and depth >= limit:
                return
            yield node
            depth += 1
            node = node.parent

    def iter_children_of_kind(self, kind: NodeKind) -> Iterator["SyntaxNode"]:
        return (child for child in self.children if child.kind is kind)

    def walk(self, stop_at: tuple = ()) -> Iterator["SyntaxNode"]:
        """Yield descendants in pre-order, not descending below ``stop_at`` kinds."""

        stack = list(reversed(self.children))
        while stack:
            node = stack.pop()
            yield node
            if node.kind in stop_at:
                continue
            stack.extend(reversed(node.children))

    def __repr__(self) -> str:
        label = f" {self.name!r}" if self.name else ""
        return f"<SyntaxNode {self.kind.value}{label} @{self.span.start_line}>"
