"""Ordering of the named blocks in scripts and function bodies."""

from __future__ import annotations

from typing import Optional

from stylecheck.nodes import NodeKind, SyntaxNode
from stylecheck.result import Finding
from stylecheck.utils.text_index import SourceText

from . import RuleRegistry

BLOCK_ORDER = {"param": 0, "begin": 1, "process": 2, "end": 3, "clean": 4}


def _is_checked_scope(node: SyntaxNode) -> bool:
    if node.kind is NodeKind.FUNCTION_DEFINITION:
        return True
    parent = node.parent
    return parent is None or parent.kind is NodeKind.FUNCTION_DEFINITION


def check_named_block_order(node: SyntaxNode, source: SourceText) -> Optional[Finding]:
    if not _is_checked_scope(node):
        return None
    blocks = [
        child
        for child in node.iter_children_of_kind(NodeKind.NAMED_BLOCK)
        if (child.name or "").lower() in BLOCK_ORDER
    ]
    blocks.sort(key=lambda block: block.span.start_offset)
    for previous, current in zip(blocks, blocks[1:]):
        if BLOCK_ORDER[current.name.lower()] < BLOCK_ORDER[previous.name.lower()]:
            return Finding(
                f"'{current.name}' block must come before '{previous.name}' block "
                "(expected order: param, begin, process, end, clean).",
                current.span,
            )
    return None


def register(registry: RuleRegistry) -> None:
    registry.register(
        "NamedBlockOrder",
        {NodeKind.SCRIPT_BLOCK, NodeKind.FUNCTION_DEFINITION},
        check_named_block_order,
        description="Named blocks appear in param, begin, process, end, clean order.",
    )
