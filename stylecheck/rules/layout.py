"""Whitespace and layout rules that read the raw source text."""

from __future__ import annotations

from typing import List, Optional, Sequence

from stylecheck.errors import MalformedNode
from stylecheck.nodes import NodeKind, SyntaxNode
from stylecheck.result import Finding
from stylecheck.severity import Severity
from stylecheck.utils.text_index import SourceText

from . import RuleRegistry

REQUIRED_BLANK_LINES = 2
HELP_KEYWORD = ".synopsis"

MISSING_FINAL_NEWLINE = "File must end with a single newline."
EXTRA_FINAL_NEWLINES = "File must not end with blank lines; keep exactly one trailing newline."


def _is_blank(line: str) -> bool:
    return not line.strip()


def blank_lines_before(lines: Sequence[str], start_line: int) -> Optional[int]:
    """Count blank lines directly above ``start_line``.

    ``None`` means the count ran into the start of the file.
    """

    index = start_line - 2
    count = 0
    while index >= 0 and _is_blank(lines[index]):
        count += 1
        index -= 1
    return None if index < 0 else count


def blank_lines_after(lines: Sequence[str], end_line: int) -> Optional[int]:
    """Count blank lines directly below ``end_line``; ``None`` at end of file."""

    index = end_line
    count = 0
    while index < len(lines) and _is_blank(lines[index]):
        count += 1
        index += 1
    return None if index >= len(lines) else count


def _check_surrounding_blank_lines(node: SyntaxNode, source: SourceText, label: str) -> Optional[Finding]:
    lines = source.lines(node.span.file)
    if node.span.end_line > len(lines):
        raise MalformedNode(f"{node!r} ends past the last line of its file ({len(lines)})")

    sides = []
    before = blank_lines_before(lines, node.span.start_line)
    if before is not None and before < REQUIRED_BLANK_LINES:
        sides.append(f"{before} before")
    after = blank_lines_after(lines, node.span.end_line)
    if after is not None and after < REQUIRED_BLANK_LINES:
        sides.append(f"{after} after")
    if not sides:
        return None
    return Finding(
        f"{label} '{node.name}' must be surrounded by {REQUIRED_BLANK_LINES} blank lines "
        f"(found {' and '.join(sides)}).",
        node.span,
    )


def check_function_blank_lines(node: SyntaxNode, source: SourceText) -> Optional[Finding]:
    return _check_surrounding_blank_lines(node, source, "Function")


def check_type_blank_lines(node: SyntaxNode, source: SourceText) -> Optional[Finding]:
    return _check_surrounding_blank_lines(node, source, "Class")


def check_file_end(node: SyntaxNode, source: SourceText) -> Optional[Finding]:
    # Registered for every kind; only the tree root is checked.
    if node.parent is not None:
        return None
    text = source.text(node.span.file)
    if not text:
        return None
    if not text.endswith("\n"):
        return Finding(MISSING_FINAL_NEWLINE, node.span)
    lines = source.lines(node.span.file)
    if not lines or _is_blank(lines[-1]):
        return Finding(EXTRA_FINAL_NEWLINES, node.span)
    return None


def check_opening_brace(node: SyntaxNode, source: SourceText) -> Optional[Finding]:
    lines = source.lines(node.span.file)
    if node.span.start_line > len(lines):
        raise MalformedNode(f"{node!r} starts past the last line of its file ({len(lines)})")
    if "{" in lines[node.span.start_line - 1]:
        return None
    return Finding(f"Opening brace of '{node.name}' must be on the same line as the declaration.", node.span)


def comment_lines_above(lines: Sequence[str], start_line: int) -> List[str]:
    """Collect the contiguous comment lines directly above ``start_line``.

    Both ``#`` line comments and whole ``<# ... #>`` blocks count; the scan
    stops at the first blank or code line.
    """

    collected: List[str] = []
    index = start_line - 2
    while index >= 0:
        line = lines[index].strip()
        if line.endswith("#>"):
            block_end = index
            while index >= 0 and "<#" not in lines[index]:
                index -= 1
            if index < 0:
                break
            collected.extend(lines[index:block_end + 1])
        elif line.startswith("#"):
            collected.append(lines[index])
        else:
            break
        index -= 1
    return collected


def check_comment_help(node: SyntaxNode, source: SourceText) -> Optional[Finding]:
    lines = source.lines(node.span.file)
    body = list(lines[node.span.start_line - 1:node.span.end_line])
    for line in body + comment_lines_above(lines, node.span.start_line):
        if HELP_KEYWORD in line.lower():
            return None
    return Finding(f"Function '{node.name}' must have comment-based help with a .SYNOPSIS section.", node.span)


def register(registry: RuleRegistry) -> None:
    registry.register(
        "FunctionBlankLines",
        {NodeKind.FUNCTION_DEFINITION},
        check_function_blank_lines,
        description="Functions are surrounded by two blank lines.",
    )
    registry.register(
        "TypeBlankLines",
        {NodeKind.TYPE_DEFINITION},
        check_type_blank_lines,
        description="Classes are surrounded by two blank lines.",
    )
    registry.register(
        "FileEnd",
        set(NodeKind),
        check_file_end,
        description="Files end with exactly one newline.",
    )
    registry.register(
        "OpeningBraceSameLine",
        {NodeKind.FUNCTION_DEFINITION, NodeKind.TYPE_DEFINITION},
        check_opening_brace,
        description="Opening braces sit on the declaration line.",
    )
    registry.register(
        "FunctionCommentHelp",
        {NodeKind.FUNCTION_DEFINITION},
        check_comment_help,
        severity=Severity.INFORMATION,
        description="Functions carry comment-based help with a .SYNOPSIS.",
    )
