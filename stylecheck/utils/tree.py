"""Load serialized syntax trees produced by an external parser."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from ..errors import MalformedNode
from ..nodes import NodeKind, Span, SyntaxNode
from .fileio import read_yaml_file

SPAN_LINE_KEYS = ("start_line", "end_line")
SPAN_OPTIONAL_KEYS = ("start_offset", "end_offset", "start_column", "end_column")


def load_tree(path: Path, file: Optional[str] = None) -> Optional[SyntaxNode]:
    """Load a YAML/JSON tree document; ``None`` if the file does not exist.

    ``file`` overrides every span's source path, which is how a tree is
    paired with a script stored somewhere other than where it was parsed.
    """

    try:
        data = read_yaml_file(path)
    except yaml.YAMLError as exc:
        raise MalformedNode(f"Tree document {path} is not valid YAML/JSON: {exc}") from exc
    except RecursionError as exc:
        raise MalformedNode(f"Tree document {path} is nested too deeply to load") from exc
    if data is None:
        return None
    return build_tree(data, file=file)


def build_tree(data: Any, file: Optional[str] = None) -> SyntaxNode:
    """Build a :class:`SyntaxNode` tree from nested mappings.

    Each mapping holds ``kind``, ``span`` and optionally ``name``,
    ``attributes`` and ``children``. A top-level ``file`` key sets the
    default source path of every span. Built without recursion so that
    arbitrarily deep documents load.
    """

    if not isinstance(data, dict):
        raise MalformedNode("Tree document must be a mapping")
    default_file = data.get("file")
    root = _build_node(data, "$", file, default_file)
    stack: List[Tuple[SyntaxNode, Dict[str, Any], str]] = [(root, data, "$")]
    while stack:
        parent, parent_data, location = stack.pop()
        children = parent_data.get("children") or []
        if not isinstance(children, list):
            raise MalformedNode(f"{location}: 'children' must be a list")
        for index, child_data in enumerate(children):
            child_location = f"{location}.children[{index}]"
            child = _build_node(child_data, child_location, file, default_file)
            parent.add_child(child)
            stack.append((child, child_data, child_location))
    return root


def _build_node(data: Any, location: str, override: Optional[str], default_file: Optional[str]) -> SyntaxNode:
    if not isinstance(data, dict):
        raise MalformedNode(f"{location}: node must be a mapping")
    raw_kind = data.get("kind")
    try:
        kind = NodeKind(raw_kind)
    except ValueError as exc:
        raise MalformedNode(f"{location}: unknown node kind {raw_kind!r}") from exc

    name = data.get("name")
    if name is not None and not isinstance(name, str):
        raise MalformedNode(f"{location}: 'name' must be a string")
    attributes = data.get("attributes") or {}
    if not isinstance(attributes, dict):
        raise MalformedNode(f"{location}: 'attributes' must be a mapping")

    span = _build_span(data.get("span"), location, override, default_file)
    return SyntaxNode(kind=kind, span=span, name=name, attributes=dict(attributes))


def _build_span(data: Any, location: str, override: Optional[str], default_file: Optional[str]) -> Span:
    if not isinstance(data, dict):
        raise MalformedNode(f"{location}: 'span' must be a mapping")
    values: Dict[str, int] = {}
    for key in SPAN_LINE_KEYS + SPAN_OPTIONAL_KEYS:
        if key not in data:
            if key in SPAN_LINE_KEYS:
                raise MalformedNode(f"{location}: span is missing {key!r}")
            continue
        value = data[key]
        if not isinstance(value, int) or isinstance(value, bool):
            raise MalformedNode(f"{location}: span {key!r} must be an integer")
        values[key] = value
    if values["end_line"] < values["start_line"]:
        raise MalformedNode(f"{location}: span ends before it starts")
    # Without offsets, ordering falls back to the declared child order.
    values.setdefault("start_offset", 0)
    values.setdefault("end_offset", values["start_offset"])
    return Span(file=override or data.get("file") or default_file, **values)
