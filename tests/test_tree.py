import gc
import json

import pytest

from stylecheck.errors import MalformedNode
from stylecheck.nodes import NodeKind
from stylecheck.utils import build_tree, load_tree


def test_build_tree_links_children_and_parents():
    root = build_tree(
        {
            "file": "script.ps1",
            "kind": "ScriptBlock",
            "span": {"start_line": 1, "end_line": 5, "start_offset": 0, "end_offset": 40},
            "children": [
                {
                    "kind": "FunctionDefinition",
                    "name": "Get-Item",
                    "span": {"start_line": 2, "end_line": 4, "start_offset": 5, "end_offset": 30},
                    "children": [
                        {"kind": "Parameter", "name": "Path", "span": {"start_line": 3, "end_line": 3}},
                    ],
                }
            ],
        }
    )

    function = root.children[0]
    parameter = function.children[0]
    assert root.is_root
    assert function.parent is root
    assert parameter.parent is function
    assert list(parameter.ancestors()) == [function, root]
    assert parameter.span.file == "script.ps1"
    assert parameter.span.start_offset == 0
    assert [node.kind for node in root.walk()] == [NodeKind.FUNCTION_DEFINITION, NodeKind.PARAMETER]
    assert list(root.iter_children_of_kind(NodeKind.FUNCTION_DEFINITION)) == [function]
    assert list(root.iter_children_of_kind(NodeKind.PARAMETER)) == []


def test_file_override_replaces_span_files():
    root = build_tree(
        {"file": "a.ps1", "kind": "ScriptBlock", "span": {"start_line": 1, "end_line": 1, "file": "b.ps1"}},
        file="c.ps1",
    )

    assert root.span.file == "c.ps1"


def test_parent_links_do_not_keep_nodes_alive():
    root = build_tree(
        {
            "kind": "ScriptBlock",
            "span": {"start_line": 1, "end_line": 2},
            "children": [{"kind": "Command", "name": "Get-Date", "span": {"start_line": 2, "end_line": 2}}],
        }
    )
    child = root.children[0]

    del root
    gc.collect()

    assert child.parent is None


@pytest.mark.parametrize(
    "document, message",
    [
        ([], "must be a mapping"),
        ({"kind": "Banana", "span": {"start_line": 1, "end_line": 1}}, "unknown node kind"),
        ({"kind": "ScriptBlock"}, "'span' must be a mapping"),
        ({"kind": "ScriptBlock", "span": {"start_line": 1}}, "missing 'end_line'"),
        ({"kind": "ScriptBlock", "span": {"start_line": 3, "end_line": 1}}, "ends before it starts"),
        ({"kind": "ScriptBlock", "span": {"start_line": "1", "end_line": 1}}, "must be an integer"),
        (
            {"kind": "ScriptBlock", "span": {"start_line": 1, "end_line": 1}, "children": [{"kind": "Command"}]},
            "$.children[0]",
        ),
    ],
)
def test_malformed_documents_are_rejected(document, message):
    with pytest.raises(MalformedNode) as excinfo:
        build_tree(document)

    assert message in str(excinfo.value)


def test_load_tree_reads_yaml_and_json(tmp_path):
    yaml_path = tmp_path / "tree.yaml"
    yaml_path.write_text(
        "kind: ScriptBlock\n"
        "span: {start_line: 1, end_line: 3}\n"
        "children:\n"
        "  - kind: NamedBlock\n"
        "    name: begin\n"
        "    span: {start_line: 2, end_line: 3}\n",
        encoding="utf-8",
    )
    json_path = tmp_path / "tree.json"
    json_path.write_text(
        json.dumps({"kind": "ScriptBlock", "span": {"start_line": 1, "end_line": 1}}),
        encoding="utf-8",
    )

    yaml_root = load_tree(yaml_path, file="script.ps1")
    json_root = load_tree(json_path)

    assert yaml_root.children[0].name == "begin"
    assert yaml_root.children[0].span.file == "script.ps1"
    assert json_root.kind is NodeKind.SCRIPT_BLOCK
    assert load_tree(tmp_path / "missing.yaml") is None


def test_load_tree_reports_invalid_yaml(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("kind: [unclosed", encoding="utf-8")

    with pytest.raises(MalformedNode):
        load_tree(path)
