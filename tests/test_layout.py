from stylecheck.engine import traverse
from stylecheck.rules.layout import EXTRA_FINAL_NEWLINES, MISSING_FINAL_NEWLINE, blank_lines_after, blank_lines_before
from stylecheck.severity import Severity
from stylecheck.utils import build_tree


def _lint(tmp_path, text, *children):
    path = tmp_path / "script.ps1"
    path.write_text(text, encoding="utf-8")
    line_count = max(text.count("\n"), 1)
    tree = build_tree(
        {
            "file": str(path),
            "kind": "ScriptBlock",
            "span": {"start_line": 1, "end_line": line_count, "start_offset": 0, "end_offset": len(text)},
            "children": list(children),
        }
    )
    result = traverse(tree)
    assert result.faults == []
    return result


def _rule(result, name):
    return [d for d in result.diagnostics if d.rule_name == name]


def _function(start, end, name="Get-Item"):
    return {"kind": "FunctionDefinition", "name": name, "span": {"start_line": start, "end_line": end}}


def test_blank_line_counting_helpers():
    lines = ("a", "", "  ", "b", "", "")

    assert blank_lines_before(lines, 4) == 2
    assert blank_lines_before(lines, 1) is None
    assert blank_lines_before(("", "b"), 2) is None
    assert blank_lines_after(lines, 1) == 2
    assert blank_lines_after(lines, 4) is None


def test_function_without_blank_line_before(tmp_path):
    text = "$x = 1\nfunction Get-Item {\n    # .SYNOPSIS\n}\n\n\n\nWrite-Host 1\n"

    findings = _rule(_lint(tmp_path, text, _function(2, 4)), "FunctionBlankLines")

    assert len(findings) == 1
    assert "0 before" in findings[0].message
    assert "after" not in findings[0].message
    assert findings[0].span.start_line == 2


def test_function_with_two_blank_lines_each_side(tmp_path):
    text = "$x = 1\n\n\nfunction Get-Item {\n}\n\n\nWrite-Host 1\n"

    assert _rule(_lint(tmp_path, text, _function(4, 5)), "FunctionBlankLines") == []


def test_function_with_one_blank_line_after(tmp_path):
    text = "$x = 1\n\n\nfunction Get-Item {\n}\n\nWrite-Host 1\n"

    findings = _rule(_lint(tmp_path, text, _function(4, 5)), "FunctionBlankLines")

    assert len(findings) == 1
    assert "1 after" in findings[0].message


def test_file_boundaries_satisfy_blank_lines(tmp_path):
    text = "function Get-Item {\n}\n"

    assert _rule(_lint(tmp_path, text, _function(1, 2)), "FunctionBlankLines") == []


def test_class_blank_lines(tmp_path):
    text = "using namespace System\nclass Good {\n}\n"
    node = {"kind": "TypeDefinition", "name": "Good", "span": {"start_line": 2, "end_line": 3}}

    findings = _rule(_lint(tmp_path, text, node), "TypeBlankLines")

    assert len(findings) == 1
    assert findings[0].message.startswith("Class 'Good'")


def test_span_past_end_of_file_is_a_fault(tmp_path):
    path = tmp_path / "short.ps1"
    path.write_text("function Get-Item {\n}\n", encoding="utf-8")
    tree = build_tree(
        {
            "file": str(path),
            "kind": "ScriptBlock",
            "span": {"start_line": 1, "end_line": 2},
            "children": [_function(1, 9)],
        }
    )

    result = traverse(tree)

    assert [fault.rule_name for fault in result.faults] == ["FunctionBlankLines"]


def test_file_end_single_newline(tmp_path):
    assert _rule(_lint(tmp_path, "Write-Host 1\n"), "FileEnd") == []


def test_file_end_missing_newline(tmp_path):
    findings = _rule(_lint(tmp_path, "Write-Host 1"), "FileEnd")

    assert [d.message for d in findings] == [MISSING_FINAL_NEWLINE]


def test_file_end_too_many_newlines(tmp_path):
    findings = _rule(_lint(tmp_path, "Write-Host 1\n\n\n"), "FileEnd")

    assert [d.message for d in findings] == [EXTRA_FINAL_NEWLINES]


def test_file_end_only_checks_the_root(tmp_path):
    text = "Write-Host 1"
    nested = {"kind": "ScriptBlock", "span": {"start_line": 1, "end_line": 1}}

    findings = _rule(_lint(tmp_path, text, nested), "FileEnd")

    assert len(findings) == 1


def test_empty_file_has_no_file_end_finding(tmp_path):
    assert _rule(_lint(tmp_path, ""), "FileEnd") == []


def test_opening_brace_on_its_own_line(tmp_path):
    text = "function Get-Item\n{\n}\n"

    findings = _rule(_lint(tmp_path, text, _function(1, 3)), "OpeningBraceSameLine")

    assert len(findings) == 1


def test_opening_brace_on_declaration_line(tmp_path):
    text = "function Get-Item {\n}\n"

    assert _rule(_lint(tmp_path, text, _function(1, 2)), "OpeningBraceSameLine") == []


def test_comment_help_inside_function(tmp_path):
    text = "function Get-Item {\n    <#\n    .Synopsis\n    Gets an item.\n    #>\n}\n"

    assert _rule(_lint(tmp_path, text, _function(1, 6)), "FunctionCommentHelp") == []


def test_missing_comment_help_is_information(tmp_path):
    text = "function Get-Item {\n}\n"

    findings = _rule(_lint(tmp_path, text, _function(1, 2)), "FunctionCommentHelp")

    assert len(findings) == 1
    assert findings[0].severity is Severity.INFORMATION


def test_opening_brace_checked_on_declaration_line_only(tmp_path):
    text = "function Get-Item(\n    $x = @{}\n)\n{\n}\n"

    findings = _rule(_lint(tmp_path, text, _function(1, 5)), "OpeningBraceSameLine")

    assert len(findings) == 1


def test_comment_help_block_above_function(tmp_path):
    text = "<#\n.SYNOPSIS\nGets an item.\n#>\nfunction Get-Item {\n}\n"

    assert _rule(_lint(tmp_path, text, _function(5, 6)), "FunctionCommentHelp") == []


def test_comment_help_line_comments_above_function(tmp_path):
    text = "# .SYNOPSIS\n# Gets an item.\nfunction Get-Item {\n}\n"

    assert _rule(_lint(tmp_path, text, _function(3, 4)), "FunctionCommentHelp") == []


def test_comment_help_separated_by_blank_line_is_reported(tmp_path):
    text = "<# .SYNOPSIS #>\n\nfunction Get-Item {\n}\n"

    findings = _rule(_lint(tmp_path, text, _function(3, 4)), "FunctionCommentHelp")

    assert len(findings) == 1


def test_file_end_checks_any_root_kind(tmp_path):
    path = tmp_path / "function.ps1"
    path.write_text("function Get-Item {\n    <# .SYNOPSIS #>\n}", encoding="utf-8")
    tree = build_tree(
        {
            "file": str(path),
            "kind": "FunctionDefinition",
            "name": "Get-Item",
            "span": {"start_line": 1, "end_line": 3},
            "children": [_function(1, 3, name="Get-Inner")],
        }
    )

    findings = _rule(traverse(tree), "FileEnd")

    assert [d.message for d in findings] == [MISSING_FINAL_NEWLINE]
