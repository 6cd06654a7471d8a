"""Tests for the mvscript CLI, config, and error rendering."""

from __future__ import annotations

import pytest

from mvscript.cli import main
from mvscript.config import find_config, load_config
from mvscript.errors import (
    CompileError,
    Diagnostic,
    DiagnosticLabel,
    DiagnosticRenderer,
    ParseError,
    Severity,
    describe_expected,
)
from mvscript.source import Span, line_col, span_of


# --- CLI tests ---


class TestCLI:
    def test_help(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "mvscript" in result.output
        assert "check" in result.output
        assert "view" in result.output

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_check_with_project(self, runner, tmp_project):
        result = runner.invoke(main, ["check", str(tmp_project)])
        assert result.exit_code == 0
        assert "checking testproj" in result.output
        assert "checked testproj: no errors" in result.output

    def test_check_from_subdirectory(self, runner, tmp_project):
        result = runner.invoke(main, ["check", str(tmp_project / "src")])
        assert result.exit_code == 0

    def test_check_reports_parse_errors(self, runner, tmp_project):
        (tmp_project / "src" / "broken.mvs").write_text("let a = 1;\n(a + ;\n")
        result = runner.invoke(main, ["check", str(tmp_project)])
        assert result.exit_code == 1
        assert "error[E100]" in result.output
        assert "broken.mvs:2:6" in result.output

    def test_check_uses_configured_entry(self, runner, tmp_project):
        toml = tmp_project / "mvscript.toml"
        toml.write_text('[package]\nname = "exprs"\n[parse]\nentry = "expression"\n')
        (tmp_project / "src" / "main.mvs").write_text("1 + 2\n")
        result = runner.invoke(main, ["check", str(tmp_project)])
        assert result.exit_code == 0

    def test_check_without_sources(self, runner, tmp_path):
        (tmp_path / "mvscript.toml").write_text('[package]\nname = "empty"\n')
        result = runner.invoke(main, ["check", str(tmp_path)])
        assert result.exit_code == 0
        assert "no .mvs files found" in result.output

    def test_check_without_config(self, runner, tmp_path):
        result = runner.invoke(main, ["check", str(tmp_path)])
        assert result.exit_code == 1
        assert "no mvscript.toml found" in result.output

    def test_check_bad_entry(self, runner, tmp_path):
        (tmp_path / "mvscript.toml").write_text('[parse]\nentry = "function"\n')
        result = runner.invoke(main, ["check", str(tmp_path)])
        assert result.exit_code == 1
        assert "parse.entry must be one of" in result.output

    def test_view_command(self, runner, tmp_project):
        mvs_file = tmp_project / "src" / "main.mvs"
        result = runner.invoke(main, ["view", str(mvs_file)])
        assert result.exit_code == 0
        assert "Program" in result.output
        assert "DeclarationStmt" in result.output
        assert "type_name: INT" in result.output
        assert "op: MULTIPLY" in result.output

    def test_view_stdin(self, runner):
        result = runner.invoke(
            main, ["view", "--stdin", "--entry", "expression"], input="1 + 2 * 3"
        )
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0] == "Operation"
        assert lines[1] == "  op: MULTIPLY"

    def test_view_stdin_error_shows_source_line(self, runner):
        result = runner.invoke(
            main,
            ["view", "--stdin", "--entry", "declaration", "--no-color"],
            input="let x: list;\n",
        )
        assert result.exit_code == 1
        assert "error[E100]: expected type name, found 'l'" in result.output
        assert "<stdin>:1:8" in result.output
        assert "let x: list;" in result.output
        assert "^" in result.output

    def test_view_long_operator_chain(self, runner):
        source = "x" + " + 1" * 1200
        result = runner.invoke(
            main, ["view", "--stdin", "--entry", "expression"], input=source
        )
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0] == "Operation"
        assert lines.count("Operation") == 1
        assert result.output.count("op: ADD") == 1200
        assert "name: 'x'" in result.output

    def test_view_huge_integer(self, runner):
        result = runner.invoke(
            main, ["view", "--stdin", "--entry", "expression"], input="9" * 5000
        )
        assert result.exit_code == 0
        assert "LiteralExpr" in result.output
        assert "value: 0x" in result.output

    def test_view_deep_nesting(self, runner):
        source = "(" * 5000 + "1" + ")" * 5000
        result = runner.invoke(
            main, ["view", "--stdin", "--entry", "expression", "--no-color"], input=source
        )
        assert result.exit_code == 1
        assert "input is nested too deeply to parse" in result.output

    def test_view_undecodable_file(self, runner, tmp_path):
        bad = tmp_path / "bad.mvs"
        bad.write_bytes(b"\xff\xfe let")
        result = runner.invoke(main, ["view", str(bad)])
        assert result.exit_code == 1
        assert "cannot read" in result.output

    def test_check_undecodable_file(self, runner, tmp_project):
        (tmp_project / "src" / "bad.mvs").write_bytes(b"\xff\xfe let")
        result = runner.invoke(main, ["check", str(tmp_project)])
        assert result.exit_code == 1
        assert "cannot read" in result.output
        assert "bad.mvs" in result.output

    def test_view_requires_input(self, runner):
        result = runner.invoke(main, ["view"])
        assert result.exit_code == 2
        assert "pass a FILE or --stdin" in result.output

    def test_view_help(self, runner):
        result = runner.invoke(main, ["view", "--help"])
        assert result.exit_code == 0
        assert "--entry" in result.output
        assert "--stdin" in result.output


# --- Config tests ---


class TestConfig:
    def test_load_config(self, tmp_project):
        config = load_config(tmp_project / "mvscript.toml")
        assert config.package.name == "testproj"
        assert config.package.version == "1.0.0"
        assert config.parse.entry == "program"
        assert config.parse.sources == "src"
        assert config.diagnostics.color is False

    def test_load_config_defaults(self, tmp_path):
        toml = tmp_path / "mvscript.toml"
        toml.write_text("[package]\n")
        config = load_config(toml)
        assert config.package.name == "untitled"
        assert config.parse.entry == "program"
        assert config.diagnostics.color is True

    def test_load_config_rejects_unknown_entry(self, tmp_path):
        toml = tmp_path / "mvscript.toml"
        toml.write_text('[parse]\nentry = "module"\n')
        with pytest.raises(ValueError, match="'module'"):
            load_config(toml)

    def test_find_config(self, tmp_project):
        sub = tmp_project / "src"
        found = find_config(sub)
        assert found == tmp_project / "mvscript.toml"

    def test_find_config_from_file(self, tmp_project):
        found = find_config(tmp_project / "src" / "main.mvs")
        assert found == tmp_project / "mvscript.toml"

    def test_find_config_not_found(self, tmp_path):
        empty = tmp_path / "empty"
        empty.mkdir()
        with pytest.raises(FileNotFoundError, match="No mvscript.toml found"):
            find_config(empty)


# --- Error rendering tests ---


class TestDiagnostics:
    def test_render_error(self):
        span = Span("script.mvs", 3, 9, 3, 9)
        diag = Diagnostic(
            severity=Severity.ERROR,
            code="E100",
            message="expected ';', found end of input",
            labels=[DiagnosticLabel(span=span, message="declaration ends here")],
            notes=["a declaration ends with ';'"],
        )

        renderer = DiagnosticRenderer(color=False)
        output = renderer.render(diag)

        assert "error[E100]" in output
        assert "expected ';', found end of input" in output
        assert "script.mvs:3:9" in output
        assert "declaration ends here" in output
        assert "note: a declaration ends with ';'" in output

    def test_parse_error_custom_message(self):
        err = ParseError(2, [], "((x", "deep.mvs", message="input is nested too deeply to parse")
        output = DiagnosticRenderer(color=False).render(err.diagnostics[0])
        assert "error[E100]: input is nested too deeply to parse" in output
        assert "deep.mvs:1:3" in output

    def test_render_registered_source(self):
        renderer = DiagnosticRenderer(color=False)
        renderer.add_source("mem.mvs", "let x = 1;\nlet y = ;\n")
        span = Span("mem.mvs", 2, 9, 2, 9)
        output = renderer.render(
            Diagnostic(Severity.ERROR, "E100", "boom", [DiagnosticLabel(span, "")])
        )
        assert "   2 | let y = ;" in output
        assert "|         ^" in output

    def test_render_source_from_disk(self, tmp_path):
        f = tmp_path / "disk.mvs"
        f.write_text("1 +\n")
        err = ParseError(3, ["number"], "1 +\n", str(f))
        output = DiagnosticRenderer(color=False).render(err.diagnostics[0])
        assert "1 +" in output
        assert "^" in output

    def test_render_with_color(self):
        span = Span("x.mvs", 1, 1, 1, 1)
        diag = Diagnostic(Severity.ERROR, "E100", "hello", [DiagnosticLabel(span, "")])
        output = DiagnosticRenderer(color=True).render(diag)
        assert "\033[1;31merror[E100]" in output

    def test_compile_error(self):
        diags = [
            Diagnostic(Severity.ERROR, "E100", "first error"),
            Diagnostic(Severity.ERROR, "E100", "second error"),
        ]
        err = CompileError(diags)
        assert len(err.diagnostics) == 2
        assert "2 error(s)" in str(err)

    def test_parse_error_message(self):
        err = ParseError(4, ["';'", "operator"], "let x", "a.mvs")
        assert err.diagnostics[0].message == "expected ';' or operator, found 'x'"
        assert str(err.span) == "a.mvs:1:5"

    def test_describe_expected(self):
        assert describe_expected([]) == "nothing"
        assert describe_expected(["a"]) == "a"
        assert describe_expected(["a", "b", "c"]) == "a, b or c"


# --- Source tests ---


class TestSource:
    def test_line_col(self):
        text = "ab\ncd\n"
        assert line_col(text, 0) == (1, 1)
        assert line_col(text, 1) == (1, 2)
        assert line_col(text, 3) == (2, 1)
        assert line_col(text, 4) == (2, 2)

    def test_line_col_clamps(self):
        assert line_col("ab", 99) == (1, 3)
        assert line_col("ab", -1) == (1, 1)

    def test_span_of_single_point(self):
        assert span_of("f.mvs", "x\ny", 2) == Span("f.mvs", 2, 1, 2, 1)

    def test_span_of_range(self):
        assert span_of("f.mvs", "let x;", 4, 6) == Span("f.mvs", 1, 5, 1, 6)

    def test_span_str(self):
        span = Span("file.mvs", 10, 5, 10, 20)
        assert str(span) == "file.mvs:10:5"
