"""
stcc Command-Line Interface Tests
=================================

Tests for the stcc tool, driven through click's CliRunner.
"""

import pytest
from click.testing import CliRunner

from stackcc import __version__
from stackcc.cli.stcc import main
from stackcc.cli.errors import ExitCode, handle_cli_exception
from stackcc.minic.errors import MissingTokenError


@pytest.fixture
def runner():
    return CliRunner()


class TestStccCLI:
    """Tests for the stcc CLI tool."""

    def test_cli_help(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "Compile a MiniC program" in result.output

    def test_cli_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_compile_argument(self, runner):
        result = runner.invoke(main, ["main() { return 42; }"])
        assert result.exit_code == ExitCode.SUCCESS
        assert result.stdout.startswith(".intel_syntax noprefix\n")
        assert ".globl main" in result.stdout
        assert result.stdout.endswith("ret\n")

    def test_missing_source(self, runner):
        result = runner.invoke(main, [])
        assert result.exit_code == ExitCode.INVALID_ARGS
        assert "missing SOURCE" in result.output

    def test_extra_argument(self, runner):
        result = runner.invoke(main, ["main() { return 1; }", "extra"])
        assert result.exit_code == ExitCode.INVALID_ARGS

    def test_source_and_file(self, runner, tmp_path):
        source_file = tmp_path / "prog.c"
        source_file.write_text("main() { return 1; }")
        result = runner.invoke(main, ["main() { return 1; }", "-f", str(source_file)])
        assert result.exit_code == ExitCode.INVALID_ARGS

    def test_compile_file(self, runner, tmp_path):
        source_file = tmp_path / "prog.c"
        source_file.write_text("main() {\n  return 7;\n}\n")
        result = runner.invoke(main, ["-f", str(source_file)])
        assert result.exit_code == ExitCode.SUCCESS
        assert "push 7" in " ".join(result.stdout.split())

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(main, ["-f", str(tmp_path / "missing.c")])
        assert result.exit_code == ExitCode.INVALID_ARGS

    def test_output_file(self, runner, tmp_path):
        output = tmp_path / "out.s"
        result = runner.invoke(main, ["main() { return 3; }", "-o", str(output)])
        assert result.exit_code == ExitCode.SUCCESS
        assert result.stdout == ""
        assert output.read_text().startswith(".intel_syntax noprefix")

    def test_syntax_error(self, runner):
        result = runner.invoke(main, ["main() { return 1 }"])
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "<input>:1:19: error: expected ';'" in result.output

    def test_invalid_character(self, runner):
        result = runner.invoke(main, ["main() { return $; }"])
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "invalid character '$'" in result.output

    def test_unicode_digit_is_compile_error(self, runner):
        result = runner.invoke(main, ["main() { return 1\u00b2; }"])
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "invalid character" in result.output
        assert "Internal error" not in result.output

    def test_invalid_lvalue(self, runner):
        result = runner.invoke(main, ["main() { 1 = 2; }"])
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "not an lvalue" in result.output

    def test_error_in_file_names_file(self, runner, tmp_path):
        source_file = tmp_path / "bad.c"
        source_file.write_text("main() { return 1 + ; }")
        result = runner.invoke(main, ["-f", str(source_file)])
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert f"{source_file}:1:21: error:" in result.output

    def test_ast_dump(self, runner):
        result = runner.invoke(main, ["--ast", "main() { x = 1; return x; }"])
        assert result.exit_code == ExitCode.SUCCESS
        assert "Function: main() frame=8" in result.output
        assert "Return x@0" in result.output
        assert ".intel_syntax" not in result.output

    def test_comments(self, runner):
        result = runner.invoke(main, ["--comments", "main() { return 1; }"])
        assert result.exit_code == ExitCode.SUCCESS
        assert "# function main" in result.stdout

    def test_no_comments_by_default(self, runner):
        result = runner.invoke(main, ["main() { return 1; }"])
        assert "#" not in result.stdout

    def test_verbose(self, runner):
        result = runner.invoke(main, ["-v", "main() { return 1; }"])
        assert result.exit_code == ExitCode.SUCCESS
        assert ".globl main" in result.stdout


class TestHandleCliException:
    """Exit code mapping of handle_cli_exception."""

    @pytest.mark.parametrize("error,expected", [
        (MissingTokenError("';'"), ExitCode.BUILD_ERROR),
        (FileNotFoundError("missing.c"), ExitCode.INVALID_ARGS),
        (PermissionError("prog.c"), ExitCode.INVALID_ARGS),
        (RuntimeError("boom"), ExitCode.INTERNAL_ERROR),
    ])
    def test_exit_codes(self, error, expected):
        with pytest.raises(SystemExit) as exc_info:
            handle_cli_exception(error)
        assert exc_info.value.code == expected
