"""
attis CLI Test Suite
====================

Tests for the attis command: argument validation, output modes and exit
codes.
"""

import pytest
from click.testing import CliRunner

from attis import __version__
from attis.cli.attis import main
from attis.cli.errors import ExitCode
from attis.cybele.compiler import CybeleCompiler
from attis.cybele.errors import AllocationError, SourceReadError


@pytest.fixture
def runner(monkeypatch):
    for name in ("ATTIS_CHECK_TREE", "ATTIS_TRACE", "ATTIS_EVALUATE"):
        monkeypatch.delenv(name, raising=False)
    return CliRunner()


@pytest.fixture
def program(tmp_path):
    """Write a source file and return its path as a string."""
    def write(text, name="program.cyb"):
        path = tmp_path / name
        path.write_text(text)
        return str(path)
    return write


class TestArguments:
    """Tests for argument handling."""

    def test_help(self, runner):
        """--help prints usage and exits 0."""
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "Compile a Cybele source file" in result.output

    def test_short_help(self, runner):
        """-h is an alias for --help."""
        result = runner.invoke(main, ["-h"])
        assert result.exit_code == 0
        assert "--threads" in result.output

    def test_version(self, runner):
        """--version prints the package version."""
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_no_input_files(self, runner):
        """At least one input file is required."""
        result = runner.invoke(main, [])
        assert result.exit_code == ExitCode.INVALID_ARGS
        assert "no input files given" in result.output

    def test_multiple_input_files(self, runner, program):
        """Only one input file is supported."""
        first = program("1;", "a.cyb")
        second = program("2;", "b.cyb")
        result = runner.invoke(main, [first, second])
        assert result.exit_code == ExitCode.INVALID_ARGS
        assert "multiple input files are not yet supported" in result.output

    @pytest.mark.parametrize("flag", ["-t", "--threads"])
    def test_threads_rejected(self, runner, program, flag):
        """--threads is parsed but not supported."""
        result = runner.invoke(main, [flag, "4", program("1;")])
        assert result.exit_code == ExitCode.INVALID_ARGS
        assert "multi-threading (--threads) is not yet supported" in result.output

    @pytest.mark.parametrize("value", ["abc", "many", "4.5", ""])
    def test_threads_rejected_for_any_value(self, runner, program, value):
        """Whatever value --threads gets, the answer is the same."""
        result = runner.invoke(main, ["-t", value, program("1;")])
        assert result.exit_code == ExitCode.INVALID_ARGS
        assert "multi-threading (--threads) is not yet supported" in result.output

    def test_unknown_option(self, runner, program):
        """Unknown options are usage errors."""
        result = runner.invoke(main, ["--frobnicate", program("1;")])
        assert result.exit_code == 2

    def test_missing_file(self, runner, tmp_path):
        """Input files must exist."""
        result = runner.invoke(main, [str(tmp_path / "missing.cyb")])
        assert result.exit_code == 2


class TestOutput:
    """Tests for the output modes."""

    def test_answer(self, runner, program):
        """The value of the last statement is printed."""
        result = runner.invoke(main, [program("1;2;3+4;")])
        assert result.exit_code == ExitCode.SUCCESS
        assert result.output.strip() == "Answer: 7"

    def test_empty_program(self, runner, program):
        """A program without statements has no value."""
        result = runner.invoke(main, [program("")])
        assert result.exit_code == 0
        assert "Answer: (no statements)" in result.output

    def test_tokens(self, runner, program):
        """--tokens lists every token."""
        result = runner.invoke(main, ["--tokens", program("1+2;")])
        assert result.exit_code == 0
        assert "Token(LITERAL, '1', 1:1)" in result.output
        assert "Token(BINARY_OPERATOR, '+', 1:2)" in result.output
        assert "Token(EOF, 1:5)" in result.output

    def test_ast(self, runner, program):
        """--ast prints the tree."""
        result = runner.invoke(main, ["--ast", program("(1+2)*3;")])
        assert result.exit_code == 0
        assert "Scope" in result.output
        assert "BinaryOperator '*'" in result.output
        assert "Parenthesis" in result.output
        assert "Answer: 9" in result.output

    def test_no_eval(self, runner, program):
        """--no-eval skips evaluation."""
        result = runner.invoke(main, ["--no-eval", program("1/0;")])
        assert result.exit_code == 0
        assert "Answer" not in result.output

    def test_evaluate_env(self, runner, program):
        """ATTIS_EVALUATE=0 also skips evaluation."""
        result = runner.invoke(main, [program("1;")], env={"ATTIS_EVALUATE": "0"})
        assert result.exit_code == 0
        assert "Answer" not in result.output

    def test_verbose(self, runner, program):
        """-v reports progress."""
        result = runner.invoke(main, ["-v", program("1;2;")])
        assert result.exit_code == 0
        assert "Compiling" in result.output
        assert "Tokenized: 5 tokens" in result.output
        assert "Parsed: 2 statements" in result.output

    def test_long_chain(self, runner, program):
        """A 10,000 term sum is evaluated without hitting the recursion limit."""
        result = runner.invoke(main, [program("+".join(["1"] * 10000) + ";")])
        assert result.exit_code == ExitCode.SUCCESS
        assert result.output.strip() == "Answer: 10000"

    def test_deep_parentheses(self, runner, program):
        """5,000 nested parentheses are parsed, checked and evaluated."""
        source = "(" * 5000 + "1" + ")" * 5000 + ";"
        result = runner.invoke(main, [program(source)])
        assert result.exit_code == ExitCode.SUCCESS
        assert "Answer: 1" in result.output


class TestExitCodes:
    """Tests for error reporting."""

    def test_syntax_error(self, runner, program):
        """Syntax errors exit with BUILD_ERROR and show the location."""
        path = program("1+;")
        result = runner.invoke(main, [path])
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert f"{path}:1:3: error:" in result.output

    def test_parse_error(self, runner, program):
        """Parse errors exit with BUILD_ERROR."""
        result = runner.invoke(main, [program("(1+2;")])
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "inside an open parenthesis" in result.output

    def test_evaluation_error(self, runner, program):
        """Evaluation errors exit with BUILD_ERROR."""
        result = runner.invoke(main, [program("7/0;")])
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "division by zero" in result.output

    def test_internal_error(self, runner, program, monkeypatch):
        """Unexpected exceptions exit with INTERNAL_ERROR."""
        def broken(self, path):
            raise RuntimeError("boom")

        monkeypatch.setattr(CybeleCompiler, "compile_file", broken)
        result = runner.invoke(main, [program("1;")])
        assert result.exit_code == ExitCode.INTERNAL_ERROR
        assert "Internal error: boom" in result.output

    def test_allocation_error_names_file(self, runner, program, monkeypatch):
        """Errors without a location are prefixed with the input file."""
        def exhausted(self, path):
            raise AllocationError("compilation")

        path = program("1;")
        monkeypatch.setattr(CybeleCompiler, "compile_file", exhausted)
        result = runner.invoke(main, [path])
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert f"{path}: error: out of memory during compilation" in result.output

    def test_read_error_names_file(self, runner, program, monkeypatch):
        """A failed read is reported against the input file."""
        def unreadable(self, path):
            raise SourceReadError(str(path), "device not ready")

        path = program("1;")
        monkeypatch.setattr(CybeleCompiler, "compile_file", unreadable)
        result = runner.invoke(main, ["-v", path])
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert f"{path}: error: cannot read" in result.output
        assert "Failed during reading" in result.output

    def test_located_error_not_prefixed_twice(self, runner, program):
        """Errors that carry a location keep their own file:line:col prefix."""
        path = program("1+;")
        result = runner.invoke(main, [path])
        assert f"{path}: {path}" not in result.output

    @pytest.mark.parametrize("source,stage", [
        ("1+;", "lexing"),
        ("(1+2;", "parsing"),
        ("7/0;", "evaluation"),
    ])
    def test_verbose_names_stage(self, runner, program, source, stage):
        """-v adds the stage that failed."""
        result = runner.invoke(main, ["-v", program(source)])
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert f"Failed during {stage}" in result.output

    def test_quiet_omits_stage(self, runner, program):
        """Without -v the stage is not shown."""
        result = runner.invoke(main, [program("7/0;")])
        assert "Failed during" not in result.output
