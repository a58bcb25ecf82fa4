"""
Compiler Front End Tests
========================

Tests for SimpletronCompiler, CompilerOptions, CompilerResult and the
file/statistics helpers.
"""

from pathlib import Path

import pytest

from simpletron.compiler import (
    CompilerOptions,
    SimpletronCompiler,
    compile_file,
    compile_program,
    default_output_path,
    format_stats,
    write_output,
)
from simpletron.errors import CompilerError, SourceSyntaxError


XY_SOURCE = "x=10\ny=20\nLOAD x\nADD y\nSTORE x\nWRITE x\nHALT\n"
XY_WORDS = ["2005", "3006", "2105", "1105", "4300", "10", "20"]


# =============================================================================
# Options Tests
# =============================================================================

class TestCompilerOptions:
    """Compiler configuration."""

    def test_defaults(self):
        options = CompilerOptions()
        assert options.optimize is True
        assert options.max_words == 100

    def test_word_limit_capped_at_address_space(self):
        with pytest.raises(ValueError, match="max_words"):
            CompilerOptions(max_words=101)

    def test_word_limit_must_be_positive(self):
        with pytest.raises(ValueError):
            CompilerOptions(max_words=0)


# =============================================================================
# Compilation Tests
# =============================================================================

class TestCompileSource:
    """SimpletronCompiler.compile_source()."""

    @pytest.fixture
    def compiler(self):
        return SimpletronCompiler()

    def test_result_words(self, compiler):
        result = compiler.compile_source(XY_SOURCE, "xy.smp")
        assert result.words == XY_WORDS
        assert result.filename == "xy.smp"

    def test_result_counts(self, compiler):
        result = compiler.compile_source(XY_SOURCE)
        assert result.instruction_count == 5
        assert result.variable_count == 2
        assert result.line_count == 7

    def test_result_tables(self, compiler):
        result = compiler.compile_source("a=1\nb=2\n@top\nWRITE a\nBRANCH @top\nHALT")
        assert result.variables == {"a": 3}
        assert result.labels == {"top": 0}

    def test_result_reports_eliminated(self, compiler):
        result = compiler.compile_source("a=1\nc=a+a\nWRITE a\nHALT")
        assert result.eliminated == ["c"]

    def test_implicit_halt_flag(self, compiler):
        assert compiler.compile_source("a=1\nWRITE a").implicit_halt
        assert not compiler.compile_source("a=1\nWRITE a\nHALT").implicit_halt

    def test_elapsed_time_recorded(self, compiler):
        result = compiler.compile_source(XY_SOURCE)
        assert result.elapsed_ms >= 0.0

    def test_text_is_newline_delimited(self, compiler):
        result = compiler.compile_source("a=1\nWRITE a\nHALT")
        assert result.text == "1102\n4300\n1\n"

    def test_no_optimize_option(self):
        compiler = SimpletronCompiler(CompilerOptions(optimize=False))
        result = compiler.compile_source("a=1\nc=a+a\nWRITE a\nHALT")
        assert result.instruction_count == 5
        assert result.eliminated == []

    def test_errors_propagate(self, compiler):
        with pytest.raises(CompilerError, match="<input>:2: error:"):
            compiler.compile_source("a=1\nWRITE b\nHALT")


# =============================================================================
# File Handling Tests
# =============================================================================

class TestFiles:
    """compile_file(), write_output() and friends."""

    def test_compile_file(self, tmp_path):
        source = tmp_path / "xy.smp"
        source.write_text(XY_SOURCE)
        result = SimpletronCompiler().compile_file(source)
        assert result.words == XY_WORDS
        assert result.filename == str(source)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Source file not found"):
            SimpletronCompiler().compile_file(tmp_path / "missing.smp")

    def test_empty_file(self, tmp_path):
        source = tmp_path / "empty.smp"
        source.write_text("\n\n")
        with pytest.raises(SourceSyntaxError, match="is empty"):
            SimpletronCompiler().compile_file(source)

    def test_error_location_uses_path(self, tmp_path):
        source = tmp_path / "bad.smp"
        source.write_text("a=1\na=2\n")
        with pytest.raises(CompilerError) as exc_info:
            SimpletronCompiler().compile_file(source)
        assert str(exc_info.value).startswith(f"{source}:2: error:")

    def test_default_output_path(self):
        assert default_output_path(Path("dir/prog.smp")) == Path("dir/prog.sml")
        assert default_output_path("prog") == Path("prog.sml")

    def test_write_output(self, tmp_path):
        result = SimpletronCompiler().compile_source(XY_SOURCE)
        output = write_output(result, tmp_path / "xy.sml")
        assert output.read_text().splitlines() == XY_WORDS

    def test_compile_file_convenience(self, tmp_path):
        source = tmp_path / "xy.smp"
        source.write_text(XY_SOURCE)
        target = tmp_path / "out.sml"
        assert compile_file(source, target) == XY_WORDS
        assert target.exists()


# =============================================================================
# Statistics Tests
# =============================================================================

class TestFormatStats:
    """The compilation statistics block."""

    def test_stats_block(self, tmp_path):
        result = SimpletronCompiler().compile_source(XY_SOURCE)
        output = write_output(result, tmp_path / "xy.sml")
        lines = format_stats(result, output).splitlines()

        assert lines[0] == "-" * 42
        assert lines[1] == f"Compiled to      : {output} (31 bytes)"
        assert lines[2].startswith("Compilation time : ")
        assert lines[2].endswith(" ms")
        assert lines[3] == "Number of lines  : 7"
        assert lines[4] == "-" * 42

    def test_stats_before_writing(self, tmp_path):
        result = SimpletronCompiler().compile_source("a=1\nWRITE a\nHALT")
        text = format_stats(result, tmp_path / "not_written.sml")
        assert "(12 bytes)" in text


# =============================================================================
# Convenience Function Tests
# =============================================================================

class TestCompileProgram:
    """compile_program() returns only the words."""

    def test_add_program(self):
        assert compile_program("a=5\nb=3\nc=a+b\nWRITE c\nHALT") == [
            "2005", "3006", "2107", "1107", "4300", "5", "3", "0",
        ]

    def test_optimize_flag(self):
        source = "a=1\nc=a+a\nWRITE a\nHALT"
        assert len(compile_program(source)) == 3
        assert len(compile_program(source, optimize=False)) == 7

    def test_trailing_comment_after_halt(self):
        """A comment after the final HALT still gets an implicit HALT."""
        words = compile_program("a=1\nWRITE a\nHALT\n> trailing note")
        assert words == ["1103", "4300", "4300", "1"]
