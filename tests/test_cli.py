"""
Command-Line Tool Tests
=======================

Tests for the smpc compiler and smprun runner, driven through
click's CliRunner.
"""

import pytest
from click.testing import CliRunner

from simpletron.cli.smpc import main as smpc
from simpletron.cli.smprun import main as smprun


XY_SOURCE = "x=10\ny=20\nLOAD x\nADD y\nSTORE x\nWRITE x\nHALT\n"
SUM_SOURCE = "a=0\nb=0\nREAD a\nREAD b\nc=a+b\nWRITE c\nHALT\n"


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def write_program(tmp_path):
    """Write a program file into tmp_path and return its path."""
    def write(name, text):
        path = tmp_path / name
        path.write_text(text)
        return path
    return write


# =============================================================================
# smpc Tests
# =============================================================================

class TestSmpc:
    """Tests for the smpc compiler CLI."""

    def test_help(self, runner):
        result = runner.invoke(smpc, ["--help"])
        assert result.exit_code == 0
        assert "Compile Simpletron source code" in result.output

    def test_version(self, runner):
        result = runner.invoke(smpc, ["--version"])
        assert result.exit_code == 0
        assert "1.0.0" in result.output

    def test_compile_default_output(self, runner, write_program, tmp_path):
        source = write_program("xy.smp", XY_SOURCE)
        result = runner.invoke(smpc, [str(source)])

        assert result.exit_code == 0
        output = tmp_path / "xy.sml"
        assert f"Compiled {source} -> {output}" in result.output
        assert output.read_text().splitlines() == [
            "2005", "3006", "2105", "1105", "4300", "10", "20",
        ]

    def test_output_option(self, runner, write_program, tmp_path):
        source = write_program("xy.smp", XY_SOURCE)
        target = tmp_path / "out.sml"
        result = runner.invoke(smpc, [str(source), "-o", str(target)])

        assert result.exit_code == 0
        assert target.exists()
        assert not (tmp_path / "xy.sml").exists()

    def test_verbose_statistics(self, runner, write_program):
        source = write_program("xy.smp", XY_SOURCE)
        result = runner.invoke(smpc, ["-v", str(source)])

        assert result.exit_code == 0
        assert f"Compiling {source}..." in result.output
        assert "(31 bytes)" in result.output
        assert "Compilation time : " in result.output
        assert "Number of lines  : 7" in result.output

    def test_verbose_reports_eliminated(self, runner, write_program):
        source = write_program("dead.smp", "a=1\nc=a+a\nWRITE a\nHALT\n")
        result = runner.invoke(smpc, ["-v", str(source)])
        assert "Eliminated: c" in result.output

    def test_no_optimize(self, runner, write_program, tmp_path):
        source = write_program("dead.smp", "a=1\nc=a+a\nWRITE a\nHALT\n")
        result = runner.invoke(smpc, ["--no-optimize", str(source)])

        assert result.exit_code == 0
        assert len((tmp_path / "dead.sml").read_text().splitlines()) == 7

    def test_compile_error(self, runner, write_program, tmp_path):
        source = write_program("bad.smp", "a=1\nWRITE b\nHALT\n")
        result = runner.invoke(smpc, [str(source)])

        assert result.exit_code == 1
        assert f"{source}:2: error:" in result.output
        assert not (tmp_path / "bad.sml").exists()

    def test_empty_source(self, runner, write_program):
        source = write_program("empty.smp", "")
        result = runner.invoke(smpc, [str(source)])
        assert result.exit_code == 1
        assert "is empty" in result.output

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(smpc, [str(tmp_path / "missing.smp")])
        assert result.exit_code == 2


# =============================================================================
# smprun Tests
# =============================================================================

class TestSmprun:
    """Tests for the smprun runner CLI."""

    def test_run_compiled_program(self, runner, write_program):
        program = write_program("five.sml", "1102\n4300\n5\n")
        result = runner.invoke(smprun, [str(program)])

        assert result.exit_code == 0
        assert "Data from Memory Address (2) : 5" in result.output
        assert "Program terminated." in result.output

    def test_run_source_program(self, runner, write_program):
        program = write_program("xy.smp", XY_SOURCE)
        result = runner.invoke(smprun, [str(program)])

        assert result.exit_code == 0
        assert "Data from Memory Address (5) : 30" in result.output

    def test_inputs_from_options(self, runner, write_program):
        program = write_program("sum.smp", SUM_SOURCE)
        result = runner.invoke(smprun, ["-i", "4", "-i", "9", str(program)])

        assert result.exit_code == 0
        assert "Data from Memory Address (9) : 13" in result.output

    def test_inputs_from_prompt(self, runner, write_program):
        program = write_program("sum.smp", SUM_SOURCE)
        result = runner.invoke(smprun, [str(program)], input="4\n9\n")

        assert result.exit_code == 0
        assert "Enter value" in result.output
        assert "Data from Memory Address (9) : 13" in result.output

    def test_prompt_at_end_of_input(self, runner, write_program):
        program = write_program("sum.smp", SUM_SOURCE)
        result = runner.invoke(smprun, [str(program)], input="")

        assert result.exit_code == 1
        assert "Runtime error: no input for READ into 07" in result.output
        assert "Internal error" not in result.output

    def test_invalid_input(self, runner, write_program):
        program = write_program("sum.smp", SUM_SOURCE)
        result = runner.invoke(smprun, ["-i", "four", str(program)])

        assert result.exit_code == 1
        assert "Runtime error: READ expects an integer, got 'four'" in result.output

    def test_missing_input(self, runner, write_program):
        program = write_program("sum.smp", SUM_SOURCE)
        result = runner.invoke(smprun, ["-i", "4", str(program)])

        assert result.exit_code == 1
        assert "no input for READ into 08" in result.output

    def test_dump(self, runner, write_program):
        program = write_program("five.sml", "1102\n4300\n5\n")
        result = runner.invoke(smprun, ["--dump", str(program)])

        assert result.exit_code == 0
        assert "Program counter       :  1" in result.output
        assert "Instruction Register  :  4300" in result.output

    def test_breakpoint(self, runner, write_program):
        program = write_program("five.sml", "1102\n4300\n5\n")
        result = runner.invoke(smprun, ["-b", "1", str(program)])

        assert result.exit_code == 0
        assert "Breakpoint at 01 (4300)" in result.output
        assert result.output.index("Breakpoint at 01") < result.output.index("Program terminated.")

    def test_step(self, runner, write_program):
        program = write_program("five.sml", "1102\n4300\n5\n")
        result = runner.invoke(smprun, ["--step", str(program)])

        assert result.exit_code == 0
        assert result.output.count("Program counter") == 2
        assert "Program terminated." in result.output

    def test_end_of_memory(self, runner, write_program):
        program = write_program("fall.sml", "2000\n2000\n")
        result = runner.invoke(smprun, ["-m", "2", str(program)])

        assert result.exit_code == 0
        assert "Program ran off the end of memory." in result.output

    def test_memory_too_small(self, runner, write_program):
        program = write_program("five.sml", "1102\n4300\n5\n")
        result = runner.invoke(smprun, ["-m", "2", str(program)])

        assert result.exit_code == 1
        assert "memory holds only 2" in result.output

    def test_memory_size_from_environment(self, runner, write_program):
        program = write_program("five.sml", "1102\n4300\n5\n")
        result = runner.invoke(
            smprun, [str(program)], env={"SIMPLETRON_MEMORY_SIZE": "2"}
        )
        assert result.exit_code == 1

    def test_malformed_word(self, runner, write_program):
        program = write_program("bad.sml", "12\n")
        result = runner.invoke(smprun, [str(program)])

        assert result.exit_code == 1
        assert "Runtime error: malformed instruction word" in result.output

    def test_compile_error_in_source(self, runner, write_program):
        program = write_program("bad.smp", "WRITE nothing\n")
        result = runner.invoke(smprun, [str(program)])

        assert result.exit_code == 1
        assert f"{program}:1: error:" in result.output
