# =============================================================================
# test_lexer.py - Line Classifier Unit Tests
# =============================================================================
# Tests for classification of Simpletron source lines.
#
# Test coverage includes:
#   - Comments and blank lines
#   - Variable declarations (literal normalisation, whitespace)
#   - Expression declarations (terms and operators)
#   - Branch labels and instruction lines
#   - Malformed lines
#   - Truncation at the first HALT
# =============================================================================

import pytest

from simpletron.compiler.lexer import (
    LineKind,
    classify_line,
    classify_source,
    ends_with_halt,
    iter_source,
)
from simpletron.errors import SourceLocation, SourceSyntaxError


# =============================================================================
# Helper Function
# =============================================================================

def classify(text: str):
    """Classify a single line at a fixed test location."""
    return classify_line(text, SourceLocation("<test>", 1))


# =============================================================================
# Ignored Lines
# =============================================================================

class TestIgnoredLines:
    """Comments and blank lines produce no code."""

    def test_blank_line(self):
        assert classify("").kind is LineKind.BLANK

    def test_whitespace_only(self):
        assert classify("   \t  ").kind is LineKind.BLANK

    def test_comment(self):
        assert classify("> add two numbers").kind is LineKind.COMMENT

    def test_indented_comment(self):
        assert classify("   > indented").kind is LineKind.COMMENT

    def test_comment_containing_equals(self):
        """A comment is recognised before the declaration check."""
        assert classify("> a=5").kind is LineKind.COMMENT


# =============================================================================
# Variable Declaration Tests
# =============================================================================

class TestVariableDeclarations:
    """``name=literal`` lines."""

    def test_simple_declaration(self):
        line = classify("a=5")
        assert line.kind is LineKind.VARIABLE
        assert line.name == "a"
        assert line.value == "5"

    def test_whitespace_is_ignored(self):
        line = classify("  total  =  42  ")
        assert line.kind is LineKind.VARIABLE
        assert line.name == "total"
        assert line.value == "42"

    def test_negative_literal(self):
        assert classify("n=-7").value == "-7"

    def test_literal_is_normalised(self):
        assert classify("n=+007").value == "7"

    def test_large_literal(self):
        big = "123456789012345678901234567890"
        assert classify(f"n={big}").value == big

    def test_underscore_names(self):
        assert classify("_count_2=1").name == "_count_2"

    def test_missing_name(self):
        with pytest.raises(SourceSyntaxError, match="invalid variable name"):
            classify("=5")

    def test_name_starting_with_digit(self):
        with pytest.raises(SourceSyntaxError, match="invalid variable name '1a'"):
            classify("1a=5")

    def test_missing_value(self):
        with pytest.raises(SourceSyntaxError, match="missing value for variable 'a'"):
            classify("a=")

    def test_double_equals(self):
        with pytest.raises(SourceSyntaxError, match="only one '='"):
            classify("a=b=5")


# =============================================================================
# Expression Declaration Tests
# =============================================================================

class TestExpressionDeclarations:
    """``name=a+b-c`` lines."""

    def test_addition(self):
        line = classify("c=a+b")
        assert line.kind is LineKind.EXPRESSION
        assert line.name == "c"
        assert line.terms == ("a", "b")
        assert line.operators == ("+",)

    def test_mixed_chain(self):
        line = classify("r = a + b - c - d")
        assert line.terms == ("a", "b", "c", "d")
        assert line.operators == ("+", "-", "-")

    def test_single_term_copy(self):
        line = classify("c=a")
        assert line.kind is LineKind.EXPRESSION
        assert line.terms == ("a",)
        assert line.operators == ()

    def test_references_are_terms(self):
        assert classify("c=a+b").references() == ("a", "b")

    def test_dangling_operator(self):
        with pytest.raises(SourceSyntaxError, match="dangling operator"):
            classify("c=a+")

    def test_leading_operator(self):
        with pytest.raises(SourceSyntaxError, match="dangling operator"):
            classify("c=-a")

    def test_literal_term_rejected(self):
        with pytest.raises(SourceSyntaxError, match="invalid term '5'") as exc_info:
            classify("c=a+5")
        assert "declared variable names" in str(exc_info.value)


# =============================================================================
# Label and Instruction Tests
# =============================================================================

class TestLabelsAndInstructions:
    """``@name`` and ``CMD [operand]`` lines."""

    def test_label(self):
        line = classify("@loop")
        assert line.kind is LineKind.LABEL
        assert line.name == "loop"

    def test_empty_label(self):
        with pytest.raises(SourceSyntaxError, match="invalid branch label '@'"):
            classify("@")

    def test_label_with_space(self):
        with pytest.raises(SourceSyntaxError, match="invalid branch label"):
            classify("@my loop")

    def test_label_with_equals_sign(self):
        """A leading @ is reported as a label error, not a bad variable name."""
        with pytest.raises(SourceSyntaxError, match="invalid branch label '@a=b'"):
            classify("@a=b")

    def test_instruction_with_operand(self):
        line = classify("LOAD a")
        assert line.kind is LineKind.INSTRUCTION
        assert line.command == "LOAD"
        assert line.operand == "a"
        assert not line.label_operand

    def test_branch_instruction(self):
        line = classify("BRANCHNEG @done")
        assert line.operand == "@done"
        assert line.label_operand
        assert line.references() == ()

    def test_instruction_references_operand(self):
        assert classify("WRITE total").references() == ("total",)

    def test_halt(self):
        line = classify("HALT")
        assert line.is_halt
        assert line.operand is None

    def test_command_without_operand(self):
        """Operand checking is left to the code generator."""
        line = classify("LOAD")
        assert line.command == "LOAD"
        assert line.operand is None

    def test_extra_tokens(self):
        with pytest.raises(SourceSyntaxError, match="unexpected 'b' after operand"):
            classify("LOAD a b")


# =============================================================================
# Source Classification Tests
# =============================================================================

class TestClassifySource:
    """Whole-program classification."""

    def test_locations_are_one_indexed(self):
        lines = list(iter_source("a=1\n\nWRITE a", "prog.smp"))
        assert [str(line.location) for line in lines] == [
            "prog.smp:1", "prog.smp:2", "prog.smp:3",
        ]

    def test_stops_at_first_halt(self):
        lines = classify_source("a=1\nWRITE a\nHALT\nWRITE a\nHALT")
        assert len(lines) == 3
        assert lines[-1].is_halt

    def test_lines_after_halt_are_not_classified(self):
        """Garbage after HALT is never looked at."""
        lines = classify_source("HALT\nthis is not a valid line")
        assert len(lines) == 1

    def test_error_location(self):
        with pytest.raises(SourceSyntaxError) as exc_info:
            classify_source("a=1\nb=\n", "bad.smp")
        assert exc_info.value.location == SourceLocation("bad.smp", 2)
        assert str(exc_info.value).startswith("bad.smp:2: error:")


class TestEndsWithHalt:
    """Whether the last physical line is HALT."""

    @pytest.mark.parametrize("source,expected", [
        ("a=1\nWRITE a\nHALT", True),
        ("a=1\nWRITE a\nHALT\n", True),
        ("a=1\nWRITE a\n  HALT  ", True),
        ("a=1\nWRITE a", False),
        ("HALT\n> trailing note", False),
        ("HALT\n\n", False),
        ("", False),
    ])
    def test_last_line(self, source, expected):
        assert ends_with_halt(source) is expected
