"""
Simpletron Line Classifier
==========================

Simpletron source is strictly line oriented: every trimmed line is exactly
one of the forms below, and no construct spans lines.

Line Forms
----------
```
> text              COMMENT       ignored
                    BLANK         ignored
name=literal        VARIABLE      declare a variable with an integer value
name=a+b-c          EXPRESSION    declare a variable computed from others
@name               LABEL         mark the next emitted instruction
CMD operand         INSTRUCTION   READ WRITE LOAD STORE ADD SUBTRACT
                                  BRANCH BRANCHNEG BRANCHZERO (operand @label)
HALT                INSTRUCTION   terminal, no operand
```

Whitespace inside declarations is insignificant (``a = 5`` is ``a=5``).
Literals are optionally signed decimal integers of any length and are
normalised (``+007`` becomes ``7``).

The classifier validates the *shape* of each line only. Whether a command
exists, whether names are declared, and whether labels resolve are code
generator concerns.
"""

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional

from simpletron.cpu import is_literal
from simpletron.errors import SourceLocation, SourceSyntaxError


COMMENT_PREFIX = ">"
LABEL_PREFIX = "@"
HALT_COMMAND = "HALT"

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_OPERATOR_SPLIT = re.compile(r"([+-])")


def is_identifier(text: str) -> bool:
    """True if text is a valid variable or label name."""
    return bool(_IDENTIFIER.match(text))


# =============================================================================
# Classified Lines
# =============================================================================

class LineKind(Enum):
    """Category of a source line."""
    COMMENT = auto()
    BLANK = auto()
    VARIABLE = auto()
    EXPRESSION = auto()
    LABEL = auto()
    INSTRUCTION = auto()


@dataclass(frozen=True)
class SourceLine:
    """
    One classified source line.

    Only the fields relevant to ``kind`` are populated.

    Attributes:
        kind: Line category
        text: Trimmed source text (for error context)
        location: File and line number
        name: Declared variable, expression or label name
        value: Normalised literal of a VARIABLE line
        terms: Operand names of an EXPRESSION line, in source order
        operators: ``+``/``-`` between consecutive terms
        command: Mnemonic of an INSTRUCTION line (as written)
        operand: Operand token of an INSTRUCTION line, if any
    """
    kind: LineKind
    text: str
    location: SourceLocation
    name: Optional[str] = None
    value: Optional[str] = None
    terms: tuple[str, ...] = ()
    operators: tuple[str, ...] = ()
    command: Optional[str] = None
    operand: Optional[str] = None

    @property
    def is_halt(self) -> bool:
        return self.kind is LineKind.INSTRUCTION and self.command == HALT_COMMAND

    @property
    def label_operand(self) -> bool:
        """True if the operand is a ``@label`` reference."""
        return self.operand is not None and self.operand.startswith(LABEL_PREFIX)

    def references(self) -> tuple[str, ...]:
        """Variable names this line reads."""
        if self.kind is LineKind.EXPRESSION:
            return self.terms
        if self.kind is LineKind.INSTRUCTION and self.operand and not self.label_operand:
            return (self.operand,)
        return ()


# =============================================================================
# Classification
# =============================================================================

def classify_line(text: str, location: SourceLocation) -> SourceLine:
    """
    Classify a single source line.

    Args:
        text: Raw source line (leading/trailing whitespace is ignored)
        location: Location used for error reporting

    Returns:
        The classified line

    Raises:
        SourceSyntaxError: If the line matches no valid form
    """
    stripped = text.strip()

    if not stripped:
        return SourceLine(LineKind.BLANK, stripped, location)

    if stripped.startswith(COMMENT_PREFIX):
        return SourceLine(LineKind.COMMENT, stripped, location)

    if stripped.startswith(LABEL_PREFIX):
        name = stripped[len(LABEL_PREFIX):]
        if not is_identifier(name):
            raise SourceSyntaxError(
                f"invalid branch label '{stripped}'",
                location=location,
                source_line=stripped,
                hint="labels are written as @name",
            )
        return SourceLine(LineKind.LABEL, stripped, location, name=name)

    if "=" in stripped:
        return _classify_declaration(stripped, location)

    tokens = stripped.split()
    if len(tokens) > 2:
        raise SourceSyntaxError(
            f"unexpected '{' '.join(tokens[2:])}' after operand",
            location=location,
            source_line=stripped,
        )
    return SourceLine(
        LineKind.INSTRUCTION,
        stripped,
        location,
        command=tokens[0],
        operand=tokens[1] if len(tokens) > 1 else None,
    )


def _classify_declaration(stripped: str, location: SourceLocation) -> SourceLine:
    """Classify ``name=literal`` and ``name=a+b-c`` lines."""
    compact = "".join(stripped.split())
    name, _, rhs = compact.partition("=")

    if not is_identifier(name):
        raise SourceSyntaxError(
            f"invalid variable name '{name}'",
            location=location,
            source_line=stripped,
        )
    if not rhs:
        raise SourceSyntaxError(
            f"missing value for variable '{name}'",
            location=location,
            source_line=stripped,
        )
    if "=" in rhs:
        raise SourceSyntaxError(
            "only one '=' is allowed per declaration",
            location=location,
            source_line=stripped,
        )

    if is_literal(rhs):
        return SourceLine(
            LineKind.VARIABLE, stripped, location, name=name, value=str(int(rhs))
        )

    parts = _OPERATOR_SPLIT.split(rhs)
    terms = tuple(parts[0::2])
    operators = tuple(parts[1::2])
    for term in terms:
        if not term:
            raise SourceSyntaxError(
                f"dangling operator in expression '{rhs}'",
                location=location,
                source_line=stripped,
            )
        if not is_identifier(term):
            raise SourceSyntaxError(
                f"invalid term '{term}' in expression",
                location=location,
                source_line=stripped,
                hint="expression terms must be declared variable names",
            )

    return SourceLine(
        LineKind.EXPRESSION,
        stripped,
        location,
        name=name,
        terms=terms,
        operators=operators,
    )


def iter_source(source: str, filename: str = "<input>") -> Iterator[SourceLine]:
    """Classify every line of source, lazily."""
    for number, text in enumerate(source.splitlines(), start=1):
        yield classify_line(text, SourceLocation(filename, number))


def classify_source(source: str, filename: str = "<input>") -> list[SourceLine]:
    """
    Classify source up to and including the first HALT.

    HALT is terminal: lines after it are never compiled, so they are
    not classified either.

    Args:
        source: Complete program text
        filename: Name used in error locations

    Returns:
        Classified lines, ending at the first HALT if there is one
    """
    lines = []
    for line in iter_source(source, filename):
        lines.append(line)
        if line.is_halt:
            break
    return lines


def ends_with_halt(source: str) -> bool:
    """
    True if the last physical line of source is ``HALT``.

    Only the last line counts: a HALT followed by a trailing comment or
    blank line does not terminate the program text.

    Example:
        >>> ends_with_halt("WRITE a\\nHALT\\n")
        True
        >>> ends_with_halt("WRITE a\\nHALT\\n> done")
        False
    """
    physical = source.splitlines()
    return bool(physical) and physical[-1].strip() == HALT_COMMAND
