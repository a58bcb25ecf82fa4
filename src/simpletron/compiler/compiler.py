"""
Simpletron Compiler Main Module
===============================

This module provides the main compiler interface for Simpletron source.
It orchestrates the complete compilation process:

    Source → Classify → Generate (prepass + pass 1) → Relocate (pass 2) → Words

Usage
-----
Command line:
    $ smpc program.smp -o program.sml

Programmatic:
    >>> from simpletron.compiler import compile_program
    >>> compile_program("a=5\\nWRITE a\\nHALT")
    ['1102', '4300', '5']

The output is one word per line: instruction words first, then the values
of every variable a surviving instruction references, in order of first
reference.

Error Handling
--------------
Compilation stops at the first error. Errors are raised as
CompilerError subclasses carrying the source location; no partial output
is ever produced.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from simpletron.compiler.codegen import CodeGenerator, GeneratedProgram
from simpletron.compiler.lexer import classify_source, ends_with_halt
from simpletron.cpu import ADDRESS_SPACE
from simpletron.errors import SourceSyntaxError

logger = logging.getLogger(__name__)

SOURCE_SUFFIX = ".smp"
OUTPUT_SUFFIX = ".sml"


@dataclass(frozen=True)
class CompilerOptions:
    """
    Compiler configuration options.

    Attributes:
        optimize: Drop expression declarations that nothing reads
        max_words: Largest program (instructions plus data) accepted.
                   Capped at the 2-digit address space.
    """
    optimize: bool = True
    max_words: int = ADDRESS_SPACE

    def __post_init__(self):
        if not 0 < self.max_words <= ADDRESS_SPACE:
            raise ValueError(
                f"max_words must be between 1 and {ADDRESS_SPACE}, got {self.max_words}"
            )


@dataclass
class CompilerResult:
    """
    Result of a compilation.

    Attributes:
        filename: Source filename
        words: Generated words (instructions, then variable values)
        instruction_count: Number of instruction words
        variables: Variable name -> assigned memory slot, for every
                   variable that received one
        labels: Branch label name -> instruction index
        eliminated: Expression declarations dropped as dead
        implicit_halt: True if a HALT had to be appended
        line_count: Number of source lines compiled (up to the first HALT)
        elapsed_ms: Wall-clock compilation time in milliseconds
    """
    filename: str = "<input>"
    words: list[str] = field(default_factory=list)
    instruction_count: int = 0
    variables: dict[str, int] = field(default_factory=dict)
    labels: dict[str, int] = field(default_factory=dict)
    eliminated: list[str] = field(default_factory=list)
    implicit_halt: bool = False
    line_count: int = 0
    elapsed_ms: float = 0.0

    @property
    def variable_count(self) -> int:
        return len(self.words) - self.instruction_count

    @property
    def text(self) -> str:
        """Newline-delimited program text, as written to a .sml file."""
        return "\n".join(self.words) + "\n"


class SimpletronCompiler:
    """
    Compiler for Simpletron source programs.

    Example:
        compiler = SimpletronCompiler()
        result = compiler.compile_file("add.smp")
        write_output(result, "add.sml")

    Attributes:
        options: Compiler configuration options
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        """
        Initialize the compiler.

        Args:
            options: Compiler configuration (uses defaults if None)
        """
        self.options = options or CompilerOptions()

    def compile_source(self, source: str, filename: str = "<input>") -> CompilerResult:
        """
        Compile Simpletron source code to machine words.

        Args:
            source: Source program text
            filename: Source filename for error messages

        Returns:
            CompilerResult containing the words and statistics

        Raises:
            CompilerError: If compilation fails
        """
        started = time.perf_counter()

        lines = classify_source(source, filename)
        program = self._generate(lines, ends_with_halt(source))

        elapsed_ms = (time.perf_counter() - started) * 1000.0
        result = CompilerResult(
            filename=filename,
            words=program.words,
            instruction_count=program.instruction_count,
            variables=program.symbols.addresses(),
            labels=program.branches.indices(),
            eliminated=list(program.eliminated),
            implicit_halt=program.implicit_halt,
            line_count=len(lines),
            elapsed_ms=elapsed_ms,
        )
        logger.info(
            f"Compiled {filename}: {result.instruction_count} instructions, "
            f"{result.variable_count} variables in {elapsed_ms:.2f} ms"
        )
        return result

    def compile_file(self, filepath) -> CompilerResult:
        """
        Compile a Simpletron source file.

        Args:
            filepath: Path to the .smp source file

        Returns:
            CompilerResult containing the words and statistics

        Raises:
            CompilerError: If compilation fails
            FileNotFoundError: If source file not found
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {filepath}")

        source = path.read_text(encoding="utf-8")
        if not source.strip():
            raise SourceSyntaxError(f"source file '{filepath}' is empty")

        return self.compile_source(source, str(filepath))

    def _generate(self, lines, terminated: bool) -> GeneratedProgram:
        generator = CodeGenerator(
            optimize=self.options.optimize,
            max_words=self.options.max_words,
        )
        return generator.generate(lines, terminated)


# =============================================================================
# Output Helpers
# =============================================================================

def default_output_path(input_path) -> Path:
    """Return the input path with its suffix replaced by ``.sml``."""
    return Path(input_path).with_suffix(OUTPUT_SUFFIX)


def write_output(result: CompilerResult, output_path) -> Path:
    """
    Write a compiled program as newline-delimited words.

    Returns:
        The path written
    """
    path = Path(output_path)
    path.write_text(result.text, encoding="utf-8")
    logger.debug(f"Wrote {len(result.words)} words to {path}")
    return path


def format_stats(result: CompilerResult, output_path) -> str:
    """
    Render the compilation statistics block.

    Example output::

        ------------------------------------------
        Compiled to      : add.sml (25 bytes)
        Compilation time : 0.41 ms
        Number of lines  : 7
        ------------------------------------------
    """
    path = Path(output_path)
    size = path.stat().st_size if path.exists() else len(result.text.encode("utf-8"))
    rule = "-" * 42
    return "\n".join([
        rule,
        f"Compiled to      : {path} ({size} bytes)",
        f"Compilation time : {result.elapsed_ms:.2f} ms",
        f"Number of lines  : {len(result.words)}",
        rule,
    ])


# =============================================================================
# Convenience Functions
# =============================================================================

def compile_program(source: str, filename: str = "<input>", optimize: bool = True) -> list[str]:
    """
    Compile Simpletron source code to a list of words.

    This is the primary high-level interface for the compiler.

    Args:
        source: Source program text
        filename: Source filename for error messages
        optimize: Drop dead expression declarations

    Returns:
        The generated words

    Raises:
        CompilerError: If compilation fails

    Example:
        >>> compile_program("x=10\\ny=20\\nLOAD x\\nADD y\\nSTORE x\\nWRITE x\\nHALT")
        ['2005', '3006', '2105', '1105', '4300', '10', '20']
    """
    compiler = SimpletronCompiler(CompilerOptions(optimize=optimize))
    return compiler.compile_source(source, filename).words


def compile_file(filepath, output_path=None, optimize: bool = True) -> list[str]:
    """
    Compile a source file, optionally writing the program.

    Example:
        >>> words = compile_file("add.smp", "add.sml")
    """
    compiler = SimpletronCompiler(CompilerOptions(optimize=optimize))
    result = compiler.compile_file(filepath)
    if output_path:
        write_output(result, output_path)
    return result.words
