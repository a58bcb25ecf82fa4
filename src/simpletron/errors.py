"""
Simpletron SDK Error Hierarchy
==============================

This module defines the exception hierarchy for the entire Simpletron SDK.
All exceptions inherit from SimpletronError, allowing callers to catch all
SDK-related errors with a single except clause if desired.

Exception Hierarchy
-------------------
SimpletronError (base)
├── CompilerError (compile-time, carries source location)
│   ├── SourceSyntaxError - malformed declaration or instruction line
│   ├── DuplicateSymbolError - variable or label declared twice
│   ├── UndefinedSymbolError - reference to unknown variable or label
│   ├── UnknownCommandError - instruction mnemonic not in the opcode table
│   ├── IncompleteCommandError - command missing its operand
│   └── ProgramTooLargeError - program does not fit the 2-digit address space
├── ProgramLoadError - word list cannot be loaded into memory
├── MemoryAddressError - access outside the word store
└── ProcessorError (runtime, carries address and raw word)
    ├── MalformedWordError - fetched cell is not a 4-digit word
    ├── UnknownOpcodeError - decoded opcode is not in the opcode table
    └── InputError - READ received no value or a non-integer value

Error messages follow this format:
    filename:line: error: description
        source_line_text
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class SimpletronError(Exception):
    """
    Base exception for all Simpletron SDK errors.

    All exceptions in the SDK inherit from this class, allowing callers
    to catch all SDK-related errors with a single except clause:

        try:
            compiler.compile_file("program.smp")
        except SimpletronError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Simpletron source is line oriented, so a location is a filename and a
    1-indexed line number.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
    """
    filename: str
    line: int

    def __str__(self) -> str:
        """Format as 'filename:line' for error messages."""
        return f"{self.filename}:{self.line}"


# =============================================================================
# Compiler Exceptions
# =============================================================================

class CompilerError(SimpletronError):
    """
    Base exception for all compile-time errors.

    Compile errors abort the compilation immediately; no partial output
    is ever produced.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The actual source text at the error location (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            main.smp:4: error: variable 'cc' not found
                WRITE cc
            hint: did you mean 'c'?
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None:
            parts.append(f"    {self.source_line}")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class SourceSyntaxError(CompilerError):
    """
    Malformed source line.

    Examples:
        - Declaration with an empty name or empty right-hand side
        - Expression with a dangling operator (``c=a+``)
        - Branch operand without the ``@`` prefix
        - Extra tokens after an instruction operand
    """
    pass


class DuplicateSymbolError(CompilerError):
    """
    Variable or branch label declared more than once.

    Includes the line of the original declaration when available.
    """

    def __init__(
        self,
        symbol: str,
        kind: str = "variable",
        location: Optional[SourceLocation] = None,
        original_location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.symbol = symbol
        self.kind = kind
        self.original_location = original_location

        hint = None
        if original_location:
            hint = f"'{symbol}' was first declared at {original_location}"

        super().__init__(
            f"{kind} '{symbol}' already exists",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class UndefinedSymbolError(CompilerError):
    """
    Reference to a variable or branch label that was never declared.

    Variables must be declared before use; labels may be declared anywhere
    before the terminating HALT. Similar names are suggested as a hint.
    """

    def __init__(
        self,
        symbol: str,
        kind: str = "variable",
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        similar_symbols: Optional[list[str]] = None,
    ):
        self.symbol = symbol
        self.kind = kind
        self.similar_symbols = similar_symbols or []

        hint = None
        if self.similar_symbols:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_symbols[:3])
            hint = f"did you mean {suggestions}?"

        if kind == "label":
            message = f"branch label '@{symbol}' doesn't exist"
        else:
            message = f"{kind} '{symbol}' not found"

        super().__init__(
            message,
            location=location,
            hint=hint,
            source_line=source_line,
        )


class UnknownCommandError(CompilerError):
    """Instruction mnemonic is not one of the ten Simpletron commands."""

    def __init__(
        self,
        command: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        similar_commands: Optional[list[str]] = None,
    ):
        self.command = command
        hint = None
        if similar_commands:
            hint = f"did you mean '{similar_commands[0]}'?"
        super().__init__(
            f"unknown command '{command}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class IncompleteCommandError(CompilerError):
    """Non-HALT command written without its operand."""

    def __init__(
        self,
        command: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.command = command
        super().__init__(
            f"incomplete command '{command}': missing operand",
            location=location,
            source_line=source_line,
        )


class ProgramTooLargeError(CompilerError):
    """
    Compiled program does not fit the Simpletron address space.

    Operands are two decimal digits, so instructions plus relocated
    variables must fit in addresses 00-99.
    """
    pass


# =============================================================================
# Loader and Memory Exceptions
# =============================================================================

class ProgramLoadError(SimpletronError):
    """
    Word list cannot be loaded into memory.

    Raised when a program has more words than memory cells, or when a
    program file contains an unusable word.
    """
    pass


class MemoryAddressError(SimpletronError):
    """Read or write outside the addressable range of the word store."""

    def __init__(self, address: int, size: int):
        self.address = address
        self.size = size
        super().__init__(f"address {address} out of range (memory size {size})")


# =============================================================================
# Runtime Exceptions
# =============================================================================

class ProcessorError(SimpletronError):
    """
    Fatal runtime error raised by the processor.

    Carries the address of the faulting cell and its raw content so the
    failure can be diagnosed from the message alone.

    Attributes:
        address: Program counter at the time of the fault
        word: Raw content of the instruction register
    """

    def __init__(self, message: str, address: Optional[int] = None, word: Optional[str] = None):
        self.address = address
        self.word = word
        if address is not None:
            message = f"{message} at address {address:02d} (word {word!r})"
        super().__init__(message)


class MalformedWordError(ProcessorError):
    """Fetched cell is not a well-formed 4-digit instruction word."""

    def __init__(self, address: int, word: str):
        super().__init__("malformed instruction word", address=address, word=word)


class UnknownOpcodeError(ProcessorError):
    """Decoded opcode is not in the Simpletron opcode table."""

    def __init__(self, address: int, word: str):
        self.opcode = word[:2]
        super().__init__(f"unknown opcode {self.opcode}", address=address, word=word)


class InputError(ProcessorError):
    """READ could not obtain an integer value from the input source."""
    pass
