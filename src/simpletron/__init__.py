"""
Simpletron SDK - Compiler and Emulator for the Simpletron Machine
=================================================================

The Simpletron is a teaching computer: a single accumulator, 100 decimal
memory cells, and ten instructions encoded as 4-digit words. This package
provides a compiler for a small line-oriented source language and a
processor that executes the compiled words.

Main Components
---------------
- **compiler**: Simpletron compiler (smpc)
    Converts source files (.smp) to machine-word programs (.sml), with
    dead-store elimination and variable relocation

- **emulator**: Simpletron processor (smprun)
    Loads programs into memory and runs the fetch-decode-execute cycle,
    with breakpoints and watchpoints for debugging

- **cpu**: Instruction set
    Opcode table, word codec and disassembler shared by both

Quick Start
-----------
Compile a program:
    >>> from simpletron import compile_program
    >>> compile_program("x=10\\ny=20\\nLOAD x\\nADD y\\nSTORE x\\nWRITE x\\nHALT")
    ['2005', '3006', '2105', '1105', '4300', '10', '20']

Compile and run:
    >>> from simpletron import Simpletron
    >>> machine = Simpletron()
    >>> machine.load_source("a=5\\nb=3\\nc=a+b\\nWRITE c\\nHALT")
    8
    >>> _ = machine.run()
    >>> machine.outputs
    ['8']

Or use the command-line tools:
    $ smpc add.smp -o add.sml
    $ smprun add.sml
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from simpletron.errors import (
    SimpletronError,
    SourceLocation,
    CompilerError,
    SourceSyntaxError,
    DuplicateSymbolError,
    UndefinedSymbolError,
    UnknownCommandError,
    IncompleteCommandError,
    ProgramTooLargeError,
    ProgramLoadError,
    MemoryAddressError,
    ProcessorError,
    MalformedWordError,
    UnknownOpcodeError,
    InputError,
)
from simpletron.cpu import Opcode, encode_instruction, decode_word, disassemble_word
from simpletron.compiler import (
    SimpletronCompiler,
    CompilerOptions,
    CompilerResult,
    compile_program,
    compile_file,
)
from simpletron.emulator import (
    Simpletron,
    SimpletronConfig,
    Processor,
    Memory,
    BreakpointManager,
    BreakEvent,
    BreakReason,
    input_from,
)

__all__ = [
    "__version__",
    # Errors
    "SimpletronError",
    "SourceLocation",
    "CompilerError",
    "SourceSyntaxError",
    "DuplicateSymbolError",
    "UndefinedSymbolError",
    "UnknownCommandError",
    "IncompleteCommandError",
    "ProgramTooLargeError",
    "ProgramLoadError",
    "MemoryAddressError",
    "ProcessorError",
    "MalformedWordError",
    "UnknownOpcodeError",
    "InputError",
    # Instruction set
    "Opcode",
    "encode_instruction",
    "decode_word",
    "disassemble_word",
    # Compiler
    "SimpletronCompiler",
    "CompilerOptions",
    "CompilerResult",
    "compile_program",
    "compile_file",
    # Emulator
    "Simpletron",
    "SimpletronConfig",
    "Processor",
    "Memory",
    "BreakpointManager",
    "BreakEvent",
    "BreakReason",
    "input_from",
]
