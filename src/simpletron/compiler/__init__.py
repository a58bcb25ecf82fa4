"""
Simpletron Compiler
===================

Compiles line-oriented Simpletron source (``.smp``) into 4-digit machine
words (``.sml``) for the Simpletron processor.

Pipeline
--------
    Source → Line Classifier → Code Generator → Relocator → Words

- **lexer**: classifies every line (comment, declaration, label, instruction)
- **symbols**: variable and branch label tables
- **codegen**: label/liveness prepass, emission, relocation
- **compiler**: options, result, file I/O and statistics

Usage
-----
>>> from simpletron.compiler import compile_program
>>> compile_program("a=5\\nb=3\\nc=a+b\\nWRITE c\\nHALT")
['2005', '3006', '2107', '1107', '4300', '5', '3', '0']
"""

from simpletron.compiler.compiler import (
    SimpletronCompiler,
    CompilerOptions,
    CompilerResult,
    compile_program,
    compile_file,
    write_output,
    default_output_path,
    format_stats,
    SOURCE_SUFFIX,
    OUTPUT_SUFFIX,
)
from simpletron.compiler.codegen import CodeGenerator, GeneratedProgram
from simpletron.compiler.lexer import LineKind, SourceLine, classify_line, classify_source, ends_with_halt
from simpletron.compiler.symbols import SymbolTable, BranchTable, Variable, BranchLabel

__all__ = [
    # Main interface
    "SimpletronCompiler",
    "CompilerOptions",
    "CompilerResult",
    "compile_program",
    "compile_file",
    "write_output",
    "default_output_path",
    "format_stats",
    "SOURCE_SUFFIX",
    "OUTPUT_SUFFIX",
    # Stages
    "CodeGenerator",
    "GeneratedProgram",
    "LineKind",
    "SourceLine",
    "classify_line",
    "classify_source",
    "ends_with_halt",
    "SymbolTable",
    "BranchTable",
    "Variable",
    "BranchLabel",
]
