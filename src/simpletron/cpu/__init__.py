"""
Simpletron CPU Package
======================

Instruction-set definitions shared by the compiler (which encodes
instruction words) and the emulator (which decodes them).

Modules:
    isa: Opcode table, word geometry, word codec and disassembly helpers.

Usage:
    from simpletron.cpu import Opcode, encode_instruction, decode_word

Copyright (c) 2025 Simpletron SDK Contributors
"""

from simpletron.cpu.isa import (
    # Word geometry
    OPCODE_DIGITS,
    OPERAND_DIGITS,
    WORD_LENGTH,
    ADDRESS_SPACE,
    # Opcodes
    Opcode,
    OPCODE_TABLE,
    MNEMONICS,
    BRANCH_INSTRUCTIONS,
    get_opcode,
    is_branch_instruction,
    is_valid_opcode,
    # Word types
    Instruction,
    Literal,
    Word,
    # Codec
    encode_instruction,
    decode_instruction,
    decode_word,
    is_instruction_word,
    is_literal,
    disassemble_word,
)

__all__ = [
    "OPCODE_DIGITS",
    "OPERAND_DIGITS",
    "WORD_LENGTH",
    "ADDRESS_SPACE",
    "Opcode",
    "OPCODE_TABLE",
    "MNEMONICS",
    "BRANCH_INSTRUCTIONS",
    "get_opcode",
    "is_branch_instruction",
    "is_valid_opcode",
    "Instruction",
    "Literal",
    "Word",
    "encode_instruction",
    "decode_instruction",
    "decode_word",
    "is_instruction_word",
    "is_literal",
    "disassemble_word",
]
