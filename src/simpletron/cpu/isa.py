"""
Simpletron Instruction Set
==========================

Shared instruction-set definitions used by the compiler (which encodes
words) and the processor (which decodes them).

Word Format
-----------
An instruction word is four decimal digits::

    OO AA
    |  +-- operand: memory address or instruction index (00-99)
    +----- opcode (see Opcode)

Memory cells hold either an instruction word or a decimal literal of any
length. Internally a cell is modelled as the tagged union
``Instruction | Literal``; at the external boundary (program files, memory
dumps) both are plain strings.

Copyright (c) 2025 Simpletron SDK Contributors
"""

import re
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Union


# =============================================================================
# Word Geometry
# =============================================================================

OPCODE_DIGITS = 2
OPERAND_DIGITS = 2
WORD_LENGTH = OPCODE_DIGITS + OPERAND_DIGITS

# Largest operand a word can carry, plus one: the compiler's address space
ADDRESS_SPACE = 10 ** OPERAND_DIGITS

_WORD_PATTERN = re.compile(r"^[0-9]{4}$")
_LITERAL_PATTERN = re.compile(r"^[+-]?[0-9]+$")


# =============================================================================
# Opcodes
# =============================================================================

class Opcode(IntEnum):
    """Simpletron operation codes."""
    # Input/output
    READ = 10
    WRITE = 11
    # Load/store
    LOAD = 20
    STORE = 21
    # Arithmetic
    ADD = 30
    SUBTRACT = 31
    # Transfer of control
    BRANCH = 40
    BRANCHNEG = 41
    BRANCHZERO = 42
    HALT = 43


# Mnemonic -> opcode lookup for the compiler
OPCODE_TABLE: dict[str, Opcode] = {op.name: op for op in Opcode}

MNEMONICS: tuple[str, ...] = tuple(OPCODE_TABLE)

BRANCH_INSTRUCTIONS = frozenset({Opcode.BRANCH, Opcode.BRANCHNEG, Opcode.BRANCHZERO})

_OPCODE_VALUES = frozenset(int(op) for op in Opcode)


def get_opcode(mnemonic: str) -> Optional[Opcode]:
    """Return the opcode for a mnemonic, or None if it is not a command."""
    return OPCODE_TABLE.get(mnemonic)


def is_branch_instruction(opcode: int) -> bool:
    """True for BRANCH, BRANCHNEG and BRANCHZERO."""
    return opcode in BRANCH_INSTRUCTIONS


def is_valid_opcode(code: int) -> bool:
    return code in _OPCODE_VALUES


# =============================================================================
# Word Types
# =============================================================================

@dataclass(frozen=True)
class Instruction:
    """
    A decoded instruction word.

    Attributes:
        opcode: Raw 2-digit opcode (may be outside Opcode when decoding
                arbitrary memory)
        operand: Address or instruction index (0-99)
    """
    opcode: int
    operand: int = 0

    def encode(self) -> str:
        """Render as ``opcode ++ zero_pad(operand, 2)``."""
        return f"{self.opcode:0{OPCODE_DIGITS}d}{self.operand:0{OPERAND_DIGITS}d}"

    @property
    def mnemonic(self) -> Optional[str]:
        if is_valid_opcode(self.opcode):
            return Opcode(self.opcode).name
        return None

    def __str__(self) -> str:
        return self.encode()


@dataclass(frozen=True)
class Literal:
    """A data cell holding an arbitrary-precision decimal integer."""
    value: int

    def encode(self) -> str:
        return str(self.value)

    def __str__(self) -> str:
        return self.encode()


Word = Union[Instruction, Literal]


# =============================================================================
# Encoding / Decoding
# =============================================================================

def encode_instruction(opcode: int, operand: int = 0) -> str:
    """
    Encode an opcode and operand as a 4-digit word.

    Raises:
        ValueError: If the operand does not fit in two digits
    """
    if not 0 <= operand < ADDRESS_SPACE:
        raise ValueError(f"operand {operand} does not fit in {OPERAND_DIGITS} digits")
    return Instruction(int(opcode), operand).encode()


def is_instruction_word(text: Optional[str]) -> bool:
    """True if text is exactly four decimal digits."""
    return text is not None and bool(_WORD_PATTERN.match(text))


def is_literal(text: Optional[str]) -> bool:
    """True if text is an optionally signed decimal integer."""
    return text is not None and bool(_LITERAL_PATTERN.match(text))


def decode_instruction(text: str) -> Instruction:
    """
    Split a 4-digit word into opcode and operand.

    Raises:
        ValueError: If text is not a 4-digit word
    """
    if not is_instruction_word(text):
        raise ValueError(f"not an instruction word: {text!r}")
    return Instruction(int(text[:OPCODE_DIGITS]), int(text[OPCODE_DIGITS:]))


def decode_word(text: str) -> Word:
    """
    Classify a memory cell.

    Four-digit cells whose opcode is a known command decode as
    Instruction; every other integer decodes as Literal.

    Raises:
        ValueError: If text is neither an instruction nor an integer
    """
    if is_instruction_word(text):
        instruction = decode_instruction(text)
        if is_valid_opcode(instruction.opcode):
            return instruction
    if is_literal(text):
        return Literal(int(text))
    raise ValueError(f"not a Simpletron word: {text!r}")


def disassemble_word(text: str) -> str:
    """
    Render a memory cell in mnemonic form for listings and traces.

    Example:
        >>> disassemble_word("2007")
        'LOAD 07'
        >>> disassemble_word("4300")
        'HALT'
        >>> disassemble_word("-15")
        '.DATA -15'
    """
    try:
        word = decode_word(text)
    except ValueError:
        return f"?? {text}"
    if isinstance(word, Literal):
        return f".DATA {word.value}"
    if word.opcode == Opcode.HALT:
        return "HALT"
    return f"{word.mnemonic} {word.operand:0{OPERAND_DIGITS}d}"
