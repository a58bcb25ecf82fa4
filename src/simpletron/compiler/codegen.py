"""
Simpletron Code Generator
=========================

This module turns classified source lines into Simpletron machine words.

Prepass (Liveness and Layout)
-----------------------------
- Walk the lines backwards to find which expression declarations are live,
  i.e. read by a later surviving instruction or by a later live expression.
  Dead expressions are dropped entirely (dead-store elimination).
- Walk the lines forwards, counting the words each line will emit, and
  record every branch label at the index of the next emitted instruction.
  Declarations are checked for duplicates here, so a redeclared name is
  rejected even when one of its declarations is dead.

Because the branch table is complete before any code is emitted, forward
and backward branches resolve identically, whatever declarations or
comments sit between a branch and its label.

Pass 1 (Emission)
-----------------
- Declare variables in the symbol table (no memory slot yet)
- Lower live expressions ``c=a+b-d`` into (LOAD, ADD|SUBTRACT, STORE)
  triples against a running slot named ``c``::

      LOAD a / ADD b / STORE c / LOAD c / SUBTRACT d / STORE c

- Emit one word per instruction line; HALT stops generation
- Append an implicit HALT when the last physical source line is not HALT,
  even if generation already stopped at an earlier one

Pass 2 (Relocation)
-------------------
With the final instruction count ``N`` known, each variable referenced by
a surviving instruction gets the next free slot from ``N`` upwards, in
order of first reference, and its literal is appended after the code.
Variables no instruction references get no slot and emit nothing.
"""

import difflib
import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional

from simpletron.cpu import (
    ADDRESS_SPACE,
    Instruction,
    Opcode,
    get_opcode,
    is_branch_instruction,
    MNEMONICS,
)
from simpletron.compiler.lexer import (
    LABEL_PREFIX,
    LineKind,
    SourceLine,
    is_identifier,
)
from simpletron.compiler.symbols import BranchTable, SymbolTable, Variable
from simpletron.errors import (
    DuplicateSymbolError,
    IncompleteCommandError,
    ProgramTooLargeError,
    SourceLocation,
    SourceSyntaxError,
    UnknownCommandError,
)


logger = logging.getLogger(__name__)

# Initial value of the running slot an expression stores into
EXPRESSION_SEED = "0"


# =============================================================================
# Emitted Instructions
# =============================================================================

class OperandKind(Enum):
    """How an operand record gets its final address."""
    BRANCH = auto()     # absolute instruction index, excluded from relocation
    VARIABLE = auto()   # pending variable reference, rewritten by the relocator


@dataclass
class OperandRecord:
    """
    Operand of one non-HALT instruction.

    Attributes:
        kind: BRANCH or VARIABLE
        address: Final address (set at emission for branches, by the
                 relocator for variables)
        variable: Referenced variable for VARIABLE operands
    """
    kind: OperandKind
    address: Optional[int] = None
    variable: Optional[Variable] = None


@dataclass
class EmittedInstruction:
    """An instruction in the generated stream, before rendering."""
    opcode: Opcode
    operand: Optional[OperandRecord]
    location: Optional[SourceLocation]

    def render(self) -> str:
        if self.operand is None:
            return Instruction(self.opcode).encode()
        return Instruction(self.opcode, self.operand.address).encode()


# =============================================================================
# Generation Result
# =============================================================================

@dataclass
class GeneratedProgram:
    """
    Output of one code generation run.

    Attributes:
        words: Instruction words followed by relocated variable values
        instruction_count: Number of instruction words (N)
        symbols: Symbol table, with slots assigned
        branches: Branch table
        eliminated: Names of expression declarations dropped as dead
        implicit_halt: True if a HALT was appended
    """
    words: list[str]
    instruction_count: int
    symbols: SymbolTable
    branches: BranchTable
    eliminated: list[str] = field(default_factory=list)
    implicit_halt: bool = False

    @property
    def data_count(self) -> int:
        return len(self.words) - self.instruction_count

    @property
    def instructions(self) -> list[str]:
        return self.words[:self.instruction_count]

    @property
    def data(self) -> list[str]:
        return self.words[self.instruction_count:]


@dataclass
class _CompilerState:
    """Mutable state of one generate() call. Never shared between calls."""
    lines: list[SourceLine]
    symbols: SymbolTable = field(default_factory=SymbolTable)
    branches: BranchTable = field(default_factory=BranchTable)
    instructions: list[EmittedInstruction] = field(default_factory=list)
    live_expressions: set[int] = field(default_factory=set)
    eliminated: list[str] = field(default_factory=list)
    halted: bool = False


# =============================================================================
# Code Generator
# =============================================================================

class CodeGenerator:
    """
    Generates Simpletron words from classified source lines.

    The generator itself holds only configuration; every call to
    generate() builds a fresh _CompilerState.

    Usage:
        lines = classify_source(source)
        program = CodeGenerator().generate(lines)
        print("\\n".join(program.words))
    """

    def __init__(self, optimize: bool = True, max_words: int = ADDRESS_SPACE):
        """
        Initialize the code generator.

        Args:
            optimize: Drop expression declarations nothing reads. When
                      False every expression is lowered.
            max_words: Largest program (instructions plus data) accepted
        """
        self.optimize = optimize
        self.max_words = max_words

    def generate(
        self,
        lines: list[SourceLine],
        terminated: Optional[bool] = None,
    ) -> GeneratedProgram:
        """
        Generate machine words for a classified program.

        Args:
            lines: Output of classify_source()
            terminated: Whether the last physical source line is HALT
                        (see ends_with_halt). An implicit HALT is appended
                        when it is not. Defaults to whether lines end with
                        a HALT.

        Returns:
            GeneratedProgram with the final word list

        Raises:
            CompilerError: On the first error found; nothing is returned
        """
        state = _CompilerState(lines=lines)

        self._mark_live_expressions(state)
        self._layout(state)

        for index, line in enumerate(state.lines):
            self._emit_line(state, index, line)
            if state.halted:
                break

        if terminated is None:
            terminated = state.halted
        implicit_halt = not terminated
        if implicit_halt:
            state.instructions.append(EmittedInstruction(Opcode.HALT, None, None))
            logger.debug("Appended implicit HALT")

        words = self._relocate(state)

        logger.debug(
            f"Generated {len(state.instructions)} instructions and "
            f"{len(words) - len(state.instructions)} data words"
        )
        return GeneratedProgram(
            words=words,
            instruction_count=len(state.instructions),
            symbols=state.symbols,
            branches=state.branches,
            eliminated=state.eliminated,
            implicit_halt=implicit_halt,
        )

    # =========================================================================
    # Prepass
    # =========================================================================

    def _mark_live_expressions(self, state: _CompilerState) -> None:
        """Backward liveness walk over expression declarations."""
        live_names: set[str] = set()
        for index in range(len(state.lines) - 1, -1, -1):
            line = state.lines[index]
            if line.kind is LineKind.EXPRESSION:
                if self.optimize and line.name not in live_names:
                    continue
                state.live_expressions.add(index)
            live_names.update(line.references())

    def _layout(self, state: _CompilerState) -> None:
        """
        Forward walk: count emitted words, define labels, and reject
        duplicate declarations.
        """
        declared: dict[str, SourceLocation] = {}
        count = 0

        for index, line in enumerate(state.lines):
            match line.kind:
                case LineKind.VARIABLE | LineKind.EXPRESSION:
                    if line.name in declared:
                        raise DuplicateSymbolError(
                            line.name,
                            kind="variable",
                            location=line.location,
                            original_location=declared[line.name],
                            source_line=line.text,
                        )
                    declared[line.name] = line.location
                    if index in state.live_expressions:
                        count += self._expression_size(line)
                case LineKind.LABEL:
                    state.branches.define(line.name, count, line.location, line.text)
                    logger.debug(f"Label @{line.name} -> {count:02d}")
                case LineKind.INSTRUCTION:
                    count += 1
                    if line.is_halt:
                        break

    @staticmethod
    def _expression_size(line: SourceLine) -> int:
        if not line.operators:
            return 2  # LOAD term / STORE name
        return 3 * len(line.operators)

    # =========================================================================
    # Pass 1: Emission
    # =========================================================================

    def _emit_line(self, state: _CompilerState, index: int, line: SourceLine) -> None:
        match line.kind:
            case LineKind.VARIABLE:
                state.symbols.declare(line.name, line.value, line.location, line.text)
            case LineKind.EXPRESSION:
                if index in state.live_expressions:
                    self._emit_expression(state, line)
                else:
                    state.eliminated.append(line.name)
                    logger.debug(f"{line.location}: dropped unused expression '{line.name}'")
            case LineKind.INSTRUCTION:
                self._emit_instruction(state, line)
            case _:
                # Comments and blanks emit nothing; labels were placed by the prepass
                pass

    def _emit_expression(self, state: _CompilerState, line: SourceLine) -> None:
        """Lower ``name=t0 op1 t1 op2 t2 ...`` into LOAD/ADD|SUBTRACT/STORE triples."""
        terms = [state.symbols.resolve(t, line.location, line.text) for t in line.terms]
        target = state.symbols.declare(line.name, EXPRESSION_SEED, line.location, line.text)

        if not line.operators:
            self._emit(state, Opcode.LOAD, terms[0], line)
            self._emit(state, Opcode.STORE, target, line)
            return

        accumulated = terms[0]
        for operator, term in zip(line.operators, terms[1:]):
            opcode = Opcode.ADD if operator == "+" else Opcode.SUBTRACT
            self._emit(state, Opcode.LOAD, accumulated, line)
            self._emit(state, opcode, term, line)
            self._emit(state, Opcode.STORE, target, line)
            accumulated = target

    def _emit_instruction(self, state: _CompilerState, line: SourceLine) -> None:
        opcode = get_opcode(line.command)
        if opcode is None:
            raise UnknownCommandError(
                line.command,
                location=line.location,
                source_line=line.text,
                similar_commands=difflib.get_close_matches(
                    line.command.upper(), MNEMONICS, n=1, cutoff=0.6
                ),
            )

        if opcode is Opcode.HALT:
            if line.operand is not None:
                raise SourceSyntaxError(
                    "HALT takes no operand",
                    location=line.location,
                    source_line=line.text,
                )
            state.instructions.append(EmittedInstruction(Opcode.HALT, None, line.location))
            state.halted = True
            return

        if line.operand is None:
            raise IncompleteCommandError(line.command, location=line.location, source_line=line.text)

        if is_branch_instruction(opcode):
            state.instructions.append(
                EmittedInstruction(opcode, self._branch_operand(state, line), line.location)
            )
            return

        if line.label_operand:
            raise SourceSyntaxError(
                f"{line.command} expects a variable, not a branch label",
                location=line.location,
                source_line=line.text,
            )
        variable = state.symbols.resolve(line.operand, line.location, line.text)
        self._emit(state, opcode, variable, line)

    def _branch_operand(self, state: _CompilerState, line: SourceLine) -> OperandRecord:
        if not line.label_operand:
            raise SourceSyntaxError(
                f"{line.command} target must be a branch label",
                location=line.location,
                source_line=line.text,
                hint=f"write '{line.command} @{line.operand}'",
            )
        name = line.operand[len(LABEL_PREFIX):]
        if not name:
            raise SourceSyntaxError(
                "empty branch label",
                location=line.location,
                source_line=line.text,
            )
        if not is_identifier(name):
            raise SourceSyntaxError(
                f"invalid branch label '{line.operand}'",
                location=line.location,
                source_line=line.text,
            )
        target = state.branches.resolve(name, line.location, line.text)
        return OperandRecord(OperandKind.BRANCH, address=target)

    @staticmethod
    def _emit(state: _CompilerState, opcode: Opcode, variable: Variable, line: SourceLine) -> None:
        state.instructions.append(
            EmittedInstruction(
                opcode,
                OperandRecord(OperandKind.VARIABLE, variable=variable),
                line.location,
            )
        )

    # =========================================================================
    # Pass 2: Relocation
    # =========================================================================

    def _relocate(self, state: _CompilerState) -> list[str]:
        """Assign variable slots after the code and render every word."""
        instruction_count = len(state.instructions)
        next_slot = instruction_count
        data: list[str] = []

        for instruction in state.instructions:
            record = instruction.operand
            if record is None or record.kind is not OperandKind.VARIABLE:
                continue
            variable = record.variable
            if variable.address is None:
                variable.address = next_slot
                next_slot += 1
                data.append(variable.value)
                logger.debug(f"Relocated '{variable.name}' to {variable.address:02d}")
            record.address = variable.address

        total = instruction_count + len(data)
        if total > self.max_words:
            raise ProgramTooLargeError(
                f"program needs {total} words ({instruction_count} instructions, "
                f"{len(data)} variables) but only {self.max_words} are addressable"
            )

        return [instruction.render() for instruction in state.instructions] + data
