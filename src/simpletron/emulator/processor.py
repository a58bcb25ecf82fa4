"""
Simpletron Processor
====================

Fetch-decode-execute engine for the Simpletron accumulator machine.

Registers
---------
- **pc**: program counter, address of the next instruction
- **ir**: instruction register, raw word fetched from memory[pc]
- **opcode / operand**: decoded halves of ir
- **accumulator**: unbounded decimal integer, kept as text; starts at "0"

Cycle
-----
While pc is inside memory:

1. Fetch ``ir := memory[pc]``. A cell that is not four decimal digits is a
   fatal MalformedWordError.
2. Decode ``opcode := ir[0:2]``, ``operand := ir[2:4]``. An opcode outside
   the instruction set is a fatal UnknownOpcodeError.
3. Execute. Branches set ``pc := operand`` directly.
4. Advance ``pc`` by one unless the instruction redirected it.

HALT stops execution. Running past the last cell is an implicit halt.
There is no cycle limit: a program that loops forever runs forever unless
a hook stops it.

Instrumentation
---------------
``on_instruction(pc, word) -> bool`` is called before each instruction in
run(); ``on_memory_write(address, value) -> bool`` after each write.
Returning False stops execution and run() returns a BreakEvent.

Copyright (c) 2025 Simpletron SDK Contributors
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from simpletron.cpu import (
    Opcode,
    decode_instruction,
    is_instruction_word,
    is_literal,
    is_valid_opcode,
)
from simpletron.errors import (
    InputError,
    MalformedWordError,
    MemoryAddressError,
    ProcessorError,
    UnknownOpcodeError,
)
from .breakpoints import BreakEvent, BreakReason
from .memory import DEFAULT_MEMORY_SIZE, Memory, format_cells

logger = logging.getLogger(__name__)

InputSource = Callable[[int], str]
OutputSink = Callable[[int, str], None]


def _no_input(address: int) -> str:
    raise EOFError("no input source attached")


def input_from(values: Iterable) -> InputSource:
    """
    Build an input source that answers READ from a fixed sequence.

    Raises EOFError once the values are exhausted, which the processor
    reports as an InputError.

    Example:
        >>> source = input_from(["5", "7"])
        >>> source(10), source(11)
        ('5', '7')
    """
    iterator = iter(values)

    def source(address: int) -> str:
        try:
            return str(next(iterator))
        except StopIteration:
            raise EOFError("input exhausted") from None

    return source


# =============================================================================
# Processor State
# =============================================================================

@dataclass
class ProcessorState:
    """
    Processor registers.

    Attributes:
        pc: Program counter
        ir: Instruction register (None before the first fetch)
        opcode: Decoded opcode of ir
        operand: Decoded operand of ir
        accumulator: Accumulator as a decimal string
        halted: True once HALT executed or pc left memory
        cycles: Instructions executed since reset
    """
    pc: int = 0
    ir: Optional[str] = None
    opcode: Optional[int] = None
    operand: int = 0
    accumulator: str = "0"
    halted: bool = False
    cycles: int = 0


@dataclass(frozen=True)
class ProcessorSnapshot:
    """Immutable copy of the registers and memory, as returned by dump()."""
    pc: int
    ir: Optional[str]
    opcode: Optional[int]
    operand: int
    accumulator: str
    halted: bool
    cycles: int
    memory: tuple[str, ...]

    def format_registers(self) -> str:
        opcode = "" if self.opcode is None else f"{self.opcode:02d}"
        return "\n".join([
            f"Program counter       :  {self.pc}",
            f"Instruction Register  :  {self.ir or ''}",
            f"Accumulator           :  {self.accumulator}",
            f"Opcode                :  {opcode}",
            f"Operand               :  {self.operand}",
        ])

    def format_memory(self) -> str:
        return format_cells(self.memory)

    def __str__(self) -> str:
        return f"{self.format_memory()}\n\n{self.format_registers()}"


# =============================================================================
# Processor
# =============================================================================

class Processor:
    """
    Simpletron processor with its word store.

    Example:
        >>> cpu = Processor(input_source=input_from(["4"]))
        >>> cpu.load(["1003", "1103", "4300"])
        3
        >>> cpu.run().reason
        <BreakReason.HALT: 2>
        >>> cpu.outputs
        ['4']

    Attributes:
        memory: The word store
        state: Current registers
        outputs: Every value emitted by WRITE since reset
        input_source: Called with the target address for each READ
        output_sink: Called with (address, value) for each WRITE
    """

    def __init__(
        self,
        memory_size: int = DEFAULT_MEMORY_SIZE,
        input_source: Optional[InputSource] = None,
        output_sink: Optional[OutputSink] = None,
    ):
        self.memory = Memory(memory_size)
        self.state = ProcessorState()
        self.outputs: list[str] = []
        self.input_source: InputSource = input_source or _no_input
        self.output_sink = output_sink

        # Instrumentation hooks
        # on_instruction(pc, word) -> bool: return False to stop execution
        self.on_instruction: Optional[Callable[[int, str], bool]] = None
        # on_memory_write(address, value) -> bool: return False to stop execution
        self.on_memory_write: Optional[Callable[[int, str], bool]] = None

        self._memory_break: Optional[tuple[int, str]] = None
        self._break_pc: Optional[int] = None
        self._final_event: Optional[BreakEvent] = None

    # =========================================================================
    # Loading and Inspection
    # =========================================================================

    def reset(self) -> None:
        """Clear memory, registers and outputs."""
        self.memory.clear()
        self._reset_registers()

    def _reset_registers(self) -> None:
        self.state = ProcessorState()
        self.outputs.clear()
        self._memory_break = None
        self._break_pc = None
        self._final_event = None

    def load(self, words: Iterable[str]) -> int:
        """
        Load a program from address 0 and reset the registers.

        Returns:
            Number of words loaded

        Raises:
            ProgramLoadError: If the program does not fit
        """
        count = self.memory.load(words)
        self._reset_registers()
        logger.info(f"Loaded program of {count} words")
        return count

    def store(self, address: int, word: str) -> None:
        """Write a single word without triggering watchpoints."""
        self.memory.write(address, word)

    @property
    def halted(self) -> bool:
        return self.state.halted

    def dump(self) -> ProcessorSnapshot:
        """Snapshot registers and memory."""
        s = self.state
        return ProcessorSnapshot(
            pc=s.pc,
            ir=s.ir,
            opcode=s.opcode,
            operand=s.operand,
            accumulator=s.accumulator,
            halted=s.halted,
            cycles=s.cycles,
            memory=self.memory.snapshot(),
        )

    # =========================================================================
    # Execution Control
    # =========================================================================

    def step(self) -> BreakEvent:
        """
        Execute exactly one instruction.

        Breakpoints are not consulted; the instruction always executes.

        Returns:
            BreakEvent with reason STEP, or HALT / END_OF_MEMORY if the
            program finished
        """
        if self._final_event is not None:
            return self._final_event
        self._break_pc = None

        if not self.memory.is_address_valid(self.state.pc):
            return self._finish(BreakEvent(BreakReason.END_OF_MEMORY, address=self.state.pc))

        event = self._cycle()
        self._memory_break = None
        if event is not None:
            return self._finish(event)
        return BreakEvent(BreakReason.STEP, address=self.state.pc)

    def run(self) -> BreakEvent:
        """
        Run until HALT, the end of memory, or a hook requests a stop.

        When resumed after a stop at an instruction hook, the instruction
        that triggered the stop executes without consulting the hook again.

        Returns:
            BreakEvent describing why execution stopped
        """
        if self._final_event is not None:
            return self._final_event

        resume_pc = self._break_pc
        self._break_pc = None

        while True:
            pc = self.state.pc
            if not self.memory.is_address_valid(pc):
                return self._finish(BreakEvent(BreakReason.END_OF_MEMORY, address=pc))

            if self.on_instruction and pc != resume_pc:
                if not self.on_instruction(pc, self.memory.read(pc)):
                    self._break_pc = pc
                    return BreakEvent(BreakReason.PC_BREAKPOINT, address=pc)
            resume_pc = None

            event = self._cycle()
            if event is not None:
                return self._finish(event)

            if self._memory_break is not None:
                address, value = self._memory_break
                self._memory_break = None
                return BreakEvent(BreakReason.MEMORY_WRITE, address=address, value=value)

    def _finish(self, event: BreakEvent) -> BreakEvent:
        self.state.halted = True
        self._final_event = event
        logger.info(f"{event} after {self.state.cycles} cycles")
        return event

    # =========================================================================
    # Fetch / Decode / Execute
    # =========================================================================

    def _cycle(self) -> Optional[BreakEvent]:
        """Run one cycle. Returns an event only when the program halts."""
        state = self.state
        pc = state.pc

        word = self.memory.read(pc)
        if not is_instruction_word(word):
            raise MalformedWordError(pc, word)
        state.ir = word

        instruction = decode_instruction(word)
        if not is_valid_opcode(instruction.opcode):
            raise UnknownOpcodeError(pc, word)
        state.opcode = instruction.opcode
        state.operand = operand = instruction.operand
        state.cycles += 1

        logger.debug(f"{pc:02d}: {Opcode(instruction.opcode).name} {operand:02d} acc={state.accumulator}")

        next_pc = pc + 1
        match Opcode(instruction.opcode):
            case Opcode.READ:
                self._write(operand, self._read_input(operand))
            case Opcode.WRITE:
                value = self._read(operand)
                self.outputs.append(value)
                if self.output_sink is not None:
                    self.output_sink(operand, value)
            case Opcode.LOAD:
                state.accumulator = self._read(operand)
            case Opcode.STORE:
                self._write(operand, state.accumulator)
            case Opcode.ADD:
                state.accumulator = str(self._accumulator() + self._integer(operand))
            case Opcode.SUBTRACT:
                state.accumulator = str(self._accumulator() - self._integer(operand))
            case Opcode.BRANCH:
                next_pc = operand
            case Opcode.BRANCHNEG:
                if self._accumulator() < 0:
                    next_pc = operand
            case Opcode.BRANCHZERO:
                if self._accumulator() == 0:
                    next_pc = operand
            case Opcode.HALT:
                return BreakEvent(BreakReason.HALT, address=pc, message="Program terminated")

        state.pc = next_pc
        return None

    def _fault(self, message: str) -> ProcessorError:
        return ProcessorError(message, address=self.state.pc, word=self.state.ir)

    def _read(self, address: int) -> str:
        try:
            return self.memory.read(address)
        except MemoryAddressError as e:
            raise self._fault(str(e)) from e

    def _write(self, address: int, value: str) -> None:
        try:
            self.memory.write(address, value)
        except MemoryAddressError as e:
            raise self._fault(str(e)) from e
        if self.on_memory_write and not self.on_memory_write(address, value):
            self._memory_break = (address, value)

    def _integer(self, address: int) -> int:
        value = self._read(address)
        if not is_literal(value):
            raise self._fault(f"memory[{address:02d}] holds non-integer {value!r}")
        return int(value)

    def _accumulator(self) -> int:
        value = self.state.accumulator
        if not is_literal(value):
            raise self._fault(f"accumulator holds non-integer {value!r}")
        return int(value)

    def _read_input(self, address: int) -> str:
        try:
            raw = self.input_source(address)
        except EOFError as e:
            raise InputError(
                f"no input for READ into {address:02d}",
                address=self.state.pc,
                word=self.state.ir,
            ) from e

        text = str(raw).strip()
        if not is_literal(text):
            raise InputError(
                f"READ expects an integer, got {text!r}",
                address=self.state.pc,
                word=self.state.ir,
            )
        return str(int(text))
