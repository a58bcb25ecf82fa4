"""
Breakpoints and Watchpoints for the Simpletron
==============================================

Provides step-debugging support:
- PC breakpoints (break before the instruction at an address executes)
- Write watchpoints (break after an instruction writes a watched cell)
- Register conditions (break when pc, accumulator or operand match)

The BreakpointManager is attached to the Processor through its
``on_instruction`` and ``on_memory_write`` hooks, which return False to
stop execution.

Example usage:

    >>> from simpletron.emulator import Simpletron, BreakReason
    >>> machine = Simpletron()
    >>> machine.load_source("a=5\\nWRITE a\\nHALT")
    3
    >>> machine.add_breakpoint(1)
    >>> event = machine.run()
    >>> event.reason == BreakReason.PC_BREAKPOINT
    True

Copyright (c) 2025 Simpletron SDK Contributors
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .processor import Processor


class BreakReason(Enum):
    """Why execution stopped."""
    NONE = auto()                # No specific reason
    HALT = auto()                # HALT instruction executed
    END_OF_MEMORY = auto()       # pc left the address range (implicit halt)
    STEP = auto()                # Single step completed
    PC_BREAKPOINT = auto()       # pc reached a breakpoint address
    MEMORY_WRITE = auto()        # Write watchpoint triggered
    REGISTER_CONDITION = auto()  # Register condition met


@dataclass
class BreakEvent:
    """
    Information about why execution stopped.

    Attributes:
        reason: Why execution stopped
        address: pc or memory address involved (if applicable)
        value: Value written (for MEMORY_WRITE)
        message: Human-readable description
    """
    reason: BreakReason
    address: Optional[int] = None
    value: Optional[str] = None
    message: str = ""

    @property
    def halted(self) -> bool:
        """True if the program has finished."""
        return self.reason in (BreakReason.HALT, BreakReason.END_OF_MEMORY)

    def __str__(self) -> str:
        if self.message:
            return self.message
        match self.reason:
            case BreakReason.HALT:
                return "Program terminated"
            case BreakReason.END_OF_MEMORY:
                return "Program ran off the end of memory"
            case BreakReason.STEP:
                return "Single step"
            case BreakReason.PC_BREAKPOINT:
                return f"Breakpoint at {self.address:02d}" if self.address is not None else "Breakpoint"
            case BreakReason.MEMORY_WRITE:
                return f"Write {self.value} to {self.address:02d}" if self.address is not None else "Memory write"
            case BreakReason.REGISTER_CONDITION:
                return "Register condition met"
            case _:
                return "Unknown"


class RegisterCondition:
    """
    Condition on processor registers.

    Supported registers: pc, accumulator, operand

    Supported operators: ``==``, ``!=``, ``<``, ``<=``, ``>``, ``>=``

    The accumulator is compared as an integer.

    Examples:
        >>> cond = RegisterCondition("accumulator", "<", 0)
        >>> cond = RegisterCondition("pc", "==", 12)
    """

    REGISTERS = frozenset({"pc", "accumulator", "operand"})
    OPERATORS = frozenset({"==", "!=", "<", "<=", ">", ">="})

    def __init__(self, register: str, operator: str, value: int, description: str = ""):
        self.register = register.lower()
        self.operator = operator
        self.value = value
        self.description = description or f"{register} {operator} {value}"

        if self.register not in self.REGISTERS:
            raise ValueError(
                f"Unknown register '{register}'. Valid registers: {', '.join(sorted(self.REGISTERS))}"
            )
        if self.operator not in self.OPERATORS:
            raise ValueError(
                f"Unknown operator '{operator}'. Valid operators: {', '.join(sorted(self.OPERATORS))}"
            )

    def check(self, processor: "Processor") -> bool:
        """
        Check the condition against processor state.

        A non-integer accumulator never matches.
        """
        raw = getattr(processor.state, self.register)
        try:
            actual = int(raw)
        except (TypeError, ValueError):
            return False

        match self.operator:
            case "==":
                return actual == self.value
            case "!=":
                return actual != self.value
            case "<":
                return actual < self.value
            case "<=":
                return actual <= self.value
            case ">":
                return actual > self.value
            case ">=":
                return actual >= self.value
            case _:
                return False

    def __repr__(self) -> str:
        return f"RegisterCondition({self.register!r}, {self.operator!r}, {self.value!r})"


class BreakpointManager:
    """
    Manages breakpoints, write watchpoints and register conditions.

    The manager integrates with the Processor via hooks:
    - check_instruction: called before each instruction
    - check_memory_write: called on each memory write

    Example:
        >>> mgr = BreakpointManager()
        >>> mgr.add_breakpoint(4)
        >>> mgr.add_watchpoint(10)
        >>> processor.on_instruction = lambda pc, word: mgr.check_instruction(processor, pc, word)
    """

    def __init__(self):
        self._pc_breakpoints: set[int] = set()
        self._write_watchpoints: set[int] = set()
        self._conditions: list[RegisterCondition] = []
        self._last_event: Optional[BreakEvent] = None

    @property
    def last_event(self) -> Optional[BreakEvent]:
        """The last break event that occurred."""
        return self._last_event

    def clear_last_event(self) -> None:
        self._last_event = None

    @property
    def breakpoint_count(self) -> int:
        return len(self._pc_breakpoints)

    @property
    def watchpoint_count(self) -> int:
        return len(self._write_watchpoints)

    # =========================================================================
    # PC Breakpoints
    # =========================================================================

    def add_breakpoint(self, address: int) -> None:
        """
        Add a PC breakpoint.

        Execution stops when pc reaches the address, before the instruction
        there executes.
        """
        self._pc_breakpoints.add(address)

    def remove_breakpoint(self, address: int) -> None:
        self._pc_breakpoints.discard(address)

    def has_breakpoint(self, address: int) -> bool:
        return address in self._pc_breakpoints

    def list_breakpoints(self) -> list[int]:
        return sorted(self._pc_breakpoints)

    # =========================================================================
    # Write Watchpoints
    # =========================================================================

    def add_watchpoint(self, address: int) -> None:
        """Stop after any instruction that writes the cell at address."""
        self._write_watchpoints.add(address)

    def remove_watchpoint(self, address: int) -> None:
        self._write_watchpoints.discard(address)

    def list_watchpoints(self) -> list[int]:
        return sorted(self._write_watchpoints)

    # =========================================================================
    # Register Conditions
    # =========================================================================

    def add_condition(self, register: str, operator: str, value: int, description: str = "") -> RegisterCondition:
        """Add a register condition and return it."""
        condition = RegisterCondition(register, operator, value, description)
        self._conditions.append(condition)
        return condition

    def list_conditions(self) -> list[RegisterCondition]:
        return list(self._conditions)

    def clear_all(self) -> None:
        """Remove every breakpoint, watchpoint and condition."""
        self._pc_breakpoints.clear()
        self._write_watchpoints.clear()
        self._conditions.clear()
        self._last_event = None

    # =========================================================================
    # Check Functions (called by processor hooks)
    # =========================================================================

    def check_instruction(self, processor: "Processor", pc: int, word: str) -> bool:
        """
        Check whether to break before executing the instruction at pc.

        Returns:
            True to continue execution, False to break
        """
        if pc in self._pc_breakpoints:
            self._last_event = BreakEvent(
                BreakReason.PC_BREAKPOINT,
                address=pc,
                message=f"Breakpoint at {pc:02d} ({word})",
            )
            return False

        for condition in self._conditions:
            if condition.check(processor):
                self._last_event = BreakEvent(
                    BreakReason.REGISTER_CONDITION,
                    address=pc,
                    message=f"Condition: {condition.description}",
                )
                return False

        return True

    def check_memory_write(self, address: int, value: str) -> bool:
        """
        Check whether to break after a memory write.

        Returns:
            True to continue execution, False to break
        """
        if address in self._write_watchpoints:
            self._last_event = BreakEvent(
                BreakReason.MEMORY_WRITE,
                address=address,
                value=value,
                message=f"Write {value} to {address:02d}",
            )
            return False
        return True
