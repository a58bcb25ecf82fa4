"""
Simpletron Machine - Main Orchestrator
======================================

This module provides the `Simpletron` class, which wires a Processor to a
BreakpointManager and offers a high-level API for loading and running
programs.

The Simpletron class:
- Loads programs from word lists, ``.sml`` files, or source text
- Supports execution control (run, step, reset)
- Integrates breakpoints and watchpoints for debugging
- Collects WRITE output for inspection

Example usage:
    >>> from simpletron.emulator import Simpletron, SimpletronConfig
    >>> machine = Simpletron(SimpletronConfig(memory_size=100))
    >>> machine.load_source("a=5\\nb=3\\nc=a+b\\nWRITE c\\nHALT")
    8
    >>> machine.run().reason.name
    'HALT'
    >>> machine.outputs
    ['8']

Copyright (c) 2025 Simpletron SDK Contributors
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from simpletron.compiler import CompilerOptions, SimpletronCompiler
from .breakpoints import BreakEvent, BreakpointManager, BreakReason
from .memory import DEFAULT_MEMORY_SIZE
from .processor import InputSource, OutputSink, Processor, ProcessorSnapshot

logger = logging.getLogger(__name__)

MEMORY_SIZE_ENV = "SIMPLETRON_MEMORY_SIZE"


@dataclass(frozen=True)
class SimpletronConfig:
    """
    Configuration for machine initialization.

    Attributes:
        memory_size: Number of memory cells. Default is 100, the range a
                     2-digit operand can address.

    Example:
        >>> config = SimpletronConfig(memory_size=50)
    """
    memory_size: int = DEFAULT_MEMORY_SIZE

    def __post_init__(self):
        if self.memory_size <= 0:
            raise ValueError(f"memory_size must be positive, got {self.memory_size}")

    @classmethod
    def from_env(cls) -> "SimpletronConfig":
        """
        Create a SimpletronConfig from environment variables.

        Environment variables (all optional):
            SIMPLETRON_MEMORY_SIZE: Number of memory cells (positive integer)

        Invalid values are ignored with a warning.
        """
        kwargs = {}

        if memory_size := os.environ.get(MEMORY_SIZE_ENV):
            try:
                size = int(memory_size)
            except ValueError:
                size = 0
            if size > 0:
                kwargs["memory_size"] = size
            else:
                logger.warning(f"Ignoring invalid {MEMORY_SIZE_ENV}={memory_size!r}")

        return cls(**kwargs)


class Simpletron:
    """
    Simpletron machine with instrumentation support.

    Attributes:
        config: The SimpletronConfig used to initialize this instance
        processor: The Processor (accessible for low-level control)
        breakpoints: The breakpoint/watchpoint manager

    Example:
        >>> machine = Simpletron()
        >>> machine.load_file("add.sml")
        >>> event = machine.run()
        >>> print(machine.outputs)
    """

    def __init__(
        self,
        config: Optional[SimpletronConfig] = None,
        input_source: Optional[InputSource] = None,
        output_sink: Optional[OutputSink] = None,
    ):
        """
        Initialize the machine.

        Args:
            config: Machine configuration (defaults if None)
            input_source: Supplies values for READ
            output_sink: Receives (address, value) for every WRITE
        """
        self.config = config or SimpletronConfig()
        self.processor = Processor(
            self.config.memory_size,
            input_source=input_source,
            output_sink=output_sink,
        )
        self.breakpoints = BreakpointManager()

        self.processor.on_instruction = self._instruction_hook
        self.processor.on_memory_write = self.breakpoints.check_memory_write

    def _instruction_hook(self, pc: int, word: str) -> bool:
        return self.breakpoints.check_instruction(self.processor, pc, word)

    # =========================================================================
    # Program Loading
    # =========================================================================

    def load_words(self, words: Iterable[str]) -> int:
        """
        Load program words from address 0.

        Returns:
            Number of words loaded
        """
        return self.processor.load(words)

    def load_file(self, path) -> int:
        """
        Load a ``.sml`` program file (one word per line, blank lines ignored).

        Raises:
            FileNotFoundError: If the file does not exist
            ProgramLoadError: If the program does not fit
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Program file not found: {path}")
        lines = path.read_text(encoding="utf-8").splitlines()
        words = [line.strip() for line in lines if line.strip()]
        logger.debug(f"Read {len(words)} words from {path}")
        return self.load_words(words)

    def load_source(
        self,
        source: str,
        filename: str = "<input>",
        options: Optional[CompilerOptions] = None,
    ) -> int:
        """
        Compile source text and load the result.

        Raises:
            CompilerError: If compilation fails
        """
        result = SimpletronCompiler(options).compile_source(source, filename)
        return self.load_words(result.words)

    # =========================================================================
    # Execution Control
    # =========================================================================

    def reset(self) -> None:
        """Clear memory, registers, outputs and the last break event."""
        self.processor.reset()
        self.breakpoints.clear_last_event()

    def run(self) -> BreakEvent:
        """
        Run until HALT, the end of memory, or a breakpoint.

        Returns:
            BreakEvent describing why execution stopped

        Example:
            >>> machine.add_breakpoint(4)
            >>> event = machine.run()
            >>> if event.reason == BreakReason.PC_BREAKPOINT:
            ...     print(machine.registers.format_registers())
        """
        self.breakpoints.clear_last_event()
        event = self.processor.run()
        if event.reason in (BreakReason.PC_BREAKPOINT, BreakReason.MEMORY_WRITE):
            return self.breakpoints.last_event or event
        return event

    def step(self) -> BreakEvent:
        """Execute one instruction, ignoring breakpoints."""
        return self.processor.step()

    @property
    def halted(self) -> bool:
        return self.processor.halted

    # =========================================================================
    # Debugging
    # =========================================================================

    def add_breakpoint(self, address: int) -> None:
        self.breakpoints.add_breakpoint(address)

    def add_watchpoint(self, address: int) -> None:
        self.breakpoints.add_watchpoint(address)

    # =========================================================================
    # Inspection
    # =========================================================================

    @property
    def outputs(self) -> list[str]:
        """Values written by WRITE since the last load or reset."""
        return list(self.processor.outputs)

    @property
    def registers(self) -> ProcessorSnapshot:
        return self.processor.dump()

    def dump(self) -> str:
        """Memory grid followed by the registers."""
        return str(self.processor.dump())
