"""
Simpletron Emulator
===================

Executes compiled Simpletron programs.

Components
----------
- **memory**: fixed-size word store
- **processor**: fetch-decode-execute engine with instrumentation hooks
- **breakpoints**: PC breakpoints, write watchpoints, register conditions
- **machine**: orchestrator wiring the processor to the breakpoint manager

Usage
-----
>>> from simpletron.emulator import Simpletron
>>> machine = Simpletron()
>>> machine.load_words(["2003", "1103", "4300", "42"])
4
>>> machine.run().reason.name
'HALT'
>>> machine.outputs
['42']

Copyright (c) 2025 Simpletron SDK Contributors
"""

from .memory import Memory, DEFAULT_MEMORY_SIZE, EMPTY_WORD, format_cells
from .breakpoints import BreakpointManager, BreakEvent, BreakReason, RegisterCondition
from .processor import Processor, ProcessorState, ProcessorSnapshot, input_from
from .machine import Simpletron, SimpletronConfig

__all__ = [
    "Memory",
    "DEFAULT_MEMORY_SIZE",
    "EMPTY_WORD",
    "format_cells",
    "BreakpointManager",
    "BreakEvent",
    "BreakReason",
    "RegisterCondition",
    "Processor",
    "ProcessorState",
    "ProcessorSnapshot",
    "input_from",
    "Simpletron",
    "SimpletronConfig",
]
