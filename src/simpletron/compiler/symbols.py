"""
Symbol and Branch Tables
========================

The code generator keeps two tables, both owned by a single compile
invocation:

- **SymbolTable**: variable name -> Variable (literal value plus the memory
  slot assigned during relocation)
- **BranchTable**: label name -> index of the instruction the label marks

Both tables reject redeclaration, and both suggest similarly named
entries when a lookup fails.
"""

import difflib
from dataclasses import dataclass
from typing import Iterator, Optional

from simpletron.errors import (
    DuplicateSymbolError,
    SourceLocation,
    UndefinedSymbolError,
)


def _similar(name: str, candidates: list[str]) -> list[str]:
    return difflib.get_close_matches(name, candidates, n=3, cutoff=0.6)


# =============================================================================
# Variables
# =============================================================================

@dataclass
class Variable:
    """
    Symbol table entry for a variable.

    Attributes:
        name: Variable name
        value: Initial value as a decimal string
        location: Where the variable was declared (diagnostics only)
        address: Final memory slot, assigned lazily by the relocator and
                 left as None when no surviving instruction reads it
    """
    name: str
    value: str
    location: SourceLocation
    address: Optional[int] = None

    @property
    def is_allocated(self) -> bool:
        return self.address is not None


class SymbolTable:
    """
    Variable name -> Variable, in declaration order.

    Example:
        >>> table = SymbolTable()
        >>> _ = table.declare("a", "5", SourceLocation("<input>", 1))
        >>> table.resolve("a", SourceLocation("<input>", 2)).value
        '5'
    """

    def __init__(self) -> None:
        self._variables: dict[str, Variable] = {}

    def declare(
        self,
        name: str,
        value: str,
        location: SourceLocation,
        source_line: Optional[str] = None,
    ) -> Variable:
        """
        Declare a new variable.

        Raises:
            DuplicateSymbolError: If name is already declared
        """
        existing = self._variables.get(name)
        if existing is not None:
            raise DuplicateSymbolError(
                name,
                kind="variable",
                location=location,
                original_location=existing.location,
                source_line=source_line,
            )
        variable = Variable(name, value, location)
        self._variables[name] = variable
        return variable

    def lookup(self, name: str) -> Optional[Variable]:
        return self._variables.get(name)

    def resolve(
        self,
        name: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ) -> Variable:
        """
        Look up a variable that must already be declared.

        Raises:
            UndefinedSymbolError: If name has not been declared
        """
        variable = self._variables.get(name)
        if variable is None:
            raise UndefinedSymbolError(
                name,
                kind="variable",
                location=location,
                source_line=source_line,
                similar_symbols=_similar(name, list(self._variables)),
            )
        return variable

    def allocated(self) -> list[Variable]:
        """Variables that received a memory slot, in address order."""
        placed = [v for v in self._variables.values() if v.is_allocated]
        return sorted(placed, key=lambda v: v.address)

    def addresses(self) -> dict[str, int]:
        """Name -> address for every allocated variable."""
        return {v.name: v.address for v in self.allocated()}

    def __contains__(self, name: object) -> bool:
        return name in self._variables

    def __iter__(self) -> Iterator[Variable]:
        return iter(self._variables.values())

    def __len__(self) -> int:
        return len(self._variables)


# =============================================================================
# Branch Labels
# =============================================================================

@dataclass(frozen=True)
class BranchLabel:
    """
    Branch table entry.

    Attributes:
        name: Label name (without the @ prefix)
        index: Index of the instruction the label marks in the generated
               stream
        location: Where the label was declared
    """
    name: str
    index: int
    location: SourceLocation


class BranchTable:
    """Label name -> instruction index."""

    def __init__(self) -> None:
        self._labels: dict[str, BranchLabel] = {}

    def define(
        self,
        name: str,
        index: int,
        location: SourceLocation,
        source_line: Optional[str] = None,
    ) -> BranchLabel:
        """
        Record a label at an instruction index.

        Raises:
            DuplicateSymbolError: If the label is already defined
        """
        existing = self._labels.get(name)
        if existing is not None:
            raise DuplicateSymbolError(
                f"@{name}",
                kind="branch label",
                location=location,
                original_location=existing.location,
                source_line=source_line,
            )
        label = BranchLabel(name, index, location)
        self._labels[name] = label
        return label

    def resolve(
        self,
        name: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ) -> int:
        """
        Return the instruction index of a label.

        Raises:
            UndefinedSymbolError: If the label was never declared
        """
        label = self._labels.get(name)
        if label is None:
            raise UndefinedSymbolError(
                name,
                kind="label",
                location=location,
                source_line=source_line,
                similar_symbols=[f"@{s}" for s in _similar(name, list(self._labels))],
            )
        return label.index

    def indices(self) -> dict[str, int]:
        return {name: label.index for name, label in self._labels.items()}

    def __contains__(self, name: object) -> bool:
        return name in self._labels

    def __iter__(self) -> Iterator[BranchLabel]:
        return iter(self._labels.values())

    def __len__(self) -> int:
        return len(self._labels)
