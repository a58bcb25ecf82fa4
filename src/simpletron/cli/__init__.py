"""
Simpletron Command-Line Interface
=================================

This package provides command-line tools for the Simpletron SDK:

- **smpc**: compiler (``.smp`` source to ``.sml`` program)
- **smprun**: runner (loads and executes a program)

Each tool is implemented as a Click-based CLI application with
comprehensive help and error reporting.
"""

__all__ = ["smpc", "smprun"]
