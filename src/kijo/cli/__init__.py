"""
Kijo Command-Line Interface
===========================

This package provides the command-line tools of the simulator:

- **kjasm**: assembler (words, raw bytes or a listing)
- **kjrun**: assemble, load and run a program, then dump machine state

Each tool is a Click application; both share the exit codes and
exception handling in ``kijo.cli.errors``.
"""

__all__ = ["kjasm", "kjrun"]
