"""
Kijo Disassembler
=================

Converts program words back into assembly text for listings and state
dumps.

- **disassemble**: program memory words -> DisassembledWord list
- **format_instruction**: one entry -> assembly text
- **format_program**: resolved program -> one text per slot

Example:
    >>> from kijo.disassembler import disassemble
    >>> for item in disassemble(["00101100", "00001010"]):
    ...     print(item)
    00: 00101100  SET R0, 10
    01: 00001010  .data 10
"""

from kijo.disassembler.listing import (
    DisassembledWord,
    disassemble,
    format_instruction,
    format_program,
)

__all__ = [
    "DisassembledWord",
    "disassemble",
    "format_instruction",
    "format_program",
]
