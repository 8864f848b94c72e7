"""
Kijo Assembler
==============

Assembler for the 8-bit desk computer instruction set.

Main Components
---------------
- **parser**: one source line -> instructions, data words, label entries
- **assembler**: two-pass label resolution and the Assembler facade
- **codec**: instruction <-> 8-bit word mapping

Assembly Process
----------------
1. **Parsing**: every line is parsed on its own; errors are collected
   per line so a whole program can be checked in one go.
2. **Resolution** (two-pass):
   - Pass 1: count slots, bind labels to slot numbers
   - Pass 2: replace label references with their slot number

Example Usage
-------------
>>> from kijo.assembler import assemble_source, encode
>>> program = assemble_source("set r0, 10")
>>> [encode(entry) for entry in program]
['00101100', '00001010']
"""

from kijo.assembler.assembler import (
    Assembler,
    assemble,
    assemble_file,
    assemble_source,
    build_label_table,
    resolve_labels,
)
from kijo.assembler.codec import (
    decode,
    encode,
    encode_byte,
    word_bits,
    word_value,
)
from kijo.assembler.parser import (
    ParsedLine,
    parse_address,
    parse_condition,
    parse_immediate,
    parse_line,
    parse_number,
    parse_register,
    parse_source,
    split_operands,
)

__all__ = [
    # Main class and functions
    "Assembler",
    "assemble",
    "assemble_file",
    "assemble_source",
    "build_label_table",
    "resolve_labels",
    # Codec
    "decode",
    "encode",
    "encode_byte",
    "word_bits",
    "word_value",
    # Parser
    "ParsedLine",
    "parse_address",
    "parse_condition",
    "parse_immediate",
    "parse_line",
    "parse_number",
    "parse_register",
    "parse_source",
    "split_operands",
]
