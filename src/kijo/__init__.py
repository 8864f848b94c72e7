"""
Kijo - Desk Computer Simulator
==============================

Assembler and step-by-step simulator for a small teaching computer: an
8-bit machine with four registers, a link register, NZCV flags, 256
bytes of data memory and byte-oriented input/output.

Main Components
---------------
- **assembler**: source text -> resolved program (kjasm)
    Parses each line, resolves labels to program slots, and maps
    instructions to 8-bit words.

- **emulator**: execution engine (kjrun)
    Loads a program and runtime input, then executes one word per step.

- **disassembler**: program words -> readable assembly

Quick Start
-----------
Assemble and run the echo program:
    >>> from kijo import Machine, assemble_source
    >>> program = assemble_source('''
    ... set r0, 0
    ... in r1
    ... out r1
    ... j r0
    ... ''')
    >>> machine = Machine()
    >>> machine.reset(program, input_text="A")
    >>> for _ in range(4):
    ...     machine.step()
    >>> machine.output
    b'A'

Or use the command-line tools:
    $ kjasm echo.asm --listing
    $ kjrun echo.asm --input "hello" --max-steps 100

Version History
---------------
1.0.0 - Initial release with assembler, disassembler and simulator
"""

__version__ = "1.0.0"
__author__ = "Kijo Simulator Contributors"

# =============================================================================
# Public API Exports
# =============================================================================

from kijo.assembler import Assembler, assemble, assemble_file, assemble_source, decode, encode
from kijo.disassembler import disassemble, format_instruction
from kijo.emulator import BreakEvent, BreakReason, Machine, MachineStatus
from kijo.config import MachineConfig, RunConfig
from kijo.errors import (
    KijoError,
    SourceLocation,
    AssemblerError,
    ParseError,
    InvalidRegisterError,
    InvalidConditionError,
    InvalidImmediateError,
    InvalidAddressSyntaxError,
    ArityMismatchError,
    UnknownInstructionError,
    InvalidLabelError,
    UnresolvedLabelError,
    CodecError,
    InvalidEncodingError,
    MachineError,
    OutOfProgramError,
    MachineHaltedError,
)
from kijo.isa import (
    Flags,
    Opcode,
    Instruction,
    NoOperand,
    RegOperand,
    RegPair,
    CondReg,
    MemAccess,
    Immediate,
    LabelRef,
    LabelDef,
)

__all__ = [
    # Version info
    "__version__",
    "__author__",
    # Assembler
    "Assembler",
    "assemble",
    "assemble_file",
    "assemble_source",
    "encode",
    "decode",
    # Disassembler
    "disassemble",
    "format_instruction",
    # Emulator
    "Machine",
    "MachineStatus",
    "BreakEvent",
    "BreakReason",
    # Configuration
    "MachineConfig",
    "RunConfig",
    # Instruction set
    "Flags",
    "Opcode",
    "Instruction",
    "NoOperand",
    "RegOperand",
    "RegPair",
    "CondReg",
    "MemAccess",
    "Immediate",
    "LabelRef",
    "LabelDef",
    # Exception hierarchy
    "KijoError",
    "SourceLocation",
    "AssemblerError",
    "ParseError",
    "InvalidRegisterError",
    "InvalidConditionError",
    "InvalidImmediateError",
    "InvalidAddressSyntaxError",
    "ArityMismatchError",
    "UnknownInstructionError",
    "InvalidLabelError",
    "UnresolvedLabelError",
    "CodecError",
    "InvalidEncodingError",
    "MachineError",
    "OutOfProgramError",
    "MachineHaltedError",
]
