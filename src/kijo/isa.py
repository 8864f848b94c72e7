"""
Kijo Instruction Set Definitions
================================

The desk computer is an 8-bit machine with four general purpose
registers, a link register and a four bit flag register. Every
instruction is exactly one 8-bit word; ``set`` is followed by one raw
data word holding its immediate value.

Instruction Shapes
------------------
Each opcode has exactly one operand shape:

    NoOperand     nop
    RegOperand    inc dec mvlnk j jlnk in out lshft rshft and set
    RegPair       mv add sub
    CondReg       jcnd jlnkcnd
    MemAccess     ld st

Assembly-time entries add three more kinds that never reach the
machine as instructions:

    Immediate     data word following ``set`` (resolved value)
    LabelRef      data word that still names a label
    LabelDef      ``name:`` line, consumes no program slot

Copyright (c) 2026 Kijo Simulator Contributors
"""

from dataclasses import dataclass
from enum import Enum, IntFlag
from typing import Union


# =============================================================================
# Machine Constants
# =============================================================================

WORD_BITS = 8
WORD_MASK = 0xFF
NUM_REGISTERS = 4
MEMORY_SIZE = 256
MAX_OFFSET = 3  # ld/st offset is a 2-bit field


class Flags(IntFlag):
    """
    Flag register bits.

    Bit layout:
        3  2  1  0
        N  Z  C  V

    V is part of the layout but no instruction ever sets it.
    """
    V = 0x01  # Overflow (never computed)
    C = 0x02  # Carry/Borrow
    Z = 0x04  # Zero
    N = 0x08  # Negative


FLAG_MASK = 0x0F

# Condition code (0-3) selects flag bit 1 << code
CONDITION_FLAGS = (Flags.V, Flags.C, Flags.Z, Flags.N)


class Opcode(Enum):
    """Instruction mnemonics. The value is the lower-case assembly name."""
    NOP = "nop"
    INC = "inc"
    DEC = "dec"
    MVLNK = "mvlnk"
    J = "j"
    JLNK = "jlnk"
    IN = "in"
    OUT = "out"
    LSHFT = "lshft"
    RSHFT = "rshft"
    AND = "and"
    SET = "set"
    MV = "mv"
    ADD = "add"
    SUB = "sub"
    JCND = "jcnd"
    JLNKCND = "jlnkcnd"
    LD = "ld"
    ST = "st"

    def __str__(self) -> str:
        return self.value


# =============================================================================
# Instruction Variants
# =============================================================================

@dataclass(frozen=True)
class Instruction:
    """Base class of every decoded instruction. ``op`` is the tag."""
    op: Opcode


@dataclass(frozen=True)
class NoOperand(Instruction):
    """``nop``"""
    pass


@dataclass(frozen=True)
class RegOperand(Instruction):
    """Single register instruction (``inc r0``, ``set r1`` ...)."""
    reg: int


@dataclass(frozen=True)
class RegPair(Instruction):
    """Two register instruction: ``mv``, ``add``, ``sub``."""
    reg1: int
    reg2: int


@dataclass(frozen=True)
class CondReg(Instruction):
    """Conditional jump: ``jcnd``, ``jlnkcnd``."""
    cnd: int
    reg: int


@dataclass(frozen=True)
class MemAccess(Instruction):
    """
    Memory load/store.

    Effective address is ``(regs[reg2] - ofs) mod 256``. For ``ld``
    reg1 is the destination, for ``st`` it is the value source.
    """
    reg1: int
    reg2: int
    ofs: int


# =============================================================================
# Assembly-Time Entries
# =============================================================================

@dataclass(frozen=True)
class Immediate:
    """Raw 8-bit data word (the value operand of ``set``)."""
    value: int


@dataclass(frozen=True)
class LabelRef:
    """Data word that refers to a label, replaced during resolution."""
    label: str


@dataclass(frozen=True)
class LabelDef:
    """Label definition. Binds ``name`` to the next program slot."""
    name: str


ProgramEntry = Union[Instruction, Immediate]
AsmEntry = Union[Instruction, Immediate, LabelRef, LabelDef]


# =============================================================================
# Opcode Tables
# =============================================================================

# Operand shape for every opcode
OPCODE_SHAPES: dict[Opcode, type] = {
    Opcode.NOP: NoOperand,
    Opcode.INC: RegOperand,
    Opcode.DEC: RegOperand,
    Opcode.MVLNK: RegOperand,
    Opcode.J: RegOperand,
    Opcode.JLNK: RegOperand,
    Opcode.IN: RegOperand,
    Opcode.OUT: RegOperand,
    Opcode.LSHFT: RegOperand,
    Opcode.RSHFT: RegOperand,
    Opcode.AND: RegOperand,
    Opcode.SET: RegOperand,
    Opcode.MV: RegPair,
    Opcode.ADD: RegPair,
    Opcode.SUB: RegPair,
    Opcode.JCND: CondReg,
    Opcode.JLNKCND: CondReg,
    Opcode.LD: MemAccess,
    Opcode.ST: MemAccess,
}

# Exact operand count per mnemonic, as written in source
ARITY: dict[Opcode, int] = {
    op: {NoOperand: 0, RegOperand: 1}.get(shape, 2)
    for op, shape in OPCODE_SHAPES.items()
}
ARITY[Opcode.SET] = 2  # register plus the value of the data word

MNEMONICS: dict[str, Opcode] = {op.value: op for op in Opcode}

# Register spellings accepted by the assembler
REGISTER_NAMES: dict[str, int] = {
    "r0": 0, "a": 0, "00": 0,
    "r1": 1, "b": 1, "01": 1,
    "r2": 2, "c": 2, "10": 2, "fp": 2,
    "r3": 3, "d": 3, "11": 3, "sp": 3,
}

# Condition spellings accepted by the assembler
CONDITION_NAMES: dict[str, int] = {
    "v": 0, "00": 0,
    "c": 1, "01": 1,
    "z": 2, "10": 2,
    "n": 3, "11": 3,
}

CONDITION_LETTERS = "VCZN"

