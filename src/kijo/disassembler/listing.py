"""
Kijo Disassembler
=================

Turns program words back into readable assembly. This is the inverse of
the codec plus the one piece of context a single word cannot carry: the
word after a ``set`` is data, not an instruction.

Usage:
    words = machine.program_memory
    for item in disassemble(words):
        print(item)

    00: 00101100  SET R0, 65
    01: 01000001  .data 65
    02: 00011101  OUT R1
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from kijo.assembler.codec import Word, decode, word_bits, word_value
from kijo.isa import (
    CONDITION_LETTERS,
    AsmEntry,
    CondReg,
    Immediate,
    LabelDef,
    LabelRef,
    MemAccess,
    NoOperand,
    Opcode,
    RegOperand,
    RegPair,
)


@dataclass
class DisassembledWord:
    """
    One disassembled program word.

    Attributes:
        slot: Program counter value of the word
        word: The 8-bit word string
        text: Assembly text (empty for a ``set`` data word)
        is_data: True if the word is the data operand of a ``set``
    """
    slot: int
    word: str
    text: str
    is_data: bool = False

    def __str__(self) -> str:
        text = f".data {word_value(self.word)}" if self.is_data else self.text
        return f"{self.slot:02X}: {self.word}  {text}"

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "slot": self.slot,
            "word": self.word,
            "value": word_value(self.word),
            "text": self.text,
            "is_data": self.is_data,
        }


def _reg(index: int) -> str:
    return f"R{index}"


def format_instruction(entry: AsmEntry, value: Optional[int | str] = None) -> str:
    """
    Format a single entry as assembly text.

    Args:
        entry: Instruction, data word or label entry
        value: For ``set``, the data word value (or label) if known; otherwise the
            operand is shown as ``<imm>``

    Examples:
        >>> format_instruction(MemAccess(Opcode.LD, 0, 1, 2))
        'LD R0, -2[R1]'
        >>> format_instruction(CondReg(Opcode.JCND, 2, 3))
        'JCND Z, R3'
    """
    match entry:
        case Immediate(value=imm):
            return str(imm)
        case LabelRef(label=label):
            return label
        case LabelDef(name=name):
            return f"{name}:"
        case NoOperand(op=op):
            return op.value.upper()
        case RegOperand(op=Opcode.SET, reg=reg):
            operand = "<imm>" if value is None else str(value)
            return f"SET {_reg(reg)}, {operand}"
        case RegOperand(op=op, reg=reg):
            return f"{op.value.upper()} {_reg(reg)}"
        case RegPair(op=op, reg1=reg1, reg2=reg2):
            return f"{op.value.upper()} {_reg(reg1)}, {_reg(reg2)}"
        case CondReg(op=op, cnd=cnd, reg=reg):
            return f"{op.value.upper()} {CONDITION_LETTERS[cnd]}, {_reg(reg)}"
        case MemAccess(op=op, reg1=reg1, reg2=reg2, ofs=ofs):
            return f"{op.value.upper()} {_reg(reg1)}, -{ofs}[{_reg(reg2)}]"
    raise TypeError(f"cannot format {entry!r}")


def _is_set(entry: object) -> bool:
    return isinstance(entry, RegOperand) and entry.op is Opcode.SET


def format_program(entries: Sequence[AsmEntry]) -> list[str]:
    """
    Format a resolved program, one string per entry.

    A ``set`` shows the value of the data word that follows it, and that
    data word itself is formatted as an empty string.
    """
    texts = []
    previous_was_set = False
    for index, entry in enumerate(entries):
        if previous_was_set and isinstance(entry, (Immediate, LabelRef)):
            texts.append("")
            previous_was_set = False
            continue

        value = None
        if _is_set(entry) and index + 1 < len(entries):
            following = entries[index + 1]
            if isinstance(following, Immediate):
                value = following.value
            elif isinstance(following, LabelRef):
                value = following.label
        texts.append(format_instruction(entry, value))
        previous_was_set = _is_set(entry)
    return texts


def disassemble(words: Iterable[Word], start: int = 0) -> list[DisassembledWord]:
    """
    Disassemble program memory.

    Args:
        words: Program words (bit strings or ints)
        start: Slot number of the first word

    Raises:
        InvalidEncodingError: If a word in instruction position is invalid
    """
    bits = [word_bits(w) for w in words]
    result = []
    data_next = False
    for offset, word in enumerate(bits):
        slot = start + offset
        if data_next:
            result.append(DisassembledWord(slot, word, "", is_data=True))
            data_next = False
            continue

        inst = decode(word)
        value = None
        if _is_set(inst):
            data_next = True
            if offset + 1 < len(bits):
                value = word_value(bits[offset + 1])
        result.append(DisassembledWord(slot, word, format_instruction(inst, value)))
    return result
