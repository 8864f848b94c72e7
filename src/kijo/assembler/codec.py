"""
Instruction Word Codec
======================

Maps instructions to and from their 8-bit word form. Words are written
as strings of eight '0'/'1' characters, most significant bit first.

Bit Layout
----------
    7 6 | 5 4 | 3 2 | 1 0
    ----+-----+-----+----
    0 0 | 1 1 | r1  | r2     mv r1, r2
    0 0 |  op4      | r      nop inc dec mvlnk j jlnk in out
                             lshft rshft and set  (op4 = 0000..1011)
    0 1 | op2 | r1  | r2     add (00), sub (01)
    0 1 | op2 | cnd | r      jcnd (10), jlnkcnd (11)
    1 0 | ofs | r1  | r2     ld r1, ofs[r2]
    1 1 | ofs | r1  | r2     st r1, ofs[r2]

``nop`` is only ``00000000``; the other three ``000000xx`` words match
no instruction.
"""

from typing import Optional, Union

from kijo.errors import InvalidEncodingError
from kijo.isa import (
    WORD_BITS,
    WORD_MASK,
    AsmEntry,
    CondReg,
    Immediate,
    Instruction,
    LabelDef,
    LabelRef,
    MemAccess,
    NoOperand,
    Opcode,
    RegOperand,
    RegPair,
)


# 4-bit codes in bits[5:2] of the single register group
SINGLE_REGISTER_CODES: dict[Opcode, int] = {
    Opcode.NOP: 0b0000,
    Opcode.INC: 0b0001,
    Opcode.DEC: 0b0010,
    Opcode.MVLNK: 0b0011,
    Opcode.J: 0b0100,
    Opcode.JLNK: 0b0101,
    Opcode.IN: 0b0110,
    Opcode.OUT: 0b0111,
    Opcode.LSHFT: 0b1000,
    Opcode.RSHFT: 0b1001,
    Opcode.AND: 0b1010,
    Opcode.SET: 0b1011,
}
_SINGLE_REGISTER_OPS = {code: op for op, code in SINGLE_REGISTER_CODES.items()}

MV_CODE = 0b11

# 2-bit codes in bits[5:4] of the 01 group
GROUP1_CODES: dict[Opcode, int] = {
    Opcode.ADD: 0b00,
    Opcode.SUB: 0b01,
    Opcode.JCND: 0b10,
    Opcode.JLNKCND: 0b11,
}
_GROUP1_OPS = {code: op for op, code in GROUP1_CODES.items()}

LD_PREFIX = 0b10
ST_PREFIX = 0b11

Word = Union[str, int]


def _field(entry: object, value: int, bits: int = 2) -> int:
    if not 0 <= value < (1 << bits):
        raise InvalidEncodingError(entry, f"field value {value} does not fit in {bits} bits")
    return value


def encode_byte(entry: AsmEntry) -> int:
    """
    Encode an instruction or data word as an integer 0-255.

    Raises:
        InvalidEncodingError: For label entries or out-of-range fields.
    """
    match entry:
        case Immediate(value=value):
            return value & WORD_MASK
        case LabelRef(label=label):
            raise InvalidEncodingError(entry, f"unresolved label '{label}'")
        case NoOperand():
            return 0
        case RegOperand(op=op, reg=reg):
            return (SINGLE_REGISTER_CODES[op] << 2) | _field(entry, reg)
        case RegPair(op=Opcode.MV, reg1=reg1, reg2=reg2):
            return (MV_CODE << 4) | (_field(entry, reg1) << 2) | _field(entry, reg2)
        case RegPair(op=op, reg1=reg1, reg2=reg2):
            return (0b01 << 6) | (GROUP1_CODES[op] << 4) | (_field(entry, reg1) << 2) | _field(entry, reg2)
        case CondReg(op=op, cnd=cnd, reg=reg):
            return (0b01 << 6) | (GROUP1_CODES[op] << 4) | (_field(entry, cnd) << 2) | _field(entry, reg)
        case MemAccess(op=op, reg1=reg1, reg2=reg2, ofs=ofs):
            prefix = LD_PREFIX if op is Opcode.LD else ST_PREFIX
            return (prefix << 6) | (_field(entry, ofs) << 4) | (_field(entry, reg1) << 2) | _field(entry, reg2)
    raise InvalidEncodingError(entry, "not an encodable entry")


def encode(entry: AsmEntry) -> Optional[str]:
    """
    Encode an entry as an 8-character bit string.

    Returns:
        The word, or None for a label definition (which occupies no slot).

    Example:
        >>> encode(RegOperand(Opcode.SET, 0))
        '00101100'
        >>> encode(Immediate(10))
        '00001010'
    """
    if isinstance(entry, LabelDef):
        return None
    return format(encode_byte(entry), f"0{WORD_BITS}b")


def word_bits(word: Word) -> str:
    """
    Normalize a word to its 8-character bit string.

    Raises:
        InvalidEncodingError: If the word is not 8 binary digits (or an
            int outside 0-255).
    """
    if isinstance(word, int) and not isinstance(word, bool):
        if not 0 <= word <= WORD_MASK:
            raise InvalidEncodingError(word, "value out of 8-bit range")
        return format(word, f"0{WORD_BITS}b")
    if not isinstance(word, str):
        raise InvalidEncodingError(word, "words are 8-character bit strings")
    if len(word) != WORD_BITS:
        raise InvalidEncodingError(word, f"expected {WORD_BITS} bits, got {len(word)}")
    if not set(word) <= {"0", "1"}:
        raise InvalidEncodingError(word, "word contains non-binary characters")
    return word


def word_value(word: Word) -> int:
    """Unsigned value of a word (used for ``set`` data words)."""
    return int(word_bits(word), 2)


def decode(word: Word) -> Instruction:
    """
    Decode an 8-bit word into an instruction.

    Args:
        word: 8-character bit string, or an int 0-255

    Raises:
        InvalidEncodingError: On a malformed word or an unused bit pattern.
    """
    value = word_value(word)
    group = value >> 6
    mid = (value >> 4) & 0b11
    high = (value >> 2) & 0b11
    low = value & 0b11

    match group:
        case 0b00:
            if mid == MV_CODE:
                return RegPair(Opcode.MV, high, low)
            op = _SINGLE_REGISTER_OPS.get(value >> 2)
            if op is None:
                raise InvalidEncodingError(word)
            if op is Opcode.NOP:
                if low != 0:
                    raise InvalidEncodingError(word, "nop has no register operand")
                return NoOperand(op)
            return RegOperand(op, low)
        case 0b01:
            op = _GROUP1_OPS[mid]
            if op in (Opcode.ADD, Opcode.SUB):
                return RegPair(op, high, low)
            return CondReg(op, high, low)
        case 0b10:
            return MemAccess(Opcode.LD, high, low, mid)
        case _:
            return MemAccess(Opcode.ST, high, low, mid)
