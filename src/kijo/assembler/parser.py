"""
Kijo Assembly Parser
====================

Parses one line of assembly source at a time into assembly-time entries.
Lines never depend on each other at parse time, so a program is parsed
line by line and every failing line can be reported at once.

Line Grammar
------------
    ; comment                   -> []
    (blank)                     -> []
    name:                       -> [LabelDef(name)]
    mnemonic op1, op2           -> [Instruction]
    set reg, imm                -> [Instruction, Immediate | LabelRef]

Mnemonics, registers, conditions and label names are case-insensitive.
Operands are separated by commas; a quoted character like ``','`` is a
single token.

Operand Forms
-------------
Register:   r0-r3, a-d, 00-11, fp (=r2), sp (=r3)
Condition:  v, c, z, n or 00-11
Immediate:  42, -1, 0x2a, 2ah, 0b101, 101b, 0o17, 17o, 017 (octal), 'A',
            or a label name resolved later
Address:    ofs[reg] with ofs 0-3, e.g. ``2[r1]`` or ``-2[r1]``
"""

import logging
import re
import string
from dataclasses import dataclass, field
from typing import Optional

from kijo.errors import (
    ArityMismatchError,
    InvalidAddressSyntaxError,
    InvalidConditionError,
    InvalidImmediateError,
    InvalidLabelError,
    InvalidRegisterError,
    ParseError,
    SourceLocation,
    UnknownInstructionError,
)
from kijo.isa import (
    ARITY,
    CONDITION_NAMES,
    MAX_OFFSET,
    MNEMONICS,
    OPCODE_SHAPES,
    REGISTER_NAMES,
    WORD_MASK,
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

logger = logging.getLogger(__name__)


COMMENT_CHAR = ";"
ADDRESS_PATTERN = re.compile(r"^-?(\d+)\[\s*(\w+)\s*\]$")
CHAR_LITERAL_PATTERN = re.compile(r"^'.'$", re.DOTALL)

_PREFIX_BASES = {"x": 16, "b": 2, "o": 8}
_SUFFIX_BASES = {"h": 16, "b": 2, "o": 8}
_BASE_DIGITS = {
    16: string.hexdigits,
    10: string.digits,
    8: string.octdigits,
    2: "01",
}


# =============================================================================
# Parse Results
# =============================================================================

@dataclass
class ParsedLine:
    """
    Result of parsing one source line.

    Exactly one of ``entries`` (possibly empty) or ``error`` is meaningful:
    a line either parses completely or not at all.
    """
    line_number: int
    text: str
    entries: list[AsmEntry] = field(default_factory=list)
    error: Optional[ParseError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


# =============================================================================
# Operand Parsers
# =============================================================================

def parse_register(token: str) -> int:
    """Parse a register token into its 2-bit index."""
    try:
        return REGISTER_NAMES[token.strip().lower()]
    except KeyError:
        raise InvalidRegisterError(token) from None


def parse_condition(token: str) -> int:
    """Parse a condition token into its 2-bit code."""
    try:
        return CONDITION_NAMES[token.strip().lower()]
    except KeyError:
        raise InvalidConditionError(token) from None


def _is_digits(text: str, base: int) -> bool:
    # all() of an empty string is True, so check for emptiness first
    return bool(text) and all(ch in _BASE_DIGITS[base] for ch in text)


def _parse_unsigned(text: str) -> Optional[int]:
    """
    Parse an unsigned number in any supported notation.

    Returns None when ``text`` is not a number in any notation.
    """
    # 0x / 0b / 0o prefixes
    if len(text) > 2 and text[0] == "0" and text[1] in _PREFIX_BASES:
        base = _PREFIX_BASES[text[1]]
        digits = text[2:]
        return int(digits, base) if _is_digits(digits, base) else None

    # h / b / o suffixes
    suffix = text[-1:]
    if suffix in _SUFFIX_BASES and _is_digits(text[:-1], _SUFFIX_BASES[suffix]):
        return int(text[:-1], _SUFFIX_BASES[suffix])

    # Leading zero means octal
    if text.startswith("0"):
        return int(text, 8) if _is_digits(text, 8) else None

    if _is_digits(text, 10):
        return int(text)

    return None


def parse_number(token: str) -> Optional[int]:
    """
    Parse a numeric immediate.

    Returns:
        The value (not yet masked to 8 bits), or None if the token is not
        numeric at all and should be treated as a label name.

    Raises:
        InvalidImmediateError: If the token looks numeric (starts with a
            digit or '-') but is malformed, e.g. ``0xzz`` or ``09``.
    """
    token = token.strip()
    if CHAR_LITERAL_PATTERN.match(token):
        return ord(token[1])

    text = token.lower()
    negative = text.startswith("-")
    body = text[1:] if negative else text

    value = _parse_unsigned(body)
    if value is None:
        if negative or body[:1].isdigit():
            raise InvalidImmediateError(token)
        return None
    return -value if negative else value


def parse_immediate(token: str) -> Immediate | LabelRef:
    """
    Parse the value operand of ``set``.

    Numbers are masked to 8 bits (``-1`` becomes 255). Anything that is
    not a number becomes a label reference.
    """
    token = token.strip()
    if not token:
        raise InvalidImmediateError(token)

    value = parse_number(token)
    if value is not None:
        return Immediate(value & WORD_MASK)

    return LabelRef(token.lower())


def parse_address(token: str) -> tuple[int, int]:
    """
    Parse a ``ofs[reg]`` memory operand.

    Returns:
        (offset, base register)
    """
    match = ADDRESS_PATTERN.match(token.strip())
    if not match:
        raise InvalidAddressSyntaxError(token)

    offset = int(match.group(1))
    if offset > MAX_OFFSET:
        raise InvalidAddressSyntaxError(
            token, f"offset {offset} out of range 0-{MAX_OFFSET}"
        )
    return offset, parse_register(match.group(2))


def split_operands(text: str) -> list[str]:
    """
    Split an operand string on commas.

    A quoted single character (``'x'``) is copied as one token, so
    ``set r0, ','`` has two operands. Empty operands are dropped.
    """
    operands: list[str] = []
    current: list[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "'" and i + 2 < len(text) and text[i + 2] == "'":
            current.append(text[i:i + 3])
            i += 3
            continue
        if ch == ",":
            operands.append("".join(current))
            current = []
        else:
            current.append(ch)
        i += 1
    operands.append("".join(current))
    return [op.strip() for op in operands if op.strip()]


# =============================================================================
# Line Parser
# =============================================================================

def _parse_statement(line: str) -> list[AsmEntry]:
    if not line or line.startswith(COMMENT_CHAR):
        return []

    if line.endswith(":"):
        raw_name = line[:-1].strip()
        if not raw_name:
            raise InvalidLabelError(raw_name)
        return [LabelDef(raw_name.lower())]

    parts = line.split(None, 1)
    mnemonic = parts[0].lower()
    op = MNEMONICS.get(mnemonic)
    if op is None:
        raise UnknownInstructionError(parts[0])

    operands = split_operands(parts[1] if len(parts) > 1 else "")
    expected = ARITY[op]
    if len(operands) != expected:
        raise ArityMismatchError(op.value, expected, len(operands))

    if op is Opcode.SET:
        return [RegOperand(op, parse_register(operands[0])),
                parse_immediate(operands[1])]

    shape = OPCODE_SHAPES[op]
    if shape is NoOperand:
        return [NoOperand(op)]
    if shape is RegOperand:
        return [RegOperand(op, parse_register(operands[0]))]
    if shape is RegPair:
        return [RegPair(op, parse_register(operands[0]),
                        parse_register(operands[1]))]
    if shape is CondReg:
        return [CondReg(op, parse_condition(operands[0]),
                        parse_register(operands[1]))]

    offset, base = parse_address(operands[1])
    return [MemAccess(op, parse_register(operands[0]), base, offset)]


def parse_line(
    text: str, line_number: int = 1, filename: str = "<input>"
) -> list[AsmEntry]:
    """
    Parse one source line.

    Args:
        text: The source line (surrounding whitespace is ignored)
        line_number: 1-indexed line number for error messages
        filename: Source name for error messages

    Returns:
        Zero or more entries. ``set`` yields two (instruction + data word).

    Raises:
        ParseError: The specific subclass for what went wrong, carrying
            the location of this line.
    """
    try:
        return _parse_statement(text.strip())
    except ParseError as e:
        e.with_location(SourceLocation(filename, line_number), text.rstrip("\r\n"))
        raise


def parse_source(source: str, filename: str = "<input>") -> list[ParsedLine]:
    """
    Parse a whole program, one independent result per line.

    A failing line is recorded in its ParsedLine and does not stop the
    following lines from being parsed.
    """
    results = []
    for number, text in enumerate(source.splitlines(), start=1):
        try:
            entries = parse_line(text, number, filename)
        except ParseError as e:
            logger.debug(f"{filename}:{number}: {e.message}")
            results.append(ParsedLine(number, text, error=e))
        else:
            results.append(ParsedLine(number, text, entries))

    failed = sum(1 for r in results if not r.ok)
    logger.debug(f"Parsed {len(results)} lines from {filename} ({failed} with errors)")
    return results
