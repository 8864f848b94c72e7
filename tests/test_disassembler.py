"""
Disassembler Unit Tests
=======================

Tests for the word -> assembly text direction.
"""

import pytest

from kijo.assembler import assemble_source, encode
from kijo.disassembler import DisassembledWord, disassemble, format_instruction, format_program
from kijo.errors import InvalidEncodingError
from kijo.isa import (
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


# =============================================================================
# Single Instructions
# =============================================================================

class TestFormatInstruction:
    """format_instruction() for every entry kind."""

    @pytest.mark.parametrize("entry,text", [
        (NoOperand(Opcode.NOP), "NOP"),
        (RegOperand(Opcode.INC, 0), "INC R0"),
        (RegOperand(Opcode.JLNK, 3), "JLNK R3"),
        (RegPair(Opcode.MV, 1, 2), "MV R1, R2"),
        (RegPair(Opcode.SUB, 0, 3), "SUB R0, R3"),
        (CondReg(Opcode.JCND, 2, 3), "JCND Z, R3"),
        (CondReg(Opcode.JLNKCND, 0, 1), "JLNKCND V, R1"),
        (MemAccess(Opcode.LD, 0, 1, 2), "LD R0, -2[R1]"),
        (MemAccess(Opcode.ST, 3, 2, 0), "ST R3, -0[R2]"),
        (Immediate(42), "42"),
        (LabelRef("loop"), "loop"),
        (LabelDef("loop"), "loop:"),
    ])
    def test_format(self, entry, text):
        assert format_instruction(entry) == text

    def test_set_without_value(self):
        assert format_instruction(RegOperand(Opcode.SET, 1)) == "SET R1, <imm>"

    def test_set_with_value(self):
        assert format_instruction(RegOperand(Opcode.SET, 0), 10) == "SET R0, 10"
        assert format_instruction(RegOperand(Opcode.SET, 0), "loop") == "SET R0, loop"

    def test_not_an_entry(self):
        with pytest.raises(TypeError):
            format_instruction("nop")


# =============================================================================
# Programs
# =============================================================================

class TestFormatProgram:
    """format_program() over assembled and unresolved programs."""

    def test_resolved_program(self):
        program = assemble_source("start:\nset r0, start\nj r0")
        assert format_program(program) == ["SET R0, 0", "", "J R0"]

    def test_unresolved_entries(self):
        entries = [LabelDef("x"), RegOperand(Opcode.SET, 2), LabelRef("x")]
        assert format_program(entries) == ["x:", "SET R2, x", ""]

    def test_set_at_end(self):
        assert format_program([RegOperand(Opcode.SET, 0)]) == ["SET R0, <imm>"]


class TestDisassemble:
    """disassemble() over program memory."""

    def test_set_and_data(self):
        result = disassemble(["00101100", "00001010"])
        assert result[0].text == "SET R0, 10"
        assert not result[0].is_data
        assert result[1].is_data
        assert str(result[1]) == "01: 00001010  .data 10"

    def test_echo_program(self):
        program = assemble_source("set r0, 0\nin r1\nout r1\nj r0")
        result = disassemble(encode(entry) for entry in program)
        assert [str(item) for item in result] == [
            "00: 00101100  SET R0, 0",
            "01: 00000000  .data 0",
            "02: 00011001  IN R1",
            "03: 00011101  OUT R1",
            "04: 00010000  J R0",
        ]

    def test_int_words_and_start(self):
        result = disassemble([0x41, 0x00], start=0x10)
        assert [item.slot for item in result] == [0x10, 0x11]
        assert result[0].text == "ADD R0, R1"
        assert result[0].word == "01000001"

    def test_invalid_data_word_is_fine(self):
        result = disassemble(["00101100", "00000001"])
        assert result[1].is_data

    def test_invalid_instruction_word(self):
        with pytest.raises(InvalidEncodingError):
            disassemble(["00000000", "00000011"])

    def test_to_dict(self):
        item = DisassembledWord(2, "00011001", "IN R1")
        assert item.to_dict() == {
            "slot": 2,
            "word": "00011001",
            "value": 0x19,
            "text": "IN R1",
            "is_data": False,
        }
