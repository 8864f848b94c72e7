"""
State Dump Tests
================

Tests for the text renderings used by kjrun.
"""

import pytest

from kijo.emulator.dump import (
    format_flags,
    format_memory_map,
    format_registers,
    format_state,
    xxd,
)
from kijo.isa import Flags


class TestFlags:
    """NZCV flag strings."""

    @pytest.mark.parametrize("flags,text", [
        (0, "----"),
        (Flags.N, "N---"),
        (Flags.Z | Flags.C, "-ZC-"),
        (Flags.V, "---V"),
        (0x0F, "NZCV"),
    ])
    def test_format_flags(self, flags, text):
        assert format_flags(flags) == text


class TestXxd:
    """xxd-style hex dumps."""

    def test_empty(self):
        assert xxd(b"") == ""

    def test_short_line(self):
        assert xxd(b"Hi!") == "0000: 48 69 21" + " " * 40 + " Hi!"

    def test_non_printable(self):
        line = xxd(bytes([0x00, 0x41, 0x7F, 0xFF]))
        assert line.endswith(" .A..")

    def test_multiple_rows(self):
        lines = xxd(bytes(range(20))).splitlines()
        assert len(lines) == 2
        assert lines[0].startswith("0000: 00 01 02 03")
        assert lines[1].startswith("0010: 10 11 12 13")

    def test_full_row_width(self):
        line = xxd(b"A" * 16)
        assert line == "0000: " + " ".join(["41"] * 16) + "  " + "A" * 16


class TestMemoryMap:
    """16x16 memory grid."""

    def test_layout(self):
        memory = bytearray(256)
        memory[0x00] = 0xAB
        memory[0xFF] = 0x01
        lines = format_memory_map(bytes(memory)).splitlines()
        assert len(lines) == 17
        assert lines[0].split() == list("0123456789abcdef")
        assert lines[1].startswith("00  ab 00")
        assert lines[16].startswith("f0  00")
        assert lines[16].endswith("01")


class TestMachineDumps:
    """Dumps that read from a Machine."""

    def test_registers(self, load):
        m = load("set r1, 'A'\ndec r0")
        m.step()
        m.step()
        text = format_registers(m)
        assert "PC   3" in text
        assert "R1    65  $41  01000001" in text
        assert "R0   255  $FF  11111111" in text
        assert "FLAG N-C-" in text

    def test_state(self, load, echo_source):
        m = load(echo_source, input_text="AB")
        for _ in range(4):
            m.step()
        text = format_state(m)
        assert "Registers" in text
        assert "Memory Map" in text
        assert "Input Buffer" in text
        assert "0000: 42" in text
        assert "0000: 41" in text

    def test_state_empty_buffers(self, load):
        m = load("nop")
        assert format_state(m).count("(empty)") == 2
