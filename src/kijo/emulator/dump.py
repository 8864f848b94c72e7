"""
Kijo Machine - State Dumps
==========================

Plain-text renderings of machine state for the command-line tools:
- Register table (PC, LNK, R0-R3)
- NZCV flag string ('-' for a cleared flag)
- 16x16 hex map of data memory
- xxd-style hex dump of the input and output buffers

All functions are pure; they take values or a Machine and return text.
"""

from typing import TYPE_CHECKING, Iterable

from kijo.isa import MEMORY_SIZE, Flags

if TYPE_CHECKING:
    from kijo.emulator.machine import Machine

BYTES_PER_ROW = 16


def xxd(data: Iterable[int]) -> str:
    """
    Hex dump in the style of ``xxd``.

    Each row is a 4-digit hex offset, up to 16 space-separated hex bytes
    padded to 48 columns, and the printable ASCII form ('.' otherwise).

    Example:
        >>> print(xxd(b"Hi!"))
        0000: 48 69 21                                         Hi!
    """
    data = bytes(data)
    rows = []
    for i in range(0, len(data), BYTES_PER_ROW):
        chunk = data[i:i + BYTES_PER_ROW]
        hex_part = " ".join(f"{b:02x}" for b in chunk)
        ascii_part = "".join(chr(b) if 32 <= b < 127 else "." for b in chunk)
        rows.append(f"{i:04x}: {hex_part:<48} {ascii_part}")
    return "\n".join(rows)


def format_flags(flags: int) -> str:
    """Render flags as ``NZCV``, with '-' for each cleared bit."""
    return "".join(
        letter if flags & flag else "-"
        for letter, flag in (("N", Flags.N), ("Z", Flags.Z), ("C", Flags.C), ("V", Flags.V))
    )


def format_registers(machine: "Machine") -> str:
    lines = [
        f"PC   {machine.pc}",
        f"LNK  {machine.lnk}",
    ]
    for i, value in enumerate(machine.registers):
        lines.append(f"R{i}   {value:3d}  ${value:02X}  {value:08b}")
    lines.append(f"FLAG {format_flags(machine.flags)}")
    return "\n".join(lines)


def format_memory_map(memory: bytes) -> str:
    """
    Render data memory as a 16x16 grid.

    The header row holds the low nibble; each row starts with the
    address of its first byte.
    """
    header = "    " + " ".join(f" {i:x}" for i in range(BYTES_PER_ROW))
    lines = [header]
    for row in range(0, min(len(memory), MEMORY_SIZE), BYTES_PER_ROW):
        cells = " ".join(f"{b:02x}" for b in memory[row:row + BYTES_PER_ROW])
        lines.append(f"{row:02x}  {cells}")
    return "\n".join(lines)


def format_state(machine: "Machine") -> str:
    """Full state dump: registers, memory map, then both I/O buffers."""
    sections = [
        ("Registers", format_registers(machine)),
        ("Memory Map", format_memory_map(machine.memory)),
        ("Input Buffer", xxd(machine.input_remaining) or "(empty)"),
        ("Output", xxd(machine.output) or "(empty)"),
    ]
    lines = []
    for title, body in sections:
        lines.append(f"── {title} " + "─" * (60 - len(title)))
        lines.append(body)
        lines.append("")
    return "\n".join(lines).rstrip("\n")
