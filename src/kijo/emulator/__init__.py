"""
Kijo Desk Computer Emulator
===========================

Step-by-step execution of assembled programs for the 8-bit desk
computer.

- **Machine**: registers, flags, data memory, I/O buffers; reset/step/run
- **Breakpoints**: PC breakpoints consulted by Machine.run()
- **Dumps**: text renderings of registers, flags, memory and I/O

Quick Start
-----------

    >>> from kijo.assembler import assemble_source
    >>> from kijo.emulator import Machine
    >>> machine = Machine()
    >>> machine.reset(assemble_source(source), input_text="A")
    >>> event = machine.run(max_steps=100)
    >>> machine.output
    b'A'

With a breakpoint::

    >>> machine.breakpoints.add_breakpoint(3)
    >>> event = machine.run()
    >>> if event.reason == BreakReason.PC_BREAKPOINT:
    ...     print(f"Stopped at slot {event.address}")
"""

from kijo.emulator.breakpoints import BreakEvent, BreakpointManager, BreakReason
from kijo.emulator.dump import (
    format_flags,
    format_memory_map,
    format_registers,
    format_state,
    xxd,
)
from kijo.emulator.machine import Machine, MachineState, MachineStatus

__all__ = [
    # Machine
    "Machine",
    "MachineState",
    "MachineStatus",
    # Breakpoints
    "BreakEvent",
    "BreakpointManager",
    "BreakReason",
    # Dumps
    "format_flags",
    "format_memory_map",
    "format_registers",
    "format_state",
    "xxd",
]
