"""
Breakpoints for the Kijo Machine
================================

PC breakpoints and the events that describe why a run stopped.

The machine itself only knows how to execute one instruction. Running
"until something happens" is a caller concern; Machine.run() is such a
caller and consults a BreakpointManager before every instruction.

Example usage:

    >>> machine = Machine()
    >>> machine.reset(program, "A")
    >>> machine.breakpoints.add_breakpoint(4)
    >>> event = machine.run(max_steps=100)
    >>> if event.reason == BreakReason.PC_BREAKPOINT:
    ...     print(f"Hit breakpoint at slot {event.address}")

Copyright (c) 2026 Kijo Simulator Contributors
"""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, List, Optional, Set

logger = logging.getLogger(__name__)


class BreakReason(Enum):
    """Why execution stopped."""
    PC_BREAKPOINT = auto()  # PC reached a breakpoint slot
    MAX_STEPS = auto()      # Step budget exhausted
    HALTED = auto()         # Machine halted on a fatal error


@dataclass
class BreakEvent:
    """
    Information about why execution stopped.

    Attributes:
        reason: Why execution stopped
        address: Program slot involved (if applicable)
        steps: Instructions executed by the run that produced this event
        message: Human-readable description
    """
    reason: BreakReason
    address: Optional[int] = None
    steps: int = 0
    message: str = ""

    def __str__(self) -> str:
        if self.message:
            return self.message
        match self.reason:
            case BreakReason.PC_BREAKPOINT:
                return f"Breakpoint at slot {self.address}"
            case BreakReason.MAX_STEPS:
                return f"Maximum steps reached ({self.steps})"
            case _:
                return "Machine halted"


class BreakpointManager:
    """
    Manages PC breakpoints.

    Breakpoints are program slot numbers. A breakpoint can be disabled
    without being removed; hit counts are kept per slot until cleared.
    """

    def __init__(self):
        self._breakpoints: Set[int] = set()
        self._disabled: Set[int] = set()
        self._hit_counts: Dict[int, int] = {}
        self.last_event: Optional[BreakEvent] = None

    def add_breakpoint(self, address: int) -> None:
        """Stop before executing the instruction at ``address``."""
        if address < 0:
            raise ValueError(f"breakpoint slot must be non-negative, got {address}")
        self._breakpoints.add(address)
        self._disabled.discard(address)
        logger.debug(f"Breakpoint added at slot {address}")

    def remove_breakpoint(self, address: int) -> None:
        self._breakpoints.discard(address)
        self._disabled.discard(address)
        self._hit_counts.pop(address, None)

    def clear_breakpoints(self) -> None:
        self._breakpoints.clear()
        self._disabled.clear()
        self._hit_counts.clear()
        self.last_event = None

    def enable_breakpoint(self, address: int) -> None:
        self._disabled.discard(address)

    def disable_breakpoint(self, address: int) -> None:
        if address in self._breakpoints:
            self._disabled.add(address)

    def has_breakpoint(self, address: int) -> bool:
        return address in self._breakpoints

    def __contains__(self, address: int) -> bool:
        return self.has_breakpoint(address)

    @property
    def breakpoint_count(self) -> int:
        return len(self._breakpoints)

    @property
    def breakpoints(self) -> List[int]:
        """All breakpoint slots, sorted."""
        return sorted(self._breakpoints)

    def hit_count(self, address: int) -> int:
        return self._hit_counts.get(address, 0)

    def check_pc(self, pc: int) -> Optional[BreakEvent]:
        """
        Check whether execution should stop before the instruction at ``pc``.

        Returns:
            A PC_BREAKPOINT event, or None to continue
        """
        if pc not in self._breakpoints or pc in self._disabled:
            return None

        self._hit_counts[pc] = self._hit_counts.get(pc, 0) + 1
        self.last_event = BreakEvent(BreakReason.PC_BREAKPOINT, address=pc)
        logger.debug(f"Breakpoint hit at slot {pc} (count {self._hit_counts[pc]})")
        return self.last_event
