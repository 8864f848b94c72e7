"""
Kijo Machine - Fetch/Decode/Execute Engine
==========================================

Runs an assembled program one instruction per step().

Machine model:
- 4 general purpose registers R0-R3 (8-bit unsigned)
- LNK: link register, written by jlnk/jlnkcnd
- Flags: N Z C V (V is never set by any instruction)
- 256 bytes of data memory, addresses wrap modulo 256
- Program memory: list of 8-bit words, separate from data memory
- Input buffer (bytes, read by ``in``) and output buffer (``out``)

Lifecycle:
    UNLOADED --reset()--> LOADED --step()--> STEPPING
    any state --fatal error--> HALTED --reset()--> LOADED

Program counter behavior worth knowing:
- Sequential advance is ``pc += 1`` with no wrap. Running off the end
  is reported by the *next* step() as OutOfProgramError.
- jlnk's link value and the not-taken path of jcnd/jlnkcnd wrap modulo
  the program length.
- Jump targets are used as-is.

Flag quirks kept from the reference machine:
- ``inc`` sets C to the same value as Z.
- ``and`` takes N from the source register, not from the result.

Example:
    >>> machine = Machine()
    >>> machine.reset(assemble_source("set r0, 0\\nin r1\\nout r1\\nj r0"), "A")
    >>> for _ in range(4):
    ...     machine.step()
    >>> machine.output
    b'A'

Copyright (c) 2026 Kijo Simulator Contributors
"""

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Optional, Sequence

from kijo.assembler.codec import decode, encode, word_value
from kijo.config import MachineConfig
from kijo.emulator.breakpoints import BreakEvent, BreakReason, BreakpointManager
from kijo.errors import (
    InvalidEncodingError,
    KijoError,
    MachineError,
    MachineHaltedError,
    OutOfProgramError,
)
from kijo.isa import (
    CONDITION_FLAGS,
    FLAG_MASK,
    MEMORY_SIZE,
    NUM_REGISTERS,
    WORD_MASK,
    CondReg,
    Flags,
    Instruction,
    MemAccess,
    NoOperand,
    Opcode,
    ProgramEntry,
    RegOperand,
    RegPair,
)

logger = logging.getLogger(__name__)


class MachineStatus(Enum):
    """Lifecycle state of a Machine."""
    UNLOADED = auto()  # Never reset
    LOADED = auto()    # Reset, no step yet
    STEPPING = auto()  # At least one successful step
    HALTED = auto()    # Fatal error; reset() required


@dataclass
class MachineState:
    """
    Complete mutable machine state.

    All values are Python ints but represent:
    - pc: program slot index (unbounded; checked on fetch)
    - lnk: 8-bit slot address
    - regs: four 8-bit unsigned values
    - flags: 4-bit flag register (see Flags)
    """
    pc: int = 0
    lnk: int = 0
    regs: list[int] = field(default_factory=lambda: [0] * NUM_REGISTERS)
    flags: int = 0
    memory: bytearray = field(default_factory=lambda: bytearray(MEMORY_SIZE))
    input: bytes = b""
    input_pos: int = 0
    output: bytearray = field(default_factory=bytearray)

    def copy(self) -> "MachineState":
        """Deep copy, safe to keep while the machine keeps running."""
        return MachineState(
            pc=self.pc,
            lnk=self.lnk,
            regs=list(self.regs),
            flags=self.flags,
            memory=bytearray(self.memory),
            input=self.input,
            input_pos=self.input_pos,
            output=bytearray(self.output),
        )


class Machine:
    """
    The desk computer execution engine.

    One instance is meant to be created once and reloaded with reset()
    for every run. Instances share nothing; calls on a single instance
    must not overlap.

    Attributes:
        config: MachineConfig used by reset()
        state: The live MachineState
        breakpoints: Breakpoints consulted by run()
        on_step: Optional callback ``(pc, instruction)`` invoked by run()
            after each executed instruction
    """

    def __init__(self, config: Optional[MachineConfig] = None):
        self.config = config or MachineConfig()
        self.state = MachineState()
        self.breakpoints = BreakpointManager()
        self.on_step: Optional[Callable[[int, Instruction], None]] = None

        self._program: tuple[ProgramEntry, ...] = ()
        self._progmem: list[str] = []
        self._status = MachineStatus.UNLOADED
        self._halt_error: Optional[KijoError] = None
        self._step_count = 0

    # =========================================================================
    # Loading
    # =========================================================================

    def reset(self, program: Sequence[ProgramEntry], input_text: str = "") -> None:
        """
        Load a resolved program and runtime input, clearing all state.

        Registers, flags, LNK, PC, memory and output are zeroed. The input
        buffer becomes the encoded bytes of ``input_text``. Entries with no
        encoding (label definitions) produce no program word.

        Args:
            program: Output of the assembler, all labels resolved
            input_text: Text read byte by byte by ``in``

        Raises:
            InvalidEncodingError: If the program still contains a label
                reference or an out-of-range field
        """
        words = [encode(entry) for entry in program]
        self._progmem = [w for w in words if w]
        self._program = tuple(program)
        self.state = MachineState(input=input_text.encode(self.config.input_encoding))
        self._status = MachineStatus.LOADED
        self._halt_error = None
        self._step_count = 0
        self.breakpoints.last_event = None
        logger.debug(
            f"Loaded {len(self._progmem)} words, {len(self.state.input)} input bytes"
        )

    # =========================================================================
    # Execution
    # =========================================================================

    def _halt(self, error: KijoError) -> None:
        self._status = MachineStatus.HALTED
        self._halt_error = error
        logger.info(f"Machine halted at pc={self.state.pc}: {error}")

    def step(self) -> Instruction:
        """
        Fetch, decode and execute one instruction.

        Returns:
            The instruction that was executed

        Raises:
            OutOfProgramError: PC is at or past the end of program memory.
                The machine halts.
            MachineHaltedError: The machine halted earlier and has not
                been reset.
            InvalidEncodingError: The fetched word is not an instruction.
                The machine halts.
        """
        if self._status is MachineStatus.HALTED:
            raise MachineHaltedError(self._halt_error)

        pc = self.state.pc
        if pc >= len(self._progmem):
            error = OutOfProgramError(pc, len(self._progmem))
            self._halt(error)
            raise error

        try:
            inst = decode(self._progmem[pc])
        except InvalidEncodingError as e:
            self._halt(e)
            raise

        self._execute(inst)
        self._status = MachineStatus.STEPPING
        self._step_count += 1
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"{pc:02X}: {inst.op} -> pc={self.state.pc} regs={self.state.regs}")
        return inst

    def _set_flag(self, flag: int, value: bool) -> None:
        if value:
            self.state.flags = (self.state.flags | int(flag)) & FLAG_MASK
        else:
            self.state.flags = self.state.flags & ~int(flag) & FLAG_MASK

    def _set_zn(self, value: int) -> None:
        self._set_flag(Flags.Z, value == 0)
        self._set_flag(Flags.N, (value & 0x80) != 0)

    def _execute(self, inst: Instruction) -> None:
        s = self.state
        regs = s.regs
        length = len(self._progmem)

        match inst:
            case NoOperand():
                pass

            case RegOperand(op=Opcode.INC, reg=r):
                regs[r] = (regs[r] + 1) & WORD_MASK
                self._set_flag(Flags.Z | Flags.C, regs[r] == 0)
                self._set_flag(Flags.N, (regs[r] & 0x80) != 0)

            case RegOperand(op=Opcode.DEC, reg=r):
                regs[r] = (regs[r] + WORD_MASK) & WORD_MASK
                self._set_flag(Flags.Z, regs[r] == 0)
                self._set_flag(Flags.C, regs[r] == WORD_MASK)
                self._set_flag(Flags.N, (regs[r] & 0x80) != 0)

            case RegOperand(op=Opcode.MVLNK, reg=r):
                regs[r] = s.lnk & WORD_MASK

            case RegOperand(op=Opcode.J, reg=r):
                s.pc = regs[r]
                return

            case RegOperand(op=Opcode.JLNK, reg=r):
                s.lnk = (s.pc + 1) % length
                s.pc = regs[r]
                return

            case RegOperand(op=Opcode.IN, reg=r):
                regs[r] = self._read_input()
                self._set_zn(regs[r])

            case RegOperand(op=Opcode.OUT, reg=r):
                s.output.append(regs[r])

            case RegOperand(op=Opcode.LSHFT, reg=r):
                regs[r] = (regs[r] << 1) & WORD_MASK
                self._set_zn(regs[r])

            case RegOperand(op=Opcode.RSHFT, reg=r):
                regs[r] = regs[r] >> 1
                self._set_zn(regs[r])

            case RegOperand(op=Opcode.AND, reg=r):
                k = (r + 1) % NUM_REGISTERS
                regs[k] = regs[r] & regs[k]
                self._set_flag(Flags.Z, regs[k] == 0)
                self._set_flag(Flags.N, (regs[r] & 0x80) != 0)

            case RegOperand(op=Opcode.SET, reg=r):
                # The next word is data, never decoded
                regs[r] = word_value(self._progmem[(s.pc + 1) % length])
                s.pc += 2
                return

            case RegPair(op=Opcode.MV, reg1=r1, reg2=r2):
                regs[r1] = regs[r2]

            case RegPair(op=Opcode.ADD, reg1=r1, reg2=r2):
                total = regs[r1] + regs[r2]
                regs[r1] = total & WORD_MASK
                self._set_zn(regs[r1])
                self._set_flag(Flags.C, total > WORD_MASK)

            case RegPair(op=Opcode.SUB, reg1=r1, reg2=r2):
                diff = regs[r1] - regs[r2]
                regs[r1] = (diff + 0x100) & WORD_MASK
                self._set_zn(regs[r1])
                self._set_flag(Flags.C, diff < 0)

            case CondReg(op=Opcode.JCND, cnd=cnd, reg=r):
                if s.flags & CONDITION_FLAGS[cnd]:
                    s.pc = regs[r]
                else:
                    s.pc = (s.pc + 1) % length
                return

            case CondReg(op=Opcode.JLNKCND, cnd=cnd, reg=r):
                if s.flags & CONDITION_FLAGS[cnd]:
                    s.lnk = (s.pc + 1) % length
                    s.pc = regs[r]
                else:
                    s.pc = (s.pc + 1) % length
                return

            case MemAccess(op=Opcode.LD, reg1=r1, reg2=r2, ofs=ofs):
                regs[r1] = s.memory[(regs[r2] - ofs) % MEMORY_SIZE]
                self._set_zn(regs[r1])

            case MemAccess(op=Opcode.ST, reg1=r1, reg2=r2, ofs=ofs):
                s.memory[(regs[r2] - ofs) % MEMORY_SIZE] = regs[r1]

            case _:
                raise MachineError(f"cannot execute {inst!r}")

        s.pc += 1

    def _read_input(self) -> int:
        s = self.state
        if s.input_pos >= len(s.input):
            return 0
        value = s.input[s.input_pos]
        s.input_pos += 1
        return value

    def run(self, max_steps: int = 10_000) -> BreakEvent:
        """
        Step until a breakpoint, the step budget, or a halt.

        The breakpoint at the starting PC is ignored so a run can resume
        from the breakpoint it last stopped at.

        Args:
            max_steps: Maximum instructions to execute

        Returns:
            BreakEvent describing why the run stopped. A halt caused by
            OutOfProgramError is reported as a HALTED event, not raised.

        Raises:
            InvalidEncodingError: A fetched word is not an instruction
        """
        if self._status is MachineStatus.HALTED:
            return BreakEvent(
                BreakReason.HALTED, address=self.state.pc, message=str(self._halt_error)
            )

        steps = 0
        while steps < max_steps:
            pc = self.state.pc
            if steps > 0:
                event = self.breakpoints.check_pc(pc)
                if event is not None:
                    event.steps = steps
                    return event
            try:
                inst = self.step()
            except MachineError as e:
                return BreakEvent(BreakReason.HALTED, address=pc, steps=steps, message=str(e))
            steps += 1
            if self.on_step:
                self.on_step(pc, inst)

        return BreakEvent(
            BreakReason.MAX_STEPS,
            address=self.state.pc,
            steps=steps,
            message=f"Reached max steps ({max_steps})",
        )

    # =========================================================================
    # State Inspection
    # =========================================================================

    @property
    def status(self) -> MachineStatus:
        return self._status

    @property
    def is_halted(self) -> bool:
        return self._status is MachineStatus.HALTED

    @property
    def halt_error(self) -> Optional[KijoError]:
        """The error that halted the machine, if any."""
        return self._halt_error

    @property
    def step_count(self) -> int:
        """Instructions executed since the last reset."""
        return self._step_count

    @property
    def pc(self) -> int:
        """Program counter (slot index)."""
        return self.state.pc

    @property
    def lnk(self) -> int:
        """Link register."""
        return self.state.lnk

    @property
    def registers(self) -> tuple[int, int, int, int]:
        """R0-R3."""
        return tuple(self.state.regs)

    @property
    def flags(self) -> Flags:
        return Flags(self.state.flags)

    @property
    def flag_v(self) -> bool:
        """Overflow flag (always False)."""
        return bool(self.state.flags & Flags.V)

    @property
    def flag_c(self) -> bool:
        """Carry flag."""
        return bool(self.state.flags & Flags.C)

    @property
    def flag_z(self) -> bool:
        """Zero flag."""
        return bool(self.state.flags & Flags.Z)

    @property
    def flag_n(self) -> bool:
        """Negative flag."""
        return bool(self.state.flags & Flags.N)

    @property
    def memory(self) -> bytes:
        """Snapshot of all 256 bytes of data memory."""
        return bytes(self.state.memory)

    @property
    def program(self) -> tuple[ProgramEntry, ...]:
        """Program entries as passed to reset()."""
        return self._program

    @property
    def program_memory(self) -> tuple[str, ...]:
        """Program words (8-character bit strings)."""
        return tuple(self._progmem)

    @property
    def output(self) -> bytes:
        return bytes(self.state.output)

    @property
    def input_consumed(self) -> bytes:
        return self.state.input[:self.state.input_pos]

    @property
    def input_remaining(self) -> bytes:
        return self.state.input[self.state.input_pos:]

    def snapshot(self) -> MachineState:
        """Independent copy of the current state."""
        return self.state.copy()

    # =========================================================================
    # Direct State Access (debugging and tests)
    # =========================================================================

    def set_register(self, index: int, value: int) -> None:
        """Write a register, masked to 8 bits."""
        self.state.regs[index] = value & WORD_MASK

    def read_byte(self, address: int) -> int:
        return self.state.memory[address % MEMORY_SIZE]

    def write_byte(self, address: int, value: int) -> None:
        """Write a data memory byte; address wraps, value is masked."""
        self.state.memory[address % MEMORY_SIZE] = value & WORD_MASK

    def __repr__(self) -> str:
        regs = " ".join(f"R{i}={v:02X}" for i, v in enumerate(self.state.regs))
        return (
            f"Machine(status={self._status.name}, pc={self.state.pc}, "
            f"lnk={self.state.lnk}, {regs}, flags={self.state.flags:04b})"
        )
