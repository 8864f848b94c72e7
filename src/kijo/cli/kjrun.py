"""
kjrun - Desk Computer Runner
============================

Assembles a source file, loads it with runtime input, runs it, and
prints the output bytes followed by a dump of the machine state.

Programs usually loop forever (the echo program jumps back to its
start), so every run is bounded by a step limit.

Usage Examples
--------------
    $ kjrun echo.asm --input "hello" --max-steps 100
    $ kjrun echo.asm --input "A" --break 3 --trace
    $ KIJO_MAX_STEPS=500 kjrun sum.asm --no-dump
"""

import sys
from pathlib import Path
from typing import Optional

import click

from kijo import __version__
from kijo.assembler import Assembler
from kijo.assembler.codec import word_value
from kijo.cli.errors import ExitCode, handle_cli_exception, setup_logging
from kijo.config import RunConfig
from kijo.disassembler import format_instruction
from kijo.emulator import Machine, format_state
from kijo.isa import Instruction, Opcode


def _trace_printer(machine: Machine):
    def trace(pc: int, inst: Instruction) -> None:
        value = None
        if inst.op is Opcode.SET:
            words = machine.program_memory
            value = word_value(words[(pc + 1) % len(words)])
        click.echo(f"{pc:02X}: {format_instruction(inst, value)}", err=True)
    return trace


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-i", "--input", "input_text",
    default="",
    help="Runtime input read by the 'in' instruction",
)
@click.option(
    "-n", "--max-steps",
    type=click.IntRange(min=0),
    default=None,
    help="Maximum instructions to execute (default: 10000 or $KIJO_MAX_STEPS)",
)
@click.option(
    "-B", "--break", "breakpoints",
    multiple=True,
    type=click.IntRange(min=0),
    help="Stop before executing this program slot (can be repeated)",
)
@click.option(
    "-t", "--trace",
    is_flag=True,
    help="Print each executed instruction to stderr",
)
@click.option(
    "--dump/--no-dump",
    default=True,
    help="Print registers, memory and I/O after the run (default: on)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="kjrun")
def main(
    input_file: Path,
    input_text: str,
    max_steps: Optional[int],
    breakpoints: tuple[int, ...],
    trace: bool,
    dump: bool,
    verbose: bool,
) -> None:
    """
    Assemble and run a desk computer program.

    INPUT_FILE is the assembly source file to run.

    The program's output bytes are printed as text, followed by the
    final state of the machine.

    \b
    Examples:
        kjrun echo.asm --input "A"            # Echo one character
        kjrun echo.asm -i "abc" -n 12         # Stop after 12 steps
        kjrun echo.asm -i "A" --break 3       # Stop at slot 3
    """
    setup_logging(verbose)

    config = RunConfig.from_env().with_overrides(
        max_steps=max_steps,
        trace=trace or None,
        dump=dump,
        breakpoints=list(breakpoints) or None,
    )

    asm = Assembler(verbose=verbose)

    try:
        program = asm.assemble_file(input_file)
        if asm.has_errors():
            click.echo(asm.get_error_report(), err=True)
            sys.exit(ExitCode.BUILD_ERROR)

        machine = Machine(config.machine_config())
        machine.reset(program, input_text)
        for slot in config.breakpoints:
            machine.breakpoints.add_breakpoint(slot)
        if config.trace:
            machine.on_step = _trace_printer(machine)

        event = machine.run(max_steps=config.max_steps)

        click.echo(machine.output.decode(config.input_encoding, errors="replace"))
        click.echo(f"Stopped after {machine.step_count} steps: {event}", err=True)

        if config.dump:
            click.echo()
            click.echo(format_state(machine))

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Run")


if __name__ == "__main__":
    main()
