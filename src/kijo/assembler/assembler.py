"""
Kijo Assembler - Main Interface
===============================

Ties the parser, label resolver and codec together. The resolved
program is a flat list of instructions and data words whose indices
are the program counter values the machine uses.

Label Resolution
----------------
Labels are resolved in two passes over the whole program:

1. **Addressing**: walk the entries in order, counting slots. A label
   definition binds its name to the current count and takes no slot;
   every instruction and data word takes exactly one.
2. **Rewriting**: replace each label reference with an immediate equal
   to the label's slot. A missing label aborts the whole assembly.

Example Usage
-------------
>>> from kijo.assembler import Assembler
>>> asm = Assembler()
>>> program = asm.assemble_string('''
... loop:
...     inc r0
...     set r1, loop
...     j r1
... ''')
>>> asm.get_symbols()
{'loop': 0}
"""

import logging
from pathlib import Path
from typing import Iterable, Optional

from kijo.assembler.codec import encode
from kijo.assembler.parser import ParsedLine, parse_source
from kijo.errors import (
    AssemblerError,
    ErrorCollector,
    SourceLocation,
    TooManyErrors,
    UnresolvedLabelError,
)
from kijo.isa import (
    WORD_MASK,
    AsmEntry,
    Immediate,
    LabelDef,
    LabelRef,
    ProgramEntry,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Label Resolution
# =============================================================================

def build_label_table(entries: Iterable[AsmEntry]) -> dict[str, int]:
    """
    Pass 1: map every label name to the slot it precedes.

    A later definition of the same name replaces the earlier one.
    """
    labels: dict[str, int] = {}
    slot = 0
    for entry in entries:
        if isinstance(entry, LabelDef):
            if entry.name in labels:
                logger.warning(
                    f"label '{entry.name}' redefined at slot {slot} "
                    f"(was {labels[entry.name]})"
                )
            labels[entry.name] = slot
        else:
            slot += 1
    return labels


def resolve_labels(
    entries: Iterable[AsmEntry], labels: dict[str, int]
) -> list[ProgramEntry]:
    """
    Pass 2: rewrite label references and drop label definitions.

    Raises:
        UnresolvedLabelError: On the first reference to an unknown label.
    """
    program: list[ProgramEntry] = []
    for entry in entries:
        if isinstance(entry, LabelDef):
            continue
        if isinstance(entry, LabelRef):
            if entry.label not in labels:
                raise UnresolvedLabelError.for_table(entry.label, labels)
            entry = Immediate(labels[entry.label] & WORD_MASK)
        program.append(entry)
    return program


def assemble(entries: Iterable[AsmEntry]) -> list[ProgramEntry]:
    """
    Resolve labels across a whole program.

    Args:
        entries: Parser output for every line, concatenated in source order

    Returns:
        Instructions and data words, slot-indexed from 0. The input is
        not modified.

    Raises:
        UnresolvedLabelError: If any label reference cannot be resolved;
            no partial program is returned.
    """
    entries = list(entries)
    labels = build_label_table(entries)
    program = resolve_labels(entries, labels)
    logger.debug(f"Resolved {len(labels)} labels into {len(program)} words")
    return program


# =============================================================================
# Assembler Facade
# =============================================================================

class Assembler:
    """
    High-level assembler interface.

    Parses every line of a program (collecting all parse errors rather
    than stopping at the first), resolves labels, and keeps the symbol
    table and listing of the last assembly.

    Attributes:
        verbose: If True, log progress at INFO level
    """

    def __init__(self, verbose: bool = False, max_errors: int = 100):
        """
        Args:
            verbose: Log progress messages at INFO instead of DEBUG
            max_errors: Stop collecting after this many errors
        """
        self._verbose = verbose
        self._errors = ErrorCollector(max_errors=max_errors)
        self._lines: list[ParsedLine] = []
        self._program: list[ProgramEntry] = []
        self._symbols: dict[str, int] = {}

    def _log(self, message: str) -> None:
        logger.log(logging.INFO if self._verbose else logging.DEBUG, message)

    def assemble_string(
        self, source: str, filename: str = "<input>"
    ) -> list[ProgramEntry]:
        """
        Assemble source code from a string.

        Returns:
            The resolved program, or an empty list if there were errors
            (see has_errors() and get_error_report()).
        """
        self._errors.clear()
        self._program = []
        self._symbols = {}

        self._log(f"Assembling {filename}...")
        self._lines = parse_source(source, filename)

        try:
            for line in self._lines:
                if line.error is not None:
                    self._errors.add(line.error)
        except TooManyErrors as e:
            self._errors.errors.append(e)

        if self._errors.has_errors():
            self._log(f"{self._errors.error_count()} line(s) failed to parse")
            return []

        self._check_redefinitions(filename)

        entries = [entry for line in self._lines for entry in line.entries]
        labels = build_label_table(entries)
        try:
            program = resolve_labels(entries, labels)
        except UnresolvedLabelError as e:
            line = self._find_reference(e.label)
            if line is not None:
                e.with_location(SourceLocation(filename, line.line_number), line.text)
            try:
                self._errors.add(e)
            except TooManyErrors as too_many:
                self._errors.errors.append(too_many)
            return []

        self._program = program
        self._symbols = labels
        self._log(f"Assembled {len(program)} words, {len(labels)} labels")
        return list(program)

    def assemble_file(self, filepath: str | Path) -> list[ProgramEntry]:
        """
        Assemble source code from a file.

        Raises:
            FileNotFoundError: If the file does not exist
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {path}")

        source = path.read_text(encoding="utf-8")
        return self.assemble_string(source, str(path))

    def _check_redefinitions(self, filename: str) -> None:
        defined: dict[str, int] = {}
        for line in self._lines:
            for entry in line.entries:
                if not isinstance(entry, LabelDef):
                    continue
                if entry.name in defined:
                    self._errors.add_warning(
                        f"{filename}:{line.line_number}: label '{entry.name}' "
                        f"redefined (previously defined on line {defined[entry.name]})"
                    )
                defined[entry.name] = line.line_number

    def _find_reference(self, label: str) -> Optional[ParsedLine]:
        for line in self._lines:
            if any(isinstance(e, LabelRef) and e.label == label for e in line.entries):
                return line
        return None

    # -------------------------------------------------------------------------
    # Results
    # -------------------------------------------------------------------------

    def get_program(self) -> list[ProgramEntry]:
        """Resolved program from the last successful assembly."""
        return list(self._program)

    def get_words(self) -> list[str]:
        """Program as 8-bit word strings."""
        return [encode(entry) for entry in self._program]

    def get_code(self) -> bytes:
        """Program as raw bytes, one per word."""
        return bytes(int(word, 2) for word in self.get_words())

    def get_symbols(self) -> dict[str, int]:
        """Label table from the last successful assembly."""
        return dict(self._symbols)

    def get_lines(self) -> list[ParsedLine]:
        """Per-line parse results of the last assembly (errors included)."""
        return list(self._lines)

    def get_listing(self) -> str:
        """
        Format the program as a listing.

        Example:
            00  00101100  SET R0, 0
            01  00000000
            02  00011001  IN R1
        """
        # Imported here to avoid a package import cycle
        from kijo.disassembler import format_program

        lines = []
        for slot, (entry, text) in enumerate(
            zip(self._program, format_program(self._program))
        ):
            lines.append(f"{slot:02X}  {encode(entry)}  {text}".rstrip())

        if self._symbols:
            lines.append("")
            lines.append("Labels:")
            for name, slot in sorted(self._symbols.items(), key=lambda kv: kv[1]):
                lines.append(f"  {name:<16} {slot:02X}")

        return "\n".join(lines)

    def write_words(self, filepath: str | Path) -> None:
        """Write the program as one 8-bit word string per line."""
        Path(filepath).write_text("\n".join(self.get_words()) + "\n", encoding="utf-8")

    def write_binary(self, filepath: str | Path) -> None:
        """Write the program as raw bytes."""
        Path(filepath).write_bytes(self.get_code())

    def write_listing(self, filepath: str | Path) -> None:
        Path(filepath).write_text(self.get_listing() + "\n", encoding="utf-8")

    # -------------------------------------------------------------------------
    # Error Handling
    # -------------------------------------------------------------------------

    def has_errors(self) -> bool:
        return self._errors.has_errors()

    def get_errors(self) -> list[AssemblerError]:
        return list(self._errors.errors)

    def get_warnings(self) -> list[str]:
        return list(self._errors.warnings)

    def get_error_report(self) -> str:
        return self._errors.report()


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble_source(source: str, filename: str = "<input>") -> list[ProgramEntry]:
    """
    Assemble source text, raising the first error.

    Raises:
        AssemblerError: The first parse or label error in the program
    """
    asm = Assembler()
    program = asm.assemble_string(source, filename)
    if asm.has_errors():
        raise asm.get_errors()[0]
    return program


def assemble_file(filepath: str | Path) -> list[ProgramEntry]:
    """Assemble a source file, raising the first error."""
    asm = Assembler()
    program = asm.assemble_file(filepath)
    if asm.has_errors():
        raise asm.get_errors()[0]
    return program
