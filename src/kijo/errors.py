"""
Kijo Simulator Error Hierarchy
==============================

This module defines the exception hierarchy for the whole simulator.
All exceptions inherit from KijoError, allowing callers to catch every
simulator-related error with a single except clause if desired.

Exception Hierarchy
-------------------
KijoError (base)
├── AssemblerError (assembly-time)
│   ├── ParseError - a single source line failed to parse
│   │   ├── InvalidRegisterError - bad register token
│   │   ├── InvalidConditionError - bad condition token
│   │   ├── InvalidImmediateError - numeric-looking token that is not a number
│   │   ├── InvalidAddressSyntaxError - bad ``ofs[reg]`` memory operand
│   │   ├── ArityMismatchError - wrong operand count for a mnemonic
│   │   ├── UnknownInstructionError - mnemonic not in the instruction set
│   │   └── InvalidLabelError - label definition with no name
│   └── UnresolvedLabelError - label referenced but never defined
├── CodecError (word encoding/decoding)
│   └── InvalidEncodingError - word is not a valid 8-bit encoding
└── MachineError (execution engine)
    ├── OutOfProgramError - program counter ran past program memory
    └── MachineHaltedError - step() called on a halted machine

Error messages follow this format:
    filename:line:column: error: description
        source_line_text
        ^
    hint: suggestion for fixing (when available)

Copyright (c) 2026 Kijo Simulator Contributors
"""

import difflib
from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class KijoError(Exception):
    """
    Base exception for all simulator errors.

        try:
            program = assemble_source(text)
            machine.reset(program, "")
            machine.step()
        except KijoError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A location in assembly source for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed, 0 when the whole line is meant)
    """
    filename: str
    line: int
    column: int = 0

    def __str__(self) -> str:
        if self.column > 0:
            return f"{self.filename}:{self.line}:{self.column}"
        return f"{self.filename}:{self.line}"


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(KijoError):
    """
    Base exception for assembly-time errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The source text at the error location (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def with_location(
        self, location: SourceLocation, source_line: Optional[str] = None
    ) -> "AssemblerError":
        """Attach a source location after the fact and rebuild the message."""
        self.location = location
        if source_line is not None:
            self.source_line = source_line
        self.args = (self._format_message(),)
        return self

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            echo.asm:3: error: invalid register 'r7'
                out r7
            hint: registers are r0-r3, a-d, 00-11, fp, sp
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)

    def __str__(self) -> str:
        return self._format_message()


class ParseError(AssemblerError):
    """
    A source line could not be parsed.

    Each line is parsed independently, so one ParseError never stops the
    remaining lines of a program from being parsed and reported.
    """
    pass


class InvalidRegisterError(ParseError):
    """Register operand is not one of r0-r3, a-d, 00-11, fp or sp."""

    def __init__(self, token: str, **kwargs):
        self.token = token
        kwargs.setdefault("hint", "registers are r0-r3, a-d, 00-11, fp, sp")
        super().__init__(f"invalid register '{token}'", **kwargs)


class InvalidConditionError(ParseError):
    """Condition operand is not one of v, c, z, n or 00-11."""

    def __init__(self, token: str, **kwargs):
        self.token = token
        kwargs.setdefault("hint", "conditions are v, c, z, n or 00-11")
        super().__init__(f"invalid condition '{token}'", **kwargs)


class InvalidImmediateError(ParseError):
    """
    Immediate operand looks numeric but is not a valid number.

    Examples:
        set r0, 0xzz   ; malformed hex
        set r0, 09     ; leading zero means octal
    """

    def __init__(self, token: str, **kwargs):
        self.token = token
        super().__init__(f"invalid immediate value '{token}'", **kwargs)


class InvalidAddressSyntaxError(ParseError):
    """Memory operand of ld/st is not of the form ``ofs[reg]`` with ofs 0-3."""

    def __init__(self, token: str, reason: str = "expected ofs[reg]", **kwargs):
        self.token = token
        self.reason = reason
        super().__init__(f"invalid address '{token}': {reason}", **kwargs)


class ArityMismatchError(ParseError):
    """Mnemonic was given the wrong number of operands."""

    def __init__(self, opcode: str, expected: int, actual: int, **kwargs):
        self.opcode = opcode
        self.expected = expected
        self.actual = actual
        noun = "operand" if expected == 1 else "operands"
        super().__init__(
            f"'{opcode}' takes {expected} {noun}, got {actual}", **kwargs
        )


class UnknownInstructionError(ParseError):
    """Mnemonic is not part of the instruction set."""

    def __init__(self, mnemonic: str, **kwargs):
        self.mnemonic = mnemonic
        super().__init__(f"unknown instruction '{mnemonic}'", **kwargs)


class InvalidLabelError(ParseError):
    """Label definition has an empty name."""

    def __init__(self, name: str = "", **kwargs):
        self.name = name
        super().__init__("label definition has no name", **kwargs)


class UnresolvedLabelError(AssemblerError):
    """
    Reference to a label that no line defines.

    Raised during the second pass of label resolution. Similar label
    names are suggested to help catch typos.
    """

    def __init__(
        self,
        label: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        similar_labels: Optional[list[str]] = None,
    ):
        self.label = label
        self.similar_labels = similar_labels or []

        hint = None
        if self.similar_labels:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_labels[:3])
            hint = f"did you mean {suggestions}?"

        super().__init__(
            f"unresolved label '{label}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )

    @classmethod
    def for_table(cls, label: str, known: dict[str, int]) -> "UnresolvedLabelError":
        """Build the error with suggestions drawn from the known label names."""
        similar = difflib.get_close_matches(label, list(known), n=3, cutoff=0.6)
        return cls(label, similar_labels=similar)


# =============================================================================
# Codec Exceptions
# =============================================================================

class CodecError(KijoError):
    """Base exception for instruction encoding/decoding errors."""
    pass


class InvalidEncodingError(CodecError):
    """
    Word is not a valid 8-bit instruction encoding.

    Words are exactly eight '0'/'1' characters. Well-formed assembler
    output never produces one of these, so seeing it means an internal
    inconsistency.
    """

    def __init__(self, word: object, reason: str = "invalid instruction"):
        self.word = word
        self.reason = reason
        super().__init__(f"cannot decode {word!r}: {reason}")


# =============================================================================
# Machine Exceptions
# =============================================================================

class MachineError(KijoError):
    """Base exception for execution engine errors."""
    pass


class OutOfProgramError(MachineError):
    """
    Program counter points past the end of program memory.

    Fatal to the current run. The machine refuses to step again until
    it is reset.
    """

    def __init__(self, pc: int, length: int):
        self.pc = pc
        self.length = length
        super().__init__(
            f"out of program: pc={pc} but program has {length} words"
        )


class MachineHaltedError(MachineError):
    """step() was called after a fatal error without an intervening reset()."""

    def __init__(self, cause: Optional[KijoError] = None):
        self.cause = cause
        message = "machine halted; reset() required"
        if cause is not None:
            message = f"{message} (halted by: {cause})"
        super().__init__(message)


# =============================================================================
# Error Collection for Multiple Error Reporting
# =============================================================================

class ErrorCollector:
    """
    Collects multiple errors for batch reporting.

    The assembler parses every line even after a failure so all broken
    lines are reported together.

    Example:
        collector = ErrorCollector(max_errors=100)
        for number, line in enumerate(lines, start=1):
            try:
                parse_line(line, number)
            except ParseError as e:
                collector.add(e)

        if collector.has_errors():
            print(collector.report())
    """

    def __init__(self, max_errors: int = 100):
        """
        Args:
            max_errors: Maximum errors to collect before raising TooManyErrors
        """
        self.errors: list[AssemblerError] = []
        self.warnings: list[str] = []
        self.max_errors = max_errors

    def add(self, error: AssemblerError) -> None:
        """
        Add an error to the collection.

        Raises:
            TooManyErrors: If max_errors has been reached
        """
        self.errors.append(error)
        if len(self.errors) >= self.max_errors:
            raise TooManyErrors(f"too many errors ({self.max_errors}), stopping")

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def error_count(self) -> int:
        return len(self.errors)

    def warning_count(self) -> int:
        return len(self.warnings)

    def report(self) -> str:
        """Format all errors and warnings for display."""
        lines = []

        for error in self.errors:
            lines.append(str(error))
            lines.append("")

        if self.warnings:
            lines.append("Warnings:")
            for warning in self.warnings:
                lines.append(f"  {warning}")

        error_word = "error" if len(self.errors) == 1 else "errors"
        warning_word = "warning" if len(self.warnings) == 1 else "warnings"
        lines.append(
            f"{len(self.errors)} {error_word}, {len(self.warnings)} {warning_word}"
        )

        return "\n".join(lines)

    def clear(self) -> None:
        self.errors.clear()
        self.warnings.clear()


class TooManyErrors(AssemblerError):
    """Raised when the collector hits its error limit."""

    def __init__(self, message: str = "too many errors"):
        super().__init__(message)
